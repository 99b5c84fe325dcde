"""Record search: date prefilter, tolerant name matching and selection."""

from pyplotfinder.search.dates import same_date
from pyplotfinder.search.engine import search_records, select_candidates
from pyplotfinder.search.names import classify, levenshtein, normalize_name, similarity, split_full_name

__all__ = [
    "classify",
    "levenshtein",
    "normalize_name",
    "same_date",
    "search_records",
    "select_candidates",
    "similarity",
    "split_full_name",
]
