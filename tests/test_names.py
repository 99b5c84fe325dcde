from __future__ import annotations

import pytest

from pyplotfinder.models.record import MatchClassification, NameQuery
from pyplotfinder.search.names import classify, levenshtein, normalize_name, similarity, split_full_name


def test_normalize_name_folds_case_diacritics_and_punctuation() -> None:
    assert normalize_name("  José  Dela-Cruz ") == "jose delacruz"
    assert normalize_name("MARÍA   O'Neil") == "maria oneil"
    assert normalize_name(None) == ""
    assert normalize_name("123") == ""


@pytest.mark.parametrize("value", ["", "a", "juan", "dela cruz", "ñandú"])
def test_levenshtein_identity(value: str) -> None:
    assert levenshtein(value, value) == 0


@pytest.mark.parametrize(
    ("a", "b"),
    [("kitten", "sitting"), ("jon", "juan"), ("", "abc"), ("cruz", "reyes"), ("flaw", "lawn")],
)
def test_levenshtein_symmetry(a: str, b: str) -> None:
    assert levenshtein(a, b) == levenshtein(b, a)


def test_levenshtein_known_distances() -> None:
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("abc", "") == 3
    assert levenshtein("jon", "juan") == 2
    assert levenshtein("kruz", "cruz") == 1


def test_similarity_edges() -> None:
    assert similarity("", "") == 1.0
    assert similarity(None, "") == 1.0
    assert similarity("abc", "") == 0.0
    assert similarity("Juan", "juan") == 1.0
    assert similarity("jon", "juan") == pytest.approx(0.5)
    assert similarity("kruz", "cruz") == pytest.approx(0.75)


def test_split_full_name_uses_first_and_last_token() -> None:
    assert split_full_name("Juan Dela Cruz") == ("juan", "cruz")
    assert split_full_name("Madonna") == ("madonna", "")
    assert split_full_name("") == ("", "")


def test_classify_exact_when_both_halves_match() -> None:
    query = NameQuery(first_name="juan", last_name="cruz")
    assert classify(query, "Juan Dela Cruz") is MatchClassification.EXACT


def test_classify_exact_ignores_accents_and_case() -> None:
    query = NameQuery(first_name="JOSÉ", last_name="Rizal")
    assert classify(query, "Jose Protasio Rizal") is MatchClassification.EXACT


def test_classify_close_when_one_half_is_similar_enough() -> None:
    query = NameQuery(first_name="jon", last_name="kruz")
    assert classify(query, "Juan Dela Cruz") is MatchClassification.CLOSE


def test_classify_close_on_average_similarity() -> None:
    # two thirds on each half: below the single threshold, above the average one
    query = NameQuery(first_name="jon", last_name="lim")
    assert classify(query, "Jun Lin") is MatchClassification.CLOSE


def test_classify_none_for_unrelated_names() -> None:
    query = NameQuery(first_name="pedro", last_name="reyes")
    assert classify(query, "Juan Dela Cruz") is MatchClassification.NONE


def test_classify_last_name_only() -> None:
    query = NameQuery(last_name="cruz")
    assert classify(query, "Juan Dela Cruz") is MatchClassification.CLOSE
    assert classify(query, "Ana Reyes") is MatchClassification.NONE


def test_classify_first_name_only() -> None:
    query = NameQuery(first_name="juan")
    assert classify(query, "Juan Dela Cruz") is MatchClassification.CLOSE
    assert classify(query, "Ana Reyes") is MatchClassification.NONE


def test_classify_without_name_is_exact() -> None:
    assert classify(NameQuery(), "Anyone At All") is MatchClassification.EXACT
    assert classify(NameQuery(first_name="   ", last_name=""), "Ana Reyes") is MatchClassification.EXACT


def test_classify_single_token_record_has_no_family_name() -> None:
    query = NameQuery(last_name="madonna")
    assert classify(query, "Madonna") is MatchClassification.NONE


def test_classify_non_letter_first_name_still_counts_as_provided() -> None:
    query = NameQuery(first_name="123", last_name="cruz")
    # first normalizes to "" (similarity 0.0) but the family name matches exactly
    assert classify(query, "Juan Dela Cruz") is MatchClassification.CLOSE


def test_classify_never_raises_on_missing_full_name() -> None:
    assert classify(NameQuery(first_name="juan", last_name="cruz"), None) is MatchClassification.NONE
