"""External data sources."""

from pyplotfinder._api.records import HttpRecordSource, RecordSource, StaticRecordSource

__all__ = ["HttpRecordSource", "RecordSource", "StaticRecordSource"]
