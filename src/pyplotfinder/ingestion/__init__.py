"""Ingestion layer.

Converts raw rows and payloads (record source JSON, feed messages) into
validated domain models.
"""

__all__: list[str] = []
