"""Bounded audit log of accepted location samples."""

from __future__ import annotations

import json
from collections import deque
from collections.abc import Iterator
from pathlib import Path

from pyplotfinder._constants import SAMPLE_EXPORT_FILENAME, SAMPLE_LOG_CAPACITY
from pyplotfinder.models.location import LocationFix, LocationSample, LocationSource


class SampleLog:
    """FIFO of the most recent samples; oldest entries are evicted first."""

    def __init__(self, capacity: int = SAMPLE_LOG_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self._samples: deque[LocationSample] = deque(maxlen=capacity)
        self._next_seq = 1

    @property
    def capacity(self) -> int:
        return self._samples.maxlen or 0

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[LocationSample]:
        return iter(self._samples)

    @property
    def latest(self) -> LocationSample | None:
        return self._samples[-1] if self._samples else None

    def append(self, fix: LocationFix, *, source: LocationSource, timestamp_ms: int) -> LocationSample:
        sample = LocationSample.from_fix(fix, seq=self._next_seq, source=source, timestamp_ms=timestamp_ms)
        self._next_seq += 1
        self._samples.append(sample)
        return sample

    def snapshot(self) -> list[LocationSample]:
        return list(self._samples)

    def clear(self) -> None:
        self._samples.clear()

    def export_json(self, *, indent: int | None = 2) -> str:
        """Serialize the log, oldest first, for offline inspection."""
        return json.dumps(
            [sample.model_dump(mode="json", by_alias=True) for sample in self._samples],
            indent=indent,
        )

    def write_json(self, path: str | Path = SAMPLE_EXPORT_FILENAME) -> Path:
        target = Path(path)
        target.write_text(self.export_json(), encoding="utf-8")
        return target
