"""Per-category buckets of violation records kept in entry-date order."""

from __future__ import annotations

from bisect import bisect_right
from datetime import datetime
from typing import Dict, Iterator, List, Tuple

from .errors import EmptyCategoryError
from .records import Record


class CategoryBucket:
    def __init__(self, name: str) -> None:
        self.name = name
        self._records: List[Record] = []
        # Entry timestamps parallel to _records, used as bisect keys.
        self._keys: List[datetime] = []

    def add(self, record: Record) -> None:
        # bisect_right places equal timestamps after existing ones, so ties keep insertion order.
        index = bisect_right(self._keys, record.entered_at)
        self._keys.insert(index, record.entered_at)
        self._records.insert(index, record)

    def earliest(self) -> Record:
        if not self._records:
            raise EmptyCategoryError(f"Category {self.name!r} has no records")
        return self._records[0]

    def latest(self) -> Record:
        if not self._records:
            raise EmptyCategoryError(f"Category {self.name!r} has no records")
        return self._records[-1]

    def count(self) -> int:
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> Tuple[Record, ...]:
        return tuple(self._records)

    def __repr__(self) -> str:
        return f"CategoryBucket(name={self.name!r}, count={len(self._records)})"


class Dataset:
    """Mapping of category name to its bucket.

    Buckets are created on the first record of a category. Queries reflect
    whatever has been ingested so far.
    """

    def __init__(self) -> None:
        self._buckets: Dict[str, CategoryBucket] = {}

    def ingest(self, record: Record) -> CategoryBucket:
        bucket = self._buckets.get(record.category)
        if bucket is None:
            bucket = CategoryBucket(record.category)
            self._buckets[record.category] = bucket
        bucket.add(record)
        return bucket

    def __getitem__(self, name: str) -> CategoryBucket:
        return self._buckets[name]

    def __contains__(self, name: object) -> bool:
        return name in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)

    def __iter__(self) -> Iterator[str]:
        return iter(self.categories())

    def categories(self) -> List[str]:
        return sorted(self._buckets)

    def buckets(self) -> List[CategoryBucket]:
        return [self._buckets[name] for name in self.categories()]

    def total(self) -> int:
        return sum(bucket.count() for bucket in self._buckets.values())
