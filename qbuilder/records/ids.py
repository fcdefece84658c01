"""Synthetic identifier providers for exported records and new questions."""

from __future__ import annotations

import itertools
import uuid
from typing import Iterable, Iterator, Protocol


class IdentifierProvider(Protocol):
    def new_id(self) -> str:
        ...


class UUIDProvider:
    """Random version-4 UUID strings."""

    def new_id(self) -> str:
        return str(uuid.uuid4())


class SequenceProvider:
    """Deterministic ids, either ``prefix-0001`` style or drawn from ``values``."""

    def __init__(self, prefix: str = "id", values: Iterable[str] | None = None, start: int = 1):
        self.prefix = prefix
        self._values: Iterator[str] | None = iter(values) if values is not None else None
        self._counter = itertools.count(start)

    def new_id(self) -> str:
        if self._values is not None:
            try:
                return str(next(self._values))
            except StopIteration:
                raise RuntimeError("SequenceProvider ran out of identifiers") from None
        return f"{self.prefix}-{next(self._counter):04d}"
