"""
Tagged read results.

Reads never raise on store failure; instead they return a QueryResult whose
status tells "no rows" apart from "the store could not answer".
"""
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ResultStatus(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    status: ResultStatus
    data: Optional[T] = None

    @classmethod
    def ok(cls, data: T) -> "QueryResult[T]":
        return cls(ResultStatus.OK, data)

    @classmethod
    def empty(cls, data: Optional[T] = None) -> "QueryResult[T]":
        return cls(ResultStatus.EMPTY, data)

    @classmethod
    def unavailable(cls) -> "QueryResult[T]":
        return cls(ResultStatus.UNAVAILABLE)

    @classmethod
    def from_rows(cls, rows):
        """OK when there is at least one row, EMPTY otherwise."""
        rows = list(rows)
        return cls.ok(rows) if rows else cls.empty([])

    @property
    def is_available(self) -> bool:
        return self.status != ResultStatus.UNAVAILABLE
