"""Typed failures raised by the portfolio engine."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ParseError(Exception):
    field: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class InvalidInputError(Exception):
    field: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class DegradedRecordWarning(UserWarning):
    """A single raw holding was malformed and normalized with zeroed fields."""

    index: int
    field: str
    message: str

    def __str__(self) -> str:
        return f"record {self.index}: {self.message}"
