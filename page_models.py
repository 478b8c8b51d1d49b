"""
Custom page data models.

Defines the persisted navigation entry and the result types returned by
every use case.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, field_validator

T = TypeVar("T")


class CustomPage(BaseModel):
    """A user-managed navigation entry: canonical path plus display label."""

    model_config = ConfigDict(frozen=True)

    path: str  # canonical storage key, unique within a list
    label: str

    @field_validator("path")
    @classmethod
    def _path_is_absolute(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError("path must start with '/'")
        return value

    @field_validator("label")
    @classmethod
    def _label_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("label must not be blank")
        return value


class ErrorKind(str, Enum):
    DOMAIN_REJECTED = "domain_rejected"
    PATH_REJECTED = "path_rejected"
    DUPLICATE_ENTRY = "duplicate_entry"
    OUT_OF_RANGE = "out_of_range"
    PERSISTENCE_FAILURE = "persistence_failure"


@dataclass(frozen=True)
class Success(Generic[T]):
    data: T


@dataclass(frozen=True)
class Error:
    """
    Failed use case outcome.

    `message` is short and safe to show to users; the original exception,
    if any, is kept in `cause`.
    """
    message: str
    cause: Optional[BaseException] = None
    kind: ErrorKind = ErrorKind.PERSISTENCE_FAILURE


UseCaseResult = Union[Success[T], Error]
