"""
Persistence layer for custom page lists.

This package provides the repository interfaces used by the use cases,
with JSON-based storage and in-memory variants for tests.
"""

from .custom_pages_store import (
    AsyncCustomPagesRepository,
    AsyncRepositoryAdapter,
    CustomPagesRepository,
    InMemoryAsyncRepository,
    InMemoryCustomPagesRepository,
    JSONCustomPagesRepository,
    as_async_repository
)

__all__ = [
    'AsyncCustomPagesRepository',
    'AsyncRepositoryAdapter',
    'CustomPagesRepository',
    'InMemoryAsyncRepository',
    'InMemoryCustomPagesRepository',
    'JSONCustomPagesRepository',
    'as_async_repository'
]
