"""
Storage for custom page lists.

Provides the repository interfaces used by the use cases, a JSON file
implementation, in-memory implementations for tests and tools, and the
adapter that presents a synchronous repository through the async contract.
"""

import asyncio
import inspect
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Protocol, Union

from pydantic import ValidationError

from page_models import CustomPage

logger = logging.getLogger(__name__)


class CustomPagesRepository(Protocol):
    """
    Synchronous storage interface for an ordered page list.

    This allows us to swap implementations (JSON -> SQLite) without
    changing the use cases.
    """

    def load(self) -> List[CustomPage]:
        """Load all pages, or an empty list if nothing is stored."""
        ...

    def save(self, pages: List[CustomPage]) -> bool:
        """Replace the stored list. Returns True on success."""
        ...


class AsyncCustomPagesRepository(Protocol):
    """Async storage interface consumed by the use cases."""

    async def load(self) -> List[CustomPage]:
        ...

    async def save(self, pages: List[CustomPage]) -> bool:
        ...


def pages_to_json(pages: List[CustomPage]) -> str:
    return json.dumps([page.model_dump() for page in pages], ensure_ascii=False, indent=2)


def pages_from_json(text: str) -> List[CustomPage]:
    """
    Parse a stored page list, skipping corrupted entries.

    Raises:
        ValueError: If the text isn't a JSON array
    """
    if not text.strip():
        return []

    data = json.loads(text)
    if not isinstance(data, list):
        raise ValueError("Stored custom pages must be a JSON array")

    pages = []
    for index, entry in enumerate(data):
        try:
            pages.append(CustomPage.model_validate(entry))
        except ValidationError as e:
            logger.warning(f"Skipping corrupted custom page at index {index}: {e.error_count()} error(s)")
    return pages


class JSONCustomPagesRepository:
    """
    JSON file implementation of CustomPagesRepository.

    Each storage key maps to one file holding an array of
    {"path": ..., "label": ...} objects.
    """

    def __init__(self, storage_dir: Union[str, Path] = "output/custom_pages",
                 storage_key: str = "CUSTOM_PAGES"):
        """
        Initialize the JSON repository.

        Args:
            storage_dir: Directory for storage files
            storage_key: Key naming this list's file
        """
        self.storage_dir = Path(storage_dir)
        self.storage_key = storage_key
        self.file = self.storage_dir / f"{storage_key.lower()}.json"

    def load(self) -> List[CustomPage]:
        """Load pages from disk. Never raises."""
        if not self.file.exists():
            return []

        try:
            with open(self.file, 'r', encoding='utf-8') as f:
                return pages_from_json(f.read())
        except (OSError, ValueError) as e:
            logger.error(f"Could not load custom pages from {self.file}: {e}")
            return []

    def save(self, pages: List[CustomPage]) -> bool:
        """
        Atomically replace the stored list.

        Returns:
            True if the file was written and reads back identically
        """
        payload = pages_to_json(pages)
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.storage_dir, prefix=f".{self.file.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    f.write(payload)
                os.replace(tmp_name, self.file)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

            # Verify save succeeded
            return self.file.read_text(encoding='utf-8') == payload
        except OSError as e:
            logger.error(f"Failed to save custom pages to {self.file} ({type(e).__name__}): {e}")
            return False

    def clear(self) -> None:
        """Delete the storage file."""
        if self.file.exists():
            self.file.unlink()


class InMemoryCustomPagesRepository:
    """In-memory repository. Does not persist data."""

    def __init__(self, pages: List[CustomPage] = None):
        self.pages: List[CustomPage] = list(pages or [])

    def load(self) -> List[CustomPage]:
        return list(self.pages)

    def save(self, pages: List[CustomPage]) -> bool:
        self.pages = list(pages)
        return True

    def set_initial_data(self, pages: List[CustomPage]) -> None:
        self.pages = list(pages)


class InMemoryAsyncRepository:
    """In-memory async repository with a switch to simulate failed saves."""

    def __init__(self, pages: List[CustomPage] = None):
        self.pages: List[CustomPage] = list(pages or [])
        self.save_failure = False
        self.save_calls = 0

    async def load(self) -> List[CustomPage]:
        return list(self.pages)

    async def save(self, pages: List[CustomPage]) -> bool:
        self.save_calls += 1
        if self.save_failure:
            return False
        self.pages = list(pages)
        return True

    def set_initial_data(self, pages: List[CustomPage]) -> None:
        self.pages = list(pages)


class AsyncRepositoryAdapter:
    """
    Adapts a synchronous CustomPagesRepository to AsyncCustomPagesRepository
    by running each call in a worker thread.

    No retries, no caching: results and exceptions pass through unchanged.
    Cancellation still propagates, but only once a started save has ended.
    """

    def __init__(self, delegate: CustomPagesRepository):
        self.delegate = delegate

    async def load(self) -> List[CustomPage]:
        return await asyncio.to_thread(self.delegate.load)

    async def save(self, pages: List[CustomPage]) -> bool:
        """
        Run the delegate's save in a worker thread.

        A thread can't be interrupted, so on cancellation this waits for the
        write to finish before re-raising. Callers holding a writer lock keep
        it until the file is no longer being written.
        """
        write = asyncio.ensure_future(asyncio.to_thread(self.delegate.save, list(pages)))
        try:
            return await asyncio.shield(write)
        except asyncio.CancelledError:
            await asyncio.wait([write])
            raise


def as_async_repository(repository) -> AsyncCustomPagesRepository:
    """Wrap a synchronous repository; async repositories pass through."""
    if inspect.iscoroutinefunction(getattr(repository, 'load', None)):
        return repository
    return AsyncRepositoryAdapter(repository)
