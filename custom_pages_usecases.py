"""
Use cases for managing a site's custom pages.

CRUD use cases validate URLs through the site's classifier and check for
duplicates; order use cases move entries around. Every operation persists
by replacing the repository's whole list and returns a UseCaseResult.

The use cases don't serialize callers. Each mutation is a read-modify-write
of the full list, so callers must keep at most one mutating call in flight
per repository (see SiteAdapter.lock).
"""

import logging
from typing import Callable, List, Optional

from classifiers import ClassificationResult, InvalidDomain, Valid
from page_models import CustomPage, Error, ErrorKind, Success, UseCaseResult
from persistence import as_async_repository
from usecase_runner import safe_use_case

logger = logging.getLogger(__name__)

Classifier = Callable[[str], ClassificationResult]


class _PageListUseCases:
    """Shared repository handling for the CRUD and order use cases."""

    def __init__(self, repository, log_name: Optional[str] = None):
        """
        Args:
            repository: Sync or async custom pages repository
            log_name: Logger name for this site's operations
        """
        self.repository = as_async_repository(repository)
        self.logger = logging.getLogger(log_name) if log_name else logger

    async def _save_and_return(self, pages: List[CustomPage],
                               error_message: str) -> UseCaseResult[List[CustomPage]]:
        if await self.repository.save(pages):
            return Success(list(pages))
        self.logger.error(f"Repository save returned False: {error_message}")
        return Error(error_message, kind=ErrorKind.PERSISTENCE_FAILURE)


class CustomPagesCrudUseCases(_PageListUseCases):
    """
    Load, add, delete and clear custom pages.
    """

    def __init__(self, repository, classifier: Classifier,
                 invalid_domain_message: str = "Invalid domain",
                 invalid_path_message: str = "Invalid URL path",
                 log_name: Optional[str] = None):
        """
        Args:
            repository: Sync or async custom pages repository
            classifier: Site URL classifier (any callable url -> ClassificationResult)
            invalid_domain_message: Message for URLs on another domain
            invalid_path_message: Message for URLs no route accepts
            log_name: Logger name for this site's operations
        """
        super().__init__(repository, log_name)
        self.classifier = classifier
        self.invalid_domain_message = invalid_domain_message
        self.invalid_path_message = invalid_path_message

    @safe_use_case("Failed to load pages")
    async def load_pages(self) -> UseCaseResult[List[CustomPage]]:
        return Success(list(await self.repository.load()))

    @safe_use_case("Failed to add page")
    async def add_page(self, url: str, label: str,
                       existing_pages: List[CustomPage]) -> UseCaseResult[List[CustomPage]]:
        """
        Add a new page after validating its URL.

        Args:
            url: Full URL to classify
            label: Custom label (blank = label derived from the URL)
            existing_pages: Current pages list (for duplicate checking)

        Returns:
            Success with the updated pages list, or Error
        """
        result = self.classifier(url)
        if not isinstance(result, Valid):
            if isinstance(result, InvalidDomain):
                return Error(self.invalid_domain_message, kind=ErrorKind.DOMAIN_REJECTED)
            return Error(self.invalid_path_message, kind=ErrorKind.PATH_REJECTED)

        final_label = label if label and label.strip() else result.label
        if not final_label.strip():
            final_label = result.path
        new_page = CustomPage(path=result.path, label=final_label)

        if any(page.path == new_page.path for page in existing_pages):
            return Error("This section already exists", kind=ErrorKind.DUPLICATE_ENTRY)

        return await self._save_and_return(list(existing_pages) + [new_page], "Failed to save changes")

    @safe_use_case("Failed to delete page")
    async def delete_page(self, index: int,
                          current_pages: List[CustomPage]) -> UseCaseResult[List[CustomPage]]:
        """
        Delete the page at `index` in the current pages list.
        """
        if not 0 <= index < len(current_pages):
            self.logger.warning(f"Invalid delete index: {index}, size={len(current_pages)}")
            return Error("Invalid position", kind=ErrorKind.OUT_OF_RANGE)

        updated_pages = list(current_pages)
        del updated_pages[index]
        return await self._save_and_return(updated_pages, "Failed to delete section")

    @safe_use_case("Failed to clear pages")
    async def clear_all(self) -> UseCaseResult[List[CustomPage]]:
        return await self._save_and_return([], "Failed to clear data")


class CustomPagesOrderUseCases(_PageListUseCases):
    """Reorder custom pages and restore deleted ones."""

    @safe_use_case("Failed to reorder pages")
    async def reorder_pages(self, from_index: int, to_index: int,
                            current_pages: List[CustomPage]) -> UseCaseResult[List[CustomPage]]:
        """
        Move one page with standard list-move semantics: remove it at
        `from_index`, then insert it at `to_index` in the shortened list.

        reorder_pages(0, 2, [A, B, C]) -> [B, C, A]
        """
        size = len(current_pages)
        if not (0 <= from_index < size and 0 <= to_index < size):
            self.logger.warning(f"Invalid reorder positions: from={from_index}, to={to_index}, size={size}")
            return Error("Invalid positions", kind=ErrorKind.OUT_OF_RANGE)

        pages = list(current_pages)
        moved = pages.pop(from_index)
        pages.insert(to_index, moved)
        return await self._save_and_return(pages, "Failed to save order")

    @safe_use_case("Failed to save order")
    async def save_order(self, pages: List[CustomPage]) -> UseCaseResult[List[CustomPage]]:
        """Persist a complete reordered list verbatim (drag-and-drop)."""
        return await self._save_and_return(list(pages), "Failed to save order")

    @safe_use_case("Failed to restore page")
    async def restore_page(self, page: CustomPage, index: int,
                           current_pages: List[CustomPage]) -> UseCaseResult[List[CustomPage]]:
        """
        Put a deleted page back (undo delete).

        The index is clamped to [0, len(current_pages)], so a page whose old
        position no longer exists lands at the nearest end of the list.

        Args:
            page: The page that was deleted
            index: Position it had before deletion
            current_pages: Current pages list

        Returns:
            Success with the updated pages list, or Error
        """
        if any(existing.path == page.path for existing in current_pages):
            return Error("This section already exists", kind=ErrorKind.DUPLICATE_ENTRY)

        position = min(max(index, 0), len(current_pages))
        pages = list(current_pages)
        pages.insert(position, page)
        return await self._save_and_return(pages, "Failed to save order")
