"""
Base store class for the catalog's backing collaborators.

The pipeline only ever reads through this contract; concrete stores
(hosted PostgREST, in-memory snapshot) implement the two abstract methods.
"""

from abc import ABC, abstractmethod
from typing import Any

from catalog.types import ALL_CATEGORIES, SpecimenKind, SpecimenPage


class BaseStore(ABC):
    """
    Abstract base class for specimen stores.

    Subclasses must implement:
    - list_specimens(): one page of specimens of a kind
    - list_images_for(): gallery images attached to a specimen
    """

    store_id: str = None  # e.g., "supabase"

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self) -> None:
        """Release network resources. No-op by default."""

    @abstractmethod
    async def list_specimens(
        self,
        kind: SpecimenKind,
        category: str = ALL_CATEGORIES,
        page: int = 1,
        page_size: int = 1000,
    ) -> SpecimenPage:
        """
        List specimens of one kind.

        Args:
            kind: Rock or mineral
            category: A category name, or ``"ALL"`` for no category filter
            page: 1-indexed page number
            page_size: Records per page

        Returns:
            SpecimenPage with records ordered by name

        Raises:
            StoreError: On transport, collaborator or shape failures
        """

    @abstractmethod
    async def list_images_for(
        self,
        specimen_id: str,
        kind: SpecimenKind = SpecimenKind.ROCK,
    ) -> list[dict[str, Any]]:
        """
        List gallery images attached to a specimen, in display order.

        Returns:
            Image rows (each with at least ``image_url``); may be empty

        Raises:
            StoreError: On transport, collaborator or shape failures
        """
