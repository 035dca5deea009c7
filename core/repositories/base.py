"""
Generic Base Repository
=======================

Type-safe, generic read repository. The catalog is owned by the listings
CRUD application, so only read operations live here.

Usage:
    from core.repositories import BaseRepository
    from listings.models import Listing

    class ListingRepository(BaseRepository[Listing]):
        model = Listing
        not_found_resource = "listing"
"""

from typing import TypeVar, Generic, Type, Optional, Any
from django.db import models
from django.db.models import QuerySet

from core.exceptions import NotFoundError

T = TypeVar("T", bound=models.Model)


class BaseRepository(Generic[T]):
    """
    Generic repository with standard read operations.

    Subclasses MUST set the `model` class attribute:

        class ListingRepository(BaseRepository[Listing]):
            model = Listing
    """

    model: Type[T]
    not_found_resource: str = "resource"

    @classmethod
    def queryset(cls) -> QuerySet[T]:
        """Base queryset every lookup starts from. Override to narrow it."""
        return cls.model.objects.all()

    @classmethod
    def get_by_id(cls, pk: Any) -> T:
        """
        Get a single instance by primary key.
        Raises NotFoundError if it does not exist.
        """
        instance = cls.get_by_id_or_none(pk)
        if instance is None:
            raise NotFoundError(
                f"{cls.not_found_resource.capitalize()} not found",
                resource=cls.not_found_resource,
                id=pk,
            )
        return instance

    @classmethod
    def get_by_id_or_none(cls, pk: Any) -> Optional[T]:
        """Get a single instance by primary key, or None."""
        try:
            return cls.queryset().filter(pk=pk).first()
        except (TypeError, ValueError):
            # Primary key of the wrong shape cannot match anything
            return None

