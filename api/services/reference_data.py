"""
Reference Data Cache Service.

Provides cached, typed access to the small lookup tables every diver shares
(gas mixes, tank configurations, agencies, ...). One ReferenceDataStore lives
for the whole process; services for each kind are thin typed views over it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from divelog.errors import NotFoundError
from divelog.reference_data import (
    REFERENCE_KINDS,
    Agency,
    BuddyRole,
    Current,
    DiveProperty,
    EntryPoint,
    Equipment,
    GasMix,
    ReferenceRecord,
    TankConfiguration,
    TankMaterial,
    Waves,
)

T = TypeVar("T", bound=ReferenceRecord)

if TYPE_CHECKING:
    from .divelog_repository import DivelogRepository

logger = logging.getLogger(__name__)


class ReferenceDataStore:
    """
    Process-wide cache of reference data, keyed by kind.

    Loads are serialised per kind with an asyncio.Lock and checked again once
    the lock is held, so concurrent first access triggers one load. Populated
    sets are immutable tuples swapped in whole; readers of a loaded kind take
    no lock and can never see a partial set.
    """

    def __init__(self, repository: DivelogRepository) -> None:
        self.repository = repository
        self._items: dict[type[Any], tuple[Any, ...]] = {}
        self._locks: dict[type[Any], asyncio.Lock] = {}
        # Bumped by invalidate; a load started under an older generation is not installed.
        self._epoch = 0
        self._generations: dict[type[Any], int] = {}

    def _lock_for(self, kind: type[Any]) -> asyncio.Lock:
        # setdefault is atomic on the single event loop thread
        return self._locks.setdefault(kind, asyncio.Lock())

    async def get(self, kind: type[T]) -> tuple[T, ...]:
        """All items of a kind in source sort order, loading them on first use."""
        items = self._items.get(kind)
        if items is not None:
            return items

        async with self._lock_for(kind):
            items = self._items.get(kind)
            if items is not None:
                return items
            started = self._generation(kind)
            rows = await self.repository.fetch_reference_rows(kind.collection, kind.source_sort)
            loaded = tuple(kind.from_record(row) for row in rows)
            if self._generation(kind) != started:
                logger.debug(f"Discarding {kind.collection} load that raced an invalidation")
                return loaded
            self._items[kind] = loaded
            logger.info(f"Loaded {len(loaded)} {kind.collection} into reference data cache")
            return loaded

    def _generation(self, kind: type[Any]) -> tuple[int, int]:
        return self._epoch, self._generations.get(kind, 0)

    def is_loaded(self, kind: type[Any]) -> bool:
        return kind in self._items

    def invalidate(self, kind: type[Any] | None = None) -> None:
        """Drop one kind, or everything, so the next read reloads it."""
        if kind is None:
            self._epoch += 1
            self._items.clear()
            logger.info("Reference data cache cleared")
        else:
            self._generations[kind] = self._generations.get(kind, 0) + 1
            self._items.pop(kind, None)
            logger.info(f"Reference data cache cleared for {kind.collection}")


class ReferenceDataService(Generic[T]):
    """Typed lookups over one reference data kind."""

    def __init__(self, store: ReferenceDataStore, kind: type[T]) -> None:
        self.store = store
        self.kind = kind

    async def list(self, sort_by_name: bool = False) -> list[T]:
        """Items in source sort order, or case-insensitively by name."""
        items = await self.store.get(self.kind)
        if sort_by_name:
            return sorted(items, key=lambda item: (item.name.casefold(), item.id))
        return list(items)

    async def exists(self, item_id: str) -> bool:
        items = await self.store.get(self.kind)
        return any(item.id == item_id for item in items)

    async def all_exist(self, item_ids: Iterable[str]) -> bool:
        """True when every id is known. An empty collection of ids is trivially satisfied."""
        wanted = set(item_ids)
        if not wanted:
            return True
        items = await self.store.get(self.kind)
        return wanted <= {item.id for item in items}

    async def get_one_by_id(self, item_id: str) -> T:
        """
        Raises:
            NotFoundError: If no item of this kind has the id.
        """
        items = await self.store.get(self.kind)
        for item in items:
            if item.id == item_id:
                return item
        raise NotFoundError(f"{self.kind.collection} {item_id} not found")


class ReferenceData:
    """One service per reference data kind, all sharing a store."""

    def __init__(self, store: ReferenceDataStore) -> None:
        self.store = store
        self.agencies = ReferenceDataService(store, Agency)
        self.buddy_roles = ReferenceDataService(store, BuddyRole)
        self.currents = ReferenceDataService(store, Current)
        self.dive_properties = ReferenceDataService(store, DiveProperty)
        self.entry_points = ReferenceDataService(store, EntryPoint)
        self.equipment = ReferenceDataService(store, Equipment)
        self.gas_mixes = ReferenceDataService(store, GasMix)
        self.tank_configurations = ReferenceDataService(store, TankConfiguration)
        self.tank_materials = ReferenceDataService(store, TankMaterial)
        self.waves = ReferenceDataService(store, Waves)

    def for_kind(self, name: str) -> ReferenceDataService[Any]:
        """Service for a URL-facing kind name such as ``gas-mixes``.

        Raises:
            NotFoundError: If the kind is unknown.
        """
        kind = REFERENCE_KINDS.get(name)
        if kind is None:
            raise NotFoundError(f"unknown reference data kind {name!r}")
        return ReferenceDataService(self.store, kind)
