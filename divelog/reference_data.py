"""Reference ("static") data types.

Small lookup tables shared by every diver: currents, waves, entry points,
equipment, gas mixes, tank configurations and so on. Each kind names its
PocketBase collection and the column it is ordered by at the source, and knows
how to build itself from a record. That is the whole capability the generic
cache in api.services.reference_data needs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Protocol, Self


class ReferenceRecord(Protocol):
    """Capability shared by all reference data kinds."""

    collection: ClassVar[str]
    source_sort: ClassVar[str]

    @property
    def id(self) -> str: ...

    @property
    def name(self) -> str: ...

    @classmethod
    def from_record(cls, record: Any) -> Self: ...


@dataclass(frozen=True)
class ReferenceDataItem:
    """Shape shared by most lookup tables: id, sort, default flag, name, description."""

    collection: ClassVar[str] = ""
    source_sort: ClassVar[str] = "sort"

    id: str
    sort: int = 0
    is_default: bool = False
    name: str = ""
    description: str = ""

    def __str__(self) -> str:
        return f"{self.name} - {self.description}"

    @classmethod
    def from_record(cls, record: Any) -> Self:
        return cls(
            id=str(getattr(record, "id")),
            sort=int(getattr(record, "sort", 0) or 0),
            is_default=bool(getattr(record, "is_default", False)),
            name=str(getattr(record, "name", "") or ""),
            description=str(getattr(record, "description", "") or ""),
        )


@dataclass(frozen=True)
class Current(ReferenceDataItem):
    collection: ClassVar[str] = "currents"


@dataclass(frozen=True)
class Waves(ReferenceDataItem):
    collection: ClassVar[str] = "waves"


@dataclass(frozen=True)
class EntryPoint(ReferenceDataItem):
    collection: ClassVar[str] = "entry_points"


@dataclass(frozen=True)
class Equipment(ReferenceDataItem):
    collection: ClassVar[str] = "equipment"


@dataclass(frozen=True)
class DiveProperty(ReferenceDataItem):
    collection: ClassVar[str] = "dive_properties"


@dataclass(frozen=True)
class GasMix(ReferenceDataItem):
    collection: ClassVar[str] = "gas_mixes"


@dataclass(frozen=True)
class TankConfiguration(ReferenceDataItem):
    collection: ClassVar[str] = "tank_configurations"


@dataclass(frozen=True)
class TankMaterial(ReferenceDataItem):
    collection: ClassVar[str] = "tank_materials"


@dataclass(frozen=True)
class BuddyRole(ReferenceDataItem):
    collection: ClassVar[str] = "buddy_roles"


@dataclass(frozen=True)
class Agency:
    """A diver training agency (PADI, SSI, ...)."""

    collection: ClassVar[str] = "agencies"
    source_sort: ClassVar[str] = "common_name"

    id: str
    common_name: str = ""
    full_name: str = ""
    acronym: str = ""
    url: str = ""

    @property
    def name(self) -> str:
        return self.common_name

    def __str__(self) -> str:
        return f"{self.common_name} ({self.acronym})" if self.acronym else self.common_name

    @classmethod
    def from_record(cls, record: Any) -> Self:
        return cls(
            id=str(getattr(record, "id")),
            common_name=str(getattr(record, "common_name", "") or ""),
            full_name=str(getattr(record, "full_name", "") or ""),
            acronym=str(getattr(record, "acronym", "") or ""),
            url=str(getattr(record, "url", "") or ""),
        )


# URL-facing kind names, used by the reference data router.
REFERENCE_KINDS: dict[str, type[Any]] = {
    "agencies": Agency,
    "buddy-roles": BuddyRole,
    "currents": Current,
    "dive-properties": DiveProperty,
    "entry-points": EntryPoint,
    "equipment": Equipment,
    "gas-mixes": GasMix,
    "tank-configurations": TankConfiguration,
    "tank-materials": TankMaterial,
    "waves": Waves,
}
