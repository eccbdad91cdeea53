"""
Domain object factories shared by the unit tests.

Each factory builds a valid object and takes keyword overrides, so a test
only spells out the fields it is about.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from divelog.models import Buddy, Certification, Country, Dive, DiveSite
from divelog.reference_data import EntryPoint, GasMix, TankConfiguration, TankMaterial
from divelog.stats import StatRow
from divelog.validation import DiveForm


@dataclass
class MockRecord:
    """Stand-in for a PocketBase record: plain attributes plus an expand dict."""

    id: str
    fields: dict[str, Any] = field(default_factory=dict)
    expand: dict[str, Any] = field(default_factory=dict)

    def __getattr__(self, name: str) -> Any:
        try:
            return self.__dict__["fields"][name]
        except KeyError as e:
            raise AttributeError(name) from e


def make_country(country_id: str = "au", name: str = "Australia") -> Country:
    return Country(id=country_id, name=name)


def make_site(site_id: str = "site-1", **overrides: Any) -> DiveSite:
    values: dict[str, Any] = {
        "name": "Nelson Bay",
        "location": "Port Stephens",
        "country": make_country(),
        "timezone": "Australia/Sydney",
        "altitude": 0,
    }
    values.update(overrides)
    return DiveSite(id=site_id, **values)


def make_buddy(buddy_id: str = "buddy-1", name: str = "Sam") -> Buddy:
    return Buddy(id=buddy_id, name=name)


def make_dive(**overrides: Any) -> Dive:
    values: dict[str, Any] = {
        "id": "dive-1",
        "owner_id": "owner-1",
        "number": 1,
        "dive_site": make_site(),
        "date_time_in": datetime(2024, 3, 9, 9, 30, tzinfo=UTC),
        "max_depth": 18.0,
        "avg_depth": 12.0,
        "bottom_time": timedelta(minutes=45),
        "tank_configuration": TankConfiguration(id="tc-single", name="Single Tank"),
        "tank_material": TankMaterial(id="tm-al", name="Aluminium"),
        "tank_volume": 11.6,
        "gas_mix": GasMix(id="gm-air", name="Air"),
        "fo2": 0.21,
        "entry_point": EntryPoint(id="ep-shore", name="Shore"),
        "pressure_in": 200,
        "pressure_out": 60,
    }
    values.update(overrides)
    return Dive(**values)


def make_certification() -> Certification:
    return Certification(id="cert-1", course_name="Advanced Open Water")


def make_row(
    dive_id: str,
    date_time_in: datetime,
    bottom_minutes: int = 40,
    max_depth: float = 18.0,
    avg_depth: float | None = 10.0,
    site: DiveSite | None = None,
    buddy: Buddy | None = None,
) -> StatRow:
    return StatRow(
        dive_id=dive_id,
        date_time_in=date_time_in,
        bottom_time=timedelta(minutes=bottom_minutes),
        max_depth=max_depth,
        avg_depth=avg_depth,
        dive_site=site or make_site(),
        buddy=buddy,
    )


def make_dive_form(**overrides: Any) -> DiveForm:
    values: dict[str, Any] = {
        "number": 12,
        "activity": "Reef",
        "dive_site_id": "site-1",
        "date_time_in": datetime(2024, 3, 9, 9, 30),
        "max_depth": 18.0,
        "avg_depth": 12.0,
        "bottom_time_minutes": 45,
        "tank_configuration_id": "tc-single",
        "tank_material_id": "tm-al",
        "tank_volume": 11.6,
        "gas_mix_id": "gm-air",
        "fo2": 0.21,
        "pressure_in": 200,
        "pressure_out": 60,
        "entry_point_id": "ep-shore",
    }
    values.update(overrides)
    return DiveForm(**values)


def make_site_record(site_id: str = "site-1", timezone: str = "Australia/Sydney", **fields: Any) -> MockRecord:
    values: dict[str, Any] = {"name": "Nelson Bay", "timezone": timezone, "altitude": 0}
    values.update(fields)
    country = MockRecord(id="au", fields={"name": "Australia", "iso2_code": "AU"})
    return MockRecord(id=site_id, fields=values, expand={"country": country})


def make_dive_record(dive_id: str = "dive-1", site: MockRecord | None = None, **fields: Any) -> MockRecord:
    """A dives record as fetched with the full dive expansion."""
    values: dict[str, Any] = {
        "owner": "owner-1",
        "version": 1,
        "number": 12,
        "activity": "Reef",
        "date_time_in": "2024-03-08 22:30:00.000Z",
        "max_depth": 18,
        "avg_depth": 12,
        "bottom_time": 45,
        "tank_volume": 11.6,
        "fo2": 0.21,
        "pressure_in": 200,
        "pressure_out": 60,
        "price": "",
        "rating": "",
    }
    values.update(fields)
    expand: dict[str, Any] = {
        "dive_site": site or make_site_record(),
        "tank_configuration": MockRecord(id="tc-single", fields={"name": "Single Tank", "sort": 1}),
        "tank_material": MockRecord(id="tm-al", fields={"name": "Aluminium", "sort": 1}),
        "gas_mix": MockRecord(id="gm-air", fields={"name": "Air", "sort": 1}),
        "entry_point": MockRecord(id="ep-shore", fields={"name": "Shore", "sort": 1}),
    }
    return MockRecord(id=dive_id, fields=values, expand=expand)
