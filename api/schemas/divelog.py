"""
Pydantic schemas for dive log API endpoints.

Defines request bodies for saving dives and response models for dives,
stats rollups and reference data.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, Field

from divelog.dive_metrics import DiveMetrics
from divelog.models import Buddy, Dive, DiveSite
from divelog.pagination import PageData
from divelog.stats import AggregateDiveStats, DimensionalStats, DiveStats
from divelog.validation import DiveForm, ValidationFailure


def _minutes(value: timedelta | None) -> float | None:
    return None if value is None else value.total_seconds() / 60


# ============================================================================
# Requests
# ============================================================================


class DiveRequest(BaseModel):
    """A dive as submitted by the diver. Times are wall-clock at the dive site."""

    number: int | None = None
    activity: str = ""
    dive_site_id: str = ""
    operator_id: str | None = None
    price_amount: float | None = None
    price_currency_id: str | None = None
    trip_id: str | None = None
    certification_id: str | None = None
    date_time_in: datetime | None = Field(None, description="Wall-clock start time at the dive site")
    max_depth: float | None = None
    avg_depth: float | None = None
    bottom_time_minutes: int | None = None
    safety_stop_minutes: float | None = None
    water_temp: int | None = None
    air_temp: int | None = None
    visibility: float | None = None
    current_id: str | None = None
    waves_id: str | None = None
    buddy_id: str | None = None
    buddy_role_id: str | None = None
    weight: float | None = None
    weight_notes: str = ""
    equipment_ids: list[str] = Field(default_factory=list)
    equipment_notes: str = ""
    tank_configuration_id: str = ""
    tank_material_id: str = ""
    tank_volume: float | None = None
    gas_mix_id: str = ""
    fo2: float | None = None
    pressure_in: int | None = None
    pressure_out: int | None = None
    gas_mix_notes: str = ""
    entry_point_id: str = ""
    property_ids: list[str] = Field(default_factory=list)
    rating: int | None = None
    notes: str = ""

    def to_form(self) -> DiveForm:
        return DiveForm(**self.model_dump(exclude={"version"}))


class DiveUpdateRequest(DiveRequest):
    version: int = Field(description="Version the edit was based on")


# ============================================================================
# Responses
# ============================================================================


class FieldErrorResponse(BaseModel):
    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    detail: str = "Validation failed"
    errors: list[FieldErrorResponse]
    non_field_errors: list[str] = Field(default_factory=list)

    @classmethod
    def from_failure(cls, failure: ValidationFailure) -> ValidationErrorResponse:
        return cls(
            errors=[FieldErrorResponse(field=f, message=m) for f, m in failure.errors()],
            non_field_errors=list(failure.non_field_errors),
        )


class ReferenceItemResponse(BaseModel):
    id: str
    name: str
    description: str = ""
    sort: int = 0
    is_default: bool = False
    acronym: str | None = None
    full_name: str | None = None
    url: str | None = None

    @classmethod
    def from_item(cls, item: Any) -> ReferenceItemResponse:
        return cls(
            id=item.id,
            name=item.name,
            description=getattr(item, "description", ""),
            sort=getattr(item, "sort", 0),
            is_default=getattr(item, "is_default", False),
            acronym=getattr(item, "acronym", None),
            full_name=getattr(item, "full_name", None),
            url=getattr(item, "url", None),
        )


class DiveSiteSummary(BaseModel):
    id: str
    name: str
    location: str = ""
    country: str | None = None
    timezone: str
    altitude: int = 0
    dives_at: int | None = None
    first_dive_at: datetime | None = None
    last_dive_at: datetime | None = None

    @classmethod
    def from_site(cls, site: DiveSite, with_stats: bool = False) -> DiveSiteSummary:
        return cls(
            id=site.id,
            name=site.name,
            location=site.location,
            country=site.country.name if site.country is not None else None,
            timezone=site.timezone,
            altitude=site.altitude,
            dives_at=site.dives_at if with_stats else None,
            first_dive_at=site.first_dive_at if with_stats else None,
            last_dive_at=site.last_dive_at if with_stats else None,
        )


class BuddySummary(BaseModel):
    id: str
    name: str
    agency: str | None = None
    dives_with: int | None = None
    first_dive_with: datetime | None = None
    last_dive_with: datetime | None = None

    @classmethod
    def from_buddy(cls, buddy: Buddy, with_stats: bool = False) -> BuddySummary:
        return cls(
            id=buddy.id,
            name=buddy.name,
            agency=buddy.agency.acronym if buddy.agency is not None else None,
            dives_with=buddy.dives_with if with_stats else None,
            first_dive_with=buddy.first_dive_with if with_stats else None,
            last_dive_with=buddy.last_dive_with if with_stats else None,
        )


class DiveMetricsResponse(BaseModel):
    gas_used: float = Field(description="Litres of gas used at surface pressure")
    sac_rate: float = Field(description="Surface air consumption in litres per minute")
    is_altitude_dive: bool
    is_deep_dive: bool
    is_training_dive: bool

    @classmethod
    def from_metrics(cls, metrics: DiveMetrics) -> DiveMetricsResponse:
        return cls(
            gas_used=metrics.gas_used,
            sac_rate=metrics.sac_rate,
            is_altitude_dive=metrics.is_altitude_dive,
            is_deep_dive=metrics.is_deep_dive,
            is_training_dive=metrics.is_training_dive,
        )


class DiveResponse(BaseModel):
    id: str
    version: int
    number: int
    activity: str
    dive_site: DiveSiteSummary
    date_time_in: datetime = Field(description="Start time in the dive site's timezone")
    surface_interval_minutes: float | None = None
    max_depth: float
    avg_depth: float | None = None
    bottom_time_minutes: float
    safety_stop_minutes: float | None = None
    water_temp: int | None = None
    air_temp: int | None = None
    visibility: float | None = None
    buddy: BuddySummary | None = None
    trip: str | None = None
    certification: str | None = None
    tank_configuration: str
    tank_material: str
    tank_volume: float
    gas_mix: str
    fo2: float
    pressure_in: int | None = None
    pressure_out: int | None = None
    entry_point: str
    equipment: list[str] = Field(default_factory=list)
    properties: list[str] = Field(default_factory=list)
    rating: int | None = None
    notes: str = ""
    metrics: DiveMetricsResponse

    @classmethod
    def from_dive(cls, dive: Dive, metrics: DiveMetrics) -> DiveResponse:
        return cls(
            id=dive.id,
            version=dive.version,
            number=dive.number,
            activity=dive.activity,
            dive_site=DiveSiteSummary.from_site(dive.dive_site),
            date_time_in=dive.date_time_in,
            surface_interval_minutes=_minutes(dive.surface_interval),
            max_depth=dive.max_depth,
            avg_depth=dive.avg_depth,
            bottom_time_minutes=dive.bottom_time.total_seconds() / 60,
            safety_stop_minutes=_minutes(dive.safety_stop),
            water_temp=dive.water_temp,
            air_temp=dive.air_temp,
            visibility=dive.visibility,
            buddy=BuddySummary.from_buddy(dive.buddy) if dive.buddy is not None else None,
            trip=str(dive.trip) if dive.trip is not None else None,
            certification=str(dive.certification) if dive.certification is not None else None,
            tank_configuration=dive.tank_configuration.name,
            tank_material=dive.tank_material.name,
            tank_volume=dive.tank_volume,
            gas_mix=dive.gas_mix.name,
            fo2=dive.fo2,
            pressure_in=dive.pressure_in,
            pressure_out=dive.pressure_out,
            entry_point=dive.entry_point.name,
            equipment=[e.name for e in dive.equipment],
            properties=[p.name for p in dive.properties],
            rating=dive.rating,
            notes=dive.notes,
            metrics=DiveMetricsResponse.from_metrics(metrics),
        )


class PageDataResponse(BaseModel):
    current_page: int
    page_size: int
    first_page: int
    last_page: int
    total_records: int

    @classmethod
    def from_page_data(cls, page: PageData) -> PageDataResponse:
        return cls(
            current_page=page.current_page,
            page_size=page.page_size,
            first_page=page.first_page,
            last_page=page.last_page,
            total_records=page.total_records,
        )


class DiveListResponse(BaseModel):
    dives: list[DiveResponse]
    page: PageDataResponse


class AggregateStatsResponse(BaseModel):
    dive_count: int
    first_dive: datetime
    last_dive: datetime
    bottom_time_avg_minutes: float
    bottom_time_max_minutes: float
    bottom_time_sum_minutes: float
    avg_depth_avg: float
    avg_depth_max: float
    max_depth_avg: float
    max_depth_max: float

    @classmethod
    def from_stats(cls, stats: AggregateDiveStats) -> AggregateStatsResponse:
        return cls(
            dive_count=stats.dive_count,
            first_dive=stats.first_dive,
            last_dive=stats.last_dive,
            bottom_time_avg_minutes=stats.bottom_time_avg.total_seconds() / 60,
            bottom_time_max_minutes=stats.bottom_time_max.total_seconds() / 60,
            bottom_time_sum_minutes=stats.bottom_time_sum.total_seconds() / 60,
            avg_depth_avg=stats.avg_depth_avg,
            avg_depth_max=stats.avg_depth_max,
            max_depth_avg=stats.max_depth_avg,
            max_depth_max=stats.max_depth_max,
        )


class DimensionalStatsResponse(BaseModel):
    key: str = Field(description="Month (YYYY-MM), country id, dive site id or buddy id")
    label: str
    stats: AggregateStatsResponse
    dive_site: DiveSiteSummary | None = None
    buddy: BuddySummary | None = None

    @classmethod
    def from_stats(cls, entry: DimensionalStats) -> DimensionalStatsResponse:
        entity = entry.entity
        return cls(
            key=entry.key,
            label=entry.label,
            stats=AggregateStatsResponse.from_stats(entry.stats),
            dive_site=DiveSiteSummary.from_site(entity, with_stats=True) if isinstance(entity, DiveSite) else None,
            buddy=BuddySummary.from_buddy(entity, with_stats=True) if isinstance(entity, Buddy) else None,
        )


def dimensional_list(entries: list[DimensionalStats]) -> list[DimensionalStatsResponse]:
    return [DimensionalStatsResponse.from_stats(entry) for entry in entries]


class DiveStatsResponse(BaseModel):
    general: AggregateStatsResponse
    by_month: list[DimensionalStatsResponse]
    by_country: list[DimensionalStatsResponse]
    by_dive_site: list[DimensionalStatsResponse]
    by_buddy: list[DimensionalStatsResponse]

    @classmethod
    def from_stats(cls, stats: DiveStats) -> DiveStatsResponse:
        return cls(
            general=AggregateStatsResponse.from_stats(stats.general),
            by_month=dimensional_list(stats.by_month),
            by_country=dimensional_list(stats.by_country),
            by_dive_site=dimensional_list(stats.by_dive_site),
            by_buddy=dimensional_list(stats.by_buddy),
        )
