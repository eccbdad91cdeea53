"""Dive service - business logic for reading and saving dives.

Saves go validate -> normalise start time to UTC -> write. Validation problems
are collected in full and raised once as ValidationFailedError; every other
failure propagates from the repository as a divelog error.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any

from divelog.dive_metrics import DiveMetrics, surface_interval_since
from divelog.dive_metrics import compute_dive_metrics as compute_metrics
from divelog.errors import NotFoundError, TimezoneResolutionError, ValidationFailedError
from divelog.models import Dive
from divelog.pagination import PageData, Pager
from divelog.sorting import DIVE
from divelog.timezones import site_local_to_utc
from divelog.validation import DiveForm, ValidationFailure, Validator, validate_dive
from divelog.validation.validator import SELECT_MESSAGE

from .divelog_repository import DiveFilter, DivelogRepository
from .record_mappers import format_datetime, map_dive, minutes, parse_datetime
from .reference_data import ReferenceData, ReferenceDataService

logger = logging.getLogger(__name__)

INVALID_SELECTION_MESSAGE = "This field must be a valid selection"


def form_to_values(form: DiveForm, date_time_in_utc: datetime) -> dict[str, Any]:
    """PocketBase field values for a validated dive form."""
    return {
        "number": form.number,
        "activity": form.activity,
        "dive_site": form.dive_site_id,
        "operator": form.operator_id or "",
        "price": form.price_amount,
        "currency": form.price_currency_id or "",
        "trip": form.trip_id or "",
        "certification": form.certification_id or "",
        "date_time_in": format_datetime(date_time_in_utc),
        "max_depth": form.max_depth,
        "avg_depth": form.avg_depth,
        "bottom_time": form.bottom_time_minutes,
        "safety_stop": form.safety_stop_minutes,
        "water_temp": form.water_temp,
        "air_temp": form.air_temp,
        "visibility": form.visibility,
        "current": form.current_id or "",
        "waves": form.waves_id or "",
        "buddy": form.buddy_id or "",
        "buddy_role": form.buddy_role_id or "",
        "weight": form.weight,
        "weight_notes": form.weight_notes,
        "equipment": list(form.equipment_ids),
        "equipment_notes": form.equipment_notes,
        "tank_configuration": form.tank_configuration_id,
        "tank_material": form.tank_material_id,
        "tank_volume": form.tank_volume,
        "gas_mix": form.gas_mix_id,
        "fo2": form.fo2,
        "pressure_in": form.pressure_in,
        "pressure_out": form.pressure_out,
        "gas_mix_notes": form.gas_mix_notes,
        "entry_point": form.entry_point_id,
        "properties": list(form.property_ids),
        "rating": form.rating,
        "notes": form.notes,
    }


class DiveService:
    """Reads, validates and saves dives for one diver at a time."""

    def __init__(self, repository: DivelogRepository, reference_data: ReferenceData) -> None:
        self.repository = repository
        self.reference_data = reference_data

    def compute_dive_metrics(self, dive: Dive) -> DiveMetrics:
        return compute_metrics(dive)

    async def _check_reference(
        self,
        v: Validator,
        service: ReferenceDataService[Any],
        item_id: str | None,
        field: str,
    ) -> None:
        if item_id:
            v.check_field(await service.exists(item_id), field, INVALID_SELECTION_MESSAGE)

    async def _check_record(self, v: Validator, collection: str, record_id: str | None, field: str) -> None:
        if record_id:
            v.check_field(await self.repository.id_exists(collection, record_id), field, INVALID_SELECTION_MESSAGE)

    async def validate_dive(self, form: DiveForm) -> ValidationFailure:
        """Run the dive rules plus existence checks for every selected id.

        Returns:
            The complete set of messages; ``valid`` when there are none.
        """
        gas_mix_name: str | None = None
        gas_mix_known = True
        if form.gas_mix_id:
            try:
                gas_mix_name = (await self.reference_data.gas_mixes.get_one_by_id(form.gas_mix_id)).name
            except NotFoundError:
                gas_mix_known = False

        v = validate_dive(form, gas_mix_name)
        if form.gas_mix_id:
            v.check_field(gas_mix_known, "gas_mix_id", INVALID_SELECTION_MESSAGE)

        ref = self.reference_data
        await self._check_reference(v, ref.tank_configurations, form.tank_configuration_id, "tank_configuration_id")
        await self._check_reference(v, ref.tank_materials, form.tank_material_id, "tank_material_id")
        await self._check_reference(v, ref.entry_points, form.entry_point_id, "entry_point_id")
        await self._check_reference(v, ref.currents, form.current_id, "current_id")
        await self._check_reference(v, ref.waves, form.waves_id, "waves_id")
        await self._check_reference(v, ref.buddy_roles, form.buddy_role_id, "buddy_role_id")
        v.check_field(await ref.equipment.all_exist(form.equipment_ids), "equipment_ids", INVALID_SELECTION_MESSAGE)
        v.check_field(
            await ref.dive_properties.all_exist(form.property_ids), "property_ids", INVALID_SELECTION_MESSAGE
        )

        await self._check_record(v, "dive_sites", form.dive_site_id, "dive_site_id")
        await self._check_record(v, "buddies", form.buddy_id, "buddy_id")
        await self._check_record(v, "trips", form.trip_id, "trip_id")
        await self._check_record(v, "operators", form.operator_id, "operator_id")
        await self._check_record(v, "certifications", form.certification_id, "certification_id")
        await self._check_record(v, "currencies", form.price_currency_id, "price")

        if form.buddy_role_id and not form.buddy_id:
            v.add_field_error("buddy_id", SELECT_MESSAGE)

        return v.as_failure()

    async def adjust_to_site_local_then_utc(self, dive_site_id: str, wall_clock: datetime) -> datetime:
        """Read ``wall_clock`` as local time at the dive site and return it in UTC.

        Raises:
            TimezoneResolutionError: If the site is missing or its zone is unknown.
        """
        try:
            zone_name = await self.repository.fetch_dive_site_timezone(dive_site_id)
        except NotFoundError as e:
            raise TimezoneResolutionError(f"dive site {dive_site_id} not found") from e
        return site_local_to_utc(wall_clock, zone_name)

    async def _prepare(self, form: DiveForm) -> dict[str, Any]:
        failure = await self.validate_dive(form)
        if not failure.valid:
            raise ValidationFailedError(failure)
        assert form.date_time_in is not None
        date_time_in = await self.adjust_to_site_local_then_utc(form.dive_site_id, form.date_time_in)
        return form_to_values(form, date_time_in)

    async def create_dive(self, owner_id: str, form: DiveForm) -> Dive:
        """
        Raises:
            ValidationFailedError: If the form is invalid.
            DuplicateKeyError: If the dive number is already used by this owner.
        """
        values = await self._prepare(form)
        record = await self.repository.insert_dive(owner_id, values)
        return await self.get_dive(owner_id, record.id)

    async def update_dive(self, owner_id: str, dive_id: str, version: int, form: DiveForm) -> Dive:
        """
        Raises:
            ValidationFailedError: If the form is invalid.
            NotFoundError: If the dive does not exist for this owner.
            UpdateConflictError: If ``version`` is stale.
            DuplicateKeyError: If the new dive number is already used by this owner.
        """
        values = await self._prepare(form)
        await self.repository.update_dive(owner_id, dive_id, version, values)
        logger.info(f"Updated dive {dive_id} for owner {owner_id} to version {version + 1}")
        return await self.get_dive(owner_id, dive_id)

    async def get_dive(self, owner_id: str, dive_id: str) -> Dive:
        """A dive in its site's local time, with the surface interval since the previous dive."""
        record = await self.repository.fetch_dive(owner_id, dive_id)
        dive = map_dive(record)

        previous = await self.repository.fetch_previous_dive(owner_id, dive.date_time_in)
        if previous is None:
            return dive
        previous_in = parse_datetime(getattr(previous, "date_time_in", None))
        previous_bottom = minutes(getattr(previous, "bottom_time", None))
        if previous_in is None or previous_bottom is None:
            return dive
        return replace(dive, surface_interval=surface_interval_since(previous_in + previous_bottom, dive.date_time_in))

    async def list_dives(
        self,
        owner_id: str,
        pager: Pager,
        dive_filter: DiveFilter | None = None,
        sort_by: str | None = None,
        direction: str | None = None,
    ) -> tuple[list[Dive], PageData]:
        """
        Raises:
            ValueError: If ``sort_by`` or ``direction`` is not recognised.
        """
        sort = DIVE.clause(sort_by, direction)
        records, total = await self.repository.fetch_dives_for_owner(owner_id, pager, dive_filter, sort)
        return [map_dive(record) for record in records], PageData.from_total(total, pager)
