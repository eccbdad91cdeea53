"""Tests for DiveService.

Repository calls are mocked; reference data runs through a real cache over a
mocked loader so the existence checks exercise the same code as production.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from divelog.errors import (
    NotFoundError,
    TimezoneResolutionError,
    UpdateConflictError,
    ValidationFailedError,
)
from divelog.pagination import Pager
from divelog.validation.gas_mix import UNIVERSAL_MESSAGE
from tests.fixtures.fixtures import MockRecord, make_dive, make_dive_form, make_dive_record


@dataclass
class RefRecord:
    id: str
    name: str
    sort: int = 0
    is_default: bool = False
    description: str = ""


REFERENCE_ROWS: dict[str, list[RefRecord]] = {
    "gas_mixes": [RefRecord("gm-air", "Air"), RefRecord("gm-nitrox", "Nitrox")],
    "tank_configurations": [RefRecord("tc-single", "Single Tank")],
    "tank_materials": [RefRecord("tm-al", "Aluminium")],
    "entry_points": [RefRecord("ep-shore", "Shore"), RefRecord("ep-boat", "Boat")],
    "currents": [RefRecord("cu-none", "None")],
    "waves": [RefRecord("wv-flat", "Flat")],
    "buddy_roles": [RefRecord("br-buddy", "Buddy")],
    "equipment": [RefRecord("eq-hood", "Hood"), RefRecord("eq-torch", "Torch")],
    "dive_properties": [RefRecord("dp-night", "Night")],
}


def _service(repo: MagicMock | None = None):
    from api.services.dive_service import DiveService
    from api.services.reference_data import ReferenceData, ReferenceDataStore

    loader = MagicMock()
    loader.fetch_reference_rows = AsyncMock(side_effect=lambda collection, sort: REFERENCE_ROWS[collection])

    if repo is None:
        repo = MagicMock()
        repo.id_exists = AsyncMock(return_value=True)
        repo.fetch_dive_site_timezone = AsyncMock(return_value="Australia/Sydney")
        repo.insert_dive = AsyncMock(return_value=MockRecord(id="dive-1"))
        repo.update_dive = AsyncMock(return_value=MockRecord(id="dive-1"))
        repo.fetch_dive = AsyncMock(return_value=make_dive_record())
        repo.fetch_previous_dive = AsyncMock(return_value=None)
        repo.fetch_dives_for_owner = AsyncMock(return_value=([make_dive_record()], 1))

    return DiveService(repo, ReferenceData(ReferenceDataStore(loader))), repo


class TestValidateDive:
    @pytest.mark.asyncio
    async def test_valid_form(self):
        service, _ = _service()
        failure = await service.validate_dive(make_dive_form(equipment_ids=["eq-hood"], property_ids=["dp-night"]))
        assert failure.valid, failure.errors()

    @pytest.mark.asyncio
    async def test_all_problems_reported_together(self):
        service, _ = _service()
        form = make_dive_form(avg_depth=20.0, pressure_out=250, activity="", entry_point_id="ep-cliff")

        failure = await service.validate_dive(form)

        assert set(failure.field_errors) == {"avg_depth", "pressure_out", "activity", "entry_point_id"}
        assert failure.field_error("entry_point_id") == "This field must be a valid selection"

    @pytest.mark.asyncio
    async def test_unknown_gas_mix_is_invalid_selection(self):
        service, _ = _service()
        failure = await service.validate_dive(make_dive_form(gas_mix_id="gm-heliox"))
        assert failure.field_error("gas_mix_id") == "This field must be a valid selection"

    @pytest.mark.asyncio
    async def test_gas_mix_name_decides_fo2_rules(self):
        service, _ = _service()

        nitrox = await service.validate_dive(make_dive_form(gas_mix_id="gm-nitrox", fo2=0.32))
        air = await service.validate_dive(make_dive_form(gas_mix_id="gm-air", fo2=0.32))

        assert nitrox.valid
        assert air.field_error("fo2") == "FO2 must be exactly 0.21 for Air"

    @pytest.mark.asyncio
    async def test_universal_fo2_message_wins(self):
        service, _ = _service()
        failure = await service.validate_dive(make_dive_form(gas_mix_id="gm-nitrox", fo2=1.2))
        assert len(failure.field_errors["fo2"]) == 2
        assert failure.field_error("fo2") == UNIVERSAL_MESSAGE

    @pytest.mark.asyncio
    async def test_unknown_equipment_rejected(self):
        service, _ = _service()
        failure = await service.validate_dive(make_dive_form(equipment_ids=["eq-hood", "eq-fins"]))
        assert "equipment_ids" in failure.field_errors

    @pytest.mark.asyncio
    async def test_missing_records_rejected(self):
        service, repo = _service()
        repo.id_exists = AsyncMock(side_effect=lambda collection, record_id: collection != "trips")

        failure = await service.validate_dive(make_dive_form(trip_id="trip-gone"))

        assert list(failure.field_errors) == ["trip_id"]

    @pytest.mark.asyncio
    async def test_buddy_role_needs_buddy(self):
        service, _ = _service()
        failure = await service.validate_dive(make_dive_form(buddy_role_id="br-buddy"))
        assert failure.field_error("buddy_id") == "This field must be selected"


class TestSaveDive:
    @pytest.mark.asyncio
    async def test_create_stores_site_local_time_as_utc(self):
        service, repo = _service()

        dive = await service.create_dive("owner-1", make_dive_form())

        values = repo.insert_dive.await_args.args[1]
        assert values["date_time_in"] == "2024-03-08 22:30:00.000Z"
        assert values["dive_site"] == "site-1"
        assert values["buddy"] == ""
        assert dive.id == "dive-1"
        assert dive.date_time_in.replace(tzinfo=None) == datetime(2024, 3, 9, 9, 30)

    @pytest.mark.asyncio
    async def test_invalid_form_is_never_written(self):
        service, repo = _service()

        with pytest.raises(ValidationFailedError) as exc_info:
            await service.create_dive("owner-1", make_dive_form(number=0, max_depth=None))

        assert {"number", "max_depth"} <= set(exc_info.value.failure.field_errors)
        repo.insert_dive.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_site_is_timezone_error(self):
        service, repo = _service()
        repo.fetch_dive_site_timezone = AsyncMock(side_effect=NotFoundError("dive site site-1 not found"))

        with pytest.raises(TimezoneResolutionError):
            await service.adjust_to_site_local_then_utc("site-1", datetime(2024, 3, 9, 9, 30))

    @pytest.mark.asyncio
    async def test_site_with_unknown_zone_is_timezone_error(self):
        service, repo = _service()
        repo.fetch_dive_site_timezone = AsyncMock(return_value="Mars/Olympus_Mons")

        with pytest.raises(TimezoneResolutionError):
            await service.create_dive("owner-1", make_dive_form())
        repo.insert_dive.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_adjust_ignores_attached_zone(self):
        service, _ = _service()
        submitted = datetime(2024, 7, 1, 10, 0, tzinfo=UTC)

        adjusted = await service.adjust_to_site_local_then_utc("site-1", submitted)

        # July is AEST, UTC+10
        assert adjusted == datetime(2024, 7, 1, 0, 0, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_update_passes_version(self):
        service, repo = _service()

        await service.update_dive("owner-1", "dive-1", 3, make_dive_form())

        args = repo.update_dive.await_args.args
        assert args[:3] == ("owner-1", "dive-1", 3)

    @pytest.mark.asyncio
    async def test_stale_update_propagates_conflict(self):
        service, repo = _service()
        repo.update_dive = AsyncMock(side_effect=UpdateConflictError("dive", "dive-1", 3, 4))

        with pytest.raises(UpdateConflictError):
            await service.update_dive("owner-1", "dive-1", 3, make_dive_form())
        repo.fetch_dive.assert_not_awaited()


class TestReadDive:
    @pytest.mark.asyncio
    async def test_surface_interval_from_previous_dive(self):
        service, repo = _service()
        repo.fetch_previous_dive = AsyncMock(
            return_value=MockRecord(id="dive-0", fields={"date_time_in": "2024-03-08 20:00:00.000Z", "bottom_time": 50})
        )

        dive = await service.get_dive("owner-1", "dive-1")

        assert dive.surface_interval == timedelta(hours=1, minutes=40)

    @pytest.mark.asyncio
    async def test_first_dive_has_no_surface_interval(self):
        service, _ = _service()
        assert (await service.get_dive("owner-1", "dive-1")).surface_interval is None

    @pytest.mark.asyncio
    async def test_list_dives_returns_page_data(self):
        service, repo = _service()

        dives, page = await service.list_dives("owner-1", Pager.create(1, 10, 20), sort_by="max_depth", direction="desc")

        assert [d.id for d in dives] == ["dive-1"]
        assert page.total_records == 1
        assert page.last_page == 1
        assert repo.fetch_dives_for_owner.await_args.args[3] == "-max_depth,id"

    @pytest.mark.asyncio
    async def test_list_dives_rejects_unknown_sort(self):
        service, _ = _service()
        with pytest.raises(ValueError):
            await service.list_dives("owner-1", Pager.create(1, 10, 20), sort_by="colour")


def test_metrics_for_mapped_dive():
    from api.services.dive_service import DiveService

    service = DiveService(MagicMock(), MagicMock())
    metrics = service.compute_dive_metrics(make_dive())
    assert metrics.gas_used == pytest.approx(1624.0)
