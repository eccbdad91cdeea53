"""Tests for the stats router."""

from __future__ import annotations

from collections.abc import Generator
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from zoneinfo import ZoneInfo

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from divelog.errors import DependencyTimeoutError, NoDataError
from divelog.stats import (
    DiveStats,
    general_stats,
    lifetime_buddy_stats,
    lifetime_site_stats,
    stats_by_buddy,
    stats_by_country,
    stats_by_dive_site,
    stats_by_month,
)
from tests.fixtures.fixtures import make_buddy, make_row

SYDNEY = ZoneInfo("Australia/Sydney")

ROWS = [
    make_row("d1", datetime(2024, 3, 1, 9, 0, tzinfo=SYDNEY), bottom_minutes=30, max_depth=12.0),
    make_row("d2", datetime(2024, 3, 2, 9, 0, tzinfo=SYDNEY), bottom_minutes=60, buddy=make_buddy()),
]


@pytest.fixture
def mock_service() -> MagicMock:
    service = MagicMock()
    service.get_general_stats = AsyncMock(return_value=general_stats(ROWS))
    service.get_stats_by_month = AsyncMock(return_value=stats_by_month(ROWS))
    service.get_stats_by_dive_site = AsyncMock(return_value=stats_by_dive_site(ROWS, lifetime_site_stats(ROWS)))
    service.get_stats_by_buddy = AsyncMock(return_value=stats_by_buddy(ROWS, lifetime_buddy_stats(ROWS)))
    service.get_dive_stats = AsyncMock(
        return_value=DiveStats(
            general=general_stats(ROWS),
            by_month=stats_by_month(ROWS),
            by_country=stats_by_country(ROWS),
            by_dive_site=stats_by_dive_site(ROWS),
            by_buddy=stats_by_buddy(ROWS),
        )
    )
    return service


@pytest.fixture
def client(mock_service: MagicMock) -> Generator[TestClient, None, None]:
    from api.dependencies import get_stats_service
    from api.main import register_exception_handlers
    from api.routers.stats import router

    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(router)
    app.dependency_overrides[get_stats_service] = lambda: mock_service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_general_stats_in_minutes(client):
    response = client.get("/api/divers/owner-1/stats/general")

    assert response.status_code == 200
    data = response.json()
    assert data["dive_count"] == 2
    assert data["bottom_time_sum_minutes"] == 90
    assert data["bottom_time_avg_minutes"] == 45


def test_no_dives_is_404(client, mock_service):
    mock_service.get_general_stats.side_effect = NoDataError("owner owner-1 has no dives")

    response = client.get("/api/divers/owner-1/stats/general")

    assert response.status_code == 404
    assert response.json()["detail"] == "No dives logged yet"


def test_by_month_labels(client):
    data = client.get("/api/divers/owner-1/stats/by-month").json()
    assert [(m["key"], m["label"]) for m in data] == [("2024-03", "March 2024")]


def test_by_dive_site_includes_lifetime_summary(client):
    data = client.get("/api/divers/owner-1/stats/by-dive-site").json()

    assert data[0]["dive_site"]["dives_at"] == 2
    assert data[0]["dive_site"]["country"] == "Australia"
    assert data[0]["buddy"] is None


def test_by_buddy_includes_dives_with(client):
    data = client.get("/api/divers/owner-1/stats/by-buddy").json()
    assert [(b["key"], b["buddy"]["dives_with"]) for b in data] == [("buddy-1", 1)]


def test_all_rollups(client, mock_service):
    response = client.get("/api/divers/owner-1/stats")

    assert response.status_code == 200
    data = response.json()
    assert set(data) == {"general", "by_month", "by_country", "by_dive_site", "by_buddy"}
    assert data["by_country"][0]["label"] == "Australia"
    mock_service.get_dive_stats.assert_awaited_once_with("owner-1")


def test_all_rollups_fail_together(client, mock_service):
    mock_service.get_dive_stats.side_effect = DependencyTimeoutError("fetch buddy stats timed out after 2.0s")
    assert client.get("/api/divers/owner-1/stats").status_code == 503
