"""
Shared dependencies for the Divelog API.

This module provides:
- PocketBase client management (global instance, admin authentication)
- The process-wide reference data store
- FastAPI dependency factories for the repository and services
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import Depends
from pocketbase import PocketBase

from .services.dive_service import DiveService
from .services.divelog_repository import DivelogRepository
from .services.reference_data import ReferenceData, ReferenceDataStore
from .services.stats_service import StatsService
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

# ========================================
# PocketBase Client
# ========================================

# The PocketBase API is stateless; only the auth store is client state, and we
# only ever authenticate as admin, so one shared client serves every request.
_settings = get_settings()
pb_url = _settings.pocketbase_url
pb = PocketBase(pb_url)


async def authenticate_pb() -> None:
    """Authenticate with PocketBase as admin."""
    settings = get_settings()
    try:
        await asyncio.to_thread(
            pb.collection("_superusers").auth_with_password,
            settings.pocketbase_admin_email,
            settings.pocketbase_admin_password,
        )
        logger.info("Successfully authenticated with PocketBase")
    except Exception as e:
        logger.error(f"Failed to authenticate with PocketBase: {e}")
        raise


async def get_pb_client() -> PocketBase:
    """FastAPI dependency to get authenticated PocketBase client."""
    return pb


# ========================================
# Repository and Services
# ========================================


def get_repository(
    client: PocketBase = Depends(get_pb_client),
    settings: Settings = Depends(get_settings),
) -> DivelogRepository:
    return DivelogRepository(
        client,
        read_timeout=settings.read_timeout_seconds,
        write_timeout=settings.write_timeout_seconds,
    )


# Shared across every request for the life of the process
reference_store = ReferenceDataStore(
    DivelogRepository(
        pb,
        read_timeout=_settings.read_timeout_seconds,
        write_timeout=_settings.write_timeout_seconds,
    )
)


def get_reference_data() -> ReferenceData:
    return ReferenceData(reference_store)


def get_dive_service(
    repository: DivelogRepository = Depends(get_repository),
    reference_data: ReferenceData = Depends(get_reference_data),
) -> DiveService:
    return DiveService(repository, reference_data)


def get_stats_service(
    repository: DivelogRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
) -> StatsService:
    return StatsService(repository, timeout=settings.stats_timeout_seconds)


__all__ = [
    "pb",
    "pb_url",
    "authenticate_pb",
    "get_pb_client",
    "get_repository",
    "reference_store",
    "get_reference_data",
    "get_dive_service",
    "get_stats_service",
]
