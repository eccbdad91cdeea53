"""
API Services - Business logic and data access for the Divelog API.

Services encapsulate the operations the routers expose; all PocketBase access
goes through DivelogRepository so services can be tested with a mocked one.
"""

from .dive_service import DiveService
from .divelog_repository import DiveFilter, DivelogRepository
from .reference_data import ReferenceData, ReferenceDataService, ReferenceDataStore
from .stats_service import StatsService

__all__ = [
    # Repository
    "DivelogRepository",
    "DiveFilter",
    # Services
    "DiveService",
    "StatsService",
    # Reference data
    "ReferenceData",
    "ReferenceDataService",
    "ReferenceDataStore",
]
