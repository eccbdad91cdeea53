"""
Pydantic schemas for the Divelog API.

Re-exports all schemas for convenient importing.
"""

from __future__ import annotations

from .divelog import (
    AggregateStatsResponse,
    BuddySummary,
    DimensionalStatsResponse,
    DiveListResponse,
    DiveMetricsResponse,
    DiveRequest,
    DiveResponse,
    DiveSiteSummary,
    DiveStatsResponse,
    DiveUpdateRequest,
    FieldErrorResponse,
    PageDataResponse,
    ReferenceItemResponse,
    ValidationErrorResponse,
)

__all__ = [
    # Requests
    "DiveRequest",
    "DiveUpdateRequest",
    # Dives
    "DiveResponse",
    "DiveListResponse",
    "DiveMetricsResponse",
    "DiveSiteSummary",
    "BuddySummary",
    "PageDataResponse",
    # Stats
    "AggregateStatsResponse",
    "DimensionalStatsResponse",
    "DiveStatsResponse",
    # Reference data
    "ReferenceItemResponse",
    # Errors
    "FieldErrorResponse",
    "ValidationErrorResponse",
]
