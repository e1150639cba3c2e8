"""Renewal date projection package."""

from subtracker.models.cadence import (
    InvalidCadence,
    InvalidWindow,
    ProjectionError,
)
from subtracker.projection.projector import (
    next_renewal_on_or_after,
    occurrence_at,
    project,
    renewal_dates,
    step_date,
)

__all__ = [
    "InvalidCadence",
    "InvalidWindow",
    "ProjectionError",
    "next_renewal_on_or_after",
    "occurrence_at",
    "project",
    "renewal_dates",
    "step_date",
]
