"""Icon ingestion package."""

from osrs_icons.ingestion.domain.models import UpdateSummary
from osrs_icons.ingestion.update import (
    check_collisions,
    run_update_category_icons,
    run_update_category_icons_async,
    run_update_icons,
    run_update_icons_async,
)

__all__ = [
    "check_collisions",
    "run_update_category_icons",
    "run_update_category_icons_async",
    "run_update_icons",
    "run_update_icons_async",
    "UpdateSummary",
]
