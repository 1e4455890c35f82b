"""Domain models and deterministic rules for the icon pipeline."""

from osrs_icons.ingestion.domain.collisions import find_export_collisions, resolve_collisions_with_main_icons
from osrs_icons.ingestion.domain.models import (
    CollisionStats,
    ExportCollision,
    ImageRequest,
    ProcessResult,
    UpdateSummary,
    WikiItem,
)
from osrs_icons.ingestion.domain.rules import (
    RESERVED_WORDS,
    build_image_requests,
    filter_image_files,
    sanitize_variable_name,
    strip_file_title,
    to_identifier,
)
from osrs_icons.ingestion.domain.url_hash import hash_url

__all__ = [
    "build_image_requests",
    "CollisionStats",
    "ExportCollision",
    "filter_image_files",
    "find_export_collisions",
    "hash_url",
    "ImageRequest",
    "ProcessResult",
    "RESERVED_WORDS",
    "resolve_collisions_with_main_icons",
    "sanitize_variable_name",
    "strip_file_title",
    "to_identifier",
    "UpdateSummary",
    "WikiItem",
]
