"""Infrastructure adapters for icon ingestion."""

from osrs_icons.ingestion.infrastructure.cache_store import CacheManifestStore
from osrs_icons.ingestion.infrastructure.codegen_sink import GeneratedModuleWriter
from osrs_icons.ingestion.infrastructure.exports_reader import read_generated_exports
from osrs_icons.ingestion.infrastructure.mw_client import MediaWikiClient

__all__ = ["CacheManifestStore", "GeneratedModuleWriter", "MediaWikiClient", "read_generated_exports"]
