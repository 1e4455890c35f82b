from collections.abc import Mapping, MutableMapping

from osrs_icons.config.logger_config import logger
from osrs_icons.ingestion.domain.models import CollisionStats, ExportCollision
from osrs_icons.ingestion.domain.rules import to_identifier

RENAME_SUFFIX = " category"


def resolve_collisions_with_main_icons(
    category_icons: MutableMapping[str, str],
    main_exports: Mapping[str, str],
) -> CollisionStats:
    """Reconcile category icons against identifiers already exported by the main set.

    Keys are compared after the same sanitisation the code generator applies.
    An identical value makes the category entry redundant and it is removed;
    a different value keeps the entry under ``<key> category`` so it sanitises
    to ``<name>Category``.
    """
    stats = CollisionStats()

    for raw_key, category_value in list(category_icons.items()):
        name = to_identifier(raw_key)
        if name not in main_exports:
            continue

        del category_icons[raw_key]
        if main_exports[name] == category_value:
            logger.info("  Collision (identical, dropped): {}", name)
            stats.dropped += 1
        else:
            category_icons[raw_key + RENAME_SUFFIX] = category_value
            logger.info("  Collision (different, renamed): {} -> {}Category", name, name)
            stats.renamed += 1

    return stats


def find_export_collisions(
    main_exports: Mapping[str, str],
    category_exports: Mapping[str, str],
) -> list[ExportCollision]:
    return [
        ExportCollision(name=name, identical=main_exports[name] == category_exports[name])
        for name in sorted(set(main_exports) & set(category_exports))
    ]
