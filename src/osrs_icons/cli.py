import argparse
from collections.abc import Sequence

from osrs_icons.config.logger_config import logger
from osrs_icons.ingestion.update import check_collisions, run_update_category_icons, run_update_icons


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="osrs-icons",
        description="Generate inlined CSS cursor constants from OSRS wiki images.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("update-icons", "Regenerate icons.ts from Category:Item_inventory_images."),
        ("update-category-icons", "Regenerate category-icons.ts from Category:Icons, recursively."),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument(
            "--no-cache",
            dest="use_cache",
            action="store_false",
            help="Neither read nor write the processed-image cache for this run.",
        )

    subparsers.add_parser("check-collisions", help="Report names exported by both generated icon modules.")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    if args.command == "update-icons":
        summary = run_update_icons(use_cache=args.use_cache)
        logger.success("Done: {}", summary)
    elif args.command == "update-category-icons":
        summary = run_update_category_icons(use_cache=args.use_cache)
        logger.success("Done: {}", summary)
    else:
        check_collisions()
