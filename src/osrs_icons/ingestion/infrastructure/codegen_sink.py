import json
from collections.abc import Mapping, Sequence
from pathlib import Path

from osrs_icons.ingestion.domain.rules import to_identifier

ICONS_HEADER = "// Auto-generated OSRS Icon definitions"
META_HEADER = "// Auto-generated OSRS Icon metadata"


class GeneratedModuleWriter:
    """Writes generated TypeScript modules one line at a time."""

    def __init__(self, output_dir: str | Path) -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, filename: str) -> Path:
        return self.output_dir / filename

    def emit(self, icons: Mapping[str, str], output_path: str | Path, header: str = ICONS_HEADER) -> list[str]:
        """Write ``export const`` bindings sorted by raw key and return the emitted names.

        Keys that sanitise to an already used name get a ``_1``, ``_2``, ... suffix.
        """
        used_names: set[str] = set()
        emitted: list[str] = []

        with Path(output_path).open("w", encoding="utf-8", newline="\n") as f:
            f.write(f"{header}\n\n")
            for key in sorted(icons):
                base_name = to_identifier(key)
                final_name = base_name
                counter = 1
                while final_name in used_names:
                    final_name = f"{base_name}_{counter}"
                    counter += 1
                used_names.add(final_name)
                emitted.append(final_name)
                f.write(f"export const {final_name} = {json.dumps(icons[key])};\n")

        return emitted

    def emit_meta(
        self,
        names: Sequence[str],
        output_path: str | Path,
        array_name: str = "iconNames",
        type_name: str = "IconName",
        header: str = META_HEADER,
    ) -> None:
        with Path(output_path).open("w", encoding="utf-8", newline="\n") as f:
            f.write(f"{header}\n\n")
            f.write(f"export const {array_name} = [\n")
            for name in names:
                f.write(f"  '{name}',\n")
            f.write("] as const;\n\n")
            f.write(f"export type {type_name} = (typeof {array_name})[number];\n")
