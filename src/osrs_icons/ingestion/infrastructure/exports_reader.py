import json
import re
from pathlib import Path

from osrs_icons.config.logger_config import logger

_EXPORT_RE = re.compile(r'^export const ([A-Za-z_$][\w$]*) = ("(?:[^"\\]|\\.)*");\s*$')


def read_generated_exports(path: str | Path) -> dict[str, str]:
    """Parse ``export const name = "value";`` lines from a generated module.

    A missing file yields an empty mapping, as on the very first run.
    """
    module_path = Path(path)
    if not module_path.exists():
        logger.warning("Generated module {} not found, assuming no published exports.", module_path)
        return {}

    exports: dict[str, str] = {}
    with module_path.open("r", encoding="utf-8") as f:
        for line in f:
            match = _EXPORT_RE.match(line)
            if match:
                exports[match.group(1)] = json.loads(match.group(2))
    return exports
