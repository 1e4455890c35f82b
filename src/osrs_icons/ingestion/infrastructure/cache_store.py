import json
import os
from pathlib import Path

from osrs_icons.config.logger_config import logger

CacheManifest = dict[str, str]


class CacheManifestStore:
    """JSON file mapping ``hash_url(url)`` to the cursor value produced for that URL."""

    def __init__(self, manifest_path: str | Path) -> None:
        self.manifest_path = Path(manifest_path)

    def load(self) -> CacheManifest:
        if not self.manifest_path.exists():
            return {}
        try:
            with self.manifest_path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("Cache manifest corrupted ({}), starting fresh.", exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Cache manifest is not a JSON object, starting fresh.")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def save(self, manifest: CacheManifest) -> None:
        self.manifest_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.manifest_path.with_suffix(self.manifest_path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(manifest, f, ensure_ascii=False)
        os.replace(tmp_path, self.manifest_path)
