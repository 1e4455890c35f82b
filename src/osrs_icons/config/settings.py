# Runtime configuration, overridable through environment variables or a .env file.

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_WIKI_API_URL = "https://oldschool.runescape.wiki/api.php"
DEFAULT_OUTPUT_DIR = Path("src/generated")
DEFAULT_USER_AGENT = "osrs-icons-npm-package/1.0.0 (dava96/osrs-icons)"
DEFAULT_HTTP_TIMEOUT = 15.0


@dataclass(frozen=True)
class Settings:
    wiki_api_url: str = DEFAULT_WIKI_API_URL
    output_dir: Path = DEFAULT_OUTPUT_DIR
    user_agent: str = DEFAULT_USER_AGENT
    http_timeout_seconds: float = DEFAULT_HTTP_TIMEOUT

    @property
    def cache_dir(self) -> Path:
        return self.output_dir / "cache"

    @property
    def manifest_path(self) -> Path:
        return self.cache_dir / "manifest.json"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            wiki_api_url=os.getenv("OSRS_ICONS_WIKI_API_URL", DEFAULT_WIKI_API_URL),
            output_dir=Path(os.getenv("OSRS_ICONS_OUTPUT_DIR", str(DEFAULT_OUTPUT_DIR))),
            user_agent=os.getenv("OSRS_ICONS_USER_AGENT", DEFAULT_USER_AGENT),
            http_timeout_seconds=float(os.getenv("OSRS_ICONS_HTTP_TIMEOUT", str(DEFAULT_HTTP_TIMEOUT))),
        )
