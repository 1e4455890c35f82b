from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class WikiItem:
    page_id: int
    namespace: int
    title: str

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "WikiItem":
        return cls(
            page_id=int(payload.get("pageid", 0)),
            namespace=int(payload.get("ns", 0)),
            title=str(payload.get("title") or ""),
        )


@dataclass(frozen=True)
class ImageRequest:
    file_title: str
    key: str


@dataclass
class CollisionStats:
    dropped: int = 0
    renamed: int = 0


@dataclass(frozen=True)
class ExportCollision:
    name: str
    identical: bool


@dataclass(frozen=True)
class ProcessResult:
    icons: dict[str, str] = field(default_factory=dict)
    cache_hits: int = 0
    downloads: int = 0
    failures: int = 0


@dataclass(frozen=True)
class UpdateSummary:
    discovered_total: int
    supported_total: int
    requested_total: int
    resolved_total: int
    processed_total: int
    cache_hits: int
    downloads: int
    failed_total: int
    emitted_total: int
    output_bytes: int
    elapsed_seconds: float
    dropped_total: int = 0
    renamed_total: int = 0
