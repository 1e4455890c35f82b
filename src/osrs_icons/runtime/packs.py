from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class PackInfo:
    """A curated progression of cursor values, e.g. a coin stack growing."""

    name: str
    icon: str
    import_name: str
    description: str
    stage_labels: tuple[str, ...]
    stages: tuple[str, ...]

    def __post_init__(self) -> None:
        if len(self.stages) != len(self.stage_labels):
            raise ValueError(
                f"Pack {self.import_name!r} has {len(self.stages)} stages but {len(self.stage_labels)} labels"
            )
        if len(self.stages) < 2:
            raise ValueError(f"Pack {self.import_name!r} needs at least 2 stages, got {len(self.stages)}")

    def stage(self, label: str) -> str:
        return self.stages[self.stage_labels.index(label)]


@dataclass(frozen=True)
class PackDefinition:
    name: str
    icon: str
    import_name: str
    description: str
    stage_labels: tuple[str, ...]
    stage_names: tuple[str, ...]


PACK_DEFINITIONS: tuple[PackDefinition, ...] = (
    PackDefinition(
        name="Coins",
        icon="💰",
        import_name="coinsPack",
        description="Stack grows from 1gp to 10,000gp: great for progress or score displays",
        stage_labels=("1", "2", "3", "4", "5", "25", "100", "250", "1K", "10K"),
        stage_names=(
            "coins1",
            "coins2",
            "coins3",
            "coins4",
            "coins5",
            "coins25",
            "coins100",
            "coins250",
            "coins1000",
            "coins10000",
        ),
    ),
    PackDefinition(
        name="Bucket",
        icon="🪣",
        import_name="bucketPack",
        description="Empty to Full, perfect for loading indicators or upload progress",
        stage_labels=("Empty", "1/5", "2/5", "3/5", "4/5", "Full"),
        stage_names=(
            "bucket",
            "_15thsFullBucket",
            "_25thsFullBucket",
            "_35thsFullBucket",
            "_45thsFullBucket",
            "bucketOfWater",
        ),
    ),
)


def build_pack(definition: PackDefinition, exports: Mapping[str, str]) -> PackInfo:
    missing = [name for name in definition.stage_names if name not in exports]
    if missing:
        raise KeyError(f"{definition.import_name} references missing icons: {', '.join(missing)}")
    return PackInfo(
        name=definition.name,
        icon=definition.icon,
        import_name=definition.import_name,
        description=definition.description,
        stage_labels=definition.stage_labels,
        stages=tuple(exports[name] for name in definition.stage_names),
    )


def load_packs(
    exports: Mapping[str, str],
    definitions: tuple[PackDefinition, ...] = PACK_DEFINITIONS,
) -> list[PackInfo]:
    """Bind pack definitions to generated cursor values (``identifier -> value``)."""
    return [build_pack(definition, exports) for definition in definitions]
