"""
JSON tier-list store implementation.

Keeps the tier list in a JSON document and appends undo snapshots to a JSONL
file next to it. Validates documents with pydantic before building models.
"""

import json
import time
from collections.abc import Iterable
from pathlib import Path

from pydantic import TypeAdapter, ValidationError as PydanticValidationError
from typing_extensions import NotRequired, TypedDict, override

from ..exceptions import ValidationError
from ..interfaces import TierListSnapshot, TierListStore
from ..logging_config import get_logger
from ..models import Item, TierList

# Module-level logger
logger = get_logger("json_tierlist_store")


class ItemDocument(TypedDict):
    """Type definition for one item in the tier-list document."""

    id: str
    name: NotRequired[str | None]
    image: NotRequired[str | None]


class TierListDocument(TypedDict):
    """Type definition for the tier-list JSON document."""

    tier_order: list[str]
    tiers: dict[str, list[ItemDocument]]
    locked: NotRequired[list[str]]


class SnapshotDocument(TypedDict):
    """Type definition for one line of the snapshots JSONL file."""

    label: str
    timestamp: float
    tier_order: list[str]
    tiers: dict[str, list[str]]


def tier_list_from_document(data: object) -> TierList:
    """Validate a decoded JSON document and build a TierList from it."""
    try:
        document = TypeAdapter(TierListDocument).validate_python(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid tier-list document: {e}") from e

    return TierList(
        tier_order=list(document["tier_order"]),
        tiers={
            name: [
                Item(item_id=raw["id"], name=raw.get("name"), image=raw.get("image"))
                for raw in items
            ]
            for name, items in document["tiers"].items()
        },
        locked=set(document.get("locked", [])),
    )


def tier_list_to_document(tier_list: TierList) -> TierListDocument:
    """Convert a TierList to its JSON document form."""
    tiers = dict[str, list[ItemDocument]]()
    for name, items in tier_list.tiers.items():
        tiers[name] = []
        for item in items:
            raw = ItemDocument(id=item.item_id)
            if item.name is not None:
                raw["name"] = item.name
            if item.image is not None:
                raw["image"] = item.image
            tiers[name].append(raw)

    return {
        "tier_order": list(tier_list.tier_order),
        "tiers": tiers,
        "locked": sorted(tier_list.locked),
    }


class JSONTierListStore(TierListStore):
    """
    JSON-file tier-list store.

    The tier list lives in one JSON document (rewritten on save); snapshots
    are append-only JSONL so a batch can be undone as one unit.
    """

    path: Path
    snapshots_path: Path

    def __init__(self, path: Path, snapshots_path: Path | None = None):
        """
        Initialize JSON tier-list store.

        Args:
            path: Path to the tier-list JSON document
            snapshots_path: Path to the snapshots JSONL file (default: snapshots.jsonl beside path)
        """
        self.path = Path(path)
        if snapshots_path is None:
            self.snapshots_path = self.path.parent / "snapshots.jsonl"
        else:
            self.snapshots_path = Path(snapshots_path)

        self.snapshots_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"JSON tier-list store initialized: path={self.path}, snapshots={self.snapshots_path}")

    @override
    def load(self) -> TierList:
        """Load the tier list from JSON."""
        if not self.path.exists():
            raise FileNotFoundError(f"Tier list does not exist: {self.path}")

        logger.info(f"Loading tier list from {self.path}")
        with open(self.path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValidationError(f"Tier list {self.path} is not valid JSON: {e}") from e

        tier_list = tier_list_from_document(data)
        logger.info(
            f"Loaded {sum(1 for _ in tier_list.all_items())} items in "
            f"{len(tier_list.tier_order)} tiers ({len(tier_list.locked)} locked)"
        )
        return tier_list

    @override
    def save(self, tier_list: TierList) -> None:
        """Write the tier list to JSON."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(tier_list_to_document(tier_list), f, indent=2, ensure_ascii=False)
        logger.info(f"Saved tier list to {self.path}")

    @override
    def capture_snapshot(self, tier_list: TierList, label: str) -> None:
        """Append the tier list's layout to the snapshots JSONL file."""
        snapshot: TierListSnapshot = {
            "label": label,
            "timestamp": time.time(),
            "tier_order": list(tier_list.tier_order),
            "tiers": {
                name: [item.item_id for item in items]
                for name, items in tier_list.tiers.items()
            },
        }
        with open(self.snapshots_path, "a", encoding="utf-8") as f:
            json.dump(snapshot, f, ensure_ascii=False)
            f.write("\n")
        logger.debug(f"Captured snapshot {label!r} to {self.snapshots_path}")

    @override
    def load_snapshots(self) -> Iterable[TierListSnapshot]:
        """Load all snapshots, skipping corrupted lines."""
        if not self.snapshots_path.exists():
            return

        adapter = TypeAdapter(SnapshotDocument)
        with open(self.snapshots_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue

                try:
                    document = adapter.validate_json(line)
                except PydanticValidationError as e:
                    # Skip corrupted or invalid lines
                    logger.warning(f"Skipping invalid JSON line in {self.snapshots_path}: {e}")
                    continue

                yield TierListSnapshot(
                    label=document["label"],
                    timestamp=document["timestamp"],
                    tier_order=document["tier_order"],
                    tiers=document["tiers"],
                )

    def get_snapshot_count(self) -> int:
        """Get number of stored snapshots."""
        return sum(1 for _ in self.load_snapshots())
