"""
JSON catalog data source.

Reads a unit feed from disk and groups it into a catalog tree:

    catalog root -> group (faculty or year level) -> unit

The file may hold either a bare list of unit records or {"units": [...]}.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError

from ..core.hierarchy import build_hierarchy
from ..core.types import GroupingMode, HierarchicalNode
from .models import UnitRecord

logger = logging.getLogger(__name__)


class DataUnavailable(Exception):
    """
    Raised when a grouping mode or file cannot be turned into a tree.

    Attributes:
        grouping_mode: The requested grouping, as given.
        message: Human-readable error message.
    """

    def __init__(self, grouping_mode: object, message: str):
        self.grouping_mode = grouping_mode
        self.message = message
        super().__init__(f"No hierarchy for '{grouping_mode}': {message}")


class JsonCatalogSource:
    """
    File-backed implementation of IHierarchyDataSource.
    """

    def __init__(self, path: Path, catalog_name: str = "Catalog"):
        self.path = Path(path)
        self.catalog_name = catalog_name
        self._units: Optional[List[UnitRecord]] = None

    def load_units(self, grouping_mode: object = "-") -> List[UnitRecord]:
        if self._units is not None:
            return self._units

        if not self.path.exists():
            raise DataUnavailable(grouping_mode, f"catalog file not found: {self.path}")

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DataUnavailable(grouping_mode, f"failed to read {self.path}: {e}")

        raw = data.get("units", []) if isinstance(data, dict) else data
        if not isinstance(raw, list):
            raise DataUnavailable(grouping_mode, "expected a list of unit records")

        try:
            self._units = [UnitRecord.model_validate(item) for item in raw]
        except ValidationError as e:
            raise DataUnavailable(grouping_mode, f"invalid unit record: {e}")

        logger.debug(f"Loaded {len(self._units)} units from {self.path}")
        return self._units

    def get_hierarchical_data(self, grouping_mode: GroupingMode) -> HierarchicalNode:
        """
        Build the catalog tree for `grouping_mode`.

        Raises:
            DataUnavailable: Unknown mode or unreadable catalog.
            MalformedHierarchy: Duplicate unit codes.
        """
        try:
            mode = GroupingMode(grouping_mode)
        except ValueError:
            raise DataUnavailable(grouping_mode, "unknown grouping mode")

        units = self.load_units(mode)
        groups: Dict[str, dict] = {}

        for unit in units:
            if mode == GroupingMode.FACULTY:
                key = unit.faculty_label
                group = {"id": f"faculty:{key}", "name": key, "group": "faculty"}
            else:
                level = unit.level
                key = str(level) if level is not None else "unassigned"
                name = f"Level {level}" if level is not None else "Unassigned"
                group = {"id": f"level:{key}", "name": name, "group": "level"}

            entry = groups.setdefault(key, {**group, "description": "", "children": []})
            entry["children"].append({
                "id": unit.code,
                "name": unit.title,
                "description": unit.description,
                "group": "unit",
            })

        root = {
            "id": "catalog",
            "name": self.catalog_name,
            "description": f"{len(units)} units grouped by {mode.value}",
            "group": "catalog",
            "children": [groups[key] for key in sorted(groups)],
        }
        return build_hierarchy(root)
