# src/gridbase/settings.py
"""
Workspace settings persistence for gridbase (platformdirs + JSON).

Persisted items (schema v1):
- row_height, row_overscan, column_overscan: grid geometry
- column_widths: per-table map of column id -> width in pixels

Behavior:
- If settings file missing or unreadable -> defaults are used
- If schema_version mismatches:
  - default: reset to defaults
  - optional: keep loaded but update version
- Unknown keys in loaded JSON are ignored with warnings
- Widths are clamped to the grid's min/max on load
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional

from platformdirs import user_config_dir

from gridbase.grid.config import GridConfig
from gridbase.utils.logging import get_logger

logger = get_logger(__name__)

# Increment when you make a breaking change to the on-disk JSON schema.
SCHEMA_VERSION: int = 1

APP_NAME = "gridbase"
SETTINGS_FILENAME = "workspace_settings.json"


def _int_at_least(value: Any, default: int, name: str, minimum: int) -> int:
    try:
        out = int(value)
    except (TypeError, ValueError):
        logger.warning(f"{name} is not an integer, using {default}")
        return default
    if out < minimum:
        logger.warning(f"{name} is below {minimum}, using {default}")
        return default
    return out


@dataclass
class WorkspaceSettingsData:
    """
    JSON-serializable settings payload.

    column_widths is keyed by table id, then column id. Ids of tables and
    columns that no longer exist are harmless and simply never looked up.
    """

    schema_version: int = SCHEMA_VERSION
    row_height: int = 33
    row_overscan: int = 10
    column_overscan: int = 2
    column_widths: Dict[str, Dict[str, int]] = field(default_factory=dict)

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "row_height": self.row_height,
            "row_overscan": self.row_overscan,
            "column_overscan": self.column_overscan,
            "column_widths": {tid: dict(w) for tid, w in self.column_widths.items()},
        }

    @classmethod
    def from_json_dict(cls, d: Dict[str, Any], config: Optional[GridConfig] = None) -> "WorkspaceSettingsData":
        """
        Tolerant loader:
        - ignores unknown keys
        - tolerates partially missing or malformed values
        """
        config = config or GridConfig()
        defaults = cls()

        schema_version = int(d.get("schema_version", -1))
        row_height = _int_at_least(d.get("row_height", defaults.row_height), defaults.row_height, "row_height", 1)
        row_overscan = _int_at_least(
            d.get("row_overscan", defaults.row_overscan), defaults.row_overscan, "row_overscan", 0
        )
        column_overscan = _int_at_least(
            d.get("column_overscan", defaults.column_overscan), defaults.column_overscan, "column_overscan", 0
        )

        column_widths: Dict[str, Dict[str, int]] = {}
        raw_widths = d.get("column_widths", {})
        if isinstance(raw_widths, dict):
            for table_id, widths in raw_widths.items():
                if not isinstance(widths, dict):
                    logger.warning(f"column_widths[{table_id!r}] is not a dict, ignoring")
                    continue
                table_widths: Dict[str, int] = {}
                for column_id, width in widths.items():
                    try:
                        table_widths[str(column_id)] = config.clamp_width(float(width))
                    except (TypeError, ValueError):
                        logger.warning(f"width of column {column_id!r} is not a number, ignoring")
                column_widths[str(table_id)] = table_widths
        else:
            logger.warning("column_widths is not a dict, using empty map")

        known_keys = {"schema_version", "row_height", "row_overscan", "column_overscan", "column_widths"}
        for key in d.keys():
            if key not in known_keys:
                logger.warning(f"Unknown key '{key}' in workspace settings, ignoring")

        return cls(
            schema_version=schema_version,
            row_height=row_height,
            row_overscan=row_overscan,
            column_overscan=column_overscan,
            column_widths=column_widths,
        )


class WorkspaceSettings:
    """
    Manager for loading/saving WorkspaceSettingsData to disk.
    """

    def __init__(self, *, path: Path, data: Optional[WorkspaceSettingsData] = None):
        self.path = path
        self.data = data if data is not None else WorkspaceSettingsData()

    @staticmethod
    def default_settings_path(
        app_name: str = APP_NAME,
        filename: str = SETTINGS_FILENAME,
        app_author: str | None = None,
    ) -> Path:
        """
        Determine OS-appropriate per-user settings path.

        macOS:   ~/Library/Application Support/gridbase/workspace_settings.json
        Linux:   ~/.config/gridbase/workspace_settings.json
        Windows: %APPDATA%\\gridbase\\workspace_settings.json
        """
        return Path(user_config_dir(app_name, app_author)) / filename

    @classmethod
    def load(
        cls,
        *,
        settings_path: Optional[Path] = None,
        schema_version: int = SCHEMA_VERSION,
        reset_on_version_mismatch: bool = True,
        config: Optional[GridConfig] = None,
    ) -> "WorkspaceSettings":
        """
        Load settings from disk.

        If file doesn't exist or is unreadable -> defaults.
        If schema mismatch:
          - reset_on_version_mismatch=True -> defaults
          - else -> keep loaded but overwrite schema_version
        """
        path = settings_path or cls.default_settings_path()
        default_data = WorkspaceSettingsData(schema_version=schema_version)

        try:
            parsed = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            logger.debug(f"Workspace settings file not found at {path}, using defaults")
            return cls(path=path, data=default_data)
        except json.JSONDecodeError as e:
            logger.warning(f"Workspace settings file at {path} is not valid JSON: {e}, using defaults")
            return cls(path=path, data=default_data)
        except OSError as e:
            logger.warning(f"Error reading workspace settings from {path}: {e}, using defaults")
            return cls(path=path, data=default_data)

        if not isinstance(parsed, dict):
            logger.warning(f"Workspace settings file at {path} does not contain a dict, using defaults")
            return cls(path=path, data=default_data)

        loaded = WorkspaceSettingsData.from_json_dict(parsed, config)
        if loaded.schema_version != schema_version:
            if reset_on_version_mismatch:
                logger.warning(
                    f"Workspace settings schema version mismatch: loaded={loaded.schema_version}, "
                    f"expected={schema_version}, resetting to defaults"
                )
                return cls(path=path, data=default_data)
            loaded.schema_version = schema_version

        return cls(path=path, data=loaded)

    def save(self) -> None:
        """Write settings to disk."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self.data.to_json_dict(), indent=2), encoding="utf-8")
            logger.info(f"Saved workspace settings to {self.path}")
        except OSError as e:
            logger.error(f"Error saving workspace settings to {self.path}: {e}")
            raise

    def to_grid_config(self, base: Optional[GridConfig] = None) -> GridConfig:
        """Overlay the saved geometry on ``base`` (default ``GridConfig()``)."""
        return replace(
            base or GridConfig(),
            row_height=self.data.row_height,
            row_overscan=self.data.row_overscan,
            column_overscan=self.data.column_overscan,
        )

    def get_column_widths(self, table_id: str) -> Dict[str, int]:
        return dict(self.data.column_widths.get(table_id, {}))

    def set_column_widths(self, table_id: str, widths: Dict[str, int]) -> None:
        self.data.column_widths[table_id] = dict(widths)
