"""Tests for workspace settings persistence."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from gridbase.grid.config import GridConfig
from gridbase.settings import SCHEMA_VERSION, WorkspaceSettings, WorkspaceSettingsData


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    settings = WorkspaceSettings.load(settings_path=tmp_path / "nope.json")
    assert settings.data == WorkspaceSettingsData()
    assert not settings.path.exists()


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    settings = WorkspaceSettings(path=path)
    settings.data.row_height = 40
    settings.set_column_widths("t1", {"c1": 250, "c2": 181})
    settings.save()

    loaded = WorkspaceSettings.load(settings_path=path)
    assert loaded.data.row_height == 40
    assert loaded.get_column_widths("t1") == {"c1": 250, "c2": 181}
    assert loaded.get_column_widths("t2") == {}


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
def test_unreadable_content_gives_defaults(tmp_path: Path, content: str) -> None:
    path = tmp_path / "settings.json"
    path.write_text(content, encoding="utf-8")

    settings = WorkspaceSettings.load(settings_path=path)

    assert settings.data == WorkspaceSettingsData()


def test_version_mismatch_resets(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"schema_version": SCHEMA_VERSION + 1, "row_height": 50}), encoding="utf-8")

    assert WorkspaceSettings.load(settings_path=path).data.row_height == 33

    kept = WorkspaceSettings.load(settings_path=path, reset_on_version_mismatch=False)
    assert kept.data.row_height == 50
    assert kept.data.schema_version == SCHEMA_VERSION


def test_tolerant_loader(caplog: pytest.LogCaptureFixture) -> None:
    raw = {
        "schema_version": SCHEMA_VERSION,
        "row_height": 0,
        "row_overscan": "lots",
        "column_widths": {"t1": {"c1": 5000, "c2": 10, "c3": "wide"}, "t2": "bad"},
        "theme": "dark",
    }

    with caplog.at_level(logging.WARNING, logger="gridbase"):
        data = WorkspaceSettingsData.from_json_dict(raw)

    assert data.row_height == 33
    assert data.row_overscan == 10
    assert data.column_widths == {"t1": {"c1": 420, "c2": 120}}
    assert "Unknown key 'theme'" in caplog.text


def test_to_grid_config_overlays_geometry() -> None:
    settings = WorkspaceSettings(path=Path("unused.json"), data=WorkspaceSettingsData(row_height=28, row_overscan=4))

    config = settings.to_grid_config(GridConfig(page_size=100))

    assert config.row_height == 28
    assert config.row_overscan == 4
    assert config.page_size == 100
    assert config.default_column_width == 181


def test_zero_row_height_is_rejected_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    raw = {"schema_version": SCHEMA_VERSION, "row_height": 0, "row_overscan": 0}

    with caplog.at_level(logging.WARNING, logger="gridbase"):
        data = WorkspaceSettingsData.from_json_dict(raw)

    assert data.row_height == 33
    assert data.row_overscan == 0
    assert "row_height is below 1" in caplog.text
