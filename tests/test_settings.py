"""Tests for QSettings-backed application settings."""

from pathlib import Path

from tilemaped.settings import AppSettings, ConfigVersion, clamp_zoom
from tilemaped.settings.logging import LOG_FILE_PATH


def reopen(settings: AppSettings) -> AppSettings:
    """Open a second settings object on the same storage and profile."""
    settings.sync()
    return AppSettings(profile=settings.profile, storage_path=settings.get_settings_file_path())


class TestSettingsInitialization:
    """Test settings initialization and first run state."""

    def test_storage_path(self, settings: AppSettings, tmp_path: Path) -> None:
        assert Path(settings.get_settings_file_path()).name == "settings.ini"

    def test_first_run(self, settings: AppSettings) -> None:
        assert settings.is_first_run
        assert settings.version == ConfigVersion.CURRENT.value

        settings.set_first_run_complete()
        assert not reopen(settings).is_first_run

    def test_profiles_are_separate(self, settings: AppSettings, tmp_path: Path) -> None:
        settings.editor.default_tile_size = 48
        settings.sync()
        other = AppSettings(profile="other", storage_path=tmp_path / "settings.ini")
        assert other.editor.default_tile_size == 16


class TestEditorSettings:
    """Test defaults for new maps and the canvas."""

    def test_defaults(self, settings: AppSettings) -> None:
        editor = settings.editor
        assert editor.default_topology == "grid"
        assert editor.default_tile_size == 16
        assert editor.default_map_width == 64
        assert editor.default_map_height == 64
        assert editor.zoom_level == 100
        assert editor.grid_visible

    def test_values_persist(self, settings: AppSettings) -> None:
        settings.editor.default_topology = "hex"
        settings.editor.default_map_width = 32
        settings.editor.grid_visible = False

        editor = reopen(settings).editor
        assert editor.default_topology == "hex"
        assert editor.default_map_width == 32
        assert not editor.grid_visible

    def test_invalid_values_are_ignored(self, settings: AppSettings) -> None:
        settings.editor.default_topology = "iso"
        settings.editor.default_tile_size = 0
        settings.editor.default_map_height = -4

        assert settings.editor.default_topology == "grid"
        assert settings.editor.default_tile_size == 16
        assert settings.editor.default_map_height == 64

    def test_zoom_is_clamped(self, settings: AppSettings) -> None:
        settings.editor.zoom_level = 500
        assert settings.editor.zoom_level == 200
        settings.editor.zoom_level = 10
        assert settings.editor.zoom_level == 50
        assert clamp_zoom(125) == 125


class TestPathSettings:
    """Test catalog path and recent files."""

    def test_tileset_catalog(self, settings: AppSettings, tmp_path: Path) -> None:
        assert settings.paths.tileset_catalog is None
        settings.paths.tileset_catalog = tmp_path / "catalog.json"
        assert settings.paths.tileset_catalog == tmp_path / "catalog.json"
        settings.paths.tileset_catalog = None
        assert settings.paths.tileset_catalog is None

    def test_recent_files_order_and_limit(self, settings: AppSettings) -> None:
        for idx in range(12):
            settings.paths.add_recent_file(f"/maps/map{idx}.json")
        settings.paths.add_recent_file("/maps/map5.json")

        recent = settings.paths.recent_files
        assert len(recent) == 10
        assert recent[0] == "/maps/map5.json"
        assert recent[1] == "/maps/map11.json"
        assert recent.count("/maps/map5.json") == 1

    def test_single_recent_file_survives_reopen(self, settings: AppSettings) -> None:
        settings.paths.add_recent_file("/maps/only.json")
        assert reopen(settings).paths.recent_files == ["/maps/only.json"]

    def test_clear_recent_files(self, settings: AppSettings) -> None:
        settings.paths.add_recent_file("/maps/a.json")
        settings.paths.clear_recent_files()
        assert settings.paths.recent_files == []


class TestLoggingSettings:
    """Test logging options."""

    def test_defaults(self, settings: AppSettings) -> None:
        assert settings.console_logging
        assert settings.console_log_level == "INFO"
        assert settings.console_use_colors
        assert not settings.file_logging
        assert settings.log_file_path == LOG_FILE_PATH
        assert settings.recent_max_lines == 1000

    def test_log_level(self, settings: AppSettings) -> None:
        settings.logging.console_log_level = "debug"
        assert settings.console_log_level == "DEBUG"
        settings.logging.console_log_level = "verbose"
        assert settings.console_log_level == "DEBUG"

    def test_recent_max_lines(self, settings: AppSettings) -> None:
        settings.logging.recent_max_lines = 50
        assert reopen(settings).recent_max_lines == 50
        settings.logging.recent_max_lines = 0
        assert settings.recent_max_lines == 50

    def test_absolute_log_path(self, settings: AppSettings, tmp_path: Path) -> None:
        settings.logging.log_file_path = str(tmp_path / "logs" / "run.csv")
        assert settings.logging.log_file_absolute_path == (tmp_path / "logs" / "run.csv").resolve()


class TestSettingsValidation:
    """Test configuration validation."""

    def test_missing_catalog_is_a_warning(self, settings: AppSettings) -> None:
        result = settings.validate()
        assert result.is_valid
        assert result.errors == []
        assert any("catalog" in warning for warning in result.warnings)

    def test_existing_catalog(self, settings: AppSettings, catalog_path: Path) -> None:
        settings.paths.tileset_catalog = catalog_path
        assert settings.validate().warnings == []

    def test_stale_recent_files_are_pruned(self, settings: AppSettings, tmp_path: Path) -> None:
        existing = tmp_path / "kept.json"
        existing.write_text("{}")
        settings.paths.add_recent_file(tmp_path / "gone.json")
        settings.paths.add_recent_file(existing)

        result = settings.validate()
        assert any("gone.json" in warning for warning in result.warnings)
        assert settings.paths.recent_files == [str(existing)]

    def test_invalid_stored_topology_is_an_error(self, settings: AppSettings) -> None:
        settings.settings.setValue("editor/default_topology", "iso")
        result = settings.validate()
        assert not result.is_valid
        assert any("topology" in error for error in result.errors)
