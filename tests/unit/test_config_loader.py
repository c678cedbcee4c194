from pathlib import Path

import pytest

from pod_lifecycle.config.loader import ConfigError, ConfigLoader


class TestConfigLoader:
    def test_load_file(self, fixtures_dir: Path) -> None:
        config = ConfigLoader(fixtures_dir / "agent.yaml").load()
        assert config.namespace == "batch"
        assert config.log_dir == "/var/log/pod-lifecycle"
        assert config.interval_seconds == 30
        assert config.archive_max_entries == 500
        assert config.archive_retention_hours == 12

    def test_no_path_gives_defaults(self) -> None:
        config = ConfigLoader().load()
        assert config.namespace == "default"

    def test_overrides_win(self, fixtures_dir: Path) -> None:
        config = ConfigLoader(fixtures_dir / "agent.yaml").load(
            namespace="web", interval_seconds=5.0
        )
        assert config.namespace == "web"
        assert config.interval_seconds == 5.0
        assert config.archive_max_entries == 500

    def test_none_overrides_ignored(self, fixtures_dir: Path) -> None:
        config = ConfigLoader(fixtures_dir / "agent.yaml").load(namespace=None)
        assert config.namespace == "batch"

    def test_empty_file(self, fixtures_dir: Path) -> None:
        assert ConfigLoader(fixtures_dir / "empty.yaml").load().namespace == "default"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="does not exist"):
            ConfigLoader(tmp_path / "nope.yaml").load()

    def test_invalid_yaml(self, fixtures_dir: Path) -> None:
        with pytest.raises(ConfigError, match="Invalid YAML"):
            ConfigLoader(fixtures_dir / "broken.yaml").load()

    def test_not_a_mapping(self, fixtures_dir: Path) -> None:
        with pytest.raises(ConfigError, match="mapping"):
            ConfigLoader(fixtures_dir / "not_a_mapping.yaml").load()

    def test_validation_error(self, fixtures_dir: Path) -> None:
        with pytest.raises(ConfigError, match="Validation error") as exc_info:
            ConfigLoader(fixtures_dir / "invalid_interval.yaml").load()
        assert exc_info.value.path == fixtures_dir / "invalid_interval.yaml"

    def test_invalid_override(self) -> None:
        with pytest.raises(ConfigError, match="Validation error"):
            ConfigLoader().load(interval_seconds=-5)
