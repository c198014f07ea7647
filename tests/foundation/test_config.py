"""Tests for configuration loading."""

from pathlib import Path

import pytest

from reckon.foundation.config import (
    ReckonConfig,
    get_config,
    load_config,
    reset_config,
    save_default_config,
)
from reckon.foundation.config.loader import _apply_env_overrides, _get_dataclass_defaults
from reckon.foundation.errors import ErrorCode, ReckonError


@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty directory with an empty home."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return tmp_path


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults(self, isolated_cwd: Path) -> None:
        """Without files or env vars the defaults apply."""
        config = load_config()
        assert config == ReckonConfig()
        assert config.store.policy == "cache_all"
        assert config.store.max_workers is None

    def test_explicit_file(self, isolated_cwd: Path) -> None:
        """Values from an explicit file override defaults."""
        path = isolated_cwd / "custom.yaml"
        path.write_text("store:\n  policy: cache_top_level\n  max_workers: 3\n")

        config = load_config(path)

        assert config.store.policy == "cache_top_level"
        assert config.store.max_workers == 3
        assert config.store.thread_name_prefix == "reckon"

    def test_project_file(self, isolated_cwd: Path) -> None:
        """.reckon/config.yaml is picked up."""
        (isolated_cwd / ".reckon").mkdir()
        (isolated_cwd / ".reckon" / "config.yaml").write_text("logging:\n  debug: true\n")
        assert load_config().logging.debug is True

    def test_env_overrides_file(self, isolated_cwd: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """RECKON_* variables win over file values."""
        path = isolated_cwd / "custom.yaml"
        path.write_text("store:\n  policy: cache_top_level\n")
        monkeypatch.setenv("RECKON_STORE_POLICY", "cache_none")
        monkeypatch.setenv("RECKON_STORE_MAX_WORKERS", "6")

        config = load_config(path)

        assert config.store.policy == "cache_none"
        assert config.store.max_workers == 6

    def test_unknown_key(self, isolated_cwd: Path) -> None:
        """Unknown keys are rejected."""
        path = isolated_cwd / "bad.yaml"
        path.write_text("store:\n  polcy: cache_all\n")
        with pytest.raises(ReckonError) as excinfo:
            load_config(path)
        assert excinfo.value.code is ErrorCode.CONFIG_INVALID

    def test_bad_worker_count(self, isolated_cwd: Path) -> None:
        """max_workers must be a positive integer."""
        path = isolated_cwd / "bad.yaml"
        path.write_text("store:\n  max_workers: 0\n")
        with pytest.raises(ReckonError) as excinfo:
            load_config(path)
        assert excinfo.value.code is ErrorCode.CONFIG_INVALID

    def test_unparseable_yaml(self, isolated_cwd: Path) -> None:
        """Broken YAML is a parse error."""
        path = isolated_cwd / "broken.yaml"
        path.write_text("store: [unclosed\n")
        with pytest.raises(ReckonError) as excinfo:
            load_config(path)
        assert excinfo.value.code is ErrorCode.CONFIG_PARSE_ERROR

    def test_non_mapping(self, isolated_cwd: Path) -> None:
        """The top level must be a mapping."""
        path = isolated_cwd / "list.yaml"
        path.write_text("- cache_all\n")
        with pytest.raises(ReckonError) as excinfo:
            load_config(path)
        assert excinfo.value.code is ErrorCode.CONFIG_PARSE_ERROR


class TestEnvOverrides:
    """Tests for _apply_env_overrides."""

    def test_coercion(self) -> None:
        """Strings become ints, bools and None where they look like them."""
        config = _apply_env_overrides(
            _get_dataclass_defaults(),
            {
                "RECKON_STORE_MAX_WORKERS": "8",
                "RECKON_LOGGING_DEBUG": "true",
                "RECKON_LOGGING_LEVEL": "none",
                "RECKON_STORE_THREAD_NAME_PREFIX": "calc",
            },
        )
        assert config["store"]["max_workers"] == 8
        assert config["store"]["thread_name_prefix"] == "calc"
        assert config["logging"]["debug"] is True
        assert config["logging"]["level"] is None

    def test_unrelated_variables_ignored(self) -> None:
        """Unknown sections and options are left alone."""
        defaults = _get_dataclass_defaults()
        config = _apply_env_overrides(
            _get_dataclass_defaults(),
            {"RECKON_CACHE_SIZE": "3", "RECKON_STORE_COLOR": "red", "OTHER": "x"},
        )
        assert config == defaults


class TestGlobalConfig:
    """Tests for the lazily loaded global config."""

    def test_cached_until_reset(self, isolated_cwd: Path) -> None:
        """get_config() returns the same instance until reset."""
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first

    def test_save_default_config_round_trips(self, isolated_cwd: Path) -> None:
        """The generated template loads back to the defaults."""
        path = save_default_config(isolated_cwd / "out" / "config.yaml")
        assert path.exists()
        assert load_config(path) == ReckonConfig()
