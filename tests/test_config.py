"""Tests for configuration loading."""

from dataclasses import FrozenInstanceError

import pytest

from issue_notify.config import DEFAULT_BATCH_SIZE, NotifyConfig, load_config
from issue_notify.exceptions import ConfigurationError, InvalidConfigError


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Keep user and project config files out of the way."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    for name in ("BATCH_SIZE", "TOP_COUNT", "VERBOSITY", "LOG_FILE"):
        monkeypatch.delenv(f"ISSUE_NOTIFY_{name}", raising=False)


class TestNotifyConfig:
    def test_defaults(self):
        config = load_config()
        assert config.batch_size == DEFAULT_BATCH_SIZE == 1000
        assert config.top_count == 5
        assert config.verbosity == "normal"
        assert config.log_file is None

    @pytest.mark.parametrize(
        "field,value",
        [("batch_size", 0), ("batch_size", -5), ("top_count", 0), ("verbosity", "loud")],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(InvalidConfigError) as excinfo:
            NotifyConfig(**{field: value})
        assert excinfo.value.key == field

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            NotifyConfig().batch_size = 5


class TestLoadConfig:
    def test_overrides(self):
        assert load_config(batch_size=250).batch_size == 250

    def test_none_override_ignored(self):
        assert load_config(batch_size=None).batch_size == 1000

    def test_verbose_and_quiet_flags(self):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"
        assert load_config(verbose=False).verbosity == "normal"

    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("ISSUE_NOTIFY_BATCH_SIZE", "10")
        monkeypatch.setenv("ISSUE_NOTIFY_VERBOSITY", "quiet")
        config = load_config()
        assert config.batch_size == 10
        assert config.verbosity == "quiet"

    def test_bad_env_var(self, monkeypatch):
        monkeypatch.setenv("ISSUE_NOTIFY_BATCH_SIZE", "lots")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_override_beats_env(self, monkeypatch):
        monkeypatch.setenv("ISSUE_NOTIFY_BATCH_SIZE", "10")
        assert load_config(batch_size=20).batch_size == 20

    def test_project_file_with_notify_table(self, tmp_path):
        (tmp_path / "issue-notify.toml").write_text("[notify]\nbatch_size = 50\ntop_count = 3\n")
        config = load_config()
        assert (config.batch_size, config.top_count) == (50, 3)

    def test_explicit_file_beats_project_file(self, tmp_path):
        (tmp_path / "issue-notify.toml").write_text("batch_size = 50\n")
        explicit = tmp_path / "custom.toml"
        explicit.write_text("batch_size = 75\n")
        assert load_config(config_file=explicit).batch_size == 75

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(config_file=tmp_path / "missing.toml")

    def test_malformed_file(self, tmp_path):
        bad = tmp_path / "bad.toml"
        bad.write_text("batch_size = = 1\n")
        with pytest.raises(ConfigurationError):
            load_config(config_file=bad)

    def test_unknown_key(self, tmp_path):
        bad = tmp_path / "bad.toml"
        bad.write_text("colour = 'blue'\n")
        with pytest.raises(ConfigurationError):
            load_config(config_file=bad)
