"""Unit tests for operator settings."""

import pytest
from alpine_operator.types import settings as settings_module
from alpine_operator.types.settings import Settings, _getenv, _split_command


class TestGetenv:
    """Tests for _getenv()."""

    def test_boolean_values(self, monkeypatch):
        monkeypatch.setenv("ALPINE_TEST_FLAG", "yes")
        assert _getenv("ALPINE_TEST_FLAG", False) is True
        monkeypatch.setenv("ALPINE_TEST_FLAG", "0")
        assert _getenv("ALPINE_TEST_FLAG", True) is False

    def test_string_value(self, monkeypatch):
        monkeypatch.setenv("ALPINE_TEST_IMAGE", "busybox:1.36")
        assert _getenv("ALPINE_TEST_IMAGE", "alpine") == "busybox:1.36"

    def test_default(self, monkeypatch):
        monkeypatch.delenv("ALPINE_TEST_MISSING", raising=False)
        assert _getenv("ALPINE_TEST_MISSING", 10) == 10

    def test_missing_without_default(self, monkeypatch):
        monkeypatch.delenv("ALPINE_TEST_MISSING", raising=False)
        with pytest.raises(KeyError):
            _getenv("ALPINE_TEST_MISSING")


class TestSplitCommand:
    """Tests for _split_command()."""

    def test_shell_split(self):
        assert _split_command("sh -c 'sleep 3600'") == ["sh", "-c", "sleep 3600"]

    def test_list_passthrough(self):
        assert _split_command(("sleep", "1")) == ["sleep", "1"]


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        conf = Settings()
        assert conf.default_worker_image == settings_module.DEFAULT_WORKER_IMAGE
        assert conf.reconcile_interval_seconds == settings_module.RECONCILE_INTERVAL_SECONDS
        assert conf.worker_limit == settings_module.WORKER_LIMIT

    def test_overrides(self):
        conf = Settings(
            default_worker_image="busybox",
            default_worker_command=["sleep", "60"],
            default_worker_restart_policy="OnFailure",
            reconcile_interval_seconds=5.0,
            retry_delay_seconds=1.0,
            live_list_confirm_enabled=False,
            metrics_enabled=False,
        )
        assert conf.default_worker_image == "busybox"
        assert conf.reconcile_interval_seconds == 5.0
        assert conf.retry_delay_seconds == 1.0
        assert conf.live_list_confirm_enabled is False
        assert conf.metrics_enabled is False

        template = conf.default_worker_template
        assert template.image == "busybox"
        assert template.command == ("sleep", "60")
        assert template.restart_policy == "OnFailure"

    def test_overrides_do_not_leak(self):
        Settings(default_worker_image="busybox")
        assert Settings().default_worker_image == settings_module.DEFAULT_WORKER_IMAGE

    def test_default_template_is_immutable(self):
        template = Settings().default_worker_template
        with pytest.raises(AttributeError):
            template.image = "other"
