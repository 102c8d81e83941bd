# backend/tests/core/test_config.py
"""Tests for Settings parsing."""

from pydantic import ValidationError
import pytest

from visit_sync.core.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("VISIT_ORDER_EXPIRY_DAYS", raising=False)
        settings = Settings(_env_file=None)

        assert settings.api_prefix == "/api/v1"
        assert settings.visit_order_expiry_days == 28
        assert settings.slot_provisioning_retries == 1
        assert settings.vsip_room_capacity == 99

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("VISIT_ORDER_EXPIRY_DAYS", "14")
        monkeypatch.setenv("DATABASE_URL", "sqlite+pysqlite:///:memory:")

        settings = Settings(_env_file=None)

        assert settings.visit_order_expiry_days == 14
        assert settings.is_sqlite

    def test_log_level_is_normalised(self):
        assert Settings(_env_file=None, log_level=" debug ").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="CHATTY")

    def test_negative_retries_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, slot_provisioning_retries=-1)
