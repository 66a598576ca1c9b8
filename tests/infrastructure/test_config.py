"""Tests for environment-driven settings and the composition root."""

from pathlib import Path

import pytest

from heavyims.application.subscribers import log_domain_event
from heavyims.domain.model.events import InventoryLowStockDetected
from heavyims.infrastructure.bootstrap import build_dispatcher, unit_of_work
from heavyims.infrastructure.config import load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # setenv first so teardown also removes anything load_dotenv wrote
    for name in ("HEAVYIMS_ENV", "HEAVYIMS_DATA_DIR", "HEAVYIMS_LOG_LEVEL"):
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)


class TestLoadSettings:

    def test_defaults(self):
        settings = load_settings(dotenv=False)
        assert settings.environment == "development"
        assert settings.log_level == "DEBUG"
        assert settings.store_path.name == "heavyims.json"
        assert not settings.is_production

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HEAVYIMS_ENV", "Production")
        monkeypatch.setenv("HEAVYIMS_DATA_DIR", str(tmp_path))
        settings = load_settings(dotenv=False)
        assert settings.is_production
        assert settings.log_level == "INFO"
        assert settings.store_path == Path(tmp_path) / "heavyims.json"

    def test_explicit_log_level_wins(self, monkeypatch):
        monkeypatch.setenv("HEAVYIMS_ENV", "test")
        monkeypatch.setenv("HEAVYIMS_LOG_LEVEL", "error")
        assert load_settings(dotenv=False).log_level == "ERROR"

    def test_unknown_environment_rejected(self, monkeypatch):
        monkeypatch.setenv("HEAVYIMS_ENV", "staging")
        with pytest.raises(ValueError, match="HEAVYIMS_ENV"):
            load_settings(dotenv=False)

    def test_dotenv_file_is_read(self, monkeypatch, tmp_path):
        (tmp_path / ".env").write_text(f"HEAVYIMS_DATA_DIR={tmp_path / 'from-dotenv'}\n")
        monkeypatch.chdir(tmp_path)
        settings = load_settings()
        assert settings.data_dir == tmp_path / "from-dotenv"


class TestBootstrap:

    def test_dispatcher_wiring(self):
        dispatcher = build_dispatcher()
        event = InventoryLowStockDetected(
            inventory_id="inv-1",
            part_id="P-100",
            warehouse="North",
            current_quantity=1,
            minimum_stock_level=5,
            reorder_quantity=10,
        )
        handlers = dispatcher.handlers_for(event)
        assert len(handlers) == 2
        assert handlers[-1] is log_domain_event

    def test_unit_of_work_uses_settings_path(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HEAVYIMS_DATA_DIR", str(tmp_path))
        settings = load_settings(dotenv=False)
        uow = unit_of_work(settings)
        with uow:
            assert uow.inventory.list_all() == []
