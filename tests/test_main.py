import logging
from datetime import timedelta

import pytest

import main
from config import Settings
from main import engine_lifespan
from sla_insights.application import SLAInsightsService
from sla_insights.infrastructure import SLAConfigManager

from conftest import MONDAY_9AM, make_case


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture()
def managers(monkeypatch):
    created = []

    class RecordingConfigManager(SLAConfigManager):
        def __init__(self):
            super().__init__()
            created.append(self)

    monkeypatch.setattr(main, "SLAConfigManager", RecordingConfigManager)
    return created


@pytest.fixture()
def watched_settings(tmp_path):
    path = tmp_path / "sla_config.yaml"
    path.write_text("minutes_to_assignment: 30\n")
    return Settings(_env_file=None, sla_config_path=path, watch_sla_config=True)


def test_lifespan_yields_service_with_file_thresholds(watched_settings):
    with engine_lifespan(watched_settings) as service:
        assert isinstance(service, SLAInsightsService)
        result = service.compute_recommendations(
            make_case(), now=MONDAY_9AM + timedelta(minutes=45)
        )

    assert [item.id for item in result] == ["coach-initial-outreach"]


def test_lifespan_without_threshold_file(tmp_path):
    settings = Settings(_env_file=None, sla_config_path=tmp_path / "absent.yaml")

    with engine_lifespan(settings) as service:
        result = service.compute_recommendations(
            make_case(), now=MONDAY_9AM + timedelta(minutes=45)
        )

    assert result == []


def test_watcher_stops_when_caller_fails(watched_settings, managers):
    with pytest.raises(RuntimeError):
        with engine_lifespan(watched_settings):
            raise RuntimeError("caller failed")

    assert len(managers) == 1
    assert not managers[0].is_watching


def test_watcher_not_started_when_service_build_fails(watched_settings, managers, monkeypatch):
    def fail(*args, **kwargs):
        raise ValueError("bad business window")

    monkeypatch.setattr(main.SLAInsightsService, "from_settings", fail)

    with pytest.raises(ValueError):
        with engine_lifespan(watched_settings):
            pass

    assert len(managers) == 1
    assert not managers[0].is_watching
