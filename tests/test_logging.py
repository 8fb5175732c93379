import asyncio
import json

import pytest

from api.server import configure_logging
from config import LandingConfig, get_config
from conftest import FakeCountSource, checkout_completed_event
from pipeline.classifier import classify
from schemas.landing_models import VerifiedEvent
from services.count_cache import CountCache


@pytest.fixture
def json_logging():
    configure_logging(LandingConfig(env="production"))
    yield
    configure_logging(get_config())


def _log_lines(capsys):
    return [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.strip()]


def _event(payload):
    return VerifiedEvent(event_type=payload["type"], event_id=payload["id"], payload=payload)


def test_module_loggers_render_json(json_logging, capsys):
    classify(_event(checkout_completed_event(mode="payment")))

    lines = _log_lines(capsys)

    assert lines[-1]["event"] == "event_ignored"
    assert lines[-1]["component"] == "event_classifier"
    assert lines[-1]["level"] == "info"
    assert lines[-1]["mode"] == "payment"


def test_debug_lines_are_filtered(json_logging, capsys):
    payload = checkout_completed_event()
    payload["type"] = "invoice.paid"

    classify(_event(payload))

    assert _log_lines(capsys) == []


def test_count_cache_logs_with_component(json_logging, capsys):
    asyncio.run(CountCache(FakeCountSource(values=[5])).get_count())

    lines = _log_lines(capsys)

    assert {"event": "count_refreshed", "component": "count_cache", "count": 5}.items() <= lines[-1].items()
