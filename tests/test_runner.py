from __future__ import annotations

import asyncio

import httpx
import pytest

from keepalive.app.runner import KeepAliveRunner, SOURCE_SCHEDULED


def _run(cfg, rec, source: str = "manual"):
    runner = KeepAliveRunner(cfg, transport=rec.transport)
    return asyncio.run(runner.run(source))


@pytest.mark.basic
def test_missing_token_fails_without_network_calls(make_settings, recorder) -> None:
    rec = recorder({"api.test": recorder.profile_ok()})
    result = _run(make_settings(KOYEB_TOKEN=None, KOYEB_APP_URL="https://app.test/"), rec)

    assert result.success is False
    assert len(result.messages) == 1
    assert "KOYEB_TOKEN" in result.messages[0]
    assert result.failures == ["configuration_missing"]
    assert rec.calls == []


@pytest.mark.basic
def test_primary_success_reports_account_email(make_settings, recorder) -> None:
    rec = recorder({"api.test": recorder.profile_ok("a@b.com")})
    result = _run(make_settings(), rec)

    assert result.success is True
    assert any("a@b.com" in m for m in result.messages)
    assert result.failures == []
    assert len(rec.calls) == 1
    assert rec.calls[0].headers["Authorization"] == "Bearer tok-123"


@pytest.mark.basic
def test_start_message_names_source(make_settings, recorder) -> None:
    rec = recorder({"api.test": recorder.profile_ok()})
    result = _run(make_settings(), rec, source=SOURCE_SCHEDULED)

    assert "source: scheduled" in result.messages[0]
    assert result.source == SOURCE_SCHEDULED


@pytest.mark.basic
def test_primary_success_without_email_says_unknown(make_settings, recorder) -> None:
    rec = recorder({"api.test": lambda request: httpx.Response(200, text="not json")})
    result = _run(make_settings(), rec)

    assert result.success is True
    assert any("user: Unknown" in m for m in result.messages)


@pytest.mark.basic
@pytest.mark.parametrize("secondary", ["ok", "503", "unreachable"])
def test_primary_500_fails_regardless_of_secondary(make_settings, recorder, secondary: str) -> None:
    handlers = {
        "ok": recorder.status(200),
        "503": recorder.status(503),
        "unreachable": recorder.unreachable,
    }
    rec = recorder({"api.test": recorder.status(500), "app.test": handlers[secondary]})
    result = _run(make_settings(KOYEB_APP_URL="https://app.test/"), rec)

    assert result.success is False
    assert "primary_check_failed" in result.failures
    assert any("500" in m for m in result.messages)
    assert len(rec.calls) == 2


@pytest.mark.basic
def test_primary_network_error_is_converted_to_message(make_settings, recorder) -> None:
    rec = recorder({"api.test": recorder.unreachable})
    result = _run(make_settings(), rec)

    assert result.success is False
    assert any("connection refused" in m for m in result.messages)


@pytest.mark.basic
def test_secondary_failure_is_advisory(make_settings, recorder) -> None:
    rec = recorder({"api.test": recorder.profile_ok()})
    result = _run(make_settings(KOYEB_APP_URL="https://app.test/"), rec)

    assert result.success is True
    assert result.failures == ["secondary_check_failed"]
    assert any("App ping failed" in m for m in result.messages)


@pytest.mark.basic
def test_secondary_ping_is_unauthenticated(make_settings, recorder) -> None:
    rec = recorder({"api.test": recorder.profile_ok(), "app.test": recorder.status(200)})
    result = _run(make_settings(KOYEB_APP_URL="https://app.test/"), rec)

    assert result.success is True
    assert any("App ping: 200" in m for m in result.messages)
    ping = rec.calls[1]
    assert ping.url.host == "app.test"
    assert "Authorization" not in ping.headers
