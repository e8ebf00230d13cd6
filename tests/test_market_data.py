"""
Tests for engine.market_data module. Network access is replaced with monkeypatch.
"""
from datetime import datetime, timedelta

import pytest
import requests

from engine import market_data
from engine.config import DEFAULT_BASE_RATE, REQUEST_TIMEOUT_SECONDS


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _FakeResponse:

    def __init__(self, payload, status=200):
        self._payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


def _nyfed_payload(*rates):
    return {
        "refRates": [
            {"effectiveDate": f"2026-10-{16 - i:02d}", "percentRate": rate}
            for i, rate in enumerate(rates)
        ]
    }


def _patch_get(monkeypatch, responder):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append({"url": url, "params": params, "timeout": timeout})
        result = responder(url)
        if isinstance(result, Exception):
            raise result
        return result

    monkeypatch.setattr(market_data.requests, "get", fake_get)
    return calls


# ---------------------------------------------------------------------------
# Base rate
# ---------------------------------------------------------------------------

@pytest.mark.usefixtures("clean_rate_cache")
class TestLiveBaseRate:

    def test_thirty_day_average(self, monkeypatch):
        _patch_get(monkeypatch, lambda url: _FakeResponse(_nyfed_payload(4.0, 3.0)))
        data = market_data.get_live_base_rate()
        assert data.source == "live"
        assert data.rate == pytest.approx(3.5)
        assert "30-day avg" in data.observation_date

    def test_cached_within_window(self, monkeypatch):
        calls = _patch_get(monkeypatch, lambda url: _FakeResponse(_nyfed_payload(4.1)))
        market_data.get_live_base_rate()
        again = market_data.get_live_base_rate()
        assert again.source == "cached"
        assert again.rate == pytest.approx(4.1)
        assert len(calls) == 1

    def test_force_refresh_bypasses_cache(self, monkeypatch):
        calls = _patch_get(monkeypatch, lambda url: _FakeResponse(_nyfed_payload(4.1)))
        market_data.get_live_base_rate()
        market_data.get_live_base_rate(force_refresh=True)
        assert len(calls) == 2

    def test_fallback_when_offline(self, monkeypatch):
        _patch_get(monkeypatch, lambda url: requests.ConnectionError("offline"))
        data = market_data.get_live_base_rate()
        assert data.source == "fallback"
        assert data.rate == DEFAULT_BASE_RATE

    def test_malformed_payload_falls_back(self, monkeypatch):
        _patch_get(monkeypatch, lambda url: _FakeResponse(ValueError("not json")))
        assert market_data.get_live_base_rate().source == "fallback"

    def test_stale_cache_beats_default(self, monkeypatch):
        _patch_get(monkeypatch, lambda url: _FakeResponse(_nyfed_payload(4.2)))
        market_data.get_live_base_rate()
        market_data._rate_cache["timestamp"] = datetime.now() - timedelta(hours=2)

        _patch_get(monkeypatch, lambda url: requests.Timeout("slow"))
        data = market_data.get_live_base_rate()
        assert data.source == "cached (stale)"
        assert data.rate == pytest.approx(4.2)

    def test_fred_used_when_nyfed_down(self, monkeypatch):
        monkeypatch.setenv("FRED_API_KEY", "test-key")

        def responder(url):
            if url == market_data.FRED_API_URL:
                return _FakeResponse({"observations": [{"date": "2026-10-16", "value": "4.05"}]})
            return _FakeResponse({}, status=503)

        _patch_get(monkeypatch, responder)
        data = market_data.get_live_base_rate()
        assert data.source == "live"
        assert data.rate == pytest.approx(4.05)
        assert data.observation_date == "2026-10-16"

    def test_manual_override_skips_network(self, monkeypatch):
        calls = _patch_get(monkeypatch, lambda url: _FakeResponse(_nyfed_payload(4.0)))
        data = market_data.get_base_rate_with_manual_override(5.0)
        assert data.source == "manual"
        assert data.rate == 5.0
        assert calls == []

    def test_format_rate_display(self, monkeypatch):
        _patch_get(monkeypatch, lambda url: requests.ConnectionError("offline"))
        display = market_data.format_rate_display(market_data.get_live_base_rate())
        assert display["rate"] == "3.69%"
        assert display["rate_bps"] == "369 bps"
        assert not display["is_live"]
        assert display["observation_date"] == "N/A"


# ---------------------------------------------------------------------------
# Market data service
# ---------------------------------------------------------------------------

class TestFetchRecord:

    def test_available(self, monkeypatch):
        calls = _patch_get(monkeypatch, lambda url: _FakeResponse({"deals": [1, 2]}))
        record = market_data.fetch_record("deals", base_url="http://svc:9000/", sector="auto")
        assert record.available
        assert record.data == {"deals": [1, 2]}
        assert calls[0]["url"] == "http://svc:9000/deals"
        assert calls[0]["params"] == {"sector": "auto"}
        assert calls[0]["timeout"] == REQUEST_TIMEOUT_SECONDS

    def test_default_base_url(self, monkeypatch):
        monkeypatch.setattr(market_data, "MARKET_DATA_URL", "http://localhost:8000")
        calls = _patch_get(monkeypatch, lambda url: _FakeResponse({}))
        market_data.fetch_record("/news")
        assert calls[0]["url"] == "http://localhost:8000/news"
        assert calls[0]["params"] is None

    def test_unavailable_on_connection_error(self, monkeypatch):
        _patch_get(monkeypatch, lambda url: requests.ConnectionError("refused"))
        record = market_data.fetch_record("deals")
        assert not record.available
        assert record.data == {}
        assert "refused" in record.error

    def test_unavailable_on_http_error(self, monkeypatch):
        _patch_get(monkeypatch, lambda url: _FakeResponse({}, status=500))
        assert not market_data.fetch_record("deals").available

    def test_unavailable_on_non_object(self, monkeypatch):
        _patch_get(monkeypatch, lambda url: _FakeResponse([1, 2, 3]))
        record = market_data.fetch_record("deals")
        assert not record.available
        assert "JSON object" in record.error
