"""
Market data collaborator - live base rate and market-data service records
Includes 15-minute cache and fallback to a default base rate.
The waterfall engine never calls this module; callers pass the rate in.
"""
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, Tuple

import requests

from .config import (
    DEFAULT_BASE_RATE,
    MARKET_DATA_URL,
    REQUEST_TIMEOUT_SECONDS,
    CACHE_DURATION_MINUTES,
)

logger = logging.getLogger(__name__)

FRED_SOFR_SERIES = "SOFR"
FRED_API_URL = "https://api.stlouisfed.org/fred/series/observations"
NYFED_SOFR_URL = "https://markets.newyorkfed.org/api/rates/secured/sofr/last/{days}.json"

# Module-level cache
_rate_cache: dict = {
    "value": None,
    "timestamp": None,
    "source": None,
}


@dataclass
class BaseRateData:
    """Base rate with metadata"""
    rate: float  # In % (3.69 = 3.69%)
    timestamp: datetime
    source: str  # "live", "cached", "cached (stale)", "manual", "fallback"
    observation_date: Optional[str] = None


@dataclass
class MarketRecord:
    """One record fetched from the market data service"""
    endpoint: str
    available: bool
    data: dict = field(default_factory=dict)
    error: Optional[str] = None


def fetch_sofr_from_nyfed(use_30day_avg: bool = True) -> Tuple[Optional[float], Optional[str]]:
    """
    Fetch SOFR from the NY Fed API (no API key required)

    Args:
        use_30day_avg: If True, average the last 30 observations

    Returns:
        Tuple of (rate in %, observation label) or (None, None) on failure
    """
    days = 30 if use_30day_avg else 1

    try:
        response = requests.get(NYFED_SOFR_URL.format(days=days), timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
        rates = response.json().get("refRates", [])

        if rates:
            if use_30day_avg and len(rates) > 1:
                avg_rate = sum(float(r["percentRate"]) for r in rates) / len(rates)
                return avg_rate, f"30-day avg (as of {rates[0].get('effectiveDate', '')})"
            latest = rates[0]
            return float(latest.get("percentRate", 0)), latest.get("effectiveDate", "")

    except (requests.RequestException, ValueError, KeyError) as e:
        logger.warning("NY Fed API error: %s", e)

    return None, None


def get_fred_api_key() -> Optional[str]:
    return os.environ.get("FRED_API_KEY")


def fetch_sofr_from_fred(api_key: Optional[str] = None) -> Tuple[Optional[float], Optional[str]]:
    """
    Fetch latest SOFR from FRED (requires FRED_API_KEY)

    Returns:
        Tuple of (rate in %, observation date) or (None, None) on failure
    """
    api_key = api_key or get_fred_api_key()
    if not api_key:
        return None, None

    try:
        params = {
            "series_id": FRED_SOFR_SERIES,
            "api_key": api_key,
            "file_type": "json",
            "sort_order": "desc",
            "limit": 1,
        }
        response = requests.get(FRED_API_URL, params=params, timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
        observations = response.json().get("observations", [])

        if observations:
            latest = observations[0]
            return float(latest["value"]), latest["date"]

    except (requests.RequestException, ValueError, KeyError) as e:
        logger.warning("FRED API error: %s", e)

    return None, None


def get_live_base_rate(force_refresh: bool = False) -> BaseRateData:
    """
    Get the live base rate (SOFR) with caching

    Args:
        force_refresh: If True, bypass cache and fetch fresh data

    Returns:
        BaseRateData; never raises, falls back to the default rate
    """
    global _rate_cache

    now = datetime.now()

    if not force_refresh and _rate_cache["value"] is not None:
        cache_age = now - _rate_cache["timestamp"]
        if cache_age < timedelta(minutes=CACHE_DURATION_MINUTES):
            return BaseRateData(
                rate=_rate_cache["value"],
                timestamp=_rate_cache["timestamp"],
                source="cached",
                observation_date=_rate_cache.get("observation_date"),
            )

    rate, obs_date = fetch_sofr_from_nyfed()
    if rate is None:
        rate, obs_date = fetch_sofr_from_fred()

    if rate is not None:
        _rate_cache = {
            "value": rate,
            "timestamp": now,
            "source": "live",
            "observation_date": obs_date,
        }
        return BaseRateData(rate=rate, timestamp=now, source="live", observation_date=obs_date)

    # Stale cache beats the static default
    if _rate_cache["value"] is not None:
        return BaseRateData(
            rate=_rate_cache["value"],
            timestamp=_rate_cache["timestamp"],
            source="cached (stale)",
            observation_date=_rate_cache.get("observation_date"),
        )

    logger.info("Live base rate unavailable, using default %.2f%%", DEFAULT_BASE_RATE)
    return BaseRateData(rate=DEFAULT_BASE_RATE, timestamp=now, source="fallback")


def get_base_rate_with_manual_override(manual_rate: Optional[float] = None) -> BaseRateData:
    """Use a manual base rate if given, otherwise the live rate"""
    if manual_rate is not None:
        return BaseRateData(rate=manual_rate, timestamp=datetime.now(), source="manual")
    return get_live_base_rate()


def clear_cache():
    global _rate_cache
    _rate_cache = {"value": None, "timestamp": None, "source": None}


def fetch_record(endpoint: str, base_url: Optional[str] = None, **params) -> MarketRecord:
    """
    Fetch one record from the market data service

    Args:
        endpoint: Service endpoint, e.g. "deals" or "news"
        base_url: Service root, defaults to MARKET_DATA_URL
        **params: Query parameters

    Returns:
        MarketRecord with available=False on any failure
    """
    url = f"{(base_url or MARKET_DATA_URL).rstrip('/')}/{endpoint.lstrip('/')}"

    try:
        response = requests.get(url, params=params or None, timeout=REQUEST_TIMEOUT_SECONDS)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
        return MarketRecord(endpoint=endpoint, available=True, data=data)

    except (requests.RequestException, ValueError) as e:
        logger.warning("Market data service unavailable (%s): %s", endpoint, e)
        return MarketRecord(endpoint=endpoint, available=False, error=str(e))


def format_rate_display(rate_data: BaseRateData) -> dict:
    """
    Format base rate data for display in UI

    Returns:
        Dict with formatted strings for display
    """
    return {
        "rate": f"{rate_data.rate:.2f}%",
        "rate_bps": f"{rate_data.rate * 100:.0f} bps",
        "source": rate_data.source,
        "timestamp": rate_data.timestamp.strftime("%Y-%m-%d %H:%M"),
        "observation_date": rate_data.observation_date or "N/A",
        "is_live": rate_data.source == "live",
        "is_stale": "stale" in rate_data.source,
    }
