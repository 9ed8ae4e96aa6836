"""Endpoint paths and PostgREST query parameters for the price tables."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Dict

from ..data_models import ChartPeriod

LATEST_PRICES_RPC = "rpc/get_latest_lme_prices"
CHART_STATS_RPC = "rpc/get_lme_chart_stats"
PRICES_TABLE = "lme_processed_prices"

# The fallback table scan only needs the last few trading days to find each metal's newest row
LATEST_FALLBACK_DAYS = 3

_LATEST_COLUMNS = "metal_code,metal_name_kr,price_krw_per_kg,change_percent,change_type,price_date,processed_at"
_HISTORY_COLUMNS = "metal_code,metal_name_kr,price_date,price_krw_per_kg,change_percent,change_type"


def window_start(today: date, days: int) -> str:
    return (today - timedelta(days=days)).isoformat()


def latest_fallback_params(today: date) -> Dict[str, str]:
    return {
        "select": _LATEST_COLUMNS,
        "price_date": f"gte.{window_start(today, LATEST_FALLBACK_DAYS)}",
        "order": "metal_code.asc,price_date.desc,processed_at.desc",
    }


def history_params(code: str, today: date, days: int) -> Dict[str, str]:
    return {
        "select": _HISTORY_COLUMNS,
        "metal_code": f"eq.{code}",
        "price_date": f"gte.{window_start(today, days)}",
        "order": "price_date.desc",
    }


def chart_stats_body(code: str, period: ChartPeriod, limit: int) -> Dict[str, object]:
    return {"p_metal_code": code, "p_period": period.value, "p_limit": limit}


__all__ = [
    "CHART_STATS_RPC",
    "LATEST_FALLBACK_DAYS",
    "LATEST_PRICES_RPC",
    "PRICES_TABLE",
    "chart_stats_body",
    "history_params",
    "latest_fallback_params",
    "window_start",
]
