"""Shared HTTP helper for the upstream data providers."""
from __future__ import annotations

from typing import Any, Dict, Optional
import logging

import requests

from krw_valuation.errors import UpstreamFetchError

logger = logging.getLogger(__name__)


def get_json(source: str, url: str, params: Optional[Dict[str, Any]] = None, timeout: float = 30.0) -> Any:
    """GET `url` and decode the JSON body.

    Network errors, non-2xx statuses and undecodable bodies are raised as
    `UpstreamFetchError`; no retry is attempted here.
    """
    logger.debug("GET %s (%s)", url.split("?")[0], source)
    try:
        resp = requests.get(url, params=params, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise UpstreamFetchError(source, f"request failed: {exc}") from exc

    try:
        return resp.json()
    except ValueError as exc:
        raise UpstreamFetchError(source, "response body is not valid JSON") from exc
