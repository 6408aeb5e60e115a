"""
BallDontLie API client (NBA, MLB and EPL endpoints).
Handles cursor pagination and the parameter-variant fallback used for EPL teams.
"""
from typing import Any, Dict, List, Optional, Sequence, Tuple
import requests
import structlog

from config.settings import get_settings, ConfigurationError
from config.constants import BALLDONTLIE_PREFIXES
from data.collectors.http_client import ApiError, get_json, rate_limit

logger = structlog.get_logger()
settings = get_settings()


def _auth_headers() -> Dict[str, str]:
    api_key = settings.balldontlie_api_key
    if not api_key:
        raise ConfigurationError("BallDontLie API key not set (BALLDONTLIE_API_KEY)")
    return {"Authorization": api_key}


def league_url(league: str, path: str) -> str:
    """Build an absolute endpoint URL for a league.

    Args:
        league: League key (nba, mlb, epl)
        path: Endpoint path such as "/teams"

    Returns:
        Absolute URL
    """
    prefix = BALLDONTLIE_PREFIXES[league]
    return f"{settings.balldontlie_base_url.rstrip('/')}{prefix}{path}"


def fetch_all_paginated(url: str, params: Optional[Dict[str, Any]] = None) -> List[dict]:
    """Fetch every page of a cursor-paginated endpoint.

    Pagination stops when there is no next cursor, or when a page's
    ``data`` field is not a list.

    Args:
        url: Endpoint URL
        params: Extra query parameters

    Returns:
        Concatenated ``data`` items from all pages
    """
    headers = _auth_headers()
    all_data: List[dict] = []
    next_cursor = None
    page = 1

    while True:
        query = dict(params or {})
        query["per_page"] = settings.page_size
        if next_cursor:
            query["cursor"] = next_cursor

        logger.debug("fetching_page", page=page, url=url)
        page_data = get_json(url, params=query, headers=headers)

        data = page_data.get("data") if isinstance(page_data, dict) else None
        if not isinstance(data, list):
            logger.warning("non_array_page_data", page=page, url=url)
            break

        all_data.extend(data)
        next_cursor = (page_data.get("meta") or {}).get("next_cursor")
        page += 1

        rate_limit()

        if not next_cursor:
            break

    logger.info("fetched_paginated", url=url, pages=page - 1, count=len(all_data))
    return all_data


def fetch_first_available(
    url: str,
    variants: Sequence[Tuple[str, Dict[str, Any]]]
) -> Tuple[List[dict], Optional[str]]:
    """Try parameter variants in order until one returns a list payload.

    Only the first page of the successful variant is used.

    Args:
        url: Endpoint URL
        variants: (label, params) pairs

    Returns:
        (items, label of the variant that worked) or ([], None)
    """
    headers = _auth_headers()

    for label, params in variants:
        try:
            payload = get_json(url, params=params or None, headers=headers)
        except (ApiError, requests.RequestException) as e:
            logger.warning("variant_fetch_failed", url=url, variant=label, error=str(e))
            continue

        data = payload.get("data") if isinstance(payload, dict) else None
        if isinstance(data, list):
            logger.info("variant_fetch_succeeded", url=url, variant=label, count=len(data))
            return data, label

        logger.warning("variant_unexpected_format", url=url, variant=label)

    logger.error("all_variants_failed", url=url)
    return [], None
