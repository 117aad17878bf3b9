from typing import Iterable, List

import requests
from requests.exceptions import RequestException

from runner.models import FeedError, Incident


HEADERS = {
    "User-Agent": "Mozilla/5.0 (ncdot-crash-notifier)",
    "Accept": "application/json",
}


def fetch_incidents(url: str, timeout_s: int = 15) -> List[Incident]:
    """
    Single GET against the incident feed. Every failure mode (transport,
    non-2xx, undecodable body, wrong shape) surfaces as FeedError so the
    caller can abort the run before touching persisted state.
    """
    try:
        r = requests.get(url, timeout=timeout_s, headers=HEADERS)
        r.raise_for_status()
    except RequestException as e:
        raise FeedError(f"fetch failed: {type(e).__name__}: {str(e)[:200]}") from e

    try:
        payload = r.json()
    except ValueError as e:
        raise FeedError(f"decode failed: {str(e)[:200]}") from e

    if not isinstance(payload, list):
        raise FeedError(f"expected JSON array, got {type(payload).__name__}")

    return [Incident.from_feed(item) for item in payload]


def filter_category(incidents: Iterable[Incident], category: str) -> List[Incident]:
    return [i for i in incidents if i.incident_type == category]
