import json
from typing import Tuple

import requests

from runner.models import ClearedIncident, Incident


MAPS_URL = "https://www.google.com/maps?q={lat:.6f},{lon:.6f}&z=12"


def format_new_message(incident: Incident, started: str) -> str:
    return (
        "🚨 **Vehicle Crash Alert** 🚨\n\n"
        f"**Road:** {incident.road}\n"
        f"**City:** {incident.city}\n"
        f"**Location:** {incident.location}\n"
        f"**Reason:** {incident.reason}\n"
        f"**Started:** {started}\n"
        f"**Map Link:** [View on Google Maps]({MAPS_URL.format(lat=incident.latitude, lon=incident.longitude)})"
    )


def format_cleared_message(cleared: ClearedIncident) -> str:
    return (
        "✅ **Incident Cleared** ✅\n\n"
        f"**Road:** {cleared.road}\n"
        f"**Location:** {cleared.location}\n"
        f"**City:** {cleared.city}"
    )


def post_webhook(url: str, content: str, timeout_s: int = 20) -> Tuple[bool, str]:
    if not url:
        return False, "not_configured"
    try:
        resp = requests.post(
            url,
            headers={"Content-Type": "application/json"},
            data=json.dumps({"content": content}),
            timeout=timeout_s,
        )
    except requests.RequestException as e:
        return False, f"send_exception={type(e).__name__}:{str(e)[:200]}"
    if 200 <= resp.status_code < 300:
        return True, ""
    return False, f"webhook_status={resp.status_code} body={resp.text[:200]}"


class WebhookSink:
    """
    Chat webhook notifier. Both notify methods log failures themselves and
    hand back the (ok, err) pair; they never raise.
    """

    def __init__(self, url: str, timeout_s: int = 20):
        self.url = url
        self.timeout_s = timeout_s

    def notify_new(self, incident: Incident, started: str) -> Tuple[bool, str]:
        ok, err = post_webhook(self.url, format_new_message(incident, started), self.timeout_s)
        if not ok:
            print(f"NOTIFY_FAIL kind=new id={incident.id} err={err}")
        return ok, err

    def notify_cleared(self, cleared: ClearedIncident) -> Tuple[bool, str]:
        ok, err = post_webhook(self.url, format_cleared_message(cleared), self.timeout_s)
        if not ok:
            print(f"NOTIFY_FAIL kind=cleared id={cleared.id} err={err}")
        return ok, err
