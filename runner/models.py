from dataclasses import dataclass, fields
from typing import Any, Dict


class FeedError(RuntimeError):
    pass


# feed key -> dataclass field
FEED_KEYS = {
    "id": "id",
    "latitude": "latitude",
    "longitude": "longitude",
    "commonName": "common_name",
    "reason": "reason",
    "condition": "condition",
    "incidentType": "incident_type",
    "severity": "severity",
    "direction": "direction",
    "location": "location",
    "countyId": "county_id",
    "countyName": "county_name",
    "city": "city",
    "start": "start_time",
    "end": "end_time",
    "lastUpdate": "last_update",
    "road": "road",
    "routeId": "route_id",
    "lanesClosed": "lanes_closed",
    "lanesTotal": "lanes_total",
    "detour": "detour",
    "crossStreetPrefix": "cross_street_prefix",
    "crossStreetNumber": "cross_street_number",
    "crossStreetSuffix": "cross_street_suffix",
    "crossStreetCommonName": "cross_street_common_name",
    "event": "event",
    "createdFromConcurrent": "created_from_concurrent",
    "movableConstruction": "movable_construction",
    "workZoneSpeedLimit": "work_zone_speed_limit",
}


@dataclass(frozen=True)
class Incident:
    id: int = 0
    latitude: float = 0.0
    longitude: float = 0.0
    common_name: str = ""
    reason: str = ""
    condition: str = ""
    incident_type: str = ""
    severity: int = 0
    direction: str = ""
    location: str = ""
    county_id: int = 0
    county_name: str = ""
    city: str = ""
    start_time: str = ""
    end_time: str = ""
    last_update: str = ""
    road: str = ""
    route_id: int = 0
    lanes_closed: int = 0
    lanes_total: int = 0
    detour: str = ""
    cross_street_prefix: str = ""
    cross_street_number: int = 0
    cross_street_suffix: str = ""
    cross_street_common_name: str = ""
    event: str = ""
    created_from_concurrent: bool = False
    movable_construction: str = ""
    work_zone_speed_limit: int = 0

    @classmethod
    def from_feed(cls, raw: Dict[str, Any]) -> "Incident":
        """
        Build an Incident from one feed object. Missing or null keys fall back
        to the field default, id included (0), so such records still reach the
        category filter. A value of the wrong JSON type raises FeedError.
        """
        if not isinstance(raw, dict):
            raise FeedError(f"incident is not an object: {type(raw).__name__}")
        raw_id = raw.get("id")
        if raw_id is not None and (isinstance(raw_id, bool) or not isinstance(raw_id, int)):
            raise FeedError(f"incident id not an integer: {raw_id!r}")

        types = {f.name: f.type for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, name in FEED_KEYS.items():
            val = raw.get(key)
            if val is None:
                continue
            values[name] = _coerce(types[name], val, key)
        return cls(**values)

    def as_row(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _coerce(type_name, val: Any, key: str) -> Any:
    # annotations are strings only under postponed evaluation; handle both
    kind = type_name if isinstance(type_name, str) else type_name.__name__
    try:
        if kind == "int":
            if isinstance(val, float) and not val.is_integer():
                raise ValueError(val)
            return int(val)
        if kind == "float":
            return float(val)
        if kind == "bool":
            if not isinstance(val, bool):
                raise TypeError(val)
            return val
        return str(val)
    except (TypeError, ValueError) as e:
        raise FeedError(f"bad value for {key}: {val!r}") from e


@dataclass(frozen=True)
class ClearedIncident:
    id: int
    road: str = ""
    location: str = ""
    city: str = ""
