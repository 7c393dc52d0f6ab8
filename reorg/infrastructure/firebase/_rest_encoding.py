"""Encode/decode Python values to/from Firestore REST API 'fields' format."""

import base64
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from reorg.shared.utils.datetime import ensure_utc

# Firestore returns nanosecond precision; datetime keeps microseconds.
_FRACTION_RE = re.compile(r"\.(\d{6})\d+")


class _ServerTimestamp:
    """Sentinel replaced by the commit time (REQUEST_TIME transform)."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


class Reference(str):
    """Document reference value (full resource name), kept distinct from plain strings."""


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


def _encode_value(v: Any) -> dict:
    if v is None:
        return {"nullValue": None}
    if isinstance(v, bool):
        return {"booleanValue": v}
    if isinstance(v, int):
        return {"integerValue": str(v)}
    if isinstance(v, float):
        return {"doubleValue": v}
    if isinstance(v, datetime):
        return {"timestampValue": ensure_utc(v).strftime("%Y-%m-%dT%H:%M:%S.%fZ")}
    if isinstance(v, Reference):
        return {"referenceValue": str(v)}
    if isinstance(v, str):
        return {"stringValue": v}
    if isinstance(v, bytes):
        return {"bytesValue": base64.standard_b64encode(v).decode("ascii")}
    if isinstance(v, GeoPoint):
        return {"geoPointValue": {"latitude": v.latitude, "longitude": v.longitude}}
    if isinstance(v, (list, tuple)):
        return {"arrayValue": {"values": [_encode_value(x) for x in v]}}
    if isinstance(v, dict):
        return {"mapValue": {"fields": {k: _encode_value(x) for k, x in v.items()}}}
    if isinstance(v, _ServerTimestamp):
        raise TypeError("SERVER_TIMESTAMP is only supported as a top-level field value")
    raise TypeError(f"Unsupported Firestore value type: {type(v)}")


def split_transforms(data: dict[str, Any]) -> tuple[dict[str, Any], list[str]]:
    """Separate top-level SERVER_TIMESTAMP fields from plain field values."""
    plain = {k: v for k, v in data.items() if not isinstance(v, _ServerTimestamp)}
    transforms = [k for k, v in data.items() if isinstance(v, _ServerTimestamp)]
    return plain, transforms


def encode_document(data: dict[str, Any]) -> dict:
    """Convert a Python dict to Firestore REST Document.fields format."""
    return {"fields": {k: _encode_value(v) for k, v in data.items()}}


def _decode_value(obj: dict) -> Any:
    if "nullValue" in obj:
        return None
    if "booleanValue" in obj:
        return obj["booleanValue"]
    if "integerValue" in obj:
        return int(obj["integerValue"])
    if "doubleValue" in obj:
        return float(obj["doubleValue"])
    if "timestampValue" in obj:
        raw = _FRACTION_RE.sub(r".\1", obj["timestampValue"])
        return datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if "stringValue" in obj:
        return obj["stringValue"]
    if "referenceValue" in obj:
        return Reference(obj["referenceValue"])
    if "bytesValue" in obj:
        return base64.standard_b64decode(obj["bytesValue"])
    if "geoPointValue" in obj:
        point = obj["geoPointValue"]
        return GeoPoint(point.get("latitude", 0.0), point.get("longitude", 0.0))
    if "arrayValue" in obj:
        vals = obj.get("arrayValue", {}).get("values") or []
        return [_decode_value(x) for x in vals]
    if "mapValue" in obj:
        fields = obj["mapValue"].get("fields") or {}
        return {k: _decode_value(x) for k, x in fields.items()}
    return None


def decode_document(fields: dict | None) -> dict:
    """Convert Firestore REST Document.fields to a Python dict."""
    if not fields:
        return {}
    return {k: _decode_value(v) for k, v in fields.items()}


_SIMPLE_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z_0-9]*$")


def field_path(name: str) -> str:
    """Quote a top-level field name for updateMask / fieldPath use."""
    if _SIMPLE_FIELD_RE.match(name):
        return name
    escaped = name.replace("\\", "\\\\").replace("`", "\\`")
    return f"`{escaped}`"
