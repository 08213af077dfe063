# mongosync/transformer.py
from datetime import datetime
from typing import Any, Dict, Optional

from dateutil import tz

IDENTITY_FIELD = "_id"
VERSION_FIELD = "__v"


def format_date(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2020-05-01T09:30:00.000Z."""
    if value.tzinfo is None:
        # pymongo hands back naive datetimes that are already UTC
        value = value.replace(tzinfo=tz.UTC)
    value = value.astimezone(tz.UTC)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _serialize_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return format_date(value)
    if isinstance(value, list):
        # elements are not rewritten
        return value
    if isinstance(value, dict):
        return serialize(value)
    return value


def serialize(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Rewrite dates in a document tree to ISO-8601 text. Returns a new dict.
    Other BSON scalars are left to the search client serializer.
    """
    return {k: _serialize_value(v) for k, v in data.items()}


def document_id(doc: Dict[str, Any]) -> Optional[str]:
    ident = doc.get(IDENTITY_FIELD)
    return str(ident) if ident is not None else None


def normalize_document(doc: Dict[str, Any]) -> Dict[str, Any]:
    """
    Index-ready copy of a source document: identity and version keys dropped
    at the top level only, then serialized. The input is not modified.
    """
    return serialize({k: v for k, v in doc.items() if k not in (IDENTITY_FIELD, VERSION_FIELD)})
