# mongosync/schema_infer.py
from datetime import datetime
from typing import Any, Dict, Iterable, List

from bson.binary import Binary
from bson.decimal128 import Decimal128
from bson.objectid import ObjectId
from bson.regex import Regex

from mongosync.models import FieldObservation, TypeObservation

UNDEFINED = "Undefined"


def bson_type_name(value: Any) -> str:
    # bool is an int subclass, check it first
    if value is None:
        return "Null"
    if isinstance(value, bool):
        return "Boolean"
    if isinstance(value, (int, float)):
        return "Number"
    if isinstance(value, str):
        return "String"
    if isinstance(value, datetime):
        return "Date"
    if isinstance(value, dict):
        return "Document"
    if isinstance(value, (list, tuple)):
        return "Array"
    if isinstance(value, ObjectId):
        return "ObjectID"
    if isinstance(value, Decimal128):
        return "Decimal128"
    if isinstance(value, (Binary, bytes)):
        return "Binary"
    if isinstance(value, Regex):
        return "BSONRegExp"
    return type(value).__name__


class _TypeStats:
    """Counts for one type of one field, plus the values needed to recurse into containers."""

    def __init__(self, name: str):
        self.name = name
        self.count = 0
        self.elements: List[Any] = []
        self.documents: List[Dict[str, Any]] = []

    def add(self, value: Any):
        self.count += 1
        if self.name == "Array":
            self.elements.extend(value)
        elif self.name == "Document":
            self.documents.append(value)

    def to_observation(self, total: int) -> TypeObservation:
        types = None
        fields = None
        if self.name == "Array":
            types = infer_value_types(self.elements)
        elif self.name == "Document":
            fields = infer_schema(self.documents)
        return TypeObservation(
            name=self.name,
            probability=self.count / total if total else 0.0,
            count=self.count,
            types=types,
            fields=fields,
        )


def infer_value_types(values: List[Any]) -> List[TypeObservation]:
    """
    Type observations over a flat list of values (array elements).
    Probabilities are relative to the number of values. Empty input gives [].
    """
    stats: Dict[str, _TypeStats] = {}
    for v in values:
        t = bson_type_name(v)
        stats.setdefault(t, _TypeStats(t)).add(v)
    return [s.to_observation(len(values)) for s in stats.values()]


def infer_schema(docs: Iterable[Dict[str, Any]]) -> List[FieldObservation]:
    """
    Probe a document sample into per-field type observations.

    Fields keep first-seen order, types keep first-seen order within a field.
    A field missing from some documents gets a trailing "Undefined" observation
    whose probability is the share of documents without it.
    """
    total = 0
    fields: Dict[str, Dict[str, _TypeStats]] = {}
    for d in docs:
        if not isinstance(d, dict):
            continue
        total += 1
        for k, v in d.items():
            t = bson_type_name(v)
            field_stats = fields.setdefault(k, {})
            field_stats.setdefault(t, _TypeStats(t)).add(v)

    out = []
    for name, field_stats in fields.items():
        observations = [s.to_observation(total) for s in field_stats.values()]
        present = sum(s.count for s in field_stats.values())
        if present < total:
            missing = total - present
            observations.append(TypeObservation(name=UNDEFINED, probability=missing / total, count=missing))
        out.append(FieldObservation(name=name, count=present, types=observations))
    return out
