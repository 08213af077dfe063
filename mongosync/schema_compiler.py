# mongosync/schema_compiler.py
import logging
from typing import List, Optional

from mongosync.models import CollectionSchema, FieldObservation, ResolvedField, TypeObservation, TypeTag
from mongosync.type_resolver import best_type, resolve_type

logger = logging.getLogger(__name__)

GEO_POINT_KEYS = frozenset(("lat", "lon"))


def _is_geo_point(doc_type: TypeObservation) -> bool:
    names = [f.name for f in (doc_type.fields or [])]
    return len(names) == 2 and set(names) == GEO_POINT_KEYS


def compile_field(field: FieldObservation) -> Optional[ResolvedField]:
    """
    Resolve one probed field. Returns None for nested documents that are not
    a {lat, lon} pair; those are not indexed.
    """
    t = best_type(field.types)
    if t.name == "Array":
        return ResolvedField(name=field.name, type=resolve_type(t.types or []), is_array=True)
    if t.name == "Document":
        if _is_geo_point(t):
            return ResolvedField(name=field.name, type=TypeTag.GEO_POINT)
        logger.debug("Dropping nested document field %s", field.name)
        return None
    return ResolvedField(name=field.name, type=TypeTag.from_name(t.name))


def compile_collection_schema(name: str, fields: List[FieldObservation]) -> CollectionSchema:
    """
    Build the per-collection schema from probe output, keeping input field order.
    Unknown types are kept; the mapping generator decides what to leave out.
    """
    resolved = []
    for f in fields:
        rf = compile_field(f)
        if rf is not None:
            resolved.append(rf)
    return CollectionSchema(name=name, fields=resolved)
