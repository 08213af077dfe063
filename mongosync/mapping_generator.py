# mongosync/mapping_generator.py
import copy
from typing import Any, Callable, Dict, Optional

import inflection

from mongosync.models import CollectionSchema, IndexMapping, TypeTag

Singularizer = Callable[[str], str]

# identity, version key and the conventional id alias never get an explicit mapping
EXCLUDED_FIELDS = frozenset(("_id", "__v", "id"))

KEYWORD_IGNORE_ABOVE = 256

_INDEX_PROPERTIES: Dict[TypeTag, Optional[Dict[str, Any]]] = {
    TypeTag.STRING: {
        "type": "text",
        "fields": {"keyword": {"type": "keyword", "ignore_above": KEYWORD_IGNORE_ABOVE}},
    },
    TypeTag.NUMBER: {"type": "double"},
    TypeTag.BOOLEAN: {"type": "boolean"},
    TypeTag.DATE: {"type": "date"},
    TypeTag.GEO_POINT: {"type": "geo_point"},
    # left to Elasticsearch dynamic mapping
    TypeTag.UNKNOWN: None,
}


def index_property(tag: TypeTag) -> Optional[Dict[str, Any]]:
    prop = _INDEX_PROPERTIES[tag]
    if prop is None:
        return None
    return copy.deepcopy(prop)


def index_name(collection_name: str, singularize: bool, singularizer: Singularizer = inflection.singularize) -> str:
    if singularize:
        return singularizer(collection_name)
    return collection_name


def generate_index_mapping(
    schema: CollectionSchema,
    singularize: bool = False,
    singularizer: Singularizer = inflection.singularize,
) -> IndexMapping:
    """
    Translate a collection schema into an Elasticsearch mapping.
    Array fields map like their element type, Elasticsearch fields are multi-valued.
    """
    properties = {}
    for field in schema.fields:
        if field.name in EXCLUDED_FIELDS:
            continue
        prop = index_property(field.type)
        if prop is not None:
            properties[field.name] = prop
    return IndexMapping(
        index=index_name(schema.name, singularize, singularizer),
        properties=properties,
    )
