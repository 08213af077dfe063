# mongosync/models.py
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TypeTag(str, Enum):
    STRING = "String"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    DATE = "Date"
    GEO_POINT = "GeoPoint"
    UNKNOWN = "Unknown"

    @classmethod
    def from_name(cls, name: str) -> "TypeTag":
        """Map a probed BSON type name to a tag. GeoPoint is never probed directly."""
        if name in _PROBED_TAGS:
            return cls(name)
        return cls.UNKNOWN


_PROBED_TAGS = {"String", "Number", "Boolean", "Date"}


class TypeObservation(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    probability: float = Field(ge=0.0, le=1.0)
    count: int = 0
    # element observations, only for name == "Array"
    types: Optional[List[TypeObservation]] = None
    # nested fields, only for name == "Document"
    fields: Optional[List[FieldObservation]] = None


class FieldObservation(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    count: int = 0
    types: List[TypeObservation]


TypeObservation.model_rebuild()


class ResolvedField(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: TypeTag
    is_array: bool = False


class CollectionSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    fields: List[ResolvedField] = Field(default_factory=list)


class IndexMapping(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: str
    properties: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
