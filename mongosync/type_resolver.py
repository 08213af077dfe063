# mongosync/type_resolver.py
from typing import Sequence

from mongosync.models import TypeObservation, TypeTag
from mongosync.schema_infer import UNDEFINED

# fields only ever seen missing are treated as text
_ABSENT_FALLBACK = TypeObservation(name="String", probability=1.0)


def best_type(types: Sequence[TypeObservation]) -> TypeObservation:
    """
    Pick the most probable observed type, ignoring "Undefined".
    Ties go to the first observation in input order.
    """
    candidates = [t for t in types if t.name != UNDEFINED]
    if not candidates:
        return _ABSENT_FALLBACK
    # max() keeps the first of equal keys
    return max(candidates, key=lambda t: t.probability)


def resolve_type(types: Sequence[TypeObservation]) -> TypeTag:
    return TypeTag.from_name(best_type(types).name)
