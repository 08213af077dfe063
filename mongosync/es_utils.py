# mongosync/es_utils.py
import base64
import logging
from typing import Any, Callable, Dict, List, Optional

from bson.decimal128 import Decimal128
from bson.objectid import ObjectId
from bson.regex import Regex
from elasticsearch import ApiError, Elasticsearch, TransportError
from elasticsearch.serializer import JsonSerializer, NdjsonSerializer

from mongosync.errors import IndexResetError, TargetConnectionError
from mongosync.models import IndexMapping

logger = logging.getLogger(__name__)


class BsonJsonSerializer(JsonSerializer):
    """JSON serializer that also encodes the BSON scalars pymongo returns, at any depth."""

    def default(self, data: Any) -> Any:
        if isinstance(data, ObjectId):
            return str(data)
        if isinstance(data, Decimal128):
            return self.default(data.to_decimal())
        # bson Binary is a bytes subclass
        if isinstance(data, bytes):
            return base64.b64encode(data).decode("ascii")
        if isinstance(data, Regex):
            return data.pattern
        return super().default(data)


class BsonNdjsonSerializer(BsonJsonSerializer, NdjsonSerializer):
    mimetype = "application/x-ndjson"


def bson_serializers() -> Dict[str, JsonSerializer]:
    return {
        "application/json": BsonJsonSerializer(),
        "application/x-ndjson": BsonNdjsonSerializer(),
    }


def _body(resp) -> Dict[str, Any]:
    # ObjectApiResponse wraps the decoded json in .body
    return getattr(resp, "body", resp)


class ElasticTarget:
    """Write side of the sync: index lifecycle and bulk loading over one shared client."""

    def __init__(self, es: Elasticsearch):
        self.es = es

    @classmethod
    def from_uri(
        cls,
        uri: str,
        user: Optional[str] = None,
        password: Optional[str] = None,
        request_timeout: int = 120,
    ) -> "ElasticTarget":
        kwargs = {"request_timeout": request_timeout, "serializers": bson_serializers()}
        if user:
            kwargs["basic_auth"] = (user, password or "")
        try:
            es = Elasticsearch(uri, **kwargs)
        except ValueError as e:
            raise TargetConnectionError(f"Invalid elasticsearch uri: {e}") from e
        return cls(es)

    def ping(self):
        if not self.es.ping():
            raise TargetConnectionError("Cannot reach elasticsearch")

    def index_exists(self, index: str) -> bool:
        return bool(self.es.indices.exists(index=index))

    def delete_index(self, index: str):
        self.es.indices.delete(index=index)

    def create_index(self, index: str):
        self.es.indices.create(index=index)

    def put_mapping(self, index: str, properties: Dict[str, Any]):
        self.es.indices.put_mapping(index=index, properties=properties)

    def reset_index(self, mapping: IndexMapping):
        """
        Drop the index if present, recreate it empty and apply the mapping.
        Not transactional: a failure after the delete leaves the index absent.
        """
        index = mapping.index

        def step(name: str, fn: Callable, *args):
            try:
                return fn(*args)
            except (ApiError, TransportError) as e:
                raise IndexResetError(index, name, str(e)) from e

        if step("exists", self.index_exists, index):
            logger.debug("Deleting existing index %s", index)
            step("delete", self.delete_index, index)
        step("create", self.create_index, index)
        step("put_mapping", self.put_mapping, index, dict(mapping.properties))

    def bulk(self, operations: List[Dict[str, Any]], refresh: bool = True) -> Dict[str, Any]:
        """
        Submit interleaved action/document pairs in one request.
        A rejected request is returned as its error body ({"error": ...}) rather than raised.
        """
        try:
            return _body(self.es.bulk(operations=operations, refresh=refresh))
        except ApiError as e:
            body = e.body if isinstance(e.body, dict) else {}
            return {"error": body.get("error") or str(e)}
        except TransportError as e:
            return {"error": str(e)}

    def close(self):
        self.es.close()
