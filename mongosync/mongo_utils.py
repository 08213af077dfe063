# mongosync/mongo_utils.py
import logging
from typing import Any, Dict, List, Optional

from pymongo import MongoClient, errors

from mongosync.errors import SchemaProbeError, SourceConnectionError, SourceReadError
from mongosync.models import FieldObservation
from mongosync.schema_infer import infer_schema

logger = logging.getLogger(__name__)


class MongoSource:
    """
    Read side of the sync: one shared client and database handle for the whole run.
    uri must carry the database name, e.g. "mongodb://localhost:27017/app".
    """

    def __init__(self, client: MongoClient, db_name: Optional[str] = None):
        self.client = client
        try:
            self.db = client[db_name] if db_name else client.get_default_database()
        except errors.ConfigurationError as e:
            raise SourceConnectionError(f"No database in mongodb uri: {e}") from e

    @classmethod
    def from_uri(cls, uri: str, **kwargs) -> "MongoSource":
        try:
            client = MongoClient(uri, **kwargs)
        except errors.PyMongoError as e:
            raise SourceConnectionError(f"Invalid mongodb uri: {e}") from e
        return cls(client)

    def ping(self):
        try:
            self.client.admin.command("ping")
        except errors.PyMongoError as e:
            raise SourceConnectionError(f"Cannot reach mongodb: {e}") from e

    def list_collection_names(self) -> List[str]:
        try:
            return list(self.db.list_collection_names())
        except errors.PyMongoError as e:
            raise SourceConnectionError(f"Cannot list collections: {e}") from e

    def probe_schema(self, name: str, sample_size: Optional[int] = None) -> List[FieldObservation]:
        coll = self.db[name]
        try:
            if sample_size:
                cursor = coll.aggregate([{"$sample": {"size": sample_size}}])
            else:
                cursor = coll.find()
            return infer_schema(cursor)
        except errors.PyMongoError as e:
            raise SchemaProbeError(name, str(e)) from e

    def estimated_document_count(self, name: str) -> int:
        try:
            return self.db[name].estimated_document_count()
        except errors.PyMongoError as e:
            raise SourceReadError(name, "counting", str(e)) from e

    def fetch_all(self, name: str) -> List[Dict[str, Any]]:
        # whole collection in memory
        try:
            return list(self.db[name].find())
        except errors.PyMongoError as e:
            raise SourceReadError(name, "fetching", str(e)) from e

    def close(self):
        self.client.close()
