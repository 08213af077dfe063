# mongosync/errors.py
import datetime, json, logging, os, traceback, uuid
from typing import Optional


logger = logging.getLogger(__name__)


class SyncError(Exception):
    """Base for every failure that aborts a sync run."""


class SourceConnectionError(SyncError):
    pass


class TargetConnectionError(SyncError):
    pass


class SchemaProbeError(SyncError):
    def __init__(self, collection: str, reason: str):
        super().__init__(f"Error probing schema of {collection}: {reason}")
        self.collection = collection


class SourceReadError(SyncError):
    def __init__(self, collection: str, action: str, reason: str):
        super().__init__(f"Error {action} {collection}: {reason}")
        self.collection = collection


class IndexResetError(SyncError):
    def __init__(self, index: str, step: str, reason: str):
        super().__init__(f"Error resetting index {index} ({step}): {reason}")
        self.index = index
        self.step = step


class BulkWriteError(SyncError):
    def __init__(self, collection: str, reason: str):
        super().__init__(f"Error syncing {collection}: {reason}")
        self.collection = collection


def log_exception(exc: Exception, error_log: str, context: Optional[dict] = None) -> str:
    """Append traceback + context as one JSON line to error_log and return a unique id."""
    err_id = f"err_{uuid.uuid4().hex[:8]}"
    now = datetime.datetime.now(datetime.timezone.utc).isoformat().replace("+00:00", "Z")
    entry = {
        "id": err_id,
        "time": now,
        "context": context or {},
        "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        "exc_str": str(exc),
    }
    try:
        parent = os.path.dirname(error_log)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(error_log, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False) + "\n")
    except OSError:
        logger.warning("Failed to write error log %s", error_log)
    return err_id
