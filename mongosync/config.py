# mongosync/config.py
import os
from dataclasses import dataclass
from typing import Optional

_TRUTHY = ("1", "true", "yes", "y", "on")


def _env_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in _TRUTHY


def _env_int(name: str) -> Optional[int]:
    v = os.getenv(name, "").strip()
    if not v:
        return None
    try:
        return int(v)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {v!r}") from None


# --- TUNABLES ---------------------------------------------------------------
@dataclass
class SyncConfig:
    # source mongodb uri, must name the database, e.g. mongodb://localhost:27017/app
    mongo_uri: Optional[str] = None
    # destination elasticsearch node, e.g. http://localhost:9200
    elasticsearch_uri: Optional[str] = None
    # index "users" collection as "user"
    singularize_name: bool = False
    # documents sampled per collection for schema probing, None = whole collection
    sample_size: Optional[int] = None
    es_user: Optional[str] = None
    es_pass: Optional[str] = None
    es_request_timeout: int = 120
    error_log: str = os.path.join("store", "errors.log")
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "SyncConfig":
        return cls(
            mongo_uri=os.getenv("MONGO_URI") or None,
            elasticsearch_uri=os.getenv("ELASTICSEARCH_URI") or None,
            singularize_name=_env_bool("SINGULARIZE_NAME"),
            sample_size=_env_int("SAMPLE_SIZE"),
            es_user=os.getenv("ES_USER") or None,
            es_pass=os.getenv("ES_PASS") or None,
            es_request_timeout=_env_int("ES_REQUEST_TIMEOUT") or 120,
            error_log=os.getenv("ERROR_LOG", os.path.join("store", "errors.log")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
# ----------------------------------------------------------------------------
