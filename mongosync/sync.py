# mongosync/sync.py
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

import inflection

from mongosync.errors import BulkWriteError
from mongosync.mapping_generator import Singularizer, generate_index_mapping
from mongosync.models import CollectionSchema, IndexMapping
from mongosync.schema_compiler import compile_collection_schema
from mongosync.transformer import document_id, normalize_document

logger = logging.getLogger(__name__)


class SyncStage(str, Enum):
    DISCOVERING = "discovering"
    SCHEMA_PROBING = "schema_probing"
    MAPPING_BUILDING = "mapping_building"
    INDEX_RESETTING = "index_resetting"
    FETCHING = "fetching"
    NORMALIZING = "normalizing"
    BULK_WRITING = "bulk_writing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class CollectionJob:
    """One collection's pipeline. Jobs share the source and target handles but nothing else."""

    name: str
    stage: SyncStage = SyncStage.DISCOVERING
    schema: Optional[CollectionSchema] = None
    mapping: Optional[IndexMapping] = None
    written: int = 0

    @property
    def index(self) -> Optional[str]:
        return self.mapping.index if self.mapping else None


@dataclass
class SyncReport:
    jobs: List[CollectionJob] = field(default_factory=list)

    @property
    def total_written(self) -> int:
        return sum(j.written for j in self.jobs)


@contextmanager
def _stage(job: CollectionJob, stage: SyncStage):
    logger.debug("%s: %s -> %s", job.name, job.stage.value, stage.value)
    job.stage = stage
    try:
        yield
    except Exception:
        job.stage = SyncStage.FAILED
        raise


def build_bulk_body(index: str, docs: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Interleave one index action and one normalized document per source document."""
    body = []
    for doc in docs:
        action = {"_index": index}
        doc_id = document_id(doc)
        if doc_id is not None:
            action["_id"] = doc_id
        body.append({"index": action})
        body.append(normalize_document(doc))
    return body


def check_bulk_response(collection: str, resp: Dict[str, Any]):
    if resp.get("error"):
        raise BulkWriteError(collection, str(resp["error"]))
    if resp.get("errors"):
        failed = sum(1 for item in resp.get("items", []) if "error" in next(iter(item.values()), {}))
        logger.warning("%s: %d documents rejected by elasticsearch", collection, failed)


class SyncRun:
    """
    Full destructive copy of every source collection into its own index.

    source: MongoSource-like (list_collection_names, probe_schema, fetch_all,
            estimated_document_count)
    target: ElasticTarget-like (reset_index, bulk)
    """

    def __init__(
        self,
        source,
        target,
        singularize: bool = False,
        sample_size: Optional[int] = None,
        singularizer: Singularizer = inflection.singularize,
    ):
        self.source = source
        self.target = target
        self.singularize = singularize
        self.sample_size = sample_size
        self.singularizer = singularizer
        self.jobs: List[CollectionJob] = []

    # --- stages ---------------------------------------------------------------
    def discover(self) -> List[CollectionJob]:
        logger.info("Getting collections…")
        self.jobs = [CollectionJob(name=n) for n in self.source.list_collection_names()]
        return self.jobs

    def probe(self, job: CollectionJob):
        with _stage(job, SyncStage.SCHEMA_PROBING):
            logger.info(" Getting schema for %s…", job.name)
            observations = self.source.probe_schema(job.name, self.sample_size)
            job.schema = compile_collection_schema(job.name, observations)

    def build_mapping(self, job: CollectionJob):
        with _stage(job, SyncStage.MAPPING_BUILDING):
            job.mapping = generate_index_mapping(job.schema, self.singularize, self.singularizer)

    def reset_index(self, job: CollectionJob):
        with _stage(job, SyncStage.INDEX_RESETTING):
            logger.info(" Creating mapping for %s", job.index)
            self.target.reset_index(job.mapping)

    def load(self, job: CollectionJob):
        logger.info(" Syncing %s", job.name)
        with _stage(job, SyncStage.FETCHING):
            count = self.source.estimated_document_count(job.name)
            logger.info(" Estimated documents count: %s", count)
            docs = self.source.fetch_all(job.name)
        with _stage(job, SyncStage.NORMALIZING):
            body = build_bulk_body(job.index, docs)
        with _stage(job, SyncStage.BULK_WRITING):
            if body:
                resp = self.target.bulk(body, refresh=True)
                check_bulk_response(job.name, resp)
            job.written = len(body) // 2
        job.stage = SyncStage.DONE

    # --- driver ---------------------------------------------------------------
    def run(self) -> SyncReport:
        """
        Probe and map every collection before touching any index, then reset
        all indices, then load collections in discovery order. Fails fast.
        """
        self.discover()
        for job in self.jobs:
            self.probe(job)

        logger.info("Convert schema to elasticsearch mapping…")
        for job in self.jobs:
            self.build_mapping(job)

        logger.info("Creating elasticsearch index…")
        for job in self.jobs:
            self.reset_index(job)

        logger.info("Syncing mongodb collections to elasticsearch…")
        for job in self.jobs:
            self.load(job)
        return SyncReport(jobs=list(self.jobs))


def run_sync(source, target, singularize: bool = False, sample_size: Optional[int] = None, **kwargs) -> SyncReport:
    return SyncRun(source, target, singularize=singularize, sample_size=sample_size, **kwargs).run()
