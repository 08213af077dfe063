#!/usr/bin/env python3
"""
MongoDB -> Elasticsearch full resync.

- Probes every collection's schema from its documents
- Builds one Elasticsearch mapping per collection
- Drops and recreates each destination index
- Loads every document with a single bulk request per collection

Usage:
  mongo-elastic-sync -u mongodb://localhost:27017/app -e http://localhost:9200 [-s]
"""
import argparse
import logging
import sys
from typing import List, Optional

from mongosync.config import SyncConfig
from mongosync.errors import SyncError, log_exception
from mongosync.es_utils import ElasticTarget
from mongosync.mongo_utils import MongoSource
from mongosync.sync import SyncRun

__version__ = "0.1.0"

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

logger = logging.getLogger("mongosync")


def build_parser(cfg: SyncConfig) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="mongo-elastic-sync", description="Sync MongoDB documents to Elasticsearch")
    ap.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    ap.add_argument("-u", "--mongoUri", dest="mongo_uri", default=cfg.mongo_uri,
                    help="mongodb source (env MONGO_URI)")
    ap.add_argument("-e", "--elasticsearchUri", dest="elasticsearch_uri", default=cfg.elasticsearch_uri,
                    help="elasticsearch destination (env ELASTICSEARCH_URI)")
    ap.add_argument("-s", "--singularizeName", dest="singularize_name", action="store_true",
                    default=cfg.singularize_name, help="singularize document names in Elasticsearch")
    ap.add_argument("--sample-size", type=int, default=cfg.sample_size,
                    help="documents sampled per collection for schema probing (default: all)")
    ap.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default=cfg.log_level,
                    help=f"logging level (default {cfg.log_level})")
    return ap


def parse_config(argv: List[str], cfg: Optional[SyncConfig] = None) -> SyncConfig:
    if cfg is None:
        try:
            cfg = SyncConfig.from_env()
        except ValueError as e:
            build_parser(SyncConfig()).error(str(e))
    ap = build_parser(cfg)
    args = ap.parse_args(argv)
    # argparse does not check defaults against choices
    if args.log_level.upper() not in LOG_LEVELS:
        ap.error(f"invalid log level {args.log_level!r}, choose from {', '.join(LOG_LEVELS)}")
    if not args.mongo_uri:
        ap.error("You must specify a mongoUri")
    if not args.elasticsearch_uri:
        ap.error("You must specify an elasticsearchUri")
    cfg.mongo_uri = args.mongo_uri
    cfg.elasticsearch_uri = args.elasticsearch_uri
    cfg.singularize_name = args.singularize_name
    cfg.sample_size = args.sample_size
    cfg.log_level = args.log_level.upper()
    return cfg


def sync(cfg: SyncConfig) -> int:
    source = target = None
    try:
        logger.info("Connecting to source…")
        source = MongoSource.from_uri(cfg.mongo_uri)
        source.ping()
        logger.info("Connecting to destination…")
        target = ElasticTarget.from_uri(
            cfg.elasticsearch_uri,
            user=cfg.es_user,
            password=cfg.es_pass,
            request_timeout=cfg.es_request_timeout,
        )
        target.ping()

        report = SyncRun(source, target, singularize=cfg.singularize_name, sample_size=cfg.sample_size).run()
        logger.info("Synced %d collections, %d documents", len(report.jobs), report.total_written)
        return 0
    except SyncError as e:
        context = {"error_type": type(e).__name__, "collection": getattr(e, "collection", None)}
        err_id = log_exception(e, cfg.error_log, context)
        logger.error("%s (%s)", e, err_id)
        return 1
    finally:
        if source is not None:
            source.close()
        if target is not None:
            target.close()


def main(argv: List[str]) -> int:
    cfg = parse_config(argv)
    logging.basicConfig(level=cfg.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    return sync(cfg)


def run():
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
