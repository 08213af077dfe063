"""Shared test fixtures: in-memory stand-ins for the MongoDB source and Elasticsearch target."""

from datetime import datetime
from pathlib import Path
import sys

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from mongosync.schema_infer import infer_schema  # noqa: E402


class FakeSource:
    """Collections held as lists of dicts, probed with the real schema inference."""

    def __init__(self, collections):
        self.collections = collections
        self.calls = []
        self.closed = False

    def list_collection_names(self):
        self.calls.append(("list",))
        return list(self.collections)

    def probe_schema(self, name, sample_size=None):
        self.calls.append(("probe", name, sample_size))
        docs = self.collections[name]
        if sample_size:
            docs = docs[:sample_size]
        return infer_schema(docs)

    def estimated_document_count(self, name):
        self.calls.append(("count", name))
        return len(self.collections[name])

    def fetch_all(self, name):
        self.calls.append(("fetch", name))
        return list(self.collections[name])

    def close(self):
        self.closed = True


class FakeTarget:
    """Records every index lifecycle and bulk call in order."""

    def __init__(self, existing=(), bulk_responses=None):
        self.indices = {name: {} for name in existing}
        self.calls = []
        self.bulk_requests = []
        self.bulk_responses = dict(bulk_responses or {})
        self.closed = False

    def reset_index(self, mapping):
        if mapping.index in self.indices:
            self.calls.append(("delete", mapping.index))
            del self.indices[mapping.index]
        self.calls.append(("create", mapping.index))
        self.indices[mapping.index] = {}
        self.calls.append(("put_mapping", mapping.index))
        self.indices[mapping.index] = dict(mapping.properties)

    def bulk(self, operations, refresh=True):
        index = operations[0]["index"]["_index"]
        self.calls.append(("bulk", index, refresh))
        self.bulk_requests.append(operations)
        return self.bulk_responses.get(index, {"errors": False, "items": []})

    def close(self):
        self.closed = True


@pytest.fixture
def signup_date():
    return datetime(2021, 3, 4, 5, 6, 7, 890000)


@pytest.fixture
def users_source(signup_date):
    return FakeSource({"users": [{"_id": "1", "name": "Ann", "age": 30, "signup": signup_date}]})


@pytest.fixture
def fake_target():
    return FakeTarget()


@pytest.fixture
def make_source():
    return FakeSource


@pytest.fixture
def make_target():
    return FakeTarget
