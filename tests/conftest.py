"""Shared test fixtures for dagproof."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest

from dagproof.core.block_store import FileBlockStore, MemoryBlockStore, put_value
from dagproof.core.generator import ProofGenerator
from dagproof.models.identifier import ContentIdentifier


@dataclass(frozen=True)
class WorkedDag:
    """root -> [a, b, c]; b -> [d, e].

    Leaves hold string values no single bit flip can turn into one another.
    """

    store: MemoryBlockStore
    root: ContentIdentifier
    a: ContentIdentifier
    b: ContentIdentifier
    c: ContentIdentifier
    d: ContentIdentifier
    e: ContentIdentifier
    d_value: str = "delta"


@pytest.fixture
def store() -> MemoryBlockStore:
    """Provide an empty in-memory block store."""
    return MemoryBlockStore()


@pytest.fixture
def file_store(tmp_path: Path) -> FileBlockStore:
    """Provide a fresh FileBlockStore in a temp directory."""
    return FileBlockStore(tmp_path / "blocks")


@pytest.fixture
def worked_dag(store: MemoryBlockStore) -> WorkedDag:
    """Build the two-level example DAG in the memory store."""
    a = put_value(store, "alpha")
    c = put_value(store, "charlie")
    d = put_value(store, "delta")
    e = put_value(store, "echo")
    b = put_value(store, [d, e])
    root = put_value(store, [a, b, c])
    return WorkedDag(store=store, root=root, a=a, b=b, c=c, d=d, e=e)


@pytest.fixture
def generator(worked_dag: WorkedDag) -> ProofGenerator:
    """Provide a ProofGenerator over the worked example DAG."""
    return ProofGenerator(worked_dag.store)


class CountingStore:
    """Wraps a store and records every ``get``."""

    def __init__(self, inner: MemoryBlockStore) -> None:
        self.inner = inner
        self.reads: list[ContentIdentifier] = []

    def get(self, cid: ContentIdentifier) -> bytes:
        self.reads.append(cid)
        return self.inner.get(cid)

    def put(self, data, hash_algorithm=None, codec=None):
        return self.inner.put(data, hash_algorithm=hash_algorithm, codec=codec)

    def has(self, cid: ContentIdentifier) -> bool:
        return self.inner.has(cid)


@pytest.fixture
def counting_store(store: MemoryBlockStore) -> CountingStore:
    """Provide a read-recording wrapper around the memory store."""
    return CountingStore(store)
