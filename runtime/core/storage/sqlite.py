"""SQLite storage driver (local job record store).

This module provides a simple SQLite implementation behind the JobStore
interface. It stands in for the cluster API when running the operator
locally: records are Job documents keyed by (namespace, name), and label
selectors are evaluated against the stored labels.

The launcher never mutates a record after creation. `record_status` exists
for the executing side (and tests) to report success/failure counts.
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from contextlib import contextmanager
from copy import deepcopy
from pathlib import Path
from typing import Any, Iterator

from errors import ConflictError, NotFoundError, PolicyViolationError
from storage.interfaces import JobStore, LabelSelector
from utils import deep_get, format_rfc3339, json_dumps, utcnow


class SQLiteDatabase:
    def __init__(self, path: Path):
        self.path = path.resolve()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._migrate()

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(str(self.path), timeout=30, isolation_level=None)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _migrate(self) -> None:
        with self.connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_version (
                  version INTEGER NOT NULL
                );
                """
            )
            row = conn.execute("SELECT version FROM schema_version LIMIT 1;").fetchone()
            if row is None:
                conn.execute("INSERT INTO schema_version(version) VALUES (1);")
                version = 1
            else:
                version = int(row["version"])

            if version != 1:
                raise PolicyViolationError(f"Unsupported SQLite schema_version: {version}")

            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS jobs (
                  namespace TEXT NOT NULL,
                  name TEXT NOT NULL,
                  uid TEXT NOT NULL,
                  created_at TEXT NOT NULL,
                  doc_json TEXT NOT NULL,
                  PRIMARY KEY (namespace, name)
                );
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_jobs_namespace_created_at ON jobs(namespace, created_at);")


class SQLiteJobStore(JobStore):
    def __init__(self, db: SQLiteDatabase):
        self._db = db

    def list(self, namespace: str, selector: LabelSelector) -> list[dict[str, Any]]:
        with self._db.connect() as conn:
            rows = conn.execute(
                "SELECT doc_json FROM jobs WHERE namespace = ? ORDER BY created_at ASC, name ASC;",
                (namespace,),
            ).fetchall()
        docs = [json.loads(r["doc_json"]) for r in rows]
        return [d for d in docs if selector.matches(deep_get(d, ["metadata", "labels"]))]

    def create(self, namespace: str, job: dict[str, Any]) -> dict[str, Any]:
        name = deep_get(job, ["metadata", "name"])
        if not isinstance(name, str) or not name:
            raise PolicyViolationError("Job metadata.name is required")

        stored = deepcopy(job)
        metadata = stored.setdefault("metadata", {})
        metadata["namespace"] = namespace
        metadata["uid"] = str(uuid.uuid4())
        metadata["creationTimestamp"] = format_rfc3339(utcnow())
        stored.setdefault("status", {})

        with self._db.connect() as conn:
            try:
                conn.execute(
                    "INSERT INTO jobs(namespace, name, uid, created_at, doc_json) VALUES (?, ?, ?, ?, ?);",
                    (namespace, name, metadata["uid"], metadata["creationTimestamp"], json_dumps(stored)),
                )
            except sqlite3.IntegrityError as e:
                raise ConflictError(f"Job already exists: {namespace}/{name}") from e
        return stored

    def get(self, namespace: str, name: str) -> dict[str, Any]:
        with self._db.connect() as conn:
            row = conn.execute("SELECT doc_json FROM jobs WHERE namespace = ? AND name = ?;", (namespace, name)).fetchone()
            if row is None:
                raise NotFoundError("Job", f"{namespace}/{name}")
            return json.loads(row["doc_json"])

    def record_status(self, namespace: str, name: str, *, succeeded: int = 0, failed: int = 0) -> dict[str, Any]:
        job = self.get(namespace, name)
        status = job.setdefault("status", {})
        status["succeeded"] = int(succeeded)
        status["failed"] = int(failed)
        with self._db.connect() as conn:
            cur = conn.execute(
                "UPDATE jobs SET doc_json = ? WHERE namespace = ? AND name = ?;",
                (json_dumps(job), namespace, name),
            )
            if cur.rowcount != 1:
                raise NotFoundError("Job", f"{namespace}/{name}")
        return job


class SQLiteStores:
    """Convenience container for the stores backed by one SQLite file."""

    def __init__(self, sqlite_path: Path):
        db = SQLiteDatabase(sqlite_path)
        self.jobs = SQLiteJobStore(db)
