"""SQLite-backed policy store.

Policies and execution logs are stored as JSON documents (camelCase, the same
shape the data API uses) with a few columns pulled out for filtering. Soft
deleted policies keep their row with ``deleted_at_iso`` set.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog

from syncops_lifecycle.exceptions import PolicyNotFoundError, PolicyStoreError
from syncops_lifecycle.models import PolicyExecutionLog, PolicySchedule, StorageLifecyclePolicy
from syncops_lifecycle.store.base import check_policy, soft_deleted, stamp_for_save

logger = structlog.get_logger()


_SCHEMA_VERSION = 1


class SqlitePolicyStore:
    """Implementation of the PolicyStore protocol on a local SQLite file."""

    def __init__(self, db_path: Path, *, enforce_priority_rules: bool = True) -> None:
        """Create a store.

        Args:
            db_path: Path to the SQLite database file.
            enforce_priority_rules: Check priority uniqueness and legal hold
                precedence when a policy is saved active.
        """

        self._db_path = db_path
        self._enforce_priority_rules = enforce_priority_rules

    def initialize(self) -> None:
        """Create or upgrade the store schema."""

        self._db_path.parent.mkdir(parents=True, exist_ok=True)

        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL;")

            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS _schema_meta (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );
                """
            )

            current_version = self._get_schema_version(conn)
            if current_version is None:
                self._create_schema_v1(conn)
                self._set_schema_version(conn, _SCHEMA_VERSION)
                conn.commit()
                logger.info("policy_store_schema_created", version=_SCHEMA_VERSION)
                return

            if current_version != _SCHEMA_VERSION:
                raise PolicyStoreError(
                    f"Unsupported schema version {current_version}; expected {_SCHEMA_VERSION}"
                )

    def list(
        self,
        organization_id: str | None = None,
        *,
        include_inactive: bool = True,
    ) -> list[StorageLifecyclePolicy]:
        clauses = ["deleted_at_iso IS NULL"]
        params: list[object] = []
        if organization_id is not None:
            clauses.append("organization_id = ?")
            params.append(organization_id)
        if not include_inactive:
            clauses.append("is_active = 1")

        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT record_json
                FROM policies
                WHERE {" AND ".join(clauses)}
                ORDER BY rowid ASC;
                """,
                params,
            ).fetchall()

        return [StorageLifecyclePolicy.model_validate_json(row["record_json"]) for row in rows]

    def get(self, policy_id: str) -> StorageLifecyclePolicy | None:
        with self._connect() as conn:
            policy = self._fetch(conn, policy_id)
        if policy is None or policy.is_deleted:
            return None
        return policy

    def save(self, policy: StorageLifecyclePolicy, *, validate: bool = True) -> StorageLifecyclePolicy:
        with self._connect() as conn:
            existing = self._fetch(conn, policy.id)
            if existing is not None and existing.is_deleted:
                raise PolicyNotFoundError(f"Policy {policy.id} has been deleted")

            if validate:
                rows = conn.execute(
                    """
                    SELECT record_json
                    FROM policies
                    WHERE organization_id = ? AND deleted_at_iso IS NULL;
                    """,
                    (policy.organization_id,),
                ).fetchall()
                siblings = [StorageLifecyclePolicy.model_validate_json(r["record_json"]) for r in rows]
                check_policy(policy, siblings, enforce_priority_rules=self._enforce_priority_rules)

            stored = stamp_for_save(policy, existing)
            self._upsert(conn, stored)
            conn.commit()

        logger.info("policy_saved", policy_id=stored.id, version=stored.version, active=stored.is_active)
        return stored

    def delete(self, policy_id: str) -> None:
        with self._connect() as conn:
            policy = self._fetch(conn, policy_id)
            if policy is None or policy.is_deleted:
                raise PolicyNotFoundError(f"Unknown policy_id: {policy_id}")
            self._upsert(conn, soft_deleted(policy))
            conn.commit()
        logger.info("policy_deleted", policy_id=policy_id)

    def set_active(self, policy_id: str, active: bool) -> StorageLifecyclePolicy:
        policy = self.get(policy_id)
        if policy is None:
            raise PolicyNotFoundError(f"Unknown policy_id: {policy_id}")
        return self.save(policy.model_copy(update={"is_active": active}), validate=active)

    def update_schedule(self, policy_id: str, schedule: PolicySchedule) -> StorageLifecyclePolicy:
        with self._connect() as conn:
            policy = self._fetch(conn, policy_id)
            if policy is None or policy.is_deleted:
                raise PolicyNotFoundError(f"Unknown policy_id: {policy_id}")
            updated = policy.model_copy(update={"schedule": schedule})
            self._upsert(conn, updated)
            conn.commit()
        return updated

    def append_log(self, log: PolicyExecutionLog) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO execution_logs (id, policy_id, executed_at_iso, record_json)
                VALUES (?, ?, ?, ?);
                """,
                (log.id, log.policy_id, log.executed_at.isoformat(), log.model_dump_json(by_alias=True)),
            )
            conn.commit()

    def list_logs(self, policy_id: str | None = None, limit: int = 50) -> list[PolicyExecutionLog]:
        where = ""
        params: list[object] = []
        if policy_id is not None:
            where = "WHERE policy_id = ?"
            params.append(policy_id)
        params.append(limit)

        with self._connect() as conn:
            rows = conn.execute(
                f"""
                SELECT record_json
                FROM execution_logs
                {where}
                ORDER BY executed_at_iso DESC, rowid DESC
                LIMIT ?;
                """,
                params,
            ).fetchall()

        return [PolicyExecutionLog.model_validate_json(row["record_json"]) for row in rows]

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            raise PolicyStoreError(f"Cannot open policy store {self._db_path}: {exc}") from exc
        try:
            conn.row_factory = sqlite3.Row
            yield conn
        finally:
            conn.close()

    def _fetch(self, conn: sqlite3.Connection, policy_id: str) -> StorageLifecyclePolicy | None:
        row = conn.execute(
            "SELECT record_json FROM policies WHERE id = ?",
            (policy_id,),
        ).fetchone()
        if row is None:
            return None
        return StorageLifecyclePolicy.model_validate_json(row["record_json"])

    def _upsert(self, conn: sqlite3.Connection, policy: StorageLifecyclePolicy) -> None:
        conn.execute(
            """
            INSERT INTO policies (
                id,
                organization_id,
                priority,
                is_active,
                deleted_at_iso,
                updated_at_iso,
                record_json
            )
            VALUES (
                :id,
                :organization_id,
                :priority,
                :is_active,
                :deleted_at_iso,
                :updated_at_iso,
                :record_json
            )
            ON CONFLICT(id) DO UPDATE SET
                organization_id=excluded.organization_id,
                priority=excluded.priority,
                is_active=excluded.is_active,
                deleted_at_iso=excluded.deleted_at_iso,
                updated_at_iso=excluded.updated_at_iso,
                record_json=excluded.record_json
            """,
            {
                "id": policy.id,
                "organization_id": policy.organization_id,
                "priority": policy.priority,
                "is_active": 1 if policy.is_active else 0,
                "deleted_at_iso": policy.deleted_at.isoformat() if policy.deleted_at else None,
                "updated_at_iso": policy.updated_at.isoformat() if policy.updated_at else None,
                "record_json": policy.model_dump_json(by_alias=True),
            },
        )

    def _get_schema_version(self, conn: sqlite3.Connection) -> int | None:
        row = conn.execute(
            "SELECT value FROM _schema_meta WHERE key = 'schema_version'"
        ).fetchone()
        if row is None:
            return None
        return int(row[0])

    def _set_schema_version(self, conn: sqlite3.Connection, version: int) -> None:
        conn.execute(
            "INSERT OR REPLACE INTO _schema_meta(key, value) VALUES('schema_version', ?) ",
            (str(version),),
        )

    def _create_schema_v1(self, conn: sqlite3.Connection) -> None:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS policies (
                rowid INTEGER PRIMARY KEY,
                id TEXT NOT NULL UNIQUE,
                organization_id TEXT NOT NULL,
                priority INTEGER NOT NULL,
                is_active INTEGER NOT NULL,
                deleted_at_iso TEXT,
                updated_at_iso TEXT,
                record_json TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_policies_organization
                ON policies(organization_id, deleted_at_iso);

            CREATE TABLE IF NOT EXISTS execution_logs (
                rowid INTEGER PRIMARY KEY,
                id TEXT NOT NULL UNIQUE,
                policy_id TEXT NOT NULL,
                executed_at_iso TEXT NOT NULL,
                record_json TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_execution_logs_policy
                ON execution_logs(policy_id, executed_at_iso);
            """
        )
