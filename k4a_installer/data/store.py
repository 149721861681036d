"""Local data store — SQLite at ~/.k4a-installer/data.db."""

from __future__ import annotations

import json
import os
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from k4a_installer.core.models import HostEnvironment, RunResult


_DEFAULT_DB_PATH = os.path.join(
    str(Path.home()), ".k4a-installer", "data.db"
)

CONFIG_DEFAULTS: dict[str, str] = {
    "variant": "dependencies",
    "work_dir": ".",
    "sdk_repo_url": "https://github.com/microsoft/Azure-Kinect-Sensor-SDK.git",
    "depthengine_url": (
        "https://www.nuget.org/api/v2/package/Microsoft.Azure.Kinect.Sensor/1.4.1"
    ),
}

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS runs (
    id TEXT PRIMARY KEY,
    started_at TEXT NOT NULL,
    finished_at TEXT,
    variant TEXT NOT NULL,
    os_version TEXT,
    architecture TEXT,
    is_root INTEGER DEFAULT 0,
    exit_code INTEGER,
    total_steps INTEGER,
    steps_completed INTEGER,
    failed_step INTEGER,
    fatal_category TEXT,
    tags TEXT
);

CREATE TABLE IF NOT EXISTS config (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class DataStore:
    """Local SQLite data store."""

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or _DEFAULT_DB_PATH
        os.makedirs(os.path.dirname(self.db_path), exist_ok=True)
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_db(self) -> None:
        conn = self._get_conn()
        conn.executescript(_SCHEMA)
        conn.executemany(
            "INSERT OR IGNORE INTO config (key, value) VALUES (?, ?)",
            list(CONFIG_DEFAULTS.items()),
        )
        conn.commit()

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    # ── Config ───────────────────────────────────────────────────────

    def get_config(self, key: str) -> Optional[str]:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT value FROM config WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None

    def set_config(self, key: str, value: str) -> None:
        conn = self._get_conn()
        conn.execute(
            "INSERT OR REPLACE INTO config (key, value) VALUES (?, ?)",
            (key, value),
        )
        conn.commit()

    # ── Runs ─────────────────────────────────────────────────────────

    def create_run(self, variant: str, environment: HostEnvironment) -> str:
        run_id = str(uuid.uuid4())
        conn = self._get_conn()
        conn.execute(
            """INSERT INTO runs
               (id, started_at, variant, os_version, architecture, is_root)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                run_id,
                datetime.now().isoformat(),
                variant,
                environment.os_version,
                environment.architecture,
                1 if environment.is_root else 0,
            ),
        )
        conn.commit()
        return run_id

    def complete_run(self, run_id: str, result: RunResult) -> None:
        conn = self._get_conn()
        conn.execute(
            """UPDATE runs SET
               finished_at = ?,
               exit_code = ?,
               total_steps = ?,
               steps_completed = ?,
               failed_step = ?,
               fatal_category = ?,
               tags = ?
               WHERE id = ?""",
            (
                datetime.now().isoformat(),
                result.exit_code,
                result.total_steps,
                result.steps_completed,
                result.failed_step,
                result.fatal_category.value if result.fatal_category else None,
                json.dumps([tag.name for tag in result.tags]),
                run_id,
            ),
        )
        conn.commit()

    def get_recent_runs(self, limit: int = 10) -> list[dict[str, Any]]:
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT * FROM runs ORDER BY started_at DESC LIMIT ?", (limit,)
        ).fetchall()
        result = []
        for row in rows:
            d = dict(row)
            d["tags"] = json.loads(d["tags"]) if d.get("tags") else []
            result.append(d)
        return result
