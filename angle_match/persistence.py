from __future__ import annotations

import json
import logging
import os
import sqlite3
import time
from pathlib import Path

from .results import AttemptResult

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
RESULTS_DB_ENV = "ANGLE_MATCH_DB_PATH"


def default_db_path() -> Path:
    explicit = os.environ.get(RESULTS_DB_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / ".angle_match_results.sqlite3"


def open_db(path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(path)
    conn.execute("PRAGMA foreign_keys=ON;")
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    _migrate(conn)
    return conn


def _utc_now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(time.time()))


def _migrate(conn: sqlite3.Connection) -> None:
    row = conn.execute("PRAGMA user_version;").fetchone()
    ver = int(row[0]) if row else 0
    if ver >= SCHEMA_VERSION:
        return

    logger.info("Migrating results database from schema %d to %d", ver, SCHEMA_VERSION)
    with conn:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS session (
                id INTEGER PRIMARY KEY,
                created_at_utc TEXT NOT NULL
            );
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS attempt (
                id INTEGER PRIMARY KEY,
                session_id INTEGER NOT NULL REFERENCES session(id) ON DELETE CASCADE,
                test_code TEXT NOT NULL,
                test_version INTEGER NOT NULL,
                app_version TEXT NOT NULL,
                rng_seed INTEGER NOT NULL,
                profile TEXT NOT NULL,
                config_json TEXT NOT NULL,
                completed_at_utc TEXT NOT NULL
            );
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS metric (
                attempt_id INTEGER NOT NULL REFERENCES attempt(id) ON DELETE CASCADE,
                key TEXT NOT NULL,
                value TEXT NOT NULL,
                PRIMARY KEY (attempt_id, key)
            );
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS trial_event (
                id INTEGER PRIMARY KEY,
                attempt_id INTEGER NOT NULL REFERENCES attempt(id) ON DELETE CASCADE,
                seq INTEGER NOT NULL,
                target_angle REAL NOT NULL,
                selected_angle REAL NOT NULL,
                is_correct INTEGER NOT NULL,
                presented_at_ms INTEGER NOT NULL,
                answered_at_ms INTEGER NOT NULL,
                rt_ms INTEGER NOT NULL
            );
            """
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_trial_event_attempt_seq ON trial_event(attempt_id, seq);")
        conn.execute(f"PRAGMA user_version={SCHEMA_VERSION};")


def record_angle_matching_attempt(*, db_path: Path, result: AttemptResult, app_version: str) -> int:
    """
    Persist one finished run:
      session -> attempt -> metric + trial_event
    """
    conn = open_db(db_path)
    try:
        attempt_id = _insert_attempt(conn=conn, result=result, app_version=app_version)
    finally:
        conn.close()
    logger.info("Recorded attempt %d (%d trials) in %s", attempt_id, len(result.trials), db_path)
    return attempt_id


def _insert_attempt(*, conn: sqlite3.Connection, result: AttemptResult, app_version: str) -> int:
    now = _utc_now_iso()

    with conn:
        cur = conn.execute("INSERT INTO session(created_at_utc) VALUES (?)", (now,))
        session_id = int(cur.lastrowid)

        cur = conn.execute(
            """
            INSERT INTO attempt(
                session_id, test_code, test_version, app_version,
                rng_seed, profile, config_json, completed_at_utc
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                session_id,
                str(result.test_code),
                int(result.test_version),
                app_version,
                int(result.seed),
                str(result.config.profile.value),
                json.dumps(result.config.to_dict(), sort_keys=True),
                now,
            ),
        )
        attempt_id = int(cur.lastrowid)

        mean_rt = "" if result.mean_rt_ms is None else f"{result.mean_rt_ms:.3f}"
        median_rt = "" if result.median_rt_ms is None else f"{result.median_rt_ms:.3f}"
        metrics = {
            "attempted": str(result.attempted),
            "correct": str(result.correct),
            "accuracy": f"{result.accuracy:.6f}",
            "mean_rt_ms": mean_rt,
            "median_rt_ms": median_rt,
            "degraded_stimuli": ",".join(str(i) for i in result.degraded_stimuli),
        }
        for k, v in metrics.items():
            conn.execute("INSERT INTO metric(attempt_id, key, value) VALUES (?, ?, ?)", (attempt_id, k, v))

        for t in result.trials:
            conn.execute(
                """
                INSERT INTO trial_event(
                    attempt_id, seq, target_angle, selected_angle, is_correct,
                    presented_at_ms, answered_at_ms, rt_ms
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    attempt_id,
                    int(t.index),
                    float(t.target_angle),
                    float(t.selected_angle),
                    1 if t.correct else 0,
                    int(round(t.presented_at_s * 1000.0)),
                    int(round(t.answered_at_s * 1000.0)),
                    int(t.time_ms),
                ),
            )

    return attempt_id
