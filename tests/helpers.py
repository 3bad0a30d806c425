from __future__ import annotations

import shutil
import sqlite3
import sys
from pathlib import Path
from typing import Any, Dict, List

from labinit.config import Settings

FIXTURES = Path(__file__).resolve().parent / "fixtures"
FAKE_NPM = FIXTURES / "fake_npm.py"
FAKE_SNAPSHOT = FIXTURES / "fake_snapshot.py"
ECHO_STREAMS = FIXTURES / "echo_streams.py"


def fake_settings(root: Path, **overrides: Any) -> Settings:
    values: Dict[str, Any] = {
        "repo_root": root,
        "npm_command": [sys.executable, str(FAKE_NPM)],
        "snapshot_runner": [sys.executable],
    }
    values.update(overrides)
    return Settings(**values)


def install_snapshot_cli(root: Path, settings: Settings) -> Path:
    target = root / settings.snapshot_cli
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(FAKE_SNAPSHOT, target)
    return target


def make_sqlite(path: Path, tables: Dict[str, List[Dict[str, Any]]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    try:
        for table, rows in tables.items():
            columns = list(rows[0].keys()) if rows else ["id"]
            conn.execute(f'CREATE TABLE "{table}" ({", ".join(columns)})')
            for row in rows:
                placeholders = ", ".join("?" for _ in columns)
                conn.execute(
                    f'INSERT INTO "{table}" ({", ".join(columns)}) VALUES ({placeholders})',
                    [row[col] for col in columns],
                )
        conn.commit()
    finally:
        conn.close()
    return path
