from __future__ import annotations

import json
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import orjson
from blake3 import blake3


def canonical_dumps(data: Any) -> bytes:
    return orjson.dumps(data, option=orjson.OPT_SORT_KEYS)


def pretty_dumps(data: Any) -> str:
    """Two-space indented JSON that keeps insertion order (column order for rows)."""
    return orjson.dumps(data, option=orjson.OPT_INDENT_2).decode("utf-8")


def compact_dumps(data: Any) -> str:
    return orjson.dumps(data).decode("utf-8")


def stable_hash(data: Any) -> str:
    return blake3(canonical_dumps(data)).hexdigest()


def hash_bytes(data: bytes) -> str:
    return blake3(data).hexdigest()


def now_ts_ns() -> int:
    return time.time_ns()


def format_stamp(now: Optional[datetime] = None) -> str:
    # local wall-clock fields, no timezone conversion
    moment = now or datetime.now()
    return (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d}_"
        f"{moment.hour:02d}-{moment.minute:02d}-{moment.second:02d}"
    )


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def read_json(path: Path) -> Any:
    return orjson.loads(path.read_bytes())


def write_jsonl_line(path: Path, data: Any) -> None:
    ensure_dir(path.parent)
    line = canonical_dumps(data) + b"\n"
    with path.open("ab") as handle:
        handle.write(line)


def read_jsonl(path: Path) -> list[Any]:
    if not path.exists():
        return []
    lines = path.read_bytes().splitlines()
    return [orjson.loads(line) for line in lines if line]


def to_jsonable(value: Any) -> Any:
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {str(key): to_jsonable(val) for key, val in value.items()}
    if isinstance(value, (int, str, bool, float)) or value is None:
        return value
    return json.loads(json.dumps(value, default=str))
