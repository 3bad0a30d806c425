from __future__ import annotations

import importlib
from contextlib import closing
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, List, Optional

from ..artifact_store import ArtifactStore
from ..config import Settings
from ..console import log
from ..ledger.ledger import Ledger
from ..schemas import MatchRecord, StepResult
from ..utils import compact_dumps, pretty_dumps, to_jsonable

JSON_REPORT = "context_restore.json"
MD_REPORT = "context_restore.md"
TABLES_SQL = "SELECT name FROM sqlite_master WHERE type='table'"


@dataclass(frozen=True)
class Engine:
    """Result of loading the optional SQL engine; ``module`` is None when unavailable."""

    name: str
    module: Optional[ModuleType] = None
    reason: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.module is not None


def load_engine(name: str) -> Engine:
    try:
        module = importlib.import_module(name)
    except ImportError as exc:
        return Engine(name=name, reason=str(exc))
    return Engine(name=name, module=module)


def find_sqlite_files(root: Path, settings: Settings) -> List[Path]:
    memory_dir = root / settings.memory_dir
    if not memory_dir.is_dir():
        return []
    return sorted(
        (entry for entry in memory_dir.iterdir() if entry.name.lower().endswith(".sqlite")),
        key=lambda entry: entry.name,
    )


def _relpath(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def _quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _row_matches(entry: Dict[str, Any], query_lower: str) -> bool:
    if not query_lower:
        return True
    return query_lower in compact_dumps(entry).lower()


class _Scan:
    def __init__(self, db_api: ModuleType, root: Path, query: str, settings: Settings) -> None:
        self.db_api = db_api
        self.root = root
        self.query_lower = query.lower()
        self.row_limit = settings.row_limit
        self.match_limit = settings.match_limit
        self.tag = settings.log_tag
        self.matches: List[MatchRecord] = []
        self.skipped: List[str] = []

    @property
    def full(self) -> bool:
        return len(self.matches) >= self.match_limit

    def run(self, files: List[Path]) -> None:
        for path in files:
            self.scan_file(path)
            if self.full:
                break

    def scan_file(self, path: Path) -> None:
        db_api = self.db_api
        source = _relpath(path, self.root)
        uri = f"{path.resolve().as_uri()}?mode=ro"
        try:
            conn = db_api.connect(uri, uri=True)
        except db_api.Error as exc:
            self._skip_file(source, exc)
            return
        with closing(conn):
            try:
                tables = [row[0] for row in conn.execute(TABLES_SQL).fetchall()]
            except db_api.Error as exc:
                self._skip_file(source, exc)
                return
            for table in tables:
                try:
                    self.scan_table(conn, source, table)
                except db_api.Error as exc:
                    log(f"Context restore: skip {source} :: {table} ({exc})", self.tag)
                    self.skipped.append(f"{source} :: {table}")
                if self.full:
                    return

    def _skip_file(self, source: str, exc: Exception) -> None:
        log(f"Context restore: unreadable {source} ({exc})", self.tag)
        self.skipped.append(f"{source} :: *")

    def scan_table(self, conn: Any, source: str, table: str) -> None:
        cursor = conn.execute(
            f"SELECT * FROM {_quote_identifier(table)} ORDER BY rowid DESC LIMIT ?",
            (self.row_limit,),
        )
        columns = [column[0] for column in cursor.description]
        for values in cursor.fetchall():
            entry = {col: to_jsonable(value) for col, value in zip(columns, values)}
            if not _row_matches(entry, self.query_lower):
                continue
            self.matches.append(MatchRecord(sqlite=source, table=table, entry=entry))
            if self.full:
                return


def render_markdown(query: str, matches: List[MatchRecord]) -> str:
    lines = ["# Context Restore", f"Query: `{query}`", ""]
    if not matches:
        lines.append("No matching rows found (limited scan).")
    for match in matches:
        lines.append(f"- {match.sqlite} :: {match.table}")
        lines.append("```json")
        lines.append(pretty_dumps(match.entry))
        lines.append("```")
        lines.append("")
    return "\n".join(lines)


def _write_skip(store: ArtifactStore, summary: StepResult, note: str) -> StepResult:
    store.write_json(JSON_REPORT, summary.report(), kind="context_report")
    store.write_text(MD_REPORT, f"# Context Restore\n\nSKIP: {note}", kind="context_markdown")
    return summary


def restore_context(
    out_dir: Path,
    query: str,
    root: Path,
    settings: Settings,
    ledger: Optional[Ledger] = None,
) -> StepResult:
    store = ArtifactStore(out_dir, ledger)
    sqlite_files = find_sqlite_files(root, settings)
    if not sqlite_files:
        summary = StepResult(
            status="skipped",
            reason=f"No {settings.memory_dir}/*.sqlite files detected",
        )
        log("Context restore SKIP (no sqlite)", settings.log_tag)
        return _write_skip(store, summary, "no SQLite memory snapshot found.")

    engine = load_engine(settings.sqlite_engine)
    if engine.module is None:
        summary = StepResult(
            status="skipped",
            reason=f"{engine.name} not available ({engine.reason})",
        )
        log(f"Context restore SKIP ({engine.name} missing)", settings.log_tag)
        return _write_skip(store, summary, f"{engine.name} dependency missing.")

    scan = _Scan(engine.module, root, query, settings)
    scan.run(sqlite_files)

    summary = StepResult(
        status="ok",
        query=query,
        matches=scan.matches,
        skipped_tables=scan.skipped or None,
    )
    store.write_json(JSON_REPORT, summary.report(), kind="context_report")
    store.write_text(MD_REPORT, render_markdown(query, scan.matches), kind="context_markdown")
    log(f"Context restore {'PASS' if scan.matches else 'PASS (no hits)'}", settings.log_tag)
    return summary
