from __future__ import annotations

from pathlib import Path
from typing import Optional

from .artifact_store import ArtifactStore
from .config import Settings
from .console import log
from .ledger.ledger import Ledger
from .schemas import RunRequest, RunSummary
from .steps import restore_context, run_baseline, run_snapshot
from .utils import ensure_dir, format_stamp
from .vcs import current_branch, current_commit

ROOT_MARKERS = ("package.json", ".git")


def find_repo_root(start: Path) -> Path:
    for parent in [start] + list(start.parents):
        if any((parent / marker).exists() for marker in ROOT_MARKERS):
            return parent
    return start


def resolve_root(settings: Settings) -> Path:
    if settings.repo_root is not None:
        return Path(settings.repo_root).resolve()
    return find_repo_root(Path.cwd().resolve())


def resolve_out_dir(request: RunRequest, root: Path, settings: Settings, stamp: str) -> Path:
    if request.out is None:
        return root / settings.init_runs_dir / stamp
    out = Path(request.out)
    if out.is_absolute():
        return out
    return root / out


def run_init(
    request: RunRequest,
    settings: Settings,
    stamp: Optional[str] = None,
) -> RunSummary:
    root = resolve_root(settings)
    query = request.query or settings.default_query
    out_dir = resolve_out_dir(request, root, settings, stamp or format_stamp())
    ensure_dir(out_dir)
    tag = settings.log_tag

    branch = current_branch(root)
    commit = current_commit(root)
    log(f"Repo root: {root}", tag)
    log(f"Branch: {branch}", tag)
    log(f"Commit: {commit}", tag)
    log(f"Output dir: {out_dir}", tag)

    ledger = Ledger.for_run(out_dir)
    ledger.append(
        "RUN_START",
        {
            "repo_root": root,
            "branch": branch,
            "commit": commit,
            "out_dir": out_dir,
            "query": query,
            "public": request.public,
        },
    )

    snapshot = run_snapshot(out_dir, root, settings)
    ledger.append("STEP_END", {"step": "snapshot", **snapshot.report()})

    context = restore_context(out_dir / "context", query, root, settings, ledger)
    ledger.append(
        "STEP_END",
        {
            "step": "context",
            "status": context.status,
            "reason": context.reason,
            "match_count": len(context.matches or []),
        },
    )

    baseline = run_baseline(out_dir, request.public, root, settings, ledger)

    summary = RunSummary(
        ok=baseline.ok,
        repo_root=str(root),
        out_dir=str(out_dir),
        branch=branch,
        commit=commit,
        query=query,
        snapshot=snapshot,
        context=context,
        baseline=baseline,
    )
    ArtifactStore(out_dir, ledger).write_json("run_summary.json", summary.report(), kind="run_summary")
    ledger.append("RUN_END", {"ok": summary.ok})

    if summary.ok:
        log("lab:init PASS", tag)
    else:
        log("lab:init completed with failures.", tag)
    return summary
