from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..config import Settings
from ..console import log
from ..process import run_and_capture
from ..schemas import StepResult
from ..utils import ensure_dir


def find_snapshot_env(root: Path, settings: Settings) -> Optional[Path]:
    examples_dir = root / settings.examples_dir
    if not examples_dir.is_dir():
        return None
    candidates = sorted(
        entry.name
        for entry in examples_dir.iterdir()
        if entry.name.startswith(settings.snapshot_env_prefix)
        and entry.name.endswith(".json")
    )
    if not candidates:
        return None
    return examples_dir / candidates[0]


def run_snapshot(out_dir: Path, root: Path, settings: Settings) -> StepResult:
    snapshot_dir = out_dir / "snapshot"
    ensure_dir(snapshot_dir)
    cli_path = root / settings.snapshot_cli
    if not cli_path.exists():
        log("SKIP snapshot: node CLI missing", settings.log_tag)
        return StepResult(status="skipped", reason="missing CLI")

    command = [*settings.snapshot_runner, str(cli_path), "--out", str(snapshot_dir)]
    env_path = find_snapshot_env(root, settings)
    if env_path is not None:
        command.extend(["--env", str(env_path)])
    result = run_and_capture(
        "snapshot",
        command,
        snapshot_dir / "run.log",
        cwd=root,
        tag=settings.log_tag,
        quiet=True,
    )
    if not result.ok:
        detail = result.error or f"exit {result.exit_code}"
        log(f"Snapshot FAILED ({detail})", settings.log_tag)
        return StepResult(status="failed", reason="snapshot CLI error")
    log("Snapshot PASS", settings.log_tag)
    return StepResult(status="ok", output=str(snapshot_dir))
