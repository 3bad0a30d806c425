from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from ..config import Settings
from ..console import log
from ..ledger.ledger import Ledger
from ..process import npm_invocation, run_and_capture
from ..schemas import BaselineResult
from ..utils import ensure_dir, read_json


def should_run_smoke(public: bool, root: Path, settings: Settings) -> bool:
    if public:
        return True
    if not (root / settings.ci_config).exists():
        return False
    try:
        manifest = read_json(root / settings.manifest)
    except Exception:  # noqa: BLE001
        return False
    if not isinstance(manifest, dict):
        return False
    scripts = manifest.get("scripts")
    return isinstance(scripts, dict) and bool(scripts.get(settings.smoke_script))


def _gate_plan(smoke: bool, settings: Settings) -> List[Tuple[str, List[str], str]]:
    plan = [
        ("validate", ["run", "validate"], "validate.txt"),
        ("test", ["test"], "test.txt"),
    ]
    if smoke:
        plan.append((settings.smoke_script, ["run", settings.smoke_script], "smoke.txt"))
    return plan


def run_baseline(
    out_dir: Path,
    public: bool,
    root: Path,
    settings: Settings,
    ledger: Optional[Ledger] = None,
) -> BaselineResult:
    baseline_dir = out_dir / "baseline"
    ensure_dir(baseline_dir)
    smoke = should_run_smoke(public, root, settings)
    result = BaselineResult(smoke_requested=smoke)
    for name, args, log_name in _gate_plan(smoke, settings):
        gate = run_and_capture(
            name,
            npm_invocation(args, settings),
            baseline_dir / log_name,
            cwd=root,
            tag=settings.log_tag,
        )
        result.gates.append(gate)
        if ledger is not None:
            ledger.append("GATE_END", gate.model_dump())
    if not smoke:
        log("Smoke skip (not requested)", settings.log_tag)
    return result
