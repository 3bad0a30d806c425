from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path
from typing import IO, List, Optional, Sequence

from .config import Settings
from .console import DEFAULT_TAG, log
from .schemas import GateResult
from .utils import ensure_dir


class FanOut:
    """Text sink that forwards every write to each destination in order."""

    def __init__(self, *destinations: IO[str]) -> None:
        self.destinations = list(destinations)

    def write(self, text: str) -> int:
        if not text:
            return 0
        for dest in self.destinations:
            dest.write(text)
            dest.flush()
        return len(text)


def npm_invocation(args: Sequence[str], settings: Settings) -> List[str]:
    if settings.npm_command:
        return [*settings.npm_command, *args]
    npm_execpath = os.environ.get("npm_execpath")
    if npm_execpath:
        return [settings.node_command, npm_execpath, *args]
    npm = "npm.cmd" if sys.platform == "win32" else "npm"
    return [npm, *args]


def run_and_capture(
    name: str,
    command: Sequence[str],
    log_path: Path,
    *,
    cwd: Path,
    tag: str = DEFAULT_TAG,
    quiet: bool = False,
) -> GateResult:
    if not quiet:
        log(f"Running {name}: {' '.join(command)}", tag)
    ensure_dir(log_path.parent)
    error: Optional[str] = None
    stdout = stderr = ""
    returncode: Optional[int] = None
    try:
        proc = subprocess.run(
            list(command),
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError as exc:
        error = str(exc)
    else:
        stdout = proc.stdout or ""
        stderr = proc.stderr or ""
        returncode = proc.returncode

    # log file gets stdout then stderr; the console keeps them on separate streams
    with log_path.open("w", encoding="utf-8", newline="") as handle:
        if not quiet:
            FanOut(handle, sys.stdout).write(stdout)
            FanOut(handle, sys.stderr).write(stderr)
        else:
            FanOut(handle).write(stdout + stderr)

    result = GateResult(
        name=name,
        ok=error is None and returncode == 0,
        log_path=str(log_path),
        exit_code=returncode,
        error=error,
    )
    if quiet:
        return result
    if error is not None:
        log(f"{name} ERROR: {error}", tag)
    elif returncode != 0:
        log(f"{name} FAILED (exit {returncode})", tag)
    else:
        log(f"{name} PASS", tag)
    return result
