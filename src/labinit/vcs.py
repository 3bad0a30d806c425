from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List, Optional

UNKNOWN = "(unknown)"


def run_git(args: List[str], root: Path) -> Optional[str]:
    try:
        out = subprocess.run(
            ["git", *args],
            cwd=root,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return None
    if out.returncode != 0:
        return None
    return out.stdout.strip() or None


def current_branch(root: Path) -> str:
    return run_git(["branch", "--show-current"], root) or UNKNOWN


def current_commit(root: Path) -> str:
    return run_git(["rev-parse", "HEAD"], root) or UNKNOWN
