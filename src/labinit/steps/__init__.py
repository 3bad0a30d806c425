from .baseline import run_baseline, should_run_smoke
from .context import restore_context
from .snapshot import run_snapshot

__all__ = ["restore_context", "run_baseline", "run_snapshot", "should_run_smoke"]
