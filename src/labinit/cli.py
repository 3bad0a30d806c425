from __future__ import annotations

import traceback
from pathlib import Path
from typing import Optional

import typer

from .config import Settings
from .console import DEFAULT_TAG, console, log_error
from .ledger.ledger import LEDGER_FILENAME, Ledger
from .orchestrator import run_init
from .schemas import RunRequest
from .utils import read_json

HELP = """Prepare a lab session for this repository.

Steps:
  1. repo snapshot (node CLI)
  2. context restore (sqlite, if available)
  3. baseline gates (validate, test, optional smoke)
"""

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

app = typer.Typer(help=HELP, context_settings=CONTEXT_SETTINGS, add_completion=False)
ledger_app = typer.Typer(help="Run ledger commands", context_settings=CONTEXT_SETTINGS)

QUERY_OPTION = typer.Option(None, "--query", help="Substring to look for in memory rows.")
OUT_OPTION = typer.Option(None, "--out", help="Output directory (relative to repo root).")
PUBLIC_OPTION = typer.Option(False, "--public", help="Always run the smoke gate.")
REPO_ROOT_OPTION = typer.Option(None, "--repo-root", file_okay=False)
CONFIG_OPTION = typer.Option(None, "--config", exists=True, dir_okay=False)
RUN_DIR_REQUIRED_OPTION = typer.Option(..., "--run-dir", exists=True, file_okay=False)


def _load_settings(config: Optional[Path]) -> Settings:
    if config is None:
        return Settings()
    data = read_json(config)
    return Settings(**data)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    query: Optional[str] = QUERY_OPTION,
    out: Optional[Path] = OUT_OPTION,
    public: bool = PUBLIC_OPTION,
    repo_root: Optional[Path] = REPO_ROOT_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
) -> None:
    if ctx.invoked_subcommand is not None:
        return
    tag = DEFAULT_TAG
    try:
        settings = _load_settings(config)
        if repo_root is not None:
            settings = settings.model_copy(update={"repo_root": repo_root})
        tag = settings.log_tag
        summary = run_init(RunRequest(query=query, out=out, public=public), settings)
    except Exception:  # noqa: BLE001
        log_error(traceback.format_exc().rstrip(), tag)
        raise typer.Exit(code=1)
    if not summary.ok:
        raise typer.Exit(code=1)


@ledger_app.command("verify")
def ledger_verify_cmd(run_dir: Path = RUN_DIR_REQUIRED_OPTION) -> None:
    ok, message = Ledger.verify_chain(run_dir / LEDGER_FILENAME)
    console.print({"ok": ok, "message": message})
    if not ok:
        raise typer.Exit(code=1)


app.add_typer(ledger_app, name="ledger")
