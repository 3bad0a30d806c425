from __future__ import annotations

from rich.console import Console

DEFAULT_TAG = "[lab:init]"

# Plain lines: the tag looks like rich markup and paths must not wrap.
console = Console(markup=False, emoji=False, highlight=False, soft_wrap=True)
err_console = Console(
    stderr=True, markup=False, emoji=False, highlight=False, soft_wrap=True
)


def log(message: str, tag: str = DEFAULT_TAG) -> None:
    console.print(f"{tag} {message}")


def log_error(message: str, tag: str = DEFAULT_TAG) -> None:
    err_console.print(f"{tag} ERROR {message}")
