from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LAB_INIT_")

    repo_root: Optional[Path] = None
    default_query: str = "infra"
    row_limit: int = 25
    match_limit: int = 50
    log_tag: str = "[lab:init]"

    examples_dir: str = "lab/examples"
    snapshot_env_prefix: str = "env.repo_snapshot_request_v1"
    snapshot_cli: str = "skills/repo_snapshot_basic/impl/bindings/node/cli.mjs"
    snapshot_runner: List[str] = Field(default_factory=lambda: ["node"])

    memory_dir: str = "lab/memory"
    sqlite_engine: str = "sqlite3"
    init_runs_dir: str = "lab/init_runs"

    ci_config: str = ".github/workflows/ci.yml"
    manifest: str = "package.json"
    smoke_script: str = "smoke:wf_cycle"
    npm_command: Optional[List[str]] = None
    node_command: str = "node"
