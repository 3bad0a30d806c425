from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

StepStatus = Literal["ok", "failed", "skipped"]


class RunRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    query: Optional[str] = None
    out: Optional[Path] = None
    public: bool = False


class MatchRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    sqlite: str
    table: str
    entry: Dict[str, Any]


class StepResult(BaseModel):
    status: StepStatus
    reason: Optional[str] = None
    output: Optional[str] = None
    query: Optional[str] = None
    matches: Optional[List[MatchRecord]] = None
    skipped_tables: Optional[List[str]] = None

    def report(self) -> Dict[str, Any]:
        # row values may be null; only the top-level optional fields are dropped
        data = self.model_dump(mode="json", exclude={"matches"}, exclude_none=True)
        if self.matches is not None:
            data["matches"] = [match.model_dump(mode="json") for match in self.matches]
        return data


class GateResult(BaseModel):
    name: str
    ok: bool
    log_path: str
    exit_code: Optional[int] = None
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok


class BaselineResult(BaseModel):
    gates: List[GateResult] = Field(default_factory=list)
    smoke_requested: bool = False

    @property
    def ok(self) -> bool:
        return all(gate.ok for gate in self.gates)


class ArtifactRecord(BaseModel):
    path: str
    content_hash: str
    bytes: int
    kind: str


class RunSummary(BaseModel):
    ok: bool
    repo_root: str
    out_dir: str
    branch: str
    commit: str
    query: str
    snapshot: StepResult
    context: StepResult
    baseline: BaselineResult

    def report(self) -> Dict[str, Any]:
        context = self.context.report()
        matches = context.pop("matches", None)
        if matches is not None:
            context["match_count"] = len(matches)
        return {
            "ok": self.ok,
            "repo_root": self.repo_root,
            "out_dir": self.out_dir,
            "branch": self.branch,
            "commit": self.commit,
            "query": self.query,
            "snapshot": self.snapshot.report(),
            "context": context,
            "baseline": {
                "ok": self.baseline.ok,
                "smoke_requested": self.baseline.smoke_requested,
                "gates": [gate.model_dump(mode="json") for gate in self.baseline.gates],
            },
        }
