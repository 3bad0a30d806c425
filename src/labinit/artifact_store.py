from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from .ledger.ledger import Ledger
from .schemas import ArtifactRecord
from .utils import ensure_dir, hash_bytes, pretty_dumps


class ArtifactStore:
    """Writes report files under one run directory.

    Every write is recorded in the run ledger with its blake3 content hash, so a
    later ``ledger verify`` covers the reports as well as the step events.
    Without a ledger the store still writes the files.
    """

    def __init__(self, root: Path, ledger: Optional[Ledger] = None) -> None:
        self.root = root
        self.ledger = ledger
        ensure_dir(root)

    def path_for(self, rel_path: str) -> Path:
        return self.root / rel_path

    def write_json(self, rel_path: str, data: Any, kind: str) -> ArtifactRecord:
        return self.write_text(rel_path, pretty_dumps(data), kind)

    def write_text(self, rel_path: str, text: str, kind: str) -> ArtifactRecord:
        return self.write_bytes(rel_path, text.encode("utf-8"), kind)

    def write_bytes(self, rel_path: str, data: bytes, kind: str) -> ArtifactRecord:
        path = self.path_for(rel_path)
        ensure_dir(path.parent)
        path.write_bytes(data)
        record = ArtifactRecord(
            path=str(path), content_hash=hash_bytes(data), bytes=len(data), kind=kind
        )
        if self.ledger is not None:
            self.ledger.append("ARTIFACT_WRITTEN", record.model_dump())
        return record
