import json
import os
from pathlib import Path

import pytest
from helpers import fake_settings

from labinit.config import Settings


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    _ = config
    run_slow = os.getenv("RUN_SLOW_TESTS", "") or os.getenv("LAB_INIT_RUN_SLOW", "")
    if str(run_slow).strip().lower() in {"1", "true", "yes"}:
        return
    skip_slow = pytest.mark.skip(reason="set RUN_SLOW_TESTS=1 to run slow tests")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("LAB_INIT_"):
            monkeypatch.delenv(name)
    monkeypatch.delenv("npm_execpath", raising=False)
    monkeypatch.delenv("FAKE_NPM_FAIL", raising=False)
    monkeypatch.delenv("FAKE_SNAPSHOT_FAIL", raising=False)


@pytest.fixture
def fake_repo(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    root.mkdir()
    manifest = {"name": "fake", "scripts": {"validate": "x", "test": "y"}}
    (root / "package.json").write_text(json.dumps(manifest), encoding="utf-8")
    return root


@pytest.fixture
def settings(fake_repo: Path) -> Settings:
    return fake_settings(fake_repo)
