from __future__ import annotations

from pathlib import Path

import pytest

from labinit.config import Settings
from labinit.steps.baseline import run_baseline, should_run_smoke


def _add_ci(root: Path) -> None:
    workflows = root / ".github" / "workflows"
    workflows.mkdir(parents=True)
    (workflows / "ci.yml").write_text("name: ci\n", encoding="utf-8")


def test_should_run_smoke_public_flag(fake_repo: Path, settings: Settings) -> None:
    assert should_run_smoke(True, fake_repo, settings)
    assert not should_run_smoke(False, fake_repo, settings)


def test_should_run_smoke_needs_ci_and_script(fake_repo: Path, settings: Settings) -> None:
    _add_ci(fake_repo)
    assert not should_run_smoke(False, fake_repo, settings)
    (fake_repo / "package.json").write_text(
        '{"scripts": {"smoke:wf_cycle": "node smoke.js"}}', encoding="utf-8"
    )
    assert should_run_smoke(False, fake_repo, settings)


def test_should_run_smoke_unparsable_manifest(fake_repo: Path, settings: Settings) -> None:
    _add_ci(fake_repo)
    (fake_repo / "package.json").write_text("{not json", encoding="utf-8")
    assert not should_run_smoke(False, fake_repo, settings)
    (fake_repo / "package.json").unlink()
    assert not should_run_smoke(False, fake_repo, settings)


def test_baseline_without_smoke(
    fake_repo: Path, settings: Settings, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    out_dir = tmp_path / "out"
    result = run_baseline(out_dir, False, fake_repo, settings)
    assert result.ok
    assert not result.smoke_requested
    assert [gate.name for gate in result.gates] == ["validate", "test"]
    baseline = out_dir / "baseline"
    assert (baseline / "validate.txt").read_text(encoding="utf-8") == (
        "npm stdout:validate\nnpm stderr:validate\n"
    )
    assert (baseline / "test.txt").read_text(encoding="utf-8") == "npm stdout:test\nnpm stderr:test\n"
    assert not (baseline / "smoke.txt").exists()
    assert "Smoke skip (not requested)" in capsys.readouterr().out


def test_baseline_runs_every_gate_after_failure(
    fake_repo: Path, settings: Settings, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("FAKE_NPM_FAIL", "validate")
    out_dir = tmp_path / "out"
    result = run_baseline(out_dir, True, fake_repo, settings)
    assert not result.ok
    assert [(gate.name, gate.ok) for gate in result.gates] == [
        ("validate", False),
        ("test", True),
        ("smoke:wf_cycle", True),
    ]
    assert (out_dir / "baseline" / "smoke.txt").exists()


def test_baseline_smoke_failure_fails_run(
    fake_repo: Path, settings: Settings, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("FAKE_NPM_FAIL", "smoke:wf_cycle")
    result = run_baseline(tmp_path / "out", True, fake_repo, settings)
    assert not result.ok
    assert result.gates[-1].exit_code == 1


def test_baseline_spawn_failure(fake_repo: Path, tmp_path: Path) -> None:
    settings = Settings(repo_root=fake_repo, npm_command=[str(tmp_path / "no-such-npm")])
    result = run_baseline(tmp_path / "out", False, fake_repo, settings)
    assert not result.ok
    assert all(gate.error for gate in result.gates)
    assert len(result.gates) == 2
