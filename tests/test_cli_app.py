import importlib
import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from eidos.errors import GenerationError
from eidos.types import Command, CommandKind, GenerationResult, IssueContext

cli_app_module = importlib.import_module("eidos.cli.app")


def test_parse_prints_command_as_json() -> None:
    runner = CliRunner()
    result = runner.invoke(cli_app_module.app, ["parse", '@eidosai custom "blue theme" -c 3'])
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["kind"] == "custom"
    assert payload["custom_instruction"] == "blue theme"
    assert payload["count"] == 3


def test_parse_reports_missing_command() -> None:
    result = CliRunner().invoke(cli_app_module.app, ["parse", "no invocation here"])
    assert result.exit_code == 0
    assert "no command" in result.stdout


def test_prompts_prints_every_prompt() -> None:
    result = CliRunner().invoke(
        cli_app_module.app,
        ["prompts", "--issue-body", "Build a login page", "--comment", "@eidosai wf"],
    )
    assert result.exit_code == 0
    assert result.stdout.count("--- prompt ") == 4
    assert "main page layout and overall structure" in result.stdout
    assert "--- prompt 4/4 ---" in result.stdout


def test_prompts_uses_override_config(tmp_path: Path) -> None:
    config = tmp_path / "prompts.yaml"
    config.write_text("conceptTemplate: 'C{{imageNumber}} {{aspect}}'\nconceptAspects: [hero]\n", encoding="utf-8")
    result = CliRunner().invoke(
        cli_app_module.app,
        ["prompts", "--comment", "@eidosai concept", "--config", str(config)],
    )
    assert result.exit_code == 0
    assert "C1 hero" in result.stdout
    assert "C2 hero" in result.stdout


def test_prompts_rejects_missing_config(tmp_path: Path) -> None:
    result = CliRunner().invoke(
        cli_app_module.app,
        ["prompts", "--comment", "@eidosai concept", "--config", str(tmp_path / "missing.yaml")],
    )
    assert result.exit_code == 1


def test_prompts_without_command_exits_nonzero() -> None:
    result = CliRunner().invoke(cli_app_module.app, ["prompts", "--comment", "hello"])
    assert result.exit_code == 1


class _FakePipeline:
    def __init__(self, result: GenerationResult | None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.contexts: list[IssueContext] = []

    def run(self, context: IssueContext) -> GenerationResult | None:
        self.contexts.append(context)
        if self.error is not None:
            raise self.error
        return self.result


class _FakeGitHub:
    def __init__(self) -> None:
        self.event_paths: list[Path] = []

    def load_issue_context(self, event_path: Path) -> IssueContext:
        self.event_paths.append(event_path)
        return IssueContext(issue_body="body", comment_body="@eidosai wf", issue_number=5, repository="octo/app")


def test_run_invokes_pipeline(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    command = Command(kind=CommandKind.WIREFRAME, raw_text="@eidosai wf")
    pipeline = _FakePipeline(GenerationResult(command=command, requested=4, urls=["a", "b", "c"]))
    github = _FakeGitHub()
    monkeypatch.setattr(cli_app_module, "build_pipeline", lambda settings: (pipeline, github))

    event = tmp_path / "event.json"
    result = CliRunner().invoke(cli_app_module.app, ["run", "--event-path", str(event), "--log-level", "WARNING"])

    assert result.exit_code == 0
    assert "generated 3/4 image(s)" in result.stdout
    assert github.event_paths == [event]
    assert pipeline.contexts[0].issue_number == 5


def test_run_fails_on_generation_error(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    pipeline = _FakePipeline(None, GenerationError("no images were generated"))
    monkeypatch.setattr(cli_app_module, "build_pipeline", lambda settings: (pipeline, _FakeGitHub()))
    result = CliRunner().invoke(cli_app_module.app, ["run", "--event-path", str(tmp_path / "e.json")])
    assert result.exit_code == 1


def test_run_requires_event_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GITHUB_EVENT_PATH", raising=False)
    monkeypatch.delenv("EIDOS_GITHUB_EVENT_PATH", raising=False)
    result = CliRunner().invoke(cli_app_module.app, ["run"])
    assert result.exit_code == 1
