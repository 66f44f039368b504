"""Eidos command line entry points."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path

import typer
from loguru import logger

from eidos.config import Settings, get_settings
from eidos.core.command_detector import parse_command
from eidos.core.prompt import build_prompts
from eidos.errors import ConfigurationError, EidosError
from eidos.integrations.gemini import create_image_generator
from eidos.integrations.github import GitHubClient
from eidos.integrations.storage import create_image_store
from eidos.logging_utils import configure_logging
from eidos.pipeline import GenerationPipeline
from eidos.prompt_config import PromptConfig, load_prompt_config
from eidos.types import IssueContext

app = typer.Typer(
    name="eidos",
    help="Generate wireframes and concept images from @eidosai issue comments.",
    add_completion=False,
)


def _exit_with_error(exc: EidosError) -> None:
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(1) from exc


def _load_prompt_config(path: Path | None) -> PromptConfig:
    if path is None:
        return PromptConfig()
    return load_prompt_config(path)


def build_pipeline(settings: Settings) -> tuple[GenerationPipeline, GitHubClient]:
    """Wire collaborators from settings."""

    github = GitHubClient(
        settings.github_token or "",
        settings.github_repository or "",
        api_base=settings.github_api_base,
        timeout_seconds=settings.request_timeout_seconds,
    )
    generator = create_image_generator(
        settings.ai_provider,
        settings.ai_api_key,
        settings.model_name,
        api_base=settings.ai_api_base,
        timeout_seconds=settings.request_timeout_seconds,
    )
    pipeline = GenerationPipeline(
        generator,
        create_image_store(settings),
        github,
        settings,
        _load_prompt_config(settings.prompt_config_path),
    )
    return pipeline, github


@app.command()
def run(
    event_path: Path | None = typer.Option(None, "--event-path", help="Actions event payload"),  # noqa: B008
    log_level: str | None = typer.Option(None, "--log-level", help="Override EIDOS_LOG_LEVEL"),
) -> None:
    """Handle one issue or issue comment event."""

    try:
        settings = get_settings()
        configure_logging(log_level or settings.log_level)
        resolved_event = event_path or settings.github_event_path
        if resolved_event is None:
            raise ConfigurationError("no event payload: set GITHUB_EVENT_PATH or pass --event-path")

        pipeline, github = build_pipeline(settings)
        context = github.load_issue_context(resolved_event)
        logger.info("processing issue #{} in {}", context.issue_number, context.repository)
        result = pipeline.run(context)
    except EidosError as exc:
        logger.error("eidos run failed: {}", exc)
        _exit_with_error(exc)
        return

    if result is None:
        typer.echo("no @eidosai command found")
    else:
        typer.echo(f"generated {result.count}/{result.requested} image(s)")


@app.command()
def parse(text: str = typer.Argument(..., help="Comment text to inspect")) -> None:
    """Show the command parsed from TEXT."""

    command = parse_command(text)
    if command is None:
        typer.echo("no command")
        return
    typer.echo(json.dumps(asdict(command), ensure_ascii=False, indent=2))


@app.command()
def prompts(
    comment: str = typer.Option(..., "--comment", help="Comment holding the command"),
    issue_body: str = typer.Option("", "--issue-body", help="Issue description"),
    config: Path | None = typer.Option(None, "--config", help="Prompt override file"),  # noqa: B008
) -> None:
    """Print the prompts a comment would produce."""

    command = parse_command(comment)
    if command is None:
        typer.echo("no command")
        raise typer.Exit(1)

    try:
        prompt_config = _load_prompt_config(config)
    except EidosError as exc:
        _exit_with_error(exc)
        return

    context = IssueContext(issue_body=issue_body, comment_body=comment)
    rendered = build_prompts(context, command, prompt_config)
    for index, prompt in enumerate(rendered, start=1):
        typer.echo(f"--- prompt {index}/{len(rendered)} ---")
        typer.echo(prompt)


def main() -> None:
    app()
