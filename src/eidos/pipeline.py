"""Command-to-comment generation pipeline."""

from __future__ import annotations

from dataclasses import replace

from loguru import logger

from eidos.config import Settings
from eidos.core.command_detector import parse_command
from eidos.core.prompt import build_prompts, count_for
from eidos.errors import CollaboratorError, GenerationError
from eidos.integrations import ImageGenerator, ImageStore, IssueCommenter
from eidos.integrations.github import render_failure_comment, render_progress_comment, render_result_comment
from eidos.prompt_config import PromptConfig
from eidos.types import Command, CommandKind, GenerationResult, IssueContext


class GenerationPipeline:
    """Turn an `@eidosai` comment into generated images posted back to the issue."""

    def __init__(
        self,
        generator: ImageGenerator,
        store: ImageStore,
        github: IssueCommenter,
        settings: Settings,
        prompt_config: PromptConfig | None = None,
    ) -> None:
        self.generator = generator
        self.store = store
        self.github = github
        self.settings = settings
        self.prompt_config = prompt_config or PromptConfig()

    def run(self, context: IssueContext) -> GenerationResult | None:
        with logger.contextualize(issue=f"{context.repository}#{context.issue_number}"):
            return self._run(context)

    def _run(self, context: IssueContext) -> GenerationResult | None:
        command = parse_command(context.comment_body)
        if command is None:
            logger.info("no @eidosai command found, skipping")
            return None
        logger.info("command detected: kind={} count={}", command.kind.value, command.count)

        requested = count_for(command, fallback=self.settings.modify_default_count)
        total = min(requested, self.settings.max_images)
        if total < requested:
            logger.warning("requested {} images, clamped to {}", requested, total)
        if total <= 0:
            logger.info("zero images requested, nothing to do")
            return GenerationResult(command=command, requested=0)

        if command.kind is CommandKind.MODIFY and not context.reference_images:
            # Issue events carry the issue text in comment_body.
            references = self.github.fetch_reference_images(context.issue_body or context.comment_body)
            logger.info("using {} reference image(s)", len(references))
            context = replace(context, reference_images=references)

        comment_id = self.github.create_comment(context.issue_number, render_progress_comment(command, total))
        try:
            urls = self._generate_images(context, command, total)
        except Exception as exc:
            self.github.update_comment(comment_id, render_failure_comment(command, str(exc) or type(exc).__name__))
            raise

        result = GenerationResult(command=command, requested=total, urls=urls)
        if not urls:
            self.github.update_comment(comment_id, render_failure_comment(command, "no images were generated"))
            raise GenerationError(f"no images were generated out of {total} requested")

        self.github.update_comment(comment_id, render_result_comment(result))
        logger.info("generated {}/{} image(s)", result.count, total)
        return result

    def _generate_images(self, context: IssueContext, command: Command, total: int) -> list[str]:
        """Generate and store each image; collaborator failures skip that image."""

        prompts = build_prompts(context, command, self.prompt_config, total_count=total)
        urls: list[str] = []
        for index, prompt in enumerate(prompts, start=1):
            try:
                image = self.generator.generate(prompt, context.reference_images)
                if image is None:
                    logger.warning("image {}/{} produced no output", index, total)
                    continue
                urls.append(self.store.upload(image))
            except CollaboratorError as exc:
                logger.error("image {}/{} failed: {}", index, total, exc)
        return urls
