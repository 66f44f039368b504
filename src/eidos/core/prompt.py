"""Image prompt synthesis.

Every kind is described by one `KindProfile` row. Built-in compositions use
the same `{{placeholder}}` tokens as user override templates, so a single
composer renders both. Synthesis is pure: identical inputs give identical
prompts, and each image index is rendered independently of the others.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from loguru import logger

from eidos.prompt_config import PromptConfig
from eidos.types import Command, CommandKind, IssueContext

PLACEHOLDER_RE = re.compile(r"\{\{(imageNumber|totalCount|aspect|fullContext|customInstruction|commonContext)\}\}")
COMMON_CONTEXT_HEADER = "## Service Context"

WIREFRAME_ASPECTS = (
    "main page layout and overall structure",
    "detailed UI components and their placement",
    "navigation flow and menu structure",
    "user interaction points and key features",
)

CONCEPT_ASPECTS = (
    "overall user interface design direction and visual style",
    "key visual elements, branding, and color scheme",
)

WIREFRAME_TEMPLATE = """Create a wireframe image ({{imageNumber}}/{{totalCount}}) for the following requirement that shows {{aspect}}:

{{fullContext}}

Generate a clear wireframe diagram that shows {{aspect}}. The wireframe should be clean, well-organized, and easy to understand, using typical wireframe conventions (boxes, labels, simple shapes)."""

CONCEPT_TEMPLATE = """Create a concept image ({{imageNumber}}/{{totalCount}}) for the following requirement that shows {{aspect}}:

{{fullContext}}

Generate a high-quality concept visualization that clearly demonstrates {{aspect}}. The image should be professional and visually appealing."""

CUSTOM_TEMPLATE = """Create a custom image ({{imageNumber}}/{{totalCount}}) based on the following requirements and custom instruction:

{{fullContext}}

Custom instruction: {{customInstruction}}

Generate a high-quality image that fulfills the above requirements and follows the custom instruction. The image should be professional and visually appealing."""

MODIFY_TEMPLATE = """Create a UI design image ({{imageNumber}}/{{totalCount}}) based on the following design requirements:

{{fullContext}}

Generate a high-quality UI design that fulfills the above requirements. The design should be professional, modern, and visually appealing with a consistent design system."""

MODIFY_REFERENCE_TEMPLATE = """You are provided with reference image(s) showing the current screen design. Based on these reference images, modify the design according to the following requirements while maintaining the same tone and manner (color scheme, typography, layout style, visual elements, etc.):

{{fullContext}}

Generate a modified version ({{imageNumber}}/{{totalCount}}) that:
1. Maintains the exact same visual style, color palette, typography, and overall design language as the reference image(s)
2. Incorporates the requested changes (e.g., adding buttons, modifying layouts, updating content)
3. Ensures the modifications blend seamlessly with the existing design
4. Preserves the overall user experience and design consistency

The output should look like a natural evolution of the reference design, not a completely new design."""


class EmbedMode(StrEnum):
    """What a kind embeds besides the issue context."""

    ASPECT = "aspect"
    INSTRUCTION = "instruction"
    REFERENCE = "reference"


@dataclass(frozen=True)
class KindProfile:
    """Built-in prompt composition for one command kind."""

    default_count: int | None
    embed: EmbedMode
    template: str
    aspects: tuple[str, ...] = ()
    reference_template: str | None = None


KIND_PROFILES: dict[CommandKind, KindProfile] = {
    CommandKind.WIREFRAME: KindProfile(
        default_count=4,
        embed=EmbedMode.ASPECT,
        template=WIREFRAME_TEMPLATE,
        aspects=WIREFRAME_ASPECTS,
    ),
    CommandKind.CONCEPT: KindProfile(
        default_count=2,
        embed=EmbedMode.ASPECT,
        template=CONCEPT_TEMPLATE,
        aspects=CONCEPT_ASPECTS,
    ),
    CommandKind.CUSTOM: KindProfile(
        default_count=2,
        embed=EmbedMode.INSTRUCTION,
        template=CUSTOM_TEMPLATE,
    ),
    CommandKind.MODIFY: KindProfile(
        default_count=None,
        embed=EmbedMode.REFERENCE,
        template=MODIFY_TEMPLATE,
        reference_template=MODIFY_REFERENCE_TEMPLATE,
    ),
}


@dataclass(frozen=True)
class PromptParams:
    """Values available to `{{placeholder}}` tokens."""

    image_number: int
    total_count: int
    aspect: str = ""
    full_context: str = ""
    custom_instruction: str = ""
    common_context: str = ""

    def placeholders(self) -> dict[str, str]:
        return {
            "imageNumber": str(self.image_number),
            "totalCount": str(self.total_count),
            "aspect": self.aspect,
            "fullContext": self.full_context,
            "customInstruction": self.custom_instruction,
            "commonContext": self.common_context,
        }


def replace_placeholders(template: str, params: PromptParams) -> str:
    """Substitute every known placeholder token in one pass.

    Unknown `{{tokens}}` are left as they are, and substituted values are
    not scanned again.
    """

    values = params.placeholders()
    return PLACEHOLDER_RE.sub(lambda match: values[match.group(1)], template)


def count_for(command: Command, *, fallback: int = 1) -> int:
    """Number of images to generate for a command.

    `fallback` applies only to kinds without a built-in default (modify).
    """

    if command.count is not None:
        return command.count
    default = KIND_PROFILES[command.kind].default_count
    return fallback if default is None else default


def assemble_context(context: IssueContext, command: Command) -> str:
    """Issue and comment text fed to the prompt, honoring --no-issue-body."""

    if command.exclude_issue_body:
        return context.comment_body
    return f"{context.issue_body}\n\n{context.comment_body}"


def select_aspect(aspects: tuple[str, ...], image_index: int) -> str:
    """Pick the aspect for a 1-based image index, reusing the first when out of range."""

    if not aspects:
        return ""
    if 1 <= image_index <= len(aspects):
        return aspects[image_index - 1]
    return aspects[0]


def common_context_section(common_context: str) -> str:
    """Service context header prepended to built-in prompts."""

    if not common_context:
        return ""
    return f"{COMMON_CONTEXT_HEADER}\n{common_context}\n\n"


def build_prompt(
    context: IssueContext,
    command: Command,
    image_index: int,
    total_count: int,
    config: PromptConfig | None = None,
) -> str:
    """Build the generation prompt for one image of a command."""

    config = config or PromptConfig()
    profile = KIND_PROFILES[command.kind]

    aspect = ""
    if profile.embed is EmbedMode.ASPECT:
        aspects = config.aspects_for(command.kind) or profile.aspects
        aspect = select_aspect(aspects, image_index)

    params = PromptParams(
        image_number=image_index,
        total_count=total_count,
        aspect=aspect,
        full_context=assemble_context(context, command),
        custom_instruction=command.custom_instruction or "",
        common_context=config.common_context or "",
    )

    override = config.template_for(command.kind)
    if override is not None:
        return replace_placeholders(override, params)

    template = profile.template
    if profile.embed is EmbedMode.REFERENCE and context.reference_images and profile.reference_template:
        template = profile.reference_template
    return common_context_section(params.common_context) + replace_placeholders(template, params)


def build_prompts(
    context: IssueContext,
    command: Command,
    config: PromptConfig | None = None,
    *,
    total_count: int | None = None,
) -> list[str]:
    """Build prompts for image indices `1..total_count`.

    `total_count` defaults to `count_for(command)`; zero yields an empty list.
    """

    total = count_for(command) if total_count is None else total_count
    logger.debug("building {} prompt(s) for kind={}", total, command.kind.value)
    return [build_prompt(context, command, index, total, config) for index in range(1, total + 1)]
