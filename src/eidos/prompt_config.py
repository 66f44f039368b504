"""Prompt override configuration."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from eidos.errors import PromptConfigError
from eidos.types import CommandKind


class PromptConfig(BaseModel):
    """Optional per-kind prompt overrides supplied once per run.

    A template replaces the built-in composition for its kind, and the
    common context is then only placed where `{{commonContext}}` appears.
    An aspect list replaces the default list entirely; lists are never
    merged. Empty strings and empty lists count as not supplied.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", alias_generator=to_camel, populate_by_name=True)

    wireframe_template: str | None = Field(default=None, description="Override template for wf")
    concept_template: str | None = Field(default=None, description="Override template for concept")
    custom_template: str | None = Field(default=None, description="Override template for custom")
    modify_template: str | None = Field(default=None, description="Override template for modify")
    wireframe_aspects: tuple[str, ...] | None = Field(default=None, description="Aspect list for wf")
    concept_aspects: tuple[str, ...] | None = Field(default=None, description="Aspect list for concept")
    common_context: str | None = Field(default=None, description="Service context shared by every prompt")

    def template_for(self, kind: CommandKind) -> str | None:
        match kind:
            case CommandKind.WIREFRAME:
                template = self.wireframe_template
            case CommandKind.CONCEPT:
                template = self.concept_template
            case CommandKind.CUSTOM:
                template = self.custom_template
            case CommandKind.MODIFY:
                template = self.modify_template
        return template or None

    def aspects_for(self, kind: CommandKind) -> tuple[str, ...] | None:
        match kind:
            case CommandKind.WIREFRAME:
                aspects = self.wireframe_aspects
            case CommandKind.CONCEPT:
                aspects = self.concept_aspects
            case _:
                aspects = None
        return aspects or None


def load_prompt_config(path: Path) -> PromptConfig:
    """Load a prompt configuration from a YAML or JSON file."""

    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise PromptConfigError(f"cannot read prompt config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise PromptConfigError(f"invalid prompt config {path}: {exc}") from exc

    if payload is None:
        return PromptConfig()
    if not isinstance(payload, dict):
        raise PromptConfigError(f"prompt config {path} must be a mapping")
    try:
        return PromptConfig.model_validate(payload)
    except ValidationError as exc:
        raise PromptConfigError(f"invalid prompt config {path}: {exc}") from exc
