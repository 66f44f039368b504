"""Eidos - image prompts from issue comments."""

from .core.command_detector import parse_command
from .core.prompt import build_prompt, build_prompts, count_for
from .prompt_config import PromptConfig
from .types import Command, CommandKind, ImageData, IssueContext

__version__ = "0.1.0"

__all__ = [
    "Command",
    "CommandKind",
    "ImageData",
    "IssueContext",
    "PromptConfig",
    "build_prompt",
    "build_prompts",
    "count_for",
    "parse_command",
]
