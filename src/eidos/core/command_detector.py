"""Invocation command detection."""

from __future__ import annotations

import re

from loguru import logger

from eidos.core.commands import extract_options, split_invocation, unquote_argument
from eidos.types import Command, CommandKind

SIMPLE_KINDS = {
    CommandKind.WIREFRAME.value: CommandKind.WIREFRAME,
    CommandKind.CONCEPT.value: CommandKind.CONCEPT,
    CommandKind.MODIFY.value: CommandKind.MODIFY,
}
EXPLICIT_CUSTOM_RE = re.compile(r"custom\s+(.+)", re.IGNORECASE)
INTEGER_RE = re.compile(r"[+-]?[0-9]+")


def parse_command(text: str) -> Command | None:
    """Detect an `@eidosai` invocation in free text.

    Returns None when the text holds no invocation or the body cannot be
    classified. Never raises for string input.
    """

    body = split_invocation(text)
    if body is None:
        return None

    options = extract_options(body)
    classified = _classify_body(options.rest)
    if classified is None:
        logger.debug("invocation body not recognized: {!r}", options.rest)
        return None

    kind, instruction = classified
    return Command(
        kind=kind,
        raw_text=text,
        count=options.count,
        custom_instruction=instruction,
        exclude_issue_body=options.exclude_issue_body,
    )


def _classify_body(rest: str) -> tuple[CommandKind, str | None] | None:
    """Map option-free body text to a kind and optional instruction."""

    match rest.lower():
        case "":
            return None
        case mnemonic if mnemonic in SIMPLE_KINDS:
            return SIMPLE_KINDS[mnemonic], None

    explicit = EXPLICIT_CUSTOM_RE.fullmatch(rest)
    if explicit is not None:
        return CommandKind.CUSTOM, unquote_argument(explicit.group(1)).value

    implicit = unquote_argument(rest)
    if INTEGER_RE.fullmatch(implicit.value.strip()):
        return None
    return CommandKind.CUSTOM, implicit.value
