"""Invocation tokenizing helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass

INVOCATION_MARKER = "@eidosai"
INVOCATION_RE = re.compile(rf"{re.escape(INVOCATION_MARKER)}\s+(.+)", re.IGNORECASE)
COUNT_OPTION_RE = re.compile(r"(?:--count|-c)\s+([0-9]+)", re.IGNORECASE)
NO_ISSUE_BODY_OPTION_RE = re.compile(r"--no-issue-body", re.IGNORECASE)
DOUBLE_QUOTED_RE = re.compile(r'"([^"]*)"')
SINGLE_QUOTED_RE = re.compile(r"'([^']*)'")


@dataclass(frozen=True)
class ParsedOptions:
    """Options pulled out of an invocation body."""

    count: int | None
    exclude_issue_body: bool
    rest: str


@dataclass(frozen=True)
class QuotedArgument:
    """Argument text with its surrounding quotes removed."""

    value: str
    quoted: bool


def split_invocation(text: str) -> str | None:
    """Return the text following the invocation marker, or None."""

    match = INVOCATION_RE.search(text)
    if match is None:
        return None
    body = match.group(1).strip()
    return body or None


def extract_options(body: str) -> ParsedOptions:
    """Strip recognized options from the body.

    Only the first `--count`/`-c` match is consumed; a malformed value is
    left in `rest`. Every `--no-issue-body` occurrence is removed.
    """

    rest = body
    count: int | None = None
    count_match = COUNT_OPTION_RE.search(rest)
    if count_match is not None:
        count = int(count_match.group(1))
        rest = COUNT_OPTION_RE.sub("", rest, count=1)

    rest = rest.strip()
    exclude_issue_body = NO_ISSUE_BODY_OPTION_RE.search(rest) is not None
    if exclude_issue_body:
        rest = NO_ISSUE_BODY_OPTION_RE.sub("", rest)

    return ParsedOptions(count=count, exclude_issue_body=exclude_issue_body, rest=rest.strip())


def unquote_argument(text: str) -> QuotedArgument:
    """Unwrap an argument that is entirely double- or single-quoted."""

    argument = text.strip()
    for pattern in (DOUBLE_QUOTED_RE, SINGLE_QUOTED_RE):
        match = pattern.fullmatch(argument)
        if match is not None:
            return QuotedArgument(value=match.group(1), quoted=True)
    return QuotedArgument(value=argument, quoted=False)
