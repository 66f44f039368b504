"""Shared value types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class CommandKind(StrEnum):
    """Closed set of command kinds, valued by their mnemonic."""

    WIREFRAME = "wf"
    CONCEPT = "concept"
    CUSTOM = "custom"
    MODIFY = "modify"


@dataclass(frozen=True)
class Command:
    """Command parsed from an `@eidosai` invocation."""

    kind: CommandKind
    raw_text: str
    count: int | None = None
    custom_instruction: str | None = None
    exclude_issue_body: bool = False


@dataclass(frozen=True)
class ImageData:
    """Binary image payload with its MIME type."""

    mime_type: str
    data: bytes


@dataclass(frozen=True)
class IssueContext:
    """Issue and comment text a command was found in."""

    issue_body: str
    comment_body: str
    issue_number: int = 0
    repository: str = ""
    comment_id: int | None = None
    is_from_comment: bool = False
    reference_images: tuple[ImageData, ...] = ()


@dataclass(frozen=True)
class GenerationResult:
    """URLs of the images produced for one command."""

    command: Command
    requested: int
    urls: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.urls)
