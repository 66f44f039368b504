"""GitHub issue and comment access."""

from __future__ import annotations

import json
import re
from pathlib import Path
from urllib.error import HTTPError, URLError
from urllib.parse import urlparse
from urllib.request import Request, urlopen

from loguru import logger

from eidos.core.commands import INVOCATION_MARKER
from eidos.errors import ConfigurationError, GitHubError
from eidos.types import Command, CommandKind, GenerationResult, ImageData, IssueContext

USER_AGENT = "eidos/1.0"
MAX_REFERENCE_IMAGES = 4
MAX_REFERENCE_BYTES = 20_000_000
MARKDOWN_IMAGE_RE = re.compile(r"!\[[^\]]*\]\(\s*<?(https?://[^\s)>]+)>?(?:\s+\"[^\"]*\")?\s*\)")
HTML_IMAGE_RE = re.compile(r"<img\b[^>]*?\bsrc\s*=\s*[\"'](https?://[^\"']+)[\"']", re.IGNORECASE)
AUTHENTICATED_HOSTS = frozenset({"github.com", "user-images.githubusercontent.com", "private-user-images.githubusercontent.com"})
KIND_LABELS = {
    CommandKind.WIREFRAME: "wireframe",
    CommandKind.CONCEPT: "concept",
    CommandKind.CUSTOM: "custom",
    CommandKind.MODIFY: "modified design",
}


def load_event_payload(event_path: Path) -> dict[str, object]:
    try:
        payload = json.loads(event_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"cannot read event payload {event_path}: {exc!s}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(f"event payload {event_path} must be a JSON object")
    return payload


def issue_context_from_event(payload: dict[str, object], repository: str | None = None) -> IssueContext:
    """Build an issue context from an `issues` or `issue_comment` event.

    Without a comment the issue body is the text searched for a command,
    so it becomes the comment body and the issue body is left empty.
    """

    issue = payload.get("issue")
    if not isinstance(issue, dict):
        raise ConfigurationError("event payload has no issue")
    repo = payload.get("repository")
    full_name = repository or (str(repo.get("full_name") or "") if isinstance(repo, dict) else "")
    issue_body = str(issue.get("body") or "")

    comment = payload.get("comment")
    if isinstance(comment, dict):
        return IssueContext(
            issue_body=issue_body,
            comment_body=str(comment.get("body") or ""),
            issue_number=int(issue.get("number") or 0),
            repository=full_name,
            comment_id=int(comment["id"]) if comment.get("id") is not None else None,
            is_from_comment=True,
        )
    return IssueContext(
        issue_body="",
        comment_body=issue_body,
        issue_number=int(issue.get("number") or 0),
        repository=full_name,
        is_from_comment=False,
    )


def extract_image_urls(text: str) -> list[str]:
    """Image URLs referenced by markdown or `<img>` tags, in order of appearance."""

    found: list[tuple[int, str]] = []
    for pattern in (MARKDOWN_IMAGE_RE, HTML_IMAGE_RE):
        found.extend((match.start(), match.group(1)) for match in pattern.finditer(text))
    urls: list[str] = []
    for _, url in sorted(found):
        if url not in urls:
            urls.append(url)
    return urls


def render_progress_comment(command: Command, total: int) -> str:
    label = KIND_LABELS[command.kind]
    return f"Generating {total} {label} image(s) for `{_command_line(command)}`..."


def render_result_comment(result: GenerationResult) -> str:
    label = KIND_LABELS[result.command.kind]
    lines = [f"## Generated {label} images", "", f"Command: `{_command_line(result.command)}`", ""]
    if result.command.custom_instruction:
        lines.extend([f"Instruction: {result.command.custom_instruction}", ""])
    for index, url in enumerate(result.urls, start=1):
        lines.extend([f"### Image {index}/{result.count}", f"![{label} {index}]({url})", ""])
    if result.count < result.requested:
        lines.append(f"{result.requested - result.count} of {result.requested} image(s) could not be generated.")
    return "\n".join(lines).rstrip() + "\n"


def render_failure_comment(command: Command, reason: str) -> str:
    return f"Image generation failed for `{_command_line(command)}`: {reason}\n"


def _command_line(command: Command) -> str:
    for line in command.raw_text.splitlines():
        if INVOCATION_MARKER in line.lower():
            return line.strip().replace("`", "'")
    return command.kind.value


class GitHubClient:
    """Minimal GitHub REST client for issue comments."""

    def __init__(
        self,
        token: str,
        repository: str,
        *,
        api_base: str = "https://api.github.com",
        timeout_seconds: int = 30,
    ) -> None:
        if not token:
            raise ConfigurationError("a GitHub token is required")
        if "/" not in repository:
            raise ConfigurationError(f"repository must be owner/name, got {repository!r}")
        self.token = token
        self.repository = repository
        self.api_base = api_base.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def load_issue_context(self, event_path: Path) -> IssueContext:
        return issue_context_from_event(load_event_payload(event_path), self.repository)

    def create_comment(self, issue_number: int, body: str) -> int:
        data = self._request_json("POST", f"/repos/{self.repository}/issues/{issue_number}/comments", {"body": body})
        comment_id = data.get("id")
        if not isinstance(comment_id, int):
            raise GitHubError("comment creation response has no id")
        logger.info("posted comment {} on #{}", comment_id, issue_number)
        return comment_id

    def update_comment(self, comment_id: int, body: str) -> None:
        self._request_json("PATCH", f"/repos/{self.repository}/issues/comments/{comment_id}", {"body": body})
        logger.info("updated comment {}", comment_id)

    def fetch_reference_images(self, text: str) -> tuple[ImageData, ...]:
        """Download images referenced in `text`; unreachable ones are skipped."""

        images: list[ImageData] = []
        for url in extract_image_urls(text)[:MAX_REFERENCE_IMAGES]:
            try:
                images.append(self.download_image(url))
            except GitHubError as exc:
                logger.warning("skipping reference image {}: {}", url, exc)
        return tuple(images)

    def download_image(self, url: str) -> ImageData:
        headers = {"User-Agent": USER_AGENT}
        if urlparse(url).hostname in AUTHENTICATED_HOSTS:
            headers["Authorization"] = f"Bearer {self.token}"
        request = Request(url, headers=headers)  # noqa: S310 - only http(s) urls are extracted.
        try:
            with urlopen(request, timeout=self.timeout_seconds) as response:  # noqa: S310
                body = response.read(MAX_REFERENCE_BYTES + 1)
                content_type = str(response.headers.get("Content-Type") or "")
        except HTTPError as exc:
            raise GitHubError(f"http {exc.code} for {url}") from exc
        except (URLError, OSError) as exc:
            raise GitHubError(f"cannot download {url}: {exc!s}") from exc

        if len(body) > MAX_REFERENCE_BYTES:
            raise GitHubError(f"image too large: {url}")
        mime_type = content_type.split(";", 1)[0].strip().lower()
        if not mime_type.startswith("image/"):
            raise GitHubError(f"not an image ({mime_type or 'unknown type'}): {url}")
        return ImageData(mime_type=mime_type, data=body)

    def _request_json(self, method: str, path: str, payload: dict[str, object]) -> dict[str, object]:
        request = Request(  # noqa: S310 - api base comes from configuration.
            f"{self.api_base}{path}",
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json",
                "User-Agent": USER_AGENT,
                "X-GitHub-Api-Version": "2022-11-28",
            },
            method=method,
        )
        try:
            with urlopen(request, timeout=self.timeout_seconds) as response:  # noqa: S310
                response_body = response.read().decode("utf-8", errors="replace")
        except HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="replace").strip()
            raise GitHubError(f"{method} {path} failed: http {exc.code} {detail}".rstrip()) from exc
        except (URLError, OSError) as exc:
            raise GitHubError(f"{method} {path} failed: {exc!s}") from exc

        if not response_body.strip():
            return {}
        try:
            data = json.loads(response_body)
        except json.JSONDecodeError as exc:
            raise GitHubError(f"{method} {path} returned invalid json: {exc!s}") from exc
        return data if isinstance(data, dict) else {}
