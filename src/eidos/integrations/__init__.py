"""External collaborators: image generation, storage, GitHub."""

from __future__ import annotations

from typing import Protocol

from eidos.types import ImageData


class ImageGenerator(Protocol):
    def generate(self, prompt: str, reference_images: tuple[ImageData, ...] = ()) -> ImageData | None: ...


class ImageStore(Protocol):
    def upload(self, image: ImageData) -> str: ...


class IssueCommenter(Protocol):
    def create_comment(self, issue_number: int, body: str) -> int: ...

    def update_comment(self, comment_id: int, body: str) -> None: ...

    def fetch_reference_images(self, text: str) -> tuple[ImageData, ...]: ...


__all__ = ["ImageGenerator", "ImageStore", "IssueCommenter"]
