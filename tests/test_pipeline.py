import pytest

from eidos.config import Settings
from eidos.errors import GenerationError
from eidos.integrations.github import issue_context_from_event
from eidos.pipeline import GenerationPipeline
from eidos.prompt_config import PromptConfig
from eidos.types import CommandKind, ImageData, IssueContext


class FakeGenerator:
    def __init__(self, failures: set[int] | None = None) -> None:
        self.failures = failures or set()
        self.calls: list[tuple[str, tuple[ImageData, ...]]] = []

    def generate(self, prompt: str, reference_images: tuple[ImageData, ...] = ()) -> ImageData | None:
        self.calls.append((prompt, reference_images))
        if len(self.calls) in self.failures:
            raise GenerationError("model overloaded")
        return ImageData(mime_type="image/png", data=f"image-{len(self.calls)}".encode())


class FakeStore:
    def __init__(self) -> None:
        self.uploaded: list[ImageData] = []

    def upload(self, image: ImageData) -> str:
        self.uploaded.append(image)
        return f"https://img.test/{len(self.uploaded)}.png"


class FakeGitHub:
    def __init__(self, references: tuple[ImageData, ...] = ()) -> None:
        self.references = references
        self.created: list[tuple[int, str]] = []
        self.updated: list[tuple[int, str]] = []
        self.fetched_from: list[str] = []

    def create_comment(self, issue_number: int, body: str) -> int:
        self.created.append((issue_number, body))
        return 700

    def update_comment(self, comment_id: int, body: str) -> None:
        self.updated.append((comment_id, body))

    def fetch_reference_images(self, text: str) -> tuple[ImageData, ...]:
        self.fetched_from.append(text)
        return self.references


def _pipeline(
    generator: FakeGenerator | None = None,
    github: FakeGitHub | None = None,
    **settings: object,
) -> tuple[GenerationPipeline, FakeGenerator, FakeStore, FakeGitHub]:
    generator = generator or FakeGenerator()
    store = FakeStore()
    github = github or FakeGitHub()
    pipeline = GenerationPipeline(
        generator,
        store,
        github,
        Settings(_env_file=None, **settings),  # type: ignore[arg-type]
        PromptConfig(common_context="Invoicing app"),
    )
    return pipeline, generator, store, github


def _context(comment: str, issue_body: str = "Build a login page") -> IssueContext:
    return IssueContext(issue_body=issue_body, comment_body=comment, issue_number=12, repository="octo/app")


def test_text_without_command_is_skipped() -> None:
    pipeline, generator, _, github = _pipeline()
    assert pipeline.run(_context("Looks great, thanks!")) is None
    assert generator.calls == []
    assert github.created == []


def test_wireframe_command_generates_default_count() -> None:
    pipeline, generator, store, github = _pipeline()

    result = pipeline.run(_context("@eidosai wf"))

    assert result is not None
    assert result.command.kind is CommandKind.WIREFRAME
    assert result.urls == [f"https://img.test/{index}.png" for index in range(1, 5)]
    assert len(store.uploaded) == 4
    assert [prompt.startswith("## Service Context\nInvoicing app") for prompt, _ in generator.calls] == [True] * 4
    assert "(3/4)" in generator.calls[2][0]
    assert github.created == [(12, "Generating 4 wireframe image(s) for `@eidosai wf`...")]
    assert github.updated[0][0] == 700
    assert "![wireframe 4](https://img.test/4.png)" in github.updated[0][1]


def test_count_is_clamped_to_max_images() -> None:
    pipeline, generator, _, _ = _pipeline(max_images=2)
    result = pipeline.run(_context("@eidosai concept --count 5"))
    assert result is not None
    assert result.requested == 2
    assert len(generator.calls) == 2
    assert "(2/2)" in generator.calls[1][0]


def test_zero_count_is_a_no_op() -> None:
    pipeline, generator, _, github = _pipeline()
    result = pipeline.run(_context("@eidosai wf -c 0"))
    assert result is not None
    assert result.requested == 0
    assert result.urls == []
    assert generator.calls == []
    assert github.created == []


def test_modify_fetches_reference_images_from_issue_body() -> None:
    reference = ImageData(mime_type="image/png", data=b"screen")
    github = FakeGitHub(references=(reference,))
    pipeline, generator, _, _ = _pipeline(github=github, modify_default_count=2)

    result = pipeline.run(_context("@eidosai modify", issue_body="![screen](https://example.com/s.png)"))

    assert result is not None
    assert github.fetched_from == ["![screen](https://example.com/s.png)"]
    assert len(generator.calls) == 2
    prompt, references = generator.calls[0]
    assert references == (reference,)
    assert "You are provided with reference image(s)" in prompt


def test_other_kinds_do_not_fetch_references() -> None:
    github = FakeGitHub()
    pipeline, _, _, _ = _pipeline(github=github)
    pipeline.run(_context('@eidosai custom "dark mode"'))
    assert github.fetched_from == []


def test_failed_images_are_skipped_and_reported() -> None:
    pipeline, _, store, github = _pipeline(generator=FakeGenerator(failures={2}))
    result = pipeline.run(_context("@eidosai wf -c 3"))
    assert result is not None
    assert result.count == 2
    assert len(store.uploaded) == 2
    assert "1 of 3 image(s) could not be generated." in github.updated[0][1]


def test_all_images_failing_raises_and_updates_comment() -> None:
    pipeline, _, _, github = _pipeline(generator=FakeGenerator(failures={1, 2}))
    with pytest.raises(GenerationError):
        pipeline.run(_context("@eidosai concept"))
    assert github.updated == [(700, "Image generation failed for `@eidosai concept`: no images were generated\n")]


def test_modify_in_new_issue_fetches_references_from_issue_text() -> None:
    reference = ImageData(mime_type="image/png", data=b"screen")
    github = FakeGitHub(references=(reference,))
    pipeline, generator, _, _ = _pipeline(github=github)
    body = "@eidosai modify\n![s](https://example.com/s.png)"
    context = issue_context_from_event({"issue": {"number": 3, "body": body}, "repository": {"full_name": "octo/app"}})

    result = pipeline.run(context)

    assert result is not None
    assert github.fetched_from == [body]
    prompt, references = generator.calls[0]
    assert references == (reference,)
    assert prompt.startswith("## Service Context\nInvoicing app\n\nYou are provided with reference image(s)")


class _BrokenStore:
    def upload(self, image: ImageData) -> str:
        raise ConnectionResetError("connection reset by peer")


def test_unexpected_errors_replace_progress_comment() -> None:
    github = FakeGitHub()
    pipeline = GenerationPipeline(FakeGenerator(), _BrokenStore(), github, Settings(_env_file=None))

    with pytest.raises(ConnectionResetError):
        pipeline.run(_context("@eidosai concept"))

    assert github.created == [(12, "Generating 2 concept image(s) for `@eidosai concept`...")]
    assert github.updated == [
        (700, "Image generation failed for `@eidosai concept`: connection reset by peer\n"),
    ]
