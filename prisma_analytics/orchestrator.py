"""
Request orchestration for the single-page analysis tool.

One RequestOrchestrator owns the page state (UIState) and drives the
submit → generate → render cycle:

    idle ──submit()──► submitting ──(answer or fallback)──► idle

Rendering, clipboard and file export are injected capabilities, so the
whole cycle runs in tests without a browser or network.

Public API:
    AnalysisRequest(topic, question, credential)
    AnalysisResult(topic, image, raw_text, html)
    UIState
    RequestOrchestrator(renderer, clipboard, exporter, generate)
        .submit() = .begin() + .complete()
"""

import datetime
import logging
from collections.abc import Callable
from dataclasses import dataclass

from pydantic import BaseModel

from prisma_analytics.config import (
    BUSY_MESSAGE,
    COPIED_LABEL,
    EXPORT_DIR,
    IDLE_LABEL,
    MISSING_FIELDS_MESSAGE,
    NOTHING_TO_COPY_MESSAGE,
    NOTHING_TO_SAVE_MESSAGE,
    PENDING_HTML,
    SUBMITTING_LABEL,
)
from prisma_analytics.export import (
    ClipboardSink,
    DirectoryExporter,
    FileExporter,
    NothingToExportError,
    export_filename,
)
from prisma_analytics.generator import generate_analysis
from prisma_analytics.prompt import build_prompt
from prisma_analytics.render import MarkdownRenderer, PythonMarkdownRenderer, html_to_text
from prisma_analytics.topics import PLACEHOLDER_IMAGE, image_for

log = logging.getLogger(__name__)

Generate = Callable[[str, str | None], str]


class MissingFieldsError(ValueError):
    """Topic or question left empty; no request is issued."""


class SubmissionInProgressError(RuntimeError):
    """A second submit() arrived while one is still pending."""


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------

class AnalysisRequest(BaseModel):
    topic: str
    question: str
    credential: str | None = None

    def validate_fields(self) -> None:
        if not self.topic or not self.question.strip():
            raise MissingFieldsError(MISSING_FIELDS_MESSAGE)


class AnalysisResult(BaseModel):
    topic: str
    image: str
    raw_text: str
    html: str

    @property
    def plain_text(self) -> str:
        return html_to_text(self.html)


@dataclass
class UIState:
    submitting: bool = False
    button_label: str = IDLE_LABEL
    result_visible: bool = False
    image: str = PLACEHOLDER_IMAGE
    html: str = ""
    topic: str = ""

    @property
    def plain_text(self) -> str:
        return html_to_text(self.html)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class ClipboardUnavailableError(RuntimeError):
    """copy_text() was called on an orchestrator built without a clipboard."""


class RequestOrchestrator:
    def __init__(
        self,
        renderer: MarkdownRenderer | None = None,
        clipboard: ClipboardSink | None = None,
        exporter: FileExporter | None = None,
        generate: Generate = generate_analysis,
    ):
        self.renderer  = renderer or PythonMarkdownRenderer()
        self.clipboard = clipboard
        self.exporter  = exporter or DirectoryExporter(EXPORT_DIR)
        self.generate  = generate
        self.state     = UIState()
        self.pending: AnalysisRequest | None = None
        self.last_result: AnalysisResult | None = None

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    def submit(self, topic: str, question: str, credential: str | None = None) -> AnalysisResult:
        """
        Validate, generate and render one analysis.

        Raises MissingFieldsError (no network call) or
        SubmissionInProgressError. Endpoint failures never raise: they
        come back as the fixed error text from the generator.
        """
        self.begin(topic, question, credential)
        return self.complete()

    def begin(self, topic: str, question: str, credential: str | None = None) -> AnalysisRequest:
        """
        First half of submit(): validate and switch the page to submitting.

        A UI that redraws between the two halves (Streamlit) calls
        begin(), renders the disabled form, then calls complete().
        """
        if self.state.submitting:
            raise SubmissionInProgressError(BUSY_MESSAGE)

        request = AnalysisRequest(
            topic=(topic or "").strip(),
            question=(question or "").strip(),
            credential=(credential or "").strip() or None,
        )
        request.validate_fields()
        log.info("Submitting topic=%r offline=%s", request.topic, request.credential is None)

        self.state.topic = request.topic
        self.state.image = image_for(request.topic)
        self.state.result_visible = True
        self.state.html = PENDING_HTML
        self._set_submitting(True)
        self.pending = request
        return request

    def complete(self) -> AnalysisResult:
        """Second half of submit(): generate, render and go back to idle."""
        request = self.pending
        if request is None:
            raise RuntimeError("complete() called without a pending request")

        try:
            prompt = build_prompt(request.topic, request.question)
            raw_text = self.generate(prompt, request.credential)
            html = self.renderer.render(raw_text)
        except Exception:
            self.state.html = ""
            raise
        finally:
            self.pending = None
            self._set_submitting(False)

        self.state.html = html
        self.last_result = AnalysisResult(
            topic=request.topic, image=self.state.image, raw_text=raw_text, html=html
        )
        return self.last_result

    def _set_submitting(self, submitting: bool) -> None:
        self.state.submitting = submitting
        self.state.button_label = SUBMITTING_LABEL if submitting else IDLE_LABEL

    # ------------------------------------------------------------------
    # Reset / export
    # ------------------------------------------------------------------

    def reset(self) -> None:
        self.state = UIState()
        self.pending = None
        self.last_result = None

    def copy_text(self) -> str:
        """Copy the visible analysis; returns the confirmation label."""
        text = self.state.plain_text
        if not text:
            raise NothingToExportError(NOTHING_TO_COPY_MESSAGE)
        if self.clipboard is None:
            raise ClipboardUnavailableError("no clipboard configured")
        self.clipboard.copy(text)
        return COPIED_LABEL

    def download(self, day: datetime.date | None = None) -> str:
        """Hand the visible analysis to the exporter; returns the file name."""
        text = self.state.plain_text
        if not text:
            raise NothingToExportError(NOTHING_TO_SAVE_MESSAGE)
        filename = export_filename(self.state.topic, day or datetime.date.today())
        self.exporter.save(filename, text)
        return filename
