import datetime
from pathlib import Path
import pytest
import prisma_analytics.orchestrator as orchestrator_module
from prisma_analytics.config import (
    COPIED_LABEL,
    ERROR_MESSAGE,
    IDLE_LABEL,
    MISSING_FIELDS_MESSAGE,
    NOTHING_TO_SAVE_MESSAGE,
    OFFLINE_MESSAGE,
    SUBMITTING_LABEL,
)
from prisma_analytics.export import (
    DirectoryExporter,
    NothingToExportError,
    clipboard_script,
    export_filename,
)
from prisma_analytics.generator import generate_analysis
from prisma_analytics.orchestrator import (
    ClipboardUnavailableError,
    MissingFieldsError,
    RequestOrchestrator,
    SubmissionInProgressError,
)
from prisma_analytics.render import html_to_text, markdown_to_html
from prisma_analytics.topics import DEFAULT_IMAGE, IMAGE_MAP, PLACEHOLDER_IMAGE


class RecordingClipboard:
    def __init__(self):
        self.copied = []

    def copy(self, text):
        self.copied.append(text)


class RecordingExporter:
    def __init__(self):
        self.saved = []

    def save(self, filename, text):
        self.saved.append((filename, text))


class RecordingGenerator:
    """Stands in for the endpoint; remembers what it was asked."""

    def __init__(self, answer="Análise X"):
        self.answer = answer
        self.calls = []

    def __call__(self, prompt, credential):
        self.calls.append((prompt, credential))
        return self.answer


@pytest.fixture
def clipboard():
    return RecordingClipboard()


@pytest.fixture
def exporter():
    return RecordingExporter()


@pytest.fixture
def generator():
    return RecordingGenerator()


@pytest.fixture
def orchestrator(clipboard, exporter, generator):
    return RequestOrchestrator(clipboard=clipboard, exporter=exporter, generate=generator)


class TestValidation:
    """Test client-side rejection."""

    @pytest.mark.parametrize("topic,question", [
        ("", "Por que o foco caiu?"),
        ("foco", ""),
        ("foco", "   "),
        ("", ""),
    ])
    def test_missing_fields_never_call_endpoint(self, orchestrator, generator, topic, question):
        """Test that an empty topic or question issues no request."""
        with pytest.raises(MissingFieldsError) as exc_info:
            orchestrator.submit(topic, question, "key")
        assert str(exc_info.value) == MISSING_FIELDS_MESSAGE
        assert generator.calls == []

    def test_rejected_submit_leaves_state_idle(self, orchestrator):
        """Test that validation failures do not touch the page."""
        with pytest.raises(MissingFieldsError):
            orchestrator.submit("", "x")
        assert orchestrator.state.submitting is False
        assert orchestrator.state.result_visible is False
        assert orchestrator.state.image == PLACEHOLDER_IMAGE


class TestSubmit:
    """Test the submit → generate → render cycle."""

    def test_offline_scenario(self):
        """Test foco + question + no key gives the offline text exactly."""
        orch = RequestOrchestrator(generate=generate_analysis)
        result = orch.submit("foco", "Por que o foco caiu?")
        assert result.raw_text == OFFLINE_MESSAGE
        assert result.image == IMAGE_MAP["foco"]

    def test_grupo_scenario(self, orchestrator, generator):
        """Test a mocked endpoint answer is rendered and the chart switches."""
        result = orchestrator.submit("grupo", "Como está o grupo?", "valid-key")
        assert result.html == markdown_to_html("Análise X")
        assert result.html == "<p>Análise X</p>"
        assert orchestrator.state.html == result.html
        assert orchestrator.state.image == IMAGE_MAP["grupo"]
        assert orchestrator.state.result_visible is True

    def test_unknown_topic_uses_default_image(self, orchestrator):
        """Test the default chart for an unmapped topic."""
        orchestrator.submit("desconhecido", "pergunta")
        assert orchestrator.state.image == DEFAULT_IMAGE

    def test_prompt_and_credential_forwarded(self, orchestrator, generator):
        """Test the generator receives the built prompt and trimmed key."""
        orchestrator.submit("metas", "  Metas ajudam?  ", "  abc  ")
        prompt, credential = generator.calls[0]
        assert "Tema: metas" in prompt
        assert "Pergunta: Metas ajudam?" in prompt
        assert credential == "abc"

    def test_blank_credential_becomes_none(self, orchestrator, generator):
        """Test that a whitespace key counts as absent."""
        orchestrator.submit("foco", "q", "   ")
        assert generator.calls[0][1] is None

    def test_state_while_submitting(self, clipboard, exporter):
        """Test input is disabled and relabelled during the call."""
        seen = {}

        def generate(prompt, credential):
            seen["submitting"] = orch.state.submitting
            seen["label"] = orch.state.button_label
            seen["html"] = orch.state.html
            return "ok"

        orch = RequestOrchestrator(clipboard=clipboard, exporter=exporter, generate=generate)
        orch.submit("foco", "q")

        assert seen == {"submitting": True, "label": SUBMITTING_LABEL, "html": "<p>Gerando análise...</p>"}
        assert orch.state.submitting is False
        assert orch.state.button_label == IDLE_LABEL

    def test_second_submit_while_pending_is_rejected(self, clipboard, exporter):
        """Test at most one request in flight."""
        errors = []

        def generate(prompt, credential):
            try:
                orch.submit("foco", "again")
            except SubmissionInProgressError as exc:
                errors.append(exc)
            return "first"

        orch = RequestOrchestrator(clipboard=clipboard, exporter=exporter, generate=generate)
        result = orch.submit("foco", "q")
        assert len(errors) == 1
        assert result.raw_text == "first"

    def test_error_text_is_rendered(self):
        """Test that the endpoint error string is shown like any answer."""
        orch = RequestOrchestrator(generate=lambda p, c: ERROR_MESSAGE)
        result = orch.submit("foco", "q", "key")
        assert "falha ao obter resposta" in result.html
        assert orch.state.submitting is False

    def test_generator_exception_returns_to_idle(self):
        """Test that a raising generator still re-enables input."""
        def boom(prompt, credential):
            raise RuntimeError("boom")

        orch = RequestOrchestrator(generate=boom)
        with pytest.raises(RuntimeError):
            orch.submit("foco", "q")
        assert orch.state.submitting is False
        assert orch.state.button_label == IDLE_LABEL


class TestReset:
    """Test resetting the page."""

    def test_reset_clears_result(self, orchestrator):
        orchestrator.submit("grupo", "q")
        orchestrator.reset()
        assert orchestrator.state.result_visible is False
        assert orchestrator.state.html == ""
        assert orchestrator.state.image == PLACEHOLDER_IMAGE
        assert orchestrator.last_result is None


class TestExport:
    """Test clipboard and file export guards."""

    def test_copy_without_analysis(self, orchestrator, clipboard):
        """Test the guard notice and no clipboard write."""
        with pytest.raises(NothingToExportError):
            orchestrator.copy_text()
        assert clipboard.copied == []

    def test_download_without_analysis(self, orchestrator, exporter):
        """Test the guard notice and no file write."""
        with pytest.raises(NothingToExportError) as exc_info:
            orchestrator.download()
        assert str(exc_info.value) == NOTHING_TO_SAVE_MESSAGE
        assert exporter.saved == []

    def test_copy_plain_text(self, clipboard, exporter):
        """Test that the copied text is the visible text, not markdown."""
        orch = RequestOrchestrator(
            clipboard=clipboard, exporter=exporter,
            generate=lambda p, c: "**Foco** em queda\n\n- pausas",
        )
        orch.submit("foco", "q")
        assert orch.copy_text() == COPIED_LABEL
        assert clipboard.copied == ["Foco em queda\n\npausas"]

    def test_download_filename(self, orchestrator, exporter):
        """Test prisma_<topic>_<date>.txt naming."""
        orchestrator.submit("grupo", "q")
        filename = orchestrator.download(datetime.date(2025, 3, 14))
        assert filename == "prisma_grupo_2025-03-14.txt"
        assert exporter.saved == [("prisma_grupo_2025-03-14.txt", "Análise X")]

    def test_download_after_reset_is_guarded(self, orchestrator, exporter):
        orchestrator.submit("grupo", "q")
        orchestrator.reset()
        with pytest.raises(NothingToExportError):
            orchestrator.download()
        assert exporter.saved == []


class TestExportHelpers:
    """Test file naming and the directory exporter."""

    def test_filename_without_topic(self):
        assert export_filename("", datetime.date(2024, 1, 2)) == "prisma_analise_2024-01-02.txt"

    def test_directory_exporter_writes_utf8(self, tmp_path):
        DirectoryExporter(tmp_path / "out").save("prisma_foco_2024-01-02.txt", "Análise")
        saved = tmp_path / "out" / "prisma_foco_2024-01-02.txt"
        assert saved.read_text(encoding="utf-8") == "Análise"


class TestRender:
    """Test markdown rendering helpers."""

    def test_markdown_bold(self):
        assert markdown_to_html("**a**") == "<p><strong>a</strong></p>"

    def test_html_to_text_empty(self):
        assert html_to_text("") == ""


class TestTwoPhaseSubmit:
    """Test begin()/complete(), used by pages that redraw mid-request."""

    def test_begin_switches_to_submitting(self, orchestrator, generator):
        """Test that the page is disabled before the endpoint is called."""
        request = orchestrator.begin("foco", "Por que o foco caiu?", "key")
        assert request.topic == "foco"
        assert orchestrator.state.submitting is True
        assert orchestrator.state.button_label == SUBMITTING_LABEL
        assert orchestrator.state.html == "<p>Gerando análise...</p>"
        assert orchestrator.state.image == IMAGE_MAP["foco"]
        assert generator.calls == []

    def test_second_begin_rejected_while_pending(self, orchestrator, generator):
        """Test that a click during the pending pass cannot start another request."""
        orchestrator.begin("foco", "q")
        with pytest.raises(SubmissionInProgressError):
            orchestrator.begin("grupo", "outra")
        assert orchestrator.pending.topic == "foco"
        assert generator.calls == []

    def test_complete_returns_to_idle(self, orchestrator, generator):
        """Test the second pass renders and re-enables input."""
        orchestrator.begin("grupo", "q", "key")
        result = orchestrator.complete()
        assert result.html == "<p>Análise X</p>"
        assert len(generator.calls) == 1
        assert orchestrator.state.submitting is False
        assert orchestrator.state.button_label == IDLE_LABEL
        assert orchestrator.pending is None

    def test_complete_without_begin(self, orchestrator):
        with pytest.raises(RuntimeError):
            orchestrator.complete()

    def test_invalid_begin_leaves_nothing_pending(self, orchestrator):
        with pytest.raises(MissingFieldsError):
            orchestrator.begin("foco", "")
        assert orchestrator.pending is None
        assert orchestrator.state.submitting is False

    def test_reset_drops_pending(self, orchestrator):
        orchestrator.begin("foco", "q")
        orchestrator.reset()
        assert orchestrator.pending is None
        assert orchestrator.state.submitting is False


class TestDefaultSinks:
    """Test the sinks used when none are injected."""

    def test_default_exporter_writes_to_export_dir(self, tmp_path, monkeypatch):
        """Test that download() works out of the box through DirectoryExporter."""
        monkeypatch.setattr(orchestrator_module, "EXPORT_DIR", tmp_path / "exports")
        orch = RequestOrchestrator(generate=lambda p, c: "Análise X")
        assert isinstance(orch.exporter, DirectoryExporter)

        orch.submit("metas", "q")
        filename = orch.download(datetime.date(2025, 1, 31))

        saved = tmp_path / "exports" / filename
        assert saved.read_text(encoding="utf-8") == "Análise X"

    def test_copy_without_clipboard(self):
        """Test a clear error when no clipboard was injected."""
        orch = RequestOrchestrator(generate=lambda p, c: "Análise X")
        orch.submit("metas", "q")
        with pytest.raises(ClipboardUnavailableError):
            orch.copy_text()


class TestClipboardScript:
    """Test the browser snippet behind the copy button."""

    def test_confirmation_only_after_write_resolves(self):
        """Test that success and failure labels hang off the writeText promise."""
        script = clipboard_script("Análise", COPIED_LABEL, "Falhou")
        write = script.index("navigator.clipboard.writeText(")
        assert script.index(".then(", write) < script.index('"Copiado!"')
        assert script.index(".catch(", write) < script.index('"Falhou"')

    def test_text_cannot_close_script_tag(self):
        """Test that analysis text is embedded as an escaped JS literal."""
        script = clipboard_script("a </script><b>", COPIED_LABEL, "x")
        assert script.count("</script>") == 1
        assert '"a <\\/script><b>"' in script


class TestFrontendSource:
    """Test the Streamlit page against the current widget API."""

    def test_no_deprecated_container_width(self):
        source = (Path(__file__).parent.parent / "frontend" / "ui.py").read_text(encoding="utf-8")
        assert "use_container_width" not in source
        assert 'width="stretch"' in source
