"""
Clipboard and file export of a finished analysis.

Both sinks are protocols so the orchestrator can be exercised without a
browser. DirectoryExporter is the orchestrator's default file sink
(writing under EXPORT_DIR); the Streamlit page injects its own sinks.

Public API:
    ClipboardSink.copy(text)
    FileExporter.save(filename, text)
    DirectoryExporter(directory)
    export_filename(topic, day) → str
    clipboard_script(text, copied, failed) → str
"""

import datetime
import json
import logging
from pathlib import Path
from typing import Protocol

log = logging.getLogger(__name__)


class NothingToExportError(Exception):
    """Raised when copy/save is requested before any analysis exists."""


class ClipboardSink(Protocol):
    def copy(self, text: str) -> None: ...


class FileExporter(Protocol):
    def save(self, filename: str, text: str) -> None: ...


def export_filename(topic: str, day: datetime.date) -> str:
    """prisma_<topic>_<YYYY-MM-DD>.txt; an empty topic becomes 'analise'."""
    return f"prisma_{topic or 'analise'}_{day.isoformat()}.txt"


class DirectoryExporter:
    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def save(self, filename: str, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / filename
        path.write_text(text, encoding="utf-8")
        log.info("Saved analysis → %s", path)


def clipboard_script(text: str, copied: str, failed: str) -> str:
    """
    HTML snippet that copies `text` in the browser and reports the outcome.

    The confirmation only appears after writeText() resolves; a refused
    copy shows `failed` instead. The note clears itself after 1.5 s.
    """
    literal = json.dumps(text).replace("</", "<\\/")
    return (
        "<span id='copy-note' style='font-family:sans-serif;font-size:0.85rem'></span>"
        "<script>"
        "const note = document.getElementById('copy-note');"
        f"navigator.clipboard.writeText({literal})"
        f".then(() => {{ note.textContent = {json.dumps(copied)}; }})"
        f".catch(() => {{ note.textContent = {json.dumps(failed)}; }})"
        ".finally(() => setTimeout(() => { note.textContent = ''; }, 1500));"
        "</script>"
    )
