"""
FastAPI application — HTTP surface over the Prisma Analytics core.

Run as a script:
    python app/app.py

Or as a module:
    uvicorn app.app:app --reload

Endpoints:
    GET  /topics
        returns: [{"id": str, "label": str, "image": str}, ...]
    POST /analyze
        body:    {"topic": "...", "question": "...", "api_key": "..."}   (api_key is optional)
        returns: {"topic", "image", "text", "html", "offline"}
    POST /export
        body:    {"topic": "...", "text": "..."}
        returns: text/plain attachment prisma_<topic>_<YYYY-MM-DD>.txt

Without api_key /analyze answers with the offline simulation text and
never touches the network. Logs each request and wall-clock response
time to stdout and logs/app.log (rotating, 5 MB max, 3 backups).
"""

import asyncio
import datetime
import logging
import logging.handlers
import re
import sys
import time
from pathlib import Path

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

# Ensure project root is on sys.path when running as a script (python app/app.py)
sys.path.insert(0, str(Path(__file__).parent.parent))

from prisma_analytics.config import NOTHING_TO_SAVE_MESSAGE
from prisma_analytics.export import export_filename
from prisma_analytics.generator import generate_analysis
from prisma_analytics.orchestrator import MissingFieldsError, RequestOrchestrator
from prisma_analytics.topics import TOPIC_LABELS, image_for

LOG_DIR  = Path(__file__).parent.parent / "logs"
LOG_FILE = LOG_DIR / "app.log"

def _setup_logging() -> None:
    LOG_DIR.mkdir(exist_ok=True)
    fmt = logging.Formatter("%(asctime)s  %(levelname)s  %(name)s  %(message)s")

    stream = logging.StreamHandler(sys.stdout)
    stream.setFormatter(fmt)

    # Rotate at 5 MB, keep 3 backups
    rotating = logging.handlers.RotatingFileHandler(
        LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    rotating.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(logging.INFO)
    root.addHandler(stream)
    root.addHandler(rotating)

_setup_logging()
log = logging.getLogger("api")

app = FastAPI(title="Prisma Analytics")


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class TopicInfo(BaseModel):
    id: str
    label: str
    image: str


class AnalyzeRequest(BaseModel):
    topic: str
    question: str
    api_key: str | None = None


class AnalyzeResponse(BaseModel):
    topic: str
    image: str
    text: str
    html: str
    offline: bool


class ExportRequest(BaseModel):
    topic: str = ""
    text: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

def _generate(prompt: str, credential: str | None) -> str:
    # looked up at call time so tests can patch app.app.generate_analysis
    return generate_analysis(prompt, credential)


@app.get("/topics", response_model=list[TopicInfo])
def topics() -> list[TopicInfo]:
    return [
        TopicInfo(id=t, label=label, image=image_for(t))
        for t, label in TOPIC_LABELS.items()
    ]


@app.post("/analyze", response_model=AnalyzeResponse)
def analyze(req: AnalyzeRequest) -> AnalyzeResponse:
    t0 = time.perf_counter()
    orchestrator = RequestOrchestrator(generate=_generate)

    try:
        result = orchestrator.submit(req.topic, req.question, req.api_key)
    except MissingFieldsError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    offline = not (req.api_key or "").strip()
    elapsed = time.perf_counter() - t0
    log.info("topic=%r  offline=%s  chars=%d  %.2fs",
             result.topic, offline, len(result.raw_text), elapsed)

    return AnalyzeResponse(
        topic=result.topic,
        image=result.image,
        text=result.raw_text,
        html=result.html,
        offline=offline,
    )


@app.post("/export", response_class=PlainTextResponse)
def export(req: ExportRequest) -> PlainTextResponse:
    if not req.text.strip():
        raise HTTPException(status_code=400, detail=NOTHING_TO_SAVE_MESSAGE)

    # header values must stay ASCII
    topic = re.sub(r"[^\w-]", "", req.topic.strip(), flags=re.ASCII)
    filename = export_filename(topic, datetime.date.today())
    log.info("export  %s  chars=%d", filename, len(req.text))
    return PlainTextResponse(
        req.text,
        media_type="text/plain; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def _launch_server() -> None:
    config = uvicorn.Config(app, host="0.0.0.0", port=8000, reload=False)
    server = uvicorn.Server(config)

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        uvicorn.run(app, host="0.0.0.0", port=8000, reload=False)
        return

    log.warning(
        "Detected an existing asyncio event loop; serving with create_task() instead of asyncio.run()."
    )
    asyncio.create_task(server.serve())


if __name__ == "__main__":
    log.info("=== Prisma Analytics — launching server on http://0.0.0.0:8000 ===")
    _launch_server()
