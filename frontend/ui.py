"""
Streamlit frontend for Prisma Analytics.

Run with:
    streamlit run frontend/ui.py

Pick a topic, type a question and (optionally) a Gemini API key. The page
shows the topic's chart and the model's markdown interpretation, and
lets the user copy or download the text. Without an API key the page
stays in offline mode and shows a canned suggestion instead.
"""

import sys
from pathlib import Path

import streamlit as st
import streamlit.components.v1 as components

# Ensure project root is importable when launched via `streamlit run frontend/ui.py`
sys.path.insert(0, str(Path(__file__).parent.parent))

from prisma_analytics.config import (
    COPIED_LABEL,
    COPY_FAILED_LABEL,
    COPY_LABEL,
    PENDING_HTML,
    RESET_LABEL,
    SAVE_LABEL,
)
from prisma_analytics.export import NothingToExportError, clipboard_script
from prisma_analytics.orchestrator import MissingFieldsError, RequestOrchestrator, SubmissionInProgressError
from prisma_analytics.render import html_to_text
from prisma_analytics.topics import TOPIC_LABELS, TOPICS, resolve_asset


class BrowserClipboard:
    """
    Writes to the visitor's clipboard through a tiny embedded script.

    The confirmation is drawn inside the embedded frame, see clipboard_script().
    """

    def __init__(self, copied: str = COPIED_LABEL, failed: str = COPY_FAILED_LABEL):
        self.copied = copied
        self.failed = failed

    def copy(self, text: str) -> None:
        components.html(clipboard_script(text, self.copied, self.failed), height=28)


class DownloadButtonExporter:
    """Offers the file through st.download_button."""

    def save(self, filename: str, text: str) -> None:
        st.download_button(
            SAVE_LABEL,
            data=text.encode("utf-8"),
            file_name=filename,
            mime="text/plain",
            width="stretch",
        )


def _orchestrator() -> RequestOrchestrator:
    if "orchestrator" not in st.session_state:
        st.session_state.orchestrator = RequestOrchestrator(
            clipboard=BrowserClipboard(),
            exporter=DownloadButtonExporter(),
        )
    return st.session_state.orchestrator


def _reset() -> None:
    _orchestrator().reset()
    st.session_state["topic"] = ""
    st.session_state["question"] = ""
    st.session_state["api_key"] = ""


st.set_page_config(page_title="Prisma Analytics", page_icon="📊", layout="centered")
st.title("Prisma Analytics")

st.markdown(
    """
Interpretação de gráficos educacionais com IA.

1. Informe sua API Key do Gemini (opcional — sem ela o app roda em modo offline)
2. Escolha um tema e descreva sua pergunta
3. Clique em **Gerar Análise**
"""
)

orchestrator = _orchestrator()
busy = orchestrator.state.submitting

with st.form("form"):
    api_key = st.text_input("API Key", type="password", key="api_key", disabled=busy)
    topic = st.selectbox(
        "Tema",
        ["", *TOPICS],
        format_func=lambda t: TOPIC_LABELS.get(t, "Selecione um tema"),
        key="topic",
        disabled=busy,
    )
    question = st.text_area(
        "Pergunta / descrição",
        placeholder="ex.: Por que o foco caiu no segundo semestre?",
        key="question",
        disabled=busy,
    )
    submitted = st.form_submit_button(
        orchestrator.state.button_label,
        type="primary",
        disabled=busy,
    )

st.button(RESET_LABEL, on_click=_reset, disabled=busy)

# Two passes per request: this one switches to "Gerando..." and redraws,
# the next one (busy) runs the call and redraws back to idle.
if submitted:
    try:
        orchestrator.begin(topic, question, api_key)
    except MissingFieldsError as exc:
        st.warning(str(exc))
    except SubmissionInProgressError as exc:
        st.info(str(exc))
    else:
        st.rerun()

if busy:
    with st.spinner(html_to_text(PENDING_HTML)):
        orchestrator.complete()
    st.rerun()

state = orchestrator.state
if state.result_visible:
    chart = resolve_asset(state.image)
    if chart.exists():
        st.image(str(chart), width="stretch")
    else:
        st.caption(f"Gráfico indisponível: {state.image}")

    st.markdown(state.html, unsafe_allow_html=True)

    col_copy, col_save = st.columns(2)
    with col_copy:
        if st.button(COPY_LABEL, width="stretch"):
            try:
                orchestrator.copy_text()
            except NothingToExportError as exc:
                st.warning(str(exc))
    with col_save:
        try:
            orchestrator.download()
        except NothingToExportError as exc:
            st.caption(str(exc))
