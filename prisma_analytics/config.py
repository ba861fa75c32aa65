"""
Runtime configuration and user-facing strings.

Endpoint settings are read from the environment (a local .env file is
honoured via python-dotenv). The API key is deliberately absent: it is
always typed by the user in the form.

Wording lives here so that locale changes never touch control flow.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _timeout(raw: str | None) -> float | None:
    """Parse GEMINI_TIMEOUT; '0', 'none' or '' mean wait forever."""
    if raw is None:
        return 60.0
    raw = raw.strip().lower()
    if raw in ("", "0", "none"):
        return None
    return float(raw)


# ---------------------------------------------------------------------------
# Generative endpoint
# ---------------------------------------------------------------------------

GEMINI_HOST    = os.getenv("GEMINI_HOST", "generativelanguage.googleapis.com")
GEMINI_MODEL   = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_TIMEOUT = _timeout(os.getenv("GEMINI_TIMEOUT"))
GEMINI_RETRIES = int(os.getenv("GEMINI_RETRIES", "0"))

PROMPT_CHAR_LIMIT = 1500

# Where DirectoryExporter writes when no other exporter is injected
EXPORT_DIR = Path(os.getenv("PRISMA_EXPORT_DIR", Path(__file__).parent.parent / "exports"))

# ---------------------------------------------------------------------------
# Canned responses
# ---------------------------------------------------------------------------

OFFLINE_MESSAGE = (
    "**Modo offline (simulação):** Sem API Key, não é possível gerar "
    "interpretação automática.  \n"
    "Sugestão: analise médias, tendências e correlações. Por exemplo, se a "
    "curva de foco cai com o uso intenso de tecnologia, incentive pausas "
    "digitais e rotinas de descanso ativo."
)

ERROR_MESSAGE = "**Erro:** falha ao obter resposta. Verifique sua API Key e conexão."

# ---------------------------------------------------------------------------
# UI strings
# ---------------------------------------------------------------------------

IDLE_LABEL        = "Gerar Análise"
SUBMITTING_LABEL  = "Gerando..."
PENDING_HTML      = "<p>Gerando análise...</p>"
COPY_LABEL        = "Copiar texto"
COPIED_LABEL      = "Copiado!"
COPY_FAILED_LABEL = "Não foi possível copiar."
SAVE_LABEL        = "Salvar análise"
RESET_LABEL       = "Limpar"

MISSING_FIELDS_MESSAGE  = "Preencha o tema e a pergunta/descrição."
NOTHING_TO_SAVE_MESSAGE = "Nenhuma análise disponível para salvar."
NOTHING_TO_COPY_MESSAGE = "Nenhuma análise disponível para copiar."
BUSY_MESSAGE            = "Uma análise já está sendo gerada."
