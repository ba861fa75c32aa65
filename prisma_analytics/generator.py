"""
LLM answer generation module.

Sends the interpretation prompt to the Gemini generateContent REST
endpoint and returns the markdown text of the first candidate.

Without an API key nothing is sent: the caller gets OFFLINE_MESSAGE.
Every failure on the way (network, HTTP status, non-JSON body, missing
or empty candidates) is logged and mapped to ERROR_MESSAGE, so
generate_analysis() never raises.

Public API:
    generate_analysis(prompt, credential, ...) → str
    build_request_body(prompt)                 → dict
    endpoint_url(host, model)                  → str
    extract_text(payload)                      → str
"""

import logging
from typing import Any

import requests

from prisma_analytics.config import (
    ERROR_MESSAGE,
    GEMINI_HOST,
    GEMINI_MODEL,
    GEMINI_RETRIES,
    GEMINI_TIMEOUT,
    OFFLINE_MESSAGE,
)

log = logging.getLogger(__name__)

_DEFAULT_TIMEOUT: Any = object()


class InvalidResponseError(ValueError):
    """The endpoint answered, but not with a usable candidate."""


def endpoint_url(host: str = GEMINI_HOST, model: str = GEMINI_MODEL) -> str:
    return f"https://{host}/v1beta/models/{model}:generateContent"


def build_request_body(prompt: str) -> dict:
    return {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "tools": [{"google_search": {}}],
    }


def extract_text(payload: Any) -> str:
    """Return candidates[0].content.parts[0].text or raise InvalidResponseError."""
    if not isinstance(payload, dict) or not payload.get("candidates"):
        raise InvalidResponseError("Resposta inválida da API")
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise InvalidResponseError(f"Resposta inválida da API: {exc!r}") from exc
    if not isinstance(text, str):
        raise InvalidResponseError("Resposta inválida da API: text is not a string")
    return text


def generate_analysis(
    prompt: str,
    credential: str | None,
    *,
    session: requests.Session | None = None,
    host: str = GEMINI_HOST,
    model: str = GEMINI_MODEL,
    timeout: float | None = _DEFAULT_TIMEOUT,
    retries: int = GEMINI_RETRIES,
) -> str:
    """
    Ask the model to interpret the chart described by `prompt`.

    `retries` counts extra attempts after the first one; it only applies
    to transport errors and HTTP failures, never to an empty candidate
    list. `timeout=None` waits indefinitely.
    """
    if not credential or not credential.strip():
        log.info("No API key provided — returning offline simulation.")
        return OFFLINE_MESSAGE

    if timeout is _DEFAULT_TIMEOUT:
        timeout = GEMINI_TIMEOUT
    post = session.post if session is not None else requests.post
    url = endpoint_url(host, model)
    body = build_request_body(prompt)

    for attempt in range(retries + 1):
        try:
            resp = post(
                url,
                params={"key": credential.strip()},
                json=body,
                timeout=timeout,
            )
            resp.raise_for_status()
        except requests.exceptions.RequestException as exc:
            log.error("Erro ao gerar análise (attempt %d/%d): %s",
                      attempt + 1, retries + 1, _redact(exc, credential))
            continue

        try:
            payload = resp.json()
        except ValueError as exc:
            log.error("Erro ao gerar análise: resposta não é JSON (%s)", exc)
            return ERROR_MESSAGE

        try:
            return extract_text(payload)
        except InvalidResponseError as exc:
            log.error("Erro ao gerar análise: %s", exc)
            return ERROR_MESSAGE

    return ERROR_MESSAGE


def _redact(exc: Exception, credential: str) -> str:
    """requests puts the full URL (key included) in some messages."""
    return str(exc).replace(credential.strip(), "***")
