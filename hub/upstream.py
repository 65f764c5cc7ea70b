"""Outbound HTTP: link liveness checks and the Ollama / media proxies."""

import logging

import requests as http_requests

from hub.errors import UpstreamError

USER_AGENT = "LocalNetworkHub/1.0"
STATUS_TIMEOUT = 5
PROXY_TIMEOUT = 10
MEDIA_CHUNK_SIZE = 64 * 1024

logger = logging.getLogger(__name__)


def check_status(url: str, timeout: float = STATUS_TIMEOUT) -> bool:
    """HEAD the url; reachable means a 2xx or 3xx answer within the timeout."""
    try:
        resp = http_requests.head(
            url,
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
            allow_redirects=False,
        )
    except (http_requests.RequestException, ValueError) as e:
        logger.debug("Status check failed for %s: %s", url, e)
        return False
    resp.close()
    return 200 <= resp.status_code < 400


# ── Ollama ────────────────────────────────────────────────────────────────


def _ollama_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}{path}"


def fetch_ollama_models(base_url: str) -> list:
    try:
        resp = http_requests.get(
            _ollama_url(base_url, "/api/tags"),
            headers={"User-Agent": USER_AGENT},
            timeout=PROXY_TIMEOUT,
        )
        payload = resp.json()
    except (http_requests.RequestException, ValueError) as e:
        logger.error("Ollama models proxy error: %s", e)
        raise UpstreamError("Failed to fetch Ollama models") from e

    models = payload.get("models") if isinstance(payload, dict) else None
    if not isinstance(models, list):
        logger.error("Unexpected Ollama /api/tags payload: %r", payload)
        raise UpstreamError("Invalid response from Ollama")
    return models


def ollama_chat(base_url: str, model: str, message: str):
    """Send one user message to the OpenAI-compatible endpoint; return its JSON."""
    try:
        resp = http_requests.post(
            _ollama_url(base_url, "/v1/chat/completions"),
            headers={"User-Agent": USER_AGENT},
            json={
                "model": model,
                "messages": [{"role": "user", "content": message}],
                "stream": False,
            },
            timeout=PROXY_TIMEOUT,
        )
        return resp.json()
    except (http_requests.RequestException, ValueError) as e:
        logger.error("Ollama chat proxy error: %s", e)
        raise UpstreamError("Failed to connect to Ollama") from e


# ── Media ─────────────────────────────────────────────────────────────────


def open_media(url: str, range_header: str | None = None) -> http_requests.Response:
    """Start a streamed GET; the caller must close the response."""
    headers = {"User-Agent": USER_AGENT}
    if range_header:
        headers["Range"] = range_header
    try:
        return http_requests.get(url, headers=headers, timeout=PROXY_TIMEOUT, stream=True)
    except http_requests.Timeout as e:
        logger.error("Media proxy timeout for %s", url)
        raise UpstreamError("Media fetch timeout") from e
    except (http_requests.RequestException, ValueError) as e:
        logger.error("Media proxy error for %s: %s", url, e)
        raise UpstreamError("Failed to fetch media") from e
