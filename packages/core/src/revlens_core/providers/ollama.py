from __future__ import annotations

import logging
import os
import sys

import requests

from revlens_core.config import DEFAULT_MODEL, DEFAULT_OLLAMA_URL
from revlens_core.models import ReviewFragment, ReviewRequest
from revlens_core.providers.base import BaseReviewer

logger = logging.getLogger(__name__)


def _debug_enabled() -> bool:
    return os.environ.get("DEBUG", "") == "TRUE"


class OllamaReviewer(BaseReviewer):
    """Reviewer backed by a local Ollama server's ``/api/generate`` route.

    The request always says ``stream: false``, yet the server may still answer
    with one JSON object per line. The body is therefore parsed line by line
    regardless of the flag.
    """

    GENERATE_PATH = "/api/generate"

    def __init__(
        self,
        ollama_url: str | None = None,
        model: str | None = None,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ):
        self.ollama_url = ollama_url or DEFAULT_OLLAMA_URL
        self.model = model or DEFAULT_MODEL
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.ollama_url}{self.GENERATE_PATH}"

    def _call_api(self, prompt: str) -> str:
        request = ReviewRequest(model=self.model, prompt=prompt, stream=False)
        logger.debug("POST %s (model=%s, %d prompt chars)", self.endpoint, self.model, len(prompt))
        response = self.session.post(self.endpoint, json=request.to_dict(), timeout=self.timeout)

        status = response.status_code
        text = response.text

        if _debug_enabled():
            sys.stderr.write(f"Response status: {status}\n")
            sys.stderr.write(f"Raw response: {text}\n")

        if status >= 400:
            logger.warning("%s returned HTTP %d", self.endpoint, status)

        return text

    def _parse(self, raw: str) -> str:
        """Concatenate fragment texts in order, stopping at the first ``done`` fragment.

        Lines that are not fragments (blank keep-alives, diagnostics) are skipped.
        """
        parts: list[str] = []
        # Split on "\n" only: str.splitlines() would also break on U+2028,
        # which JSON permits unescaped inside strings.
        for line in raw.split("\n"):
            fragment = ReviewFragment.from_line(line.removesuffix("\r"))
            if fragment is None:
                if line.strip():
                    logger.debug("Skipping undecodable response line: %s", line[:200])
                continue
            parts.append(fragment.response)
            if fragment.done:
                break
        return "".join(parts)

    def close(self) -> None:
        self.session.close()
