"""
External text-classification client (optional enrichment).

Calls a hosted text-classification model over HTTP with a timeout and a
bounded number of retries. Every failure mode (network error, timeout, HTTP
error, unexpected payload) is raised as UpstreamUnavailable so the caller can
drop the facet and still return a result.
"""

import logging
import time
from typing import Any, Dict, List, Optional

import requests

from analyzers.errors import UpstreamUnavailable
from config.settings import settings

logger = logging.getLogger(__name__)


class TextClassifierClient:
    def __init__(
        self,
        model: str = settings.HF_TOXICITY_MODEL,
        api_token: Optional[str] = settings.HF_API_TOKEN,
        base_url: str = settings.HF_API_URL,
        timeout: float = settings.REQUEST_TIMEOUT,
        max_retries: int = settings.MAX_RETRIES,
        backoff_seconds: float = 0.5,
        session: Optional[requests.Session] = None,
    ):
        self.model = model
        self.url = f"{base_url.rstrip('/')}/{model}"
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.backoff_seconds = backoff_seconds
        self.session = session or requests.Session()
        if api_token:
            self.session.headers.update({"Authorization": f"Bearer {api_token}"})

    def _post(self, text: str) -> Any:
        """HTTP POST with retry + exponential backoff."""
        last_error = ""
        for attempt in range(self.max_retries):
            try:
                resp = self.session.post(self.url, json={"inputs": text}, timeout=self.timeout)
                resp.raise_for_status()
                return resp.json()
            except (requests.RequestException, ValueError) as e:
                last_error = str(e)
                logger.warning(
                    f"Attempt {attempt + 1}/{self.max_retries} failed for {self.model}: {e}"
                )
                if attempt + 1 < self.max_retries:
                    time.sleep(self.backoff_seconds * (2 ** attempt))
        raise UpstreamUnavailable(self.model, last_error)

    @staticmethod
    def _top_label(payload: Any) -> Dict[str, Any]:
        # The hosted API answers [[{label, score}, ...]] for a single input.
        candidates: List[Any] = payload
        if isinstance(candidates, list) and candidates and isinstance(candidates[0], list):
            candidates = candidates[0]
        if not isinstance(candidates, list) or not candidates:
            raise UpstreamUnavailable("classifier", "empty classification payload")
        try:
            best = max(candidates, key=lambda c: float(c["score"]))
            return {"label": str(best["label"]), "score": round(float(best["score"]), 4)}
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamUnavailable("classifier", f"malformed payload: {e}")

    def classify(self, text: str) -> Dict[str, Any]:
        """Top {label, score} for `text`."""
        return self._top_label(self._post(text))
