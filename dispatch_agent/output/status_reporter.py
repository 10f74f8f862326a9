from __future__ import annotations

import os
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

import requests

from ..models import LogEntry
from ..utils.logging import get_logger

logger = get_logger("dd.output.status")


class StatusReporter:
    """Fire-and-forget delivery of run log entries to a monitoring webhook.

    Posts run on a small background pool. :meth:`report` never blocks on the
    network and never raises; delivery failures are logged at debug level.
    Ordering between entries is best effort.
    """

    def __init__(
        self,
        *,
        url: Optional[str] = None,
        timeout: int = 10,
        max_workers: int = 2,
        enabled: bool = True,
    ) -> None:
        self.url = url if url is not None else os.environ.get("STATUS_WEBHOOK_URL")
        self.timeout = timeout
        self.enabled = enabled and bool(self.url)
        self._executor: Optional[ThreadPoolExecutor] = None
        if enabled and not self.url:
            logger.warning("Status reporting is disabled. Set STATUS_WEBHOOK_URL to enable it.")
        if self.enabled:
            self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="status")

    def _post(self, payload: dict) -> None:
        resp = requests.post(self.url, json=payload, timeout=self.timeout)
        resp.raise_for_status()

    @staticmethod
    def _on_done(fut: Future) -> None:
        exc = fut.exception()
        if exc is not None:
            logger.debug("Failed to send status update: %s", exc)

    def report(self, entry: LogEntry) -> None:
        if not self.enabled or self._executor is None:
            return
        try:
            fut = self._executor.submit(self._post, entry.to_payload())
        except RuntimeError as exc:  # executor already shut down
            logger.debug("Status reporter closed; dropping entry: %s", exc)
            return
        fut.add_done_callback(self._on_done)

    def close(self, *, wait: bool = True) -> None:
        """Stop accepting entries; with ``wait`` let in-flight posts finish."""
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
