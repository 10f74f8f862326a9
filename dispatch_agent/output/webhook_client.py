from __future__ import annotations

import os
from typing import Any, Dict, List, Optional, Sequence

import requests

from ..models import TaskResult
from ..utils.logging import get_logger

logger = get_logger("dd.output.webhook")


class WebhookError(RuntimeError):
    """A webhook answered with a non-2xx status or could not be reached."""


def build_task_payload(*, headline: str, image_url: str, summary: str, news_link: str) -> Dict[str, Any]:
    return {
        "headline": headline,
        "imageUrl": image_url,
        "summary": summary,
        "newsLink": news_link,
        "status": "Queue",
    }


def build_final_bundle_payload(results: Sequence[TaskResult]) -> Dict[str, Any]:
    """``link1..linkN`` carry the uploaded image URLs, in completion order."""
    payload: Dict[str, Any] = {f"link{i}": r.image_url for i, r in enumerate(results, start=1)}
    payload["generatedContents"] = [
        {"imageUrl": r.image_url, "caption": r.caption, "sourceLink": r.source_url}
        for r in results
    ]
    return payload


class WebhookClient:
    """Make.com-style webhooks for per-task delivery and the final bundle.

    Environment:
      - TASK_WEBHOOK_URL, TASK_WEBHOOK_TOKEN (sent as ``x-make-apikey``)
      - FINAL_BUNDLE_WEBHOOK_URL
    """

    def __init__(
        self,
        *,
        task_url: Optional[str] = None,
        task_token: Optional[str] = None,
        final_bundle_url: Optional[str] = None,
        dry_run: bool = False,
        timeout: int = 30,
    ) -> None:
        self.task_url = task_url or os.environ.get("TASK_WEBHOOK_URL")
        self.task_token = task_token or os.environ.get("TASK_WEBHOOK_TOKEN")
        self.final_bundle_url = final_bundle_url or os.environ.get("FINAL_BUNDLE_WEBHOOK_URL")
        self.dry_run = dry_run
        self.timeout = timeout

    def _post(self, url: str, payload: Dict[str, Any], *, headers: Optional[Dict[str, str]] = None) -> requests.Response:
        try:
            return requests.post(url, json=payload, headers=headers or {}, timeout=self.timeout)
        except requests.RequestException as exc:
            raise WebhookError(f"Webhook request failed: {exc}") from exc

    def send_task(self, payload: Dict[str, Any]) -> None:
        if self.dry_run:
            logger.info("[DRY-RUN] Would send task webhook: %s", payload.get("headline"))
            return
        if not self.task_url:
            raise WebhookError("TASK_WEBHOOK_URL is not configured")

        headers = {"x-make-apikey": self.task_token} if self.task_token else {}
        resp = self._post(self.task_url, payload, headers=headers)
        if resp.status_code == 401:
            raise WebhookError(
                "Webhook request failed (401 Unauthorized). The token in the `x-make-apikey` header "
                "was rejected. Verify TASK_WEBHOOK_TOKEN."
            )
        if not resp.ok:
            raise WebhookError(f"Webhook request failed with status {resp.status_code}: {resp.text[:300]}")
        logger.info("Sent task webhook for headline: %r", payload.get("headline"))

    def send_final_bundle(self, results: Sequence[TaskResult]) -> bool:
        """Send every successful result in one payload.

        Returns ``False`` without a request when there is nothing to send or
        no URL is configured.
        """
        if not results:
            logger.info("No successful results to send to final bundle webhook.")
            return False
        if not self.final_bundle_url:
            logger.warning("FINAL_BUNDLE_WEBHOOK_URL is not configured; skipping final bundle")
            return False

        payload = build_final_bundle_payload(results)
        if self.dry_run:
            logger.info("[DRY-RUN] Would send final bundle of %d item(s)", len(results))
            return True

        resp = self._post(self.final_bundle_url, payload)
        if not resp.ok:
            raise WebhookError(
                f"Final bundle webhook request failed with status {resp.status_code}: {resp.text[:300]}"
            )
        logger.info("Sent final bundle of %d item(s)", len(results))
        return True
