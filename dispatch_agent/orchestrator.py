from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from .fetchers import ArticleGateway
from .imaging import Compositor, ImageSource
from .models import Article, ArticleAnalysis, LogEntry, LogLevel, Slot, SlotStatus, TaskResult
from .output.cloudinary_client import CloudinaryUploader
from .output.status_reporter import StatusReporter
from .output.webhook_client import WebhookClient, build_task_payload
from .processors.ai import AIClient
from .processors.select import select_and_analyze
from .processors.translate import translate_articles
from .utils.config_loader import PipelineDefinition
from .utils.logging import get_logger, python_level

logger = get_logger("dd.orchestrator")

NO_ARTICLE_SELECTED = "no article selected for this slot"


def _run_id() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")


@dataclass
class RunContext:
    """Mutable state of one run. Owned by a single :class:`Orchestrator.run` call."""

    slots: List[Slot]
    run_id: str = field(default_factory=_run_id)
    logs: List[LogEntry] = field(default_factory=list)
    results: List[TaskResult] = field(default_factory=list)
    articles_gathered: int = 0
    analyses_returned: int = 0
    bundle_sent: bool = False
    fatal_error: Optional[str] = None
    on_log: Optional[Callable[[LogEntry], None]] = None

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        category: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> LogEntry:
        entry = LogEntry(level=level, message=message, category=category, details=details)
        self.logs.append(entry)
        if category:
            logger.log(python_level(level), "[%s] %s", category, message)
        else:
            logger.log(python_level(level), "%s", message)
        if self.on_log is not None:
            self.on_log(entry)
        return entry

    def set_status(
        self,
        slot: Slot,
        status: SlotStatus,
        *,
        result: Optional[TaskResult] = None,
        error: Optional[str] = None,
    ) -> None:
        if slot.status.is_terminal:
            raise RuntimeError(f"Slot {slot.id} is already {slot.status.value}; cannot move to {status.value}")
        if status is not slot.status:
            slot.history.append(status)
        slot.status = status
        if result is not None:
            slot.result = result
        if error is not None:
            slot.error = error

    def set_all(self, status: SlotStatus) -> None:
        for slot in self.slots:
            if not slot.status.is_terminal:
                self.set_status(slot, status)

    def fail_open_slots(self, message: str) -> None:
        for slot in self.slots:
            if not slot.status.is_terminal:
                self.set_status(slot, SlotStatus.ERROR, error=message)

    def slots_with(self, status: SlotStatus) -> List[Slot]:
        return [s for s in self.slots if s.status is status]


def resolve_article(pool: Sequence[Article], index: Any) -> Optional[Article]:
    """Article at ``index`` or ``None``. Only non-negative in-range integers count."""
    if isinstance(index, str):
        # int() only takes decimal digits; isdigit() also admits superscripts
        if not index.strip().isdecimal():
            return None
        try:
            index = int(index.strip())
        except ValueError:
            return None
    if isinstance(index, bool) or not isinstance(index, int):
        return None
    if 0 <= index < len(pool):
        return pool[index]
    return None


class Orchestrator:
    """Drive one batch: gather, translate, select, then fill each slot in turn."""

    def __init__(
        self,
        definition: PipelineDefinition,
        *,
        gateway: ArticleGateway,
        ai: AIClient,
        image_source: ImageSource,
        compositor: Compositor,
        uploader: CloudinaryUploader,
        webhooks: WebhookClient,
        status_reporter: Optional[StatusReporter] = None,
        max_articles: Optional[int] = None,
    ) -> None:
        self.definition = definition
        self.gateway = gateway
        self.ai = ai
        self.images = image_source
        self.compositor = compositor
        self.uploader = uploader
        self.webhooks = webhooks
        self.status_reporter = status_reporter
        self.max_articles = max_articles

    def new_context(self) -> RunContext:
        return RunContext(
            slots=[Slot.from_spec(spec) for spec in self.definition.slots],
            on_log=self.status_reporter.report if self.status_reporter else None,
        )

    # ---------------- Run-wide phases -----------------
    def _gather(self, ctx: RunContext) -> List[Article]:
        ctx.log("INFO", "Gathering a large pool of articles from all sources...")
        ctx.set_all(SlotStatus.GATHERING)
        pool = self.gateway.gather(self.definition.topics)
        if self.max_articles is not None and self.max_articles >= 0 and len(pool) > self.max_articles:
            logger.info("Truncating pool from %d to max_articles=%d", len(pool), self.max_articles)
            pool = pool[: self.max_articles]
        ctx.articles_gathered = len(pool)
        ctx.log("SUCCESS", f"Successfully gathered {len(pool)} unique articles.")
        return pool

    def _translate(self, ctx: RunContext, pool: List[Article]) -> List[Article]:
        ctx.log("INFO", "Translating articles to English for consistent analysis...")
        translated = translate_articles(pool, ai=self.ai)
        ctx.log("SUCCESS", f"Translation complete. Pool of {len(translated)} articles is ready.")
        return translated

    def _select(self, ctx: RunContext, pool: List[Article]) -> List[ArticleAnalysis]:
        ctx.log("INFO", f"Sending article pool of {len(pool)} articles to AI for selection and analysis...")
        ctx.set_all(SlotStatus.PROCESSING)
        analyses = select_and_analyze(
            pool,
            slot_specs=self.definition.slots,
            categories=self.definition.categories,
            topics=self.definition.topics,
            ai=self.ai,
        )
        ctx.analyses_returned = len(analyses)
        ctx.log("SUCCESS", f"AI has selected and analyzed {len(analyses)} articles.")
        return analyses

    # ---------------- Slot assignment -----------------
    def _assign(self, ctx: RunContext, pool: List[Article], analyses: Sequence[ArticleAnalysis]) -> None:
        open_slots: Dict[str, List[Slot]] = {}
        for slot in ctx.slots:
            open_slots.setdefault(slot.category, []).append(slot)
        claimed: set[str] = set()

        for analysis in analyses:
            article = resolve_article(pool, analysis.original_article_index)
            if article is None:
                ctx.log("ERROR", f"AI returned an invalid article ID: {analysis.original_article_index}")
                continue

            available = [s for s in open_slots.get(analysis.category, []) if s.id not in claimed]
            if not available:
                ctx.log(
                    "ERROR",
                    f"AI returned an article for category '{analysis.category}', but all slots are already filled.",
                )
                continue

            slot = available[0]
            claimed.add(slot.id)
            self._process_slot(ctx, slot, article, analysis)

        for slot in ctx.slots:
            if slot.id not in claimed and not slot.status.is_terminal:
                ctx.set_status(slot, SlotStatus.ERROR, error=NO_ARTICLE_SELECTED)
                ctx.log("ERROR", NO_ARTICLE_SELECTED, category=slot.category_name)

    def _process_slot(self, ctx: RunContext, slot: Slot, article: Article, analysis: ArticleAnalysis) -> None:
        name = slot.category_name
        generated: List[bool] = []

        def on_fallback(exc: Exception) -> None:
            generated.append(True)
            ctx.log(
                "INFO",
                "Article image failed. Generating new one.",
                category=name,
                details={"error": str(exc)},
            )
            ctx.set_status(slot, SlotStatus.GENERATING_IMAGE)

        try:
            image = self.images.acquire(article, analysis.image_prompt, on_fallback=on_fallback)
            ctx.log("INFO", "Generated image ready." if generated else "Article image loaded.", category=name)

            ctx.set_status(slot, SlotStatus.COMPOSING)
            ctx.log("INFO", "Composing final image.", category=name)
            composed = self.compositor.compose(image, analysis.headline, analysis.highlight_phrases)

            ctx.set_status(slot, SlotStatus.UPLOADING)
            ctx.log("INFO", "Uploading to Cloudinary.", category=name)
            image_url = self.uploader.upload(composed, public_id=f"{slot.id}-{ctx.run_id}")

            ctx.set_status(slot, SlotStatus.SENDING_WEBHOOK)
            ctx.log("INFO", "Sending to workflow.", category=name)
            self.webhooks.send_task(
                build_task_payload(
                    headline=analysis.headline,
                    image_url=image_url,
                    summary=analysis.caption,
                    news_link=article.link,
                )
            )

            result = TaskResult(
                headline=analysis.headline,
                image_url=image_url,
                caption=analysis.caption,
                source_url=article.link,
                source_name=analysis.source_name or article.source_name,
            )
            ctx.set_status(slot, SlotStatus.DONE, result=result)
            ctx.results.append(result)
            ctx.log("SUCCESS", "Task completed successfully!", category=name, details={"headline": analysis.headline})
        except Exception as exc:  # noqa: BLE001 - slot boundary
            message = str(exc) or exc.__class__.__name__
            logger.debug("Slot %s failed", slot.id, exc_info=True)
            ctx.set_status(slot, SlotStatus.ERROR, error=message)
            ctx.log("ERROR", f"Processing failed: {message}", category=name)

    # ---------------- Final bundle -----------------
    def _send_final_bundle(self, ctx: RunContext) -> None:
        results = [s.result for s in ctx.slots_with(SlotStatus.DONE) if s.result is not None]
        if results:
            ctx.log("INFO", f"Sending final bundle of {len(results)} content pieces to webhook.")
        else:
            ctx.log("INFO", "No successful content was generated to be sent in the final bundle.")
        try:
            # An empty result list is a no-op inside the client
            ctx.bundle_sent = self.webhooks.send_final_bundle(results)
        except Exception as exc:  # noqa: BLE001 - reporting only
            ctx.log("ERROR", f"Failed to send final content bundle: {exc}")
            return
        if ctx.bundle_sent:
            ctx.log("SUCCESS", "Final bundle sent successfully.")

    def run(self) -> RunContext:
        ctx = self.new_context()
        ctx.log("INFO", "Automation process started.")
        try:
            pool = self._gather(ctx)
            pool = self._translate(ctx, pool)
            analyses = self._select(ctx, pool)
        except Exception as exc:  # noqa: BLE001 - run-fatal boundary
            ctx.fatal_error = str(exc) or exc.__class__.__name__
            logger.debug("Run aborted", exc_info=True)
            ctx.log("ERROR", f"Automation failed critically: {ctx.fatal_error}")
            ctx.fail_open_slots(f"Process failed: {ctx.fatal_error}")
        else:
            self._assign(ctx, pool, analyses)
        finally:
            ctx.log("SUCCESS", "Automation process finished.")
            self._send_final_bundle(ctx)
        return ctx
