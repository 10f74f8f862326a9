"""Application entrypoint for the Dhaka Dispatch batch agent.

One invocation is one run:
1) load configuration and check the trigger credential
2) gather, translate and select articles
3) compose, upload and deliver one post per slot, then the final bundle
"""

from __future__ import annotations

import argparse
import getpass
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from .fetchers import ArticleGateway
from .imaging import Compositor, ImageGenerator, ImageSource
from .orchestrator import Orchestrator
from .output.cloudinary_client import CloudinaryUploader
from .output.run_report import RunReport
from .output.status_reporter import StatusReporter
from .output.webhook_client import WebhookClient
from .processors.ai import create_ai_client
from .utils.config_loader import ConfigError, PipelineDefinition, load_pipeline_config
from .utils.logging import configure_logging, get_logger
from .utils.pipeline_config import PipelineConfig
from .utils.trigger import is_authorized, parse_trigger

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_UNAUTHORIZED = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Dhaka Dispatch agent: fetch, select, compose and deliver a batch of news posts"
    )
    parser.add_argument(
        "--config",
        default="config/pipeline.yaml",
        help="Path to the pipeline configuration file (YAML)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and analyze, but do not upload or send webhooks; log planned actions",
    )
    parser.add_argument(
        "--trigger",
        default=None,
        help="Unattended start, e.g. 'action=start&password=...' (a full URL also works)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (default: LOG_LEVEL env or INFO)",
    )
    parser.add_argument(
        "--max-articles",
        type=int,
        default=None,
        help="Cap the article pool sent to the model (for quick runs)",
    )
    return parser.parse_args(argv)


def authorize(args: argparse.Namespace, expected_password: str, *, interactive: bool) -> bool:
    """Check the shared secret for this start request."""
    if args.trigger is not None:
        trigger = parse_trigger(args.trigger)
        if not trigger.is_start:
            return False
        return is_authorized(trigger.password, expected_password)
    if not expected_password:
        return True
    if not interactive:
        return False
    return is_authorized(getpass.getpass("Password: "), expected_password)


def build_orchestrator(
    definition: PipelineDefinition,
    cfg: PipelineConfig,
    *,
    dry_run: bool = False,
    max_articles: Optional[int] = None,
) -> Orchestrator:
    gateway = ArticleGateway(
        api_keys={"newsapi": cfg.newsapi_key, "apitube": cfg.apitube_key},
        lookback_days=cfg.lookback_days,
        timeout=cfg.http_timeout,
    )
    uploader = CloudinaryUploader(
        cloud_name=cfg.cloudinary_cloud_name or None,
        upload_preset=cfg.cloudinary_upload_preset or None,
        dry_run=dry_run,
    )
    webhooks = WebhookClient(
        task_url=cfg.task_webhook_url or None,
        task_token=cfg.task_webhook_token or None,
        final_bundle_url=cfg.final_bundle_webhook_url or None,
        dry_run=dry_run,
        timeout=cfg.http_timeout,
    )
    return Orchestrator(
        definition,
        gateway=gateway,
        ai=create_ai_client(),
        image_source=ImageSource(generator=ImageGenerator()),
        compositor=Compositor(definition.branding),
        uploader=uploader,
        webhooks=webhooks,
        status_reporter=StatusReporter(url=cfg.status_webhook_url, enabled=not dry_run),
        max_articles=max_articles,
    )


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv(override=False)
    args = parse_args(argv)
    configure_logging(level=args.log_level)
    logger = get_logger("dd.agent")

    cfg = PipelineConfig()
    if not authorize(args, cfg.app_password, interactive=sys.stdin.isatty()):
        logger.error("Unauthorized start request; expected action=start and a valid password")
        return EXIT_UNAUTHORIZED

    config_path = Path(args.config)
    logger.info("Loading pipeline configuration from %s", config_path)
    try:
        definition = load_pipeline_config(config_path)
    except ConfigError as exc:
        logger.exception("Failed to load configuration: %s", exc)
        return EXIT_FAILED
    logger.info("Loaded %d topic(s) and %d slot(s)", len(definition.topics), len(definition.slots))

    try:
        orch = build_orchestrator(definition, cfg, dry_run=args.dry_run, max_articles=args.max_articles)
    except (RuntimeError, ValueError) as exc:
        logger.exception("Failed to initialise clients: %s", exc)
        return EXIT_FAILED

    try:
        ctx = orch.run()
    finally:
        if orch.status_reporter is not None:
            orch.status_reporter.close(wait=True)

    logger.info("\n%s", RunReport.from_context(ctx).to_markdown())
    return EXIT_FAILED if ctx.fatal_error else EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    raise SystemExit(main())
