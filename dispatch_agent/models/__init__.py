"""Typed models used across the application."""

from .article import Article, ArticleAnalysis, TaskResult
from .branding import Branding
from .log_entry import LogEntry, LogLevel
from .slot import Slot, SlotSpec, SlotStatus, distinct_categories
from .topic import ProviderQuery, Topic

__all__ = [
    "Article",
    "ArticleAnalysis",
    "TaskResult",
    "Branding",
    "LogEntry",
    "LogLevel",
    "Slot",
    "SlotSpec",
    "SlotStatus",
    "distinct_categories",
    "ProviderQuery",
    "Topic",
]
