"""RepInsight - review aggregation and spike detection for reputation profiles."""

__version__ = "1.0.0"
__author__ = "RepInsight Team"

from .core.models import *
from .core.config import settings
from .core.aggregate import aggregate
from .services.llm import LLMServiceFactory
from .services.report import ReportService

__all__ = [
    "settings",
    "aggregate",
    "LLMServiceFactory",
    "ReportService",
]
