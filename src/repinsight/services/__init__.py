"""Services for RepInsight."""

from .llm import LLMService, LLMServiceFactory, OpenAIService, FallbackLLMService
from .ethos_client import EthosService
from .summary_cache import SummaryCache
from .report import ReportService

__all__ = [
    "LLMService",
    "LLMServiceFactory",
    "OpenAIService",
    "FallbackLLMService",
    "EthosService",
    "SummaryCache",
    "ReportService",
]
