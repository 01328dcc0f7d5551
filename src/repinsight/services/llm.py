"""LLM services for review summaries and spike explanations."""

import hashlib
import json
import logging
import re
from abc import ABC, abstractmethod
from datetime import datetime
from textwrap import dedent
from typing import Dict, List, Optional, Sequence

import openai
from diskcache import Cache
from tenacity import retry, stop_after_attempt, wait_exponential

from ..core.config import settings
from ..core.constants import CacheConstants, PromptConstants
from ..core.errors import LLMResponseError
from ..core.models import (
    AggregateResult,
    Sentiment,
    Spike,
    SpikeInsight,
    SpikeType,
    SummaryResult,
    SummaryStats,
    ThemeEvidence,
    TimelineMonth,
)

logger = logging.getLogger(__name__)

SUMMARY_SYSTEM_PROMPT = dedent("""
You are a neutral analyst specializing in summarizing user reviews.

Your task:
- Analyze ALL provided reviews (positive, negative, and neutral) to generate comprehensive summaries
- IMPORTANT: Refer to the subject by their actual name/username, NOT as "Ethos Network"
- Create an overall summary covering the complete reputation picture
- Write detailed summaries for positive and negative reviews separately
- Identify key themes as short 2-3 word badges
- Use only the provided text - no speculation or external knowledge
- Be balanced and fair in your analysis

Output format (JSON):
{
  "summary": "Comprehensive 4-5 sentence overall reputation summary (400-500 characters) covering positive, negative, AND neutral reviews. Use the person's actual name.",
  "positiveSummary": "2-3 sentence summary of all positive reviews. Use the person's actual name.",
  "negativeSummary": "2-3 sentence summary of all negative reviews (or 'No negative reviews.' if none).",
  "positiveNotes": "1 sentence positive highlight",
  "negativeNotes": "1 sentence on concerns (or 'No significant concerns' if none)",
  "positiveThemes": ["Theme1", "Theme2", "Theme3"],
  "negativeThemes": ["Issue1", "Issue2"]
}
""").strip()

SPIKE_SYSTEM_PROMPT = dedent("""
You are an analyst specializing in reputation timeline analysis.

Your task:
- Analyze reviews from a specific time period that saw a significant spike in activity
- Identify what triggered the spike (event, project, controversy, etc.)
- Match your analysis tone to the spike type:
  * NEGATIVE spike: focus on criticism, problems, failures, or controversies that caused backlash.
  * POSITIVE spike: focus on achievements, successes, or positive reception.
  * MIXED spike: acknowledge both sides and explain the divisive trigger.
- Be specific and evidence-based - reference actual review content
- Provide detailed analysis (3-4 sentences, up to 400 characters maximum)

Output format (JSON):
{
  "analysis": "Detailed 3-4 sentence explanation matching the spike's sentiment. Maximum 400 characters."
}
""").strip()

SPIKE_TYPE_INSTRUCTIONS = {
    SpikeType.NEGATIVE: "This is a NEGATIVE spike. Your analysis MUST focus on what went wrong, criticism, problems, or controversies. Do NOT sugarcoat it.",
    SpikeType.POSITIVE: "This is a POSITIVE spike. Your analysis should focus on achievements, successes, or positive reception.",
    SpikeType.MIXED: "This is a MIXED spike. Your analysis should acknowledge both positive and negative aspects.",
}


def _strip_code_fences(s: str) -> str:
    s = s.strip()
    return re.sub(r"^```(?:json)?|```$", "", s, flags=re.IGNORECASE | re.MULTILINE).strip()


def _safe_json(s: str) -> dict:
    """Parse a JSON object from an LLM response, tolerating fences and trailing commas."""
    cleaned = _strip_code_fences(s or "")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        cleaned = re.sub(r",\s*([}\]])", r"\1", cleaned)  # trailing commas
        match = re.search(r"\{.*\}", cleaned, re.S)
        if not match:
            raise LLMResponseError(f"Could not parse JSON from: {s[:200]}...")
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            raise LLMResponseError(f"Could not parse JSON from: {s[:200]}...") from e
    if not isinstance(data, dict):
        raise LLMResponseError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def _fmt(value: float) -> str:
    # 4.0 -> "4", 2.35 -> "2.35"
    return f"{value:g}"


def _capitalize(term: str) -> str:
    return term[:1].upper() + term[1:]


def get_trend(timeline: Sequence[TimelineMonth]) -> str:
    """Compare net sentiment of the last 3 months with the 3 before them."""
    if len(timeline) < 2:
        return "stable"

    recent = timeline[-3:]
    older = timeline[-6:-3]
    if not recent or not older:
        return "stable"

    recent_avg = sum(m.pos - m.neg for m in recent) / len(recent)
    older_avg = sum(m.pos - m.neg for m in older) / len(older)

    if recent_avg > older_avg * 1.2:
        return "improving"
    if recent_avg < older_avg * 0.8:
        return "declining"
    return "stable"


def _pct_positive(agg: AggregateResult) -> float:
    return round(agg.counts.positive / (agg.counts.total or 1) * 100, 1)


def _theme_evidence(agg: AggregateResult, sentiment: Sentiment) -> List[ThemeEvidence]:
    """Top keyword themes, each backed by two example snippets."""
    group = agg.positives if sentiment == Sentiment.POSITIVE else agg.negatives
    per_theme = PromptConstants.EVIDENCE_PER_THEME
    themes = []
    for idx, keyword in enumerate(group.keywords[:PromptConstants.THEMES_PER_GROUP]):
        examples = group.examples[idx * per_theme:idx * per_theme + per_theme]
        themes.append(ThemeEvidence(
            theme=_capitalize(keyword.term),
            evidence=[f'"{ex.snippet}"' for ex in examples],
        ))
    return themes


def _stats(agg: AggregateResult) -> SummaryStats:
    return SummaryStats(
        positive=agg.counts.positive,
        negative=agg.counts.negative,
        neutral=agg.counts.neutral,
        pct_positive=_pct_positive(agg),
    )


def _outlier_notes(agg: AggregateResult) -> List[Dict[str, str]]:
    return [{"reviewId": o.id, "why": o.reason} for o in agg.outliers]


def deterministic_summary(agg: AggregateResult) -> SummaryResult:
    """Rule-based summary built only from the aggregate."""
    total = agg.counts.total
    pct_positive = _pct_positive(agg)
    trend = get_trend(agg.timeline)

    summary = (
        f"Based on {total} review{'s' if total != 1 else ''}: {_fmt(pct_positive)}% positive, "
        f"{agg.counts.negative} negative, {agg.counts.neutral} neutral."
    )
    if trend != "stable":
        summary += f" Recent trend is {trend}."

    positives = _theme_evidence(agg, Sentiment.POSITIVE)
    negatives = _theme_evidence(agg, Sentiment.NEGATIVE)
    has_pos = agg.counts.positive > 0
    has_neg = agg.counts.negative > 0

    return SummaryResult(
        summary=summary,
        positive_summary=(
            f"Received {agg.counts.positive} positive reviews highlighting strong reputation and community trust."
            if has_pos else "No positive reviews."
        ),
        negative_summary=(
            f"{agg.counts.negative} negative reviews raised some concerns about specific interactions or behaviors."
            if has_neg else "No negative reviews."
        ),
        positive_notes="Positive feedback received across multiple reviews." if has_pos else "Limited positive feedback.",
        negative_notes="Some concerns raised in reviews." if has_neg else "No significant concerns.",
        positive_themes=[t.theme for t in positives][:PromptConstants.FALLBACK_POSITIVE_THEMES],
        negative_themes=[t.theme for t in negatives][:PromptConstants.FALLBACK_NEGATIVE_THEMES],
        positives=positives,
        negatives=negatives,
        stats=_stats(agg),
        outliers=_outlier_notes(agg),
    )


def deterministic_spike_analysis(spike: Spike) -> str:
    """Rule-based explanation of a spike."""
    return (
        f"Spike in {spike.type.value} reviews ({spike.review_count} reviews, {_fmt(spike.magnitude)}x average). "
        f"Activity increased significantly compared to typical months."
    )


def select_spike_reviews(spike: Spike) -> List[str]:
    """Review lines for a spike prompt, favouring the spike's own sentiment."""
    candidates = [
        r for r in spike.reviews
        if r.comment and len(r.comment) > PromptConstants.MIN_REVIEW_TEXT_LENGTH
    ]

    if spike.type == SpikeType.MIXED:
        chosen = candidates[:PromptConstants.MAX_SPIKE_MIXED_REVIEWS]
    else:
        primary = Sentiment.NEGATIVE if spike.type == SpikeType.NEGATIVE else Sentiment.POSITIVE
        matching = [r for r in candidates if r.score == primary]
        others = [r for r in candidates if r.score != primary]
        chosen = (
            matching[:PromptConstants.MAX_SPIKE_PRIMARY_REVIEWS]
            + others[:PromptConstants.MAX_SPIKE_OTHER_REVIEWS]
        )

    return [f"[{r.score.value}] {r.comment}" for r in chosen]


class LLMService(ABC):
    """Summarization and spike-explanation capability."""

    @abstractmethod
    def summarize(
        self,
        agg: AggregateResult,
        review_texts: Optional[Dict[str, List[str]]] = None,
        profile_name: Optional[str] = None,
    ) -> SummaryResult:
        """Summarize an aggregate."""

    @abstractmethod
    def explain_spike(self, spike: Spike, profile_name: str = "the user") -> SpikeInsight:
        """Explain why a spike happened."""

    def analyze_spikes(self, spikes: Sequence[Spike], profile_name: str = "the user") -> List[SpikeInsight]:
        """Explain every spike; a spike that fails is logged and skipped."""
        if not spikes:
            return []

        insights = []
        for spike in spikes:
            try:
                insights.append(self.explain_spike(spike, profile_name))
            except Exception as e:
                logger.error(f"Failed to analyze spike {spike.month}: {e}")

        logger.info(f"Generated {len(insights)} spike insight(s)")
        return insights


class LLMServiceFactory:
    """Factory for creating LLM services."""

    @staticmethod
    def create(api_key: Optional[str] = None) -> LLMService:
        """Create appropriate LLM service; a caller-supplied key wins over the configured one."""
        key = api_key or settings.effective_openai_key
        if key:
            return OpenAIService(api_key=key)
        return FallbackLLMService()


class OpenAIService(LLMService):
    """OpenAI-based LLM service."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, cache=None, client=None):
        self.client = client or openai.OpenAI(api_key=api_key or settings.effective_openai_key)
        self.model = model or settings.openai_model
        self.cache = cache if cache is not None else Cache(settings.cache_dir)
        logger.info("OpenAI service initialized with caching")

    @retry(
        stop=stop_after_attempt(settings.max_retries),
        wait=wait_exponential(multiplier=settings.retry_delay, max=settings.retry_backoff * 10),
        reraise=True,
    )
    def _complete(self, system: str, user: str, max_tokens: int) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            max_tokens=max_tokens,
            temperature=PromptConstants.SUMMARY_TEMPERATURE,
            response_format={"type": "json_object"},
            timeout=settings.request_timeout,
        )
        return (response.choices[0].message.content or "").strip()

    def chat(self, system: str, user: str, max_tokens: int = PromptConstants.MAX_SUMMARY_TOKENS,
             prompt_version: str = PromptConstants.SUMMARY_PROMPT_VERSION) -> str:
        """JSON-mode chat completion with caching."""
        cache_key = hashlib.md5(f"{self.model}|{system}|{user}|{max_tokens}|{prompt_version}".encode()).hexdigest()

        cached_response = self.cache.get(cache_key)
        if cached_response:
            logger.debug(f"Cache hit for LLM request: {cache_key[:CacheConstants.CACHE_KEY_LENGTH]}...")
            return cached_response

        result = self._complete(system, user, max_tokens)
        self.cache.set(cache_key, result, expire=3600 * CacheConstants.CACHE_TTL_HOURS)
        logger.debug(f"Cached LLM response: {cache_key[:CacheConstants.CACHE_KEY_LENGTH]}...")
        return result

    def _summary_prompt(
        self,
        agg: AggregateResult,
        review_texts: Optional[Dict[str, List[str]]],
        subject: str,
    ) -> str:
        review_texts = review_texts or {}
        positive = "\n- ".join(review_texts.get("positive", [])[:PromptConstants.MAX_POSITIVE_TEXTS]) \
            or "\n- ".join(e.snippet for e in agg.positives.examples)
        negative = "\n- ".join(review_texts.get("negative", [])[:PromptConstants.MAX_NEGATIVE_TEXTS]) \
            or "\n- ".join(e.snippet for e in agg.negatives.examples)
        neutral = "\n- ".join(review_texts.get("neutral", [])[:PromptConstants.MAX_NEUTRAL_TEXTS])

        pos_block = f"- {positive}" if positive else "None"
        neg_block = f"- {negative}" if negative else "None"
        neu_block = f"- {neutral}" if neutral else "None"

        return (
            f"Analyze {agg.counts.total or 1} reviews for {subject} and provide comprehensive summaries:\n\n"
            f'IMPORTANT: The subject of these reviews is "{subject}", NOT "Ethos Network". '
            f"Always refer to them by their actual name.\n\n"
            f"POSITIVE REVIEWS ({agg.counts.positive}):\n{pos_block}\n\n"
            f"NEGATIVE REVIEWS ({agg.counts.negative}):\n{neg_block}\n\n"
            f"NEUTRAL REVIEWS ({agg.counts.neutral}):\n{neu_block}\n\n"
            f"Generate JSON with:\n"
            f"- summary: Comprehensive 4-5 sentence overall reputation covering ALL reviews. "
            f'Start with "Overall, {subject} is viewed as..." or similar.\n'
            f"- positiveSummary: 2-3 sentence summary of positive reviews about {subject}\n"
            f'- negativeSummary: 2-3 sentence summary of negative reviews (or "No negative reviews." if none)\n'
            f"- positiveNotes: 1 sentence highlight\n"
            f"- negativeNotes: 1 sentence on concerns\n"
            f"- positiveThemes: array of 3-6 short keywords\n"
            f"- negativeThemes: array of 2-4 keywords (or empty array if none)"
        )

    def summarize(
        self,
        agg: AggregateResult,
        review_texts: Optional[Dict[str, List[str]]] = None,
        profile_name: Optional[str] = None,
    ) -> SummaryResult:
        """Generate a summary with the LLM, falling back to the deterministic summary on failure."""
        fallback = deterministic_summary(agg)
        subject = profile_name or "the user"

        try:
            logger.info(f"Summarizing {agg.counts.total} reviews for {subject} with {self.model}")
            content = self.chat(SUMMARY_SYSTEM_PROMPT, self._summary_prompt(agg, review_texts, subject))
            result = _safe_json(content)
        except Exception as e:
            logger.error(f"LLM summary failed, falling back to deterministic summary: {e}")
            return fallback

        has_pos = agg.counts.positive > 0
        has_neg = agg.counts.negative > 0
        positive_themes = result.get("positiveThemes")
        negative_themes = result.get("negativeThemes")

        return SummaryResult(
            summary=result.get("summary") or fallback.summary,
            positive_summary=result.get("positiveSummary") or (
                "Positive reviews highlight strong reputation and trustworthiness." if has_pos else "No positive reviews."
            ),
            negative_summary=result.get("negativeSummary") or (
                "Some concerns have been raised by reviewers." if has_neg else "No negative reviews."
            ),
            positive_notes=result.get("positiveNotes") or "Positive feedback received.",
            negative_notes=result.get("negativeNotes") or (
                "Some concerns raised." if has_neg else "No significant concerns."
            ),
            positive_themes=[str(t) for t in positive_themes][:PromptConstants.MAX_POSITIVE_THEMES]
            if isinstance(positive_themes, list) else [],
            negative_themes=[str(t) for t in negative_themes][:PromptConstants.MAX_NEGATIVE_THEMES]
            if isinstance(negative_themes, list) else [],
            positives=fallback.positives,
            negatives=fallback.negatives,
            stats=fallback.stats,
            outliers=fallback.outliers,
        )

    def _spike_prompt(self, spike: Spike, profile_name: str, review_lines: List[str]) -> str:
        month_name = datetime.strptime(f"{spike.month}-01", "%Y-%m-%d").strftime("%B %Y")
        pos = sum(1 for r in spike.reviews if r.score == Sentiment.POSITIVE)
        neg = sum(1 for r in spike.reviews if r.score == Sentiment.NEGATIVE)
        neu = sum(1 for r in spike.reviews if r.score == Sentiment.NEUTRAL)
        reviews_block = "\n".join(review_lines)
        spike_type = spike.type.value.upper()

        return (
            f"Analyze this review spike for {profile_name}:\n\n"
            f"TIME PERIOD: {month_name}\n"
            f"SPIKE TYPE: {spike_type}\n"
            f"MAGNITUDE: {spike.review_count} reviews ({_fmt(spike.magnitude)}x the average of "
            f"{_fmt(spike.avg_review_count)})\n"
            f"SENTIMENT BREAKDOWN: {pos} positive, {neg} negative, {neu} neutral\n"
            f"{SPIKE_TYPE_INSTRUCTIONS[spike.type]}\n\n"
            f"REVIEWS FROM THIS PERIOD:\n{reviews_block}\n\n"
            f"Determine:\n"
            f"1. What event, action, or circumstance triggered this spike in reviews?\n"
            f"2. What specific allegations, criticisms, or praises were mentioned?\n"
            f"3. Your tone and focus must match the spike type ({spike_type}).\n\n"
            f"Generate JSON with:\n"
            f"- analysis: Detailed 3-4 sentence explanation (up to "
            f"{PromptConstants.MAX_SPIKE_ANALYSIS_LENGTH} characters) that reflects the "
            f"{spike.type.value} sentiment."
        )

    def explain_spike(self, spike: Spike, profile_name: str = "the user") -> SpikeInsight:
        """Explain a spike with the LLM; deterministic text on failure."""
        review_lines = select_spike_reviews(spike)

        if not review_lines:
            analysis = (
                f"Activity spike detected with {spike.review_count} reviews, "
                f"but no detailed comments available for analysis."
            )
        else:
            try:
                content = self.chat(
                    SPIKE_SYSTEM_PROMPT,
                    self._spike_prompt(spike, profile_name, review_lines),
                    max_tokens=PromptConstants.MAX_SPIKE_TOKENS,
                    prompt_version=PromptConstants.SPIKE_PROMPT_VERSION,
                )
                result = _safe_json(content)
                analysis = result.get("analysis") or f"Spike of {spike.type.value} reviews detected in this period."
            except Exception as e:
                logger.error(f"Error analyzing spike for {spike.month}: {e}")
                analysis = (
                    f"Significant spike in {spike.type.value} reviews "
                    f"({spike.review_count} total, {_fmt(spike.magnitude)}x average)."
                )

        return SpikeInsight(
            month=spike.month,
            type=spike.type,
            magnitude=spike.magnitude,
            review_count=spike.review_count,
            analysis=analysis,
        )


class FallbackLLMService(LLMService):
    """Fallback LLM service using simple rules."""

    def __init__(self):
        logger.info("Using fallback LLM service")

    def summarize(
        self,
        agg: AggregateResult,
        review_texts: Optional[Dict[str, List[str]]] = None,
        profile_name: Optional[str] = None,
    ) -> SummaryResult:
        """Deterministic summary."""
        logger.warning("OpenAI API key not configured, using deterministic summary")
        return deterministic_summary(agg)

    def explain_spike(self, spike: Spike, profile_name: str = "the user") -> SpikeInsight:
        """Deterministic spike explanation."""
        return SpikeInsight(
            month=spike.month,
            type=spike.type,
            magnitude=spike.magnitude,
            review_count=spike.review_count,
            analysis=deterministic_spike_analysis(spike),
        )
