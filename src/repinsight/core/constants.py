"""Constants and configuration values for RepInsight."""

# Text Processing Constants
class TokenizerConstants:
    """Constants for review text tokenization."""
    
    MIN_TOKEN_LENGTH = 3  # tokens shorter than this are dropped
    
    STOP_WORDS = frozenset([
        "the", "be", "to", "of", "and", "a", "in", "that", "have", "i",
        "it", "for", "not", "on", "with", "he", "as", "you", "do", "at",
        "this", "but", "his", "by", "from", "they", "we", "say", "her", "she",
        "or", "an", "will", "my", "one", "all", "would", "there", "their",
        "what", "so", "up", "out", "if", "about", "who", "get", "which", "go",
        "me", "when", "make", "can", "like", "time", "no", "just", "him", "know",
        "take", "people", "into", "year", "your", "good", "some", "could", "them",
        "see", "other", "than", "then", "now", "look", "only", "come", "its", "over",
        "think", "also", "back", "after", "use", "two", "how", "our", "work",
        "first", "well", "way", "even", "new", "want", "because", "any", "these",
        "give", "day", "most", "us", "is", "was", "are", "been", "has", "had",
        "were", "said", "did", "having", "may", "should", "very", "much", "more",
    ])


class KeywordConstants:
    """Constants for keyword extraction."""
    
    TOP_N = 25  # keywords kept per sentiment group
    WEIGHT_PRECISION = 3  # decimals kept on normalized weights


class SnippetConstants:
    """Constants for representative snippet sampling."""
    
    SAMPLE_COUNT = 5  # snippets per sentiment group
    MIN_COMMENT_LENGTH = 20  # trimmed comment must be longer than this
    MAX_SNIPPET_LENGTH = 240  # chars kept per snippet


class OutlierConstants:
    """Constants for outlier detection."""
    
    HIGH_PERCENTILE = 0.95
    LOW_PERCENTILE = 0.05
    DEFAULT_LENGTH_THRESHOLD = 1000  # used when no review has a comment
    DEFAULT_LOW_NET_VOTES = -10  # used when no review has votes
    DEFAULT_HIGH_NET_VOTES = 10
    MAX_OUTLIERS = 10


class TimelineConstants:
    """Constants for the synthetic reputation score trajectory."""
    
    DEFAULT_FINAL_SCORE = 1000  # terminal anchor when no current score is known
    STARTING_SCORE_OFFSET = 500  # first month starts this far below the anchor
    NEUTRAL_WEIGHT = 0.2  # neutral reviews count this much toward net sentiment
    VARIANCE_MULTIPLIER = 2  # score points per unit of net sentiment
    MIN_SCORE = 0
    MAX_SCORE = 5000
    MONTH_KEY_LENGTH = 7  # "YYYY-MM"


class SpikeConstants:
    """Constants for spike detection and classification."""
    
    MIN_MONTHS = 3  # timeline months required before any spike is reported
    MIN_AVG_REVIEWS = 2  # average reviews per month required
    MIN_MONTH_REVIEWS = 3  # months with fewer reviews are never spikes
    MAGNITUDE_THRESHOLD = 2.0  # month volume vs overall average
    CHANGE_PERCENT_THRESHOLD = 150  # month-over-month increase in percent
    MAX_SPIKES = 5
    
    # Classification
    POSITIVE_RATIO = 0.6
    POSITIVE_MAX_NEGATIVE_RATIO = 0.25
    NEGATIVE_RATIO = 0.4
    DOMINANCE_FACTOR = 1.5


# Prompt Constants
class PromptConstants:
    """Constants for LLM prompts and templates."""
    
    # Prompt Versions (for cache invalidation)
    SUMMARY_PROMPT_VERSION = "v1.2"
    SPIKE_PROMPT_VERSION = "v1.0"
    
    # Review texts sent to the summarizer per sentiment
    MAX_POSITIVE_TEXTS = 20
    MAX_NEGATIVE_TEXTS = 15
    MAX_NEUTRAL_TEXTS = 10
    MIN_REVIEW_TEXT_LENGTH = 10  # comments at or below this length are skipped
    
    # Spike analysis sampling
    MAX_SPIKE_PRIMARY_REVIEWS = 15  # reviews matching the spike type
    MAX_SPIKE_OTHER_REVIEWS = 5
    MAX_SPIKE_MIXED_REVIEWS = 20
    MAX_SPIKE_ANALYSIS_LENGTH = 400
    
    # Theme limits
    MAX_POSITIVE_THEMES = 6
    MAX_NEGATIVE_THEMES = 4
    FALLBACK_POSITIVE_THEMES = 5
    FALLBACK_NEGATIVE_THEMES = 3
    THEMES_PER_GROUP = 3  # keyword themes with evidence per group
    EVIDENCE_PER_THEME = 2
    
    # Response Limits
    MAX_SUMMARY_TOKENS = 4096
    MAX_SPIKE_TOKENS = 2048
    SUMMARY_TEMPERATURE = 0.3


# Cache Constants
class CacheConstants:
    """Constants for caching behavior."""
    
    CACHE_TTL_HOURS = 24  # cache time-to-live in hours
    CACHE_KEY_LENGTH = 8  # length of cache key for logging
    SUMMARY_KEY_PREFIX = "summary:"


# Upstream API Constants
class EthosConstants:
    """Constants for the Ethos Network API."""
    
    PAGE_LIMIT = 1000  # activities per page
    REQUEST_TIMEOUT = 30
    PAGE_DELAY = 0.1  # seconds between pages


# File and Path Constants
class FileConstants:
    """Constants for file operations."""
    
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
