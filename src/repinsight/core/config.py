"""Configuration management for RepInsight."""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings."""
    
    # OpenAI API
    openai_api_key: str = Field("", description="OpenAI API key")
    OPENAI_API_KEY: str = Field("", description="OpenAI API key (alternative naming)")
    openai_model: str = Field("gpt-4o-mini", description="Model used for summaries and spike analysis")
    
    @property
    def effective_openai_key(self) -> str:
        """Get the effective OpenAI API key from either field."""
        return self.openai_api_key or self.OPENAI_API_KEY
    
    # Ethos Network API
    ethos_api_key: str = Field("", description="Optional Ethos API bearer token")
    ethos_base_url: str = Field("https://api.ethos.network/api/v2", description="Ethos API base URL")
    
    # Logging
    log_level: str = Field("INFO", description="Logging level")
    
    # Caching
    cache_dir: str = Field("cache/llm_cache", description="Directory for cached LLM responses and summaries")
    summary_cache_ttl_hours: int = Field(24, description="Lifetime of cached reports in hours")
    
    # Retry settings (LLM calls only)
    max_retries: int = Field(3, description="Maximum retry attempts")
    retry_delay: float = Field(1.0, description="Base retry delay in seconds")
    retry_backoff: float = Field(2.0, description="Retry backoff multiplier")
    request_timeout: int = Field(60, description="Timeout for outbound requests in seconds")
    
    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()
