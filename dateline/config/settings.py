"""Application settings using Pydantic BaseSettings for environment variable management."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    API keys default to empty strings so the package imports cleanly without
    credentials; each backend client refuses to construct without its key.

    Attributes:
        perplexity_api_key: Research oracle API key
        perplexity_model: Research oracle model identifier
        gemini_api_key: Google Gemini API key for cheap excerpt checks
        gemini_model: Gemini model used for yes/no/unclear questions
        exa_api_key: Search and content-fetch backend key
        http_timeout: Per-request timeout in seconds
        oracle_max_attempts: Oracle attempts (exponential backoff)
        search_max_attempts: Search-tier attempts (fixed delay)
        search_retry_delay: Fixed delay between search-tier attempts
        search_pacing_delay: Cooperative delay between search calls
        inter_event_delay: Delay between events in a batch
        search_strategy: Tier 3 strategy (differential or trust_scored)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log output format (json for production, console for dev)
    """

    perplexity_api_key: str = Field(default="", description="Perplexity API key")
    perplexity_model: str = Field(default="sonar", description="Research oracle model")
    perplexity_base_url: str = Field(default="https://api.perplexity.ai")

    gemini_api_key: str = Field(default="", description="Google Gemini API key")
    gemini_model: str = Field(
        default="gemini-2.0-flash",
        description="Cheap model for excerpt yes/no checks"
    )

    exa_api_key: str = Field(default="", description="Exa search API key")
    exa_base_url: str = Field(default="https://api.exa.ai")

    wikipedia_api_url: str = Field(default="https://en.wikipedia.org/w/api.php")
    wikidata_entity_url: str = Field(
        default="https://www.wikidata.org/wiki/Special:EntityData"
    )

    http_timeout: float = Field(default=45.0, description="Backend timeout (s)")
    oracle_max_attempts: int = Field(default=5, ge=1)
    search_max_attempts: int = Field(default=3, ge=1)
    search_retry_delay: float = Field(default=1.0, ge=0.0)
    search_pacing_delay: float = Field(
        default=0.3,
        ge=0.0,
        description="Delay between successive search backend calls"
    )
    inter_event_delay: float = Field(default=0.5, ge=0.0)

    search_strategy: Literal["differential", "trust_scored"] = Field(
        default="differential",
        description="Tier 3 strategy"
    )

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="json",
        description="Log output format: json or console"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Singleton instance - import this throughout the application
settings = Settings()
