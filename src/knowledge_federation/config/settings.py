"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from pydantic_settings import BaseSettings

from knowledge_federation.exceptions import ConfigurationError


class Settings(BaseSettings):
    # API Keys
    google_api_key: str = ""

    # LLM / Gemini
    gemini_model: str = "gemini-2.0-flash"
    gemini_temperature: float = 0.3
    gemini_max_tokens: int = 2048

    # Fan-out
    fan_out_deadline_ms: int = 3000
    adapter_result_limit: int = 25
    upcoming_window_days: int = 7
    recent_window_days: int = 7
    weekly_window_days: int = 7

    # Ranking caps
    search_result_cap: int = 20
    chat_context_cap: int = 10

    # Plain relevance scoring
    exact_match_credit: float = 10.0
    word_credit: float = 2.0
    s_max: float = 10.0
    long_text_threshold: int = 1000
    long_text_penalty: float = 0.8

    # Contextual boosts
    contextual_s_max: float = 20.0
    segment_boost: float = 2.0
    recency_today_boost: float = 3.0
    recency_week_boost: float = 2.0
    recency_month_boost: float = 1.0
    critical_boost: float = 2.0
    high_priority_boost: float = 1.0
    active_status_boost: float = 1.0

    # Snippets
    snippet_max_length: int = 150
    snippet_lead: int = 50

    # Conversation
    history_turns: int = 6

    # Context cache
    context_cache_max_entries: int = 256
    context_cache_ttl_seconds: float = 60.0

    # Storage paths
    sqlite_session_db_path: str = "data/sessions.db"
    sqlite_records_db_path: str = "data/records.db"

    # Hosted record store (PostgREST); empty url disables the REST adapters
    rest_base_url: str = ""
    rest_api_key: str = ""
    rest_timeout_seconds: float = 5.0

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_prefix": "KF_"}


def validate_settings(settings: Settings) -> None:
    """Reject values the pipeline cannot run with."""
    if settings.fan_out_deadline_ms <= 0:
        raise ConfigurationError("fan_out_deadline_ms must be positive")
    if settings.search_result_cap <= 0 or settings.chat_context_cap <= 0:
        raise ConfigurationError("result caps must be positive")
    if settings.snippet_max_length <= len("...") * 2:
        raise ConfigurationError("snippet_max_length is too small for ellipsis markers")
    if settings.rest_base_url and not settings.rest_base_url.startswith(("http://", "https://")):
        raise ConfigurationError(f"rest_base_url must be http(s): {settings.rest_base_url!r}")
