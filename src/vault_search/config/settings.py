"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # API Keys
    google_api_key: str = ""

    # LLM / Gemini
    gemini_model: str = "gemini-2.0-flash"
    gemini_temperature: float = 0.2
    gemini_max_tokens: int = 4096
    generation_timeout_s: float = 20.0

    # Context bounding (documents handed to the model per mode)
    answer_document_limit: int = 10
    summary_document_limit: int = 15
    chat_document_limit: int = 15

    # Documents mode / fallback listings
    documents_result_limit: int = 50
    fallback_document_limit: int = 20
    include_review_documents: bool = False

    # Query analysis
    recent_days: int = 90

    # Chat sessions
    session_backend: Literal["memory", "sqlite"] = "memory"

    # Search result cache
    search_cache_enabled: bool = True
    search_cache_max_size: int = 100
    search_cache_ttl_s: float = 300.0

    # Storage paths
    sqlite_doc_db_path: str = "data/documents.db"
    sqlite_session_db_path: str = "data/sessions.db"
    sqlite_trace_db_path: str = "data/traces.db"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Auth / JWT
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiry_minutes: int = 60
    api_keys: str = ""  # comma-separated list of valid API keys

    # Rate limiting
    rate_limit_requests_per_minute: int = 60

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = {"env_file": ".env", "env_prefix": "VAULT_"}
