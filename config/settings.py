"""
Configuration settings for the job ingest system.
Loads values from .env file and provides typed access.
"""

import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Determine project root
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
env_path = os.path.join(project_root, ".env")
load_dotenv(env_path)


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    # LLM Configuration (any OpenAI-compatible endpoint)
    llm_base_url: str = field(
        default_factory=lambda: os.getenv("LLM_BASE_URL", "https://api.openai.com/v1")
    )
    llm_api_key: str = field(
        default_factory=lambda: os.getenv("LLM_API_KEY", os.getenv("OPENAI_API_KEY", ""))
    )
    llm_model_name: str = field(
        default_factory=lambda: os.getenv("LLM_MODEL_NAME", "gpt-4o-mini")
    )
    llm_temperature: float = field(
        default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0"))
    )
    llm_max_tokens: int = field(
        default_factory=lambda: int(os.getenv("LLM_MAX_TOKENS", "2048"))
    )
    llm_max_retries: int = field(
        default_factory=lambda: int(os.getenv("LLM_MAX_RETRIES", "3"))
    )
    llm_initial_backoff_ms: int = field(
        default_factory=lambda: int(os.getenv("LLM_INITIAL_BACKOFF_MS", "500"))
    )

    # ATS providers
    greenhouse_url: str = field(
        default_factory=lambda: os.getenv(
            "GREENHOUSE_URL", "https://boards-api.greenhouse.io/v1/boards"
        )
    )
    lever_url: str = field(
        default_factory=lambda: os.getenv("LEVER_URL", "https://api.lever.co/v0/postings")
    )
    request_timeout: float = field(
        default_factory=lambda: float(os.getenv("REQUEST_TIMEOUT", "10"))
    )

    # Store
    db_path: str = field(
        default_factory=lambda: os.getenv(
            "DB_PATH", os.path.join(project_root, "data", "job_ingest.db")
        )
    )

    # Queues and batching
    queue_concurrency: int = field(
        default_factory=lambda: int(os.getenv("QUEUE_CONCURRENCY", "5"))
    )
    queue_task_delay_ms: int = field(
        default_factory=lambda: int(os.getenv("QUEUE_TASK_DELAY_MS", "0"))
    )
    batch_size: int = field(
        default_factory=lambda: int(os.getenv("BATCH_SIZE", "5"))
    )

    # Caches and aggregates
    location_cache_size: int = field(
        default_factory=lambda: int(os.getenv("LOCATION_CACHE_SIZE", "1000"))
    )
    metadata_debounce_ms: int = field(
        default_factory=lambda: int(os.getenv("METADATA_DEBOUNCE_MS", "30000"))
    )

    # Logging
    log_level: str = field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper()
    )


# Default instance for the CLI; components receive settings through the context
settings = Settings()
