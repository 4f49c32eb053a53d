"""Application configuration."""
import logging
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # =========================
    # LLM Model Configuration
    # =========================

    llm_endpoint: str = "http://localhost:8001/v1"
    llm_model: str = "gpt-4o-mini"
    llm_api_key: Optional[str] = None

    # Provider used first; the others registered in the factory are fallbacks
    # Options: "generic", "openai", "vllm", "ollama", "langchain"
    model_type: Literal["generic", "openai", "vllm", "ollama", "langchain"] = "generic"

    # Comma-separated list of extra providers tried after model_type
    fallback_providers: str = ""

    # =========================
    # Timeouts (seconds)
    # =========================
    llm_timeout_seconds: float = 60.0
    tool_timeout_seconds: float = 15.0

    # =========================
    # Orchestration policy
    # =========================
    deep_path_threshold: float = 0.7
    history_window: int = 20
    summary_refresh_every: int = 5
    detailed_style_threshold: int = 300
    inactive_after_minutes: int = 30
    default_responder_id: str = "primary"
    deep_session_history: int = 50

    # Optional directory for the JSONL session log; in-memory when unset
    session_log_dir: Optional[str] = None

    # =========================
    # API Configuration
    # =========================
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_reload: bool = False

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    # Logging
    log_level: str = "INFO"

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert comma-separated CORS origins to list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def fallback_provider_list(self) -> List[str]:
        """Convert comma-separated fallback providers to list."""
        return [p.strip() for p in self.fallback_providers.split(",") if p.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = False


def configure_logging(level: str = "INFO") -> None:
    """Apply the process-wide logging format."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
