"""
Orchestrator Configuration — Process-wide settings read once at startup.

The settings object manages:
  - n8n connection (host, API key, timeout, attempts)
  - Per-pipeline workflow ID overrides
  - Machine identifier for multi-node routing
  - Logging (level, JSON output)

Instances are frozen; components receive one explicitly instead of
reading the environment at call time.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OrchestratorSettings(BaseSettings):
    """Immutable orchestrator settings, populated from env vars and `.env` files."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # ── n8n ───────────────────────────────────────────────────────────
    n8n_host: str = "http://localhost:5678"
    n8n_api_key: str | None = None
    n8n_timeout_seconds: float = Field(default=30.0, gt=0)
    n8n_max_attempts: int = Field(default=1, ge=1)

    # ── Pipelines ─────────────────────────────────────────────────────
    cad_pipeline_id: str | None = None
    code_pipeline_id: str | None = None
    research_pipeline_id: str | None = None
    data_pipeline_id: str | None = None

    # ── Multi-node routing ────────────────────────────────────────────
    machine_id: str | None = None

    # ── Logging ───────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def api_base_url(self) -> str:
        """REST root of the n8n public API."""
        return f"{self.n8n_host.rstrip('/')}/api/v1"

    def pipeline_overrides(self) -> dict[str, str]:
        """Non-empty per-pipeline overrides keyed by pipeline tag."""
        candidates = {
            "cad": self.cad_pipeline_id,
            "code": self.code_pipeline_id,
            "research": self.research_pipeline_id,
            "data": self.data_pipeline_id,
        }
        return {tag: value for tag, value in candidates.items() if value}


@lru_cache
def get_settings() -> OrchestratorSettings:
    """Parsed once, cached forever. Only the entrypoint should call this."""
    return OrchestratorSettings()
