from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

class Settings(BaseSettings):
    app_name: str = "Storyloom"
    # Embedded store; override with DATABASE_URL for a different file
    database_url: str = "sqlite:///storyloom.db"

    # Token budget for assembled context (model window minus reserves)
    context_total_budget: int = 1_000_000
    context_output_reserve: int = 4_000   # room for the model's response
    context_prompt_reserve: int = 2_000   # room for the prompt template itself

    # Characters of the previous chapter carried into L1 context
    prev_chapter_tail_chars: int = 500

    # Logging. An empty log_file disables the file handler.
    log_file: str = "server.log"
    log_level: str = "INFO"

    @property
    def context_budget(self) -> int:
        """Tokens available to assembled context once reserves are taken out."""
        return (
            self.context_total_budget
            - self.context_output_reserve
            - self.context_prompt_reserve
        )

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

@lru_cache
def get_settings():
    return Settings()
