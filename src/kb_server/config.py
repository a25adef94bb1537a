from typing import FrozenSet

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    knowledge_enabled: bool = True
    knowledge_dir: str = "knowledge"

    # Comma-separated list of recognised document suffixes
    knowledge_extensions: str = ".md,.markdown"

    # Vector search
    similarity_threshold: float = 0.1
    default_search_limit: int = 5
    build_workers: int = 1

    # API search previews (characters)
    preview_chars: int = 200

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

    @property
    def extension_set(self) -> FrozenSet[str]:
        exts = [e.strip().lower() for e in self.knowledge_extensions.split(",")]
        return frozenset(e if e.startswith(".") else f".{e}" for e in exts if e)

settings = Settings()
