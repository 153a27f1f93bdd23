"""
Configuration for the linking pipeline and the near-duplicate filter.

Uses pydantic-settings so every knob can be overridden from the environment
(prefix ``LAPTOP_LINKER_``) or a local ``.env`` file.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_VOCABULARY_PATH = Path(__file__).parent / "vocabulary.json"


class LinkerSettings(BaseSettings):
    """Pipeline and filter settings."""

    model_config = SettingsConfigDict(
        env_prefix="LAPTOP_LINKER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"

    # Externalized keyword / brand / source-schema data
    vocabulary_path: Path = Field(default=DEFAULT_VOCABULARY_PATH)

    # Near-duplicate filter
    similarity_threshold: float = Field(default=0.85, ge=0.0, le=1.0)
    word_overlap_threshold: float = Field(default=0.60, ge=0.0, le=1.0)
    significant_word_min_length: int = Field(default=3, ge=1)
    overfetch_multiplier: int = Field(default=3, ge=1)

    # Batch job
    parallel_normalization: bool = True
    output_dir: Path = Field(default=Path("./output"))


@lru_cache()
def get_settings() -> LinkerSettings:
    """Get cached settings instance."""
    return LinkerSettings()
