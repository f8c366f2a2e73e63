"""Configuration settings."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GeneratorConfig(BaseSettings):
    """Configuration for a variantforge run."""

    model_config = SettingsConfigDict(
        env_prefix="VARIANTFORGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    output_dir: str | None = None
    variant_providers: list[str] = Field(default_factory=list)
    input_tests: dict[str, dict[str, Any]] = Field(default_factory=dict)
    test_search_path: list[str] = Field(default_factory=list)
    test_prefix: str | None = None
    test_files_dir: str | None = None
    allow_dir_overwrite: bool = False
    allow_file_overwrite: bool = False
    verbose: bool = False
    log_format: str = "text"

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        valid = {"text", "json"}
        if v not in valid:
            raise ValueError(f"Invalid log format: {v!r}. Valid: {sorted(valid)}")
        return v

    @field_validator("variant_providers")
    @classmethod
    def validate_variant_providers(cls, v: list[str]) -> list[str]:
        for entry in v:
            if not entry or entry != entry.strip():
                raise ValueError(f"Invalid provider entry: {entry!r}")
        return v

    @property
    def has_tests(self) -> bool:
        return bool(self.input_tests or self.test_search_path or self.test_files_dir)
