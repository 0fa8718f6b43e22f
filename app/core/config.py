from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from services.generation_providers import GapGPTProvider, GeminiProvider, ProviderCredentials

Environment = Literal["development", "production", "staging", "test"]


def _resolve_env_files() -> tuple[str, ...]:
    env = os.getenv("ARTICLEGEN_ENVIRONMENT", "development").lower()
    if env in {"prod", "production"}:
        return (".env", ".env.prod")
    if env in {"dev", "development"}:
        return (".env", ".env.dev")
    if env in {"test", "testing"}:
        return (".env", ".env.test")
    return (".env",)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ARTICLEGEN_",
        env_file=_resolve_env_files(),
        env_nested_delimiter="__",
        env_delimiter=",",
        extra="ignore",
    )

    environment: Environment = "development"
    project_name: str = "Persian CMS Article Generator"
    api_v1_prefix: str = "/api/v1"
    log_level: str = "INFO"
    log_json: bool = False
    rate_limit: str = "60/minute"
    allowed_hosts: list[str] = ["*"]
    enable_docs: bool = True

    gapgpt_api_key: str | None = None
    gemini_api_key: str | None = None
    gapgpt_base_url: str = GapGPTProvider.default_base_url
    gemini_base_url: str = GeminiProvider.default_base_url
    upstream_timeout_seconds: float = 60.0

    def provider_credentials(self) -> ProviderCredentials:
        return ProviderCredentials(
            gapgpt_api_key=self.gapgpt_api_key or None,
            gemini_api_key=self.gemini_api_key or None,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
