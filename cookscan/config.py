from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load the repository root .env no matter which directory the process starts in.
ROOT_DIR = Path(__file__).resolve().parents[1]
load_dotenv(ROOT_DIR / ".env")


class Settings(BaseSettings):
  model_config = SettingsConfigDict(case_sensitive=False, populate_by_name=True)

  azure_openai_api_key: str | None = Field(default=None, alias="AZURE_OPENAI_API_KEY")
  azure_openai_endpoint: str = Field(default="", alias="AZURE_OPENAI_ENDPOINT")
  azure_openai_api_version: str = Field(default="2024-12-01-preview", alias="AZURE_OPENAI_API_VERSION")
  azure_openai_deployment_name: str | None = Field(default=None, alias="AZURE_OPENAI_DEPLOYMENT_NAME")
  azure_openai_vision_model: str | None = Field(default=None, alias="AZURE_OPENAI_VISION_MODEL")

  scan_data_dir: str = Field(default="scan_data", alias="SCAN_DATA_DIR")
  extraction_timeout_seconds: float = Field(default=60.0, alias="EXTRACTION_TIMEOUT_SECONDS", gt=0)
  cover_name_timeout_seconds: float = Field(default=30.0, alias="COVER_NAME_TIMEOUT_SECONDS", gt=0)
  extraction_max_tokens: int = Field(default=8192, alias="EXTRACTION_MAX_TOKENS", gt=0)

  def ensure_endpoint(self) -> str:
    endpoint = (self.azure_openai_endpoint or "").strip()
    if not endpoint:
      return ""
    return endpoint.rstrip("/") + "/"

  @property
  def vision_deployment(self) -> str | None:
    return self.azure_openai_vision_model or self.azure_openai_deployment_name

  def data_dir(self) -> Path:
    path = Path(self.scan_data_dir)
    if not path.is_absolute():
      path = ROOT_DIR / path
    return path


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  return Settings()  # type: ignore[call-arg]
