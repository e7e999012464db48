import os
from typing import Literal, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    CATALOG_BASE_URL: str = os.getenv(
        "CATALOG_BASE_URL", "https://www.themealdb.com/api/json/v1/1"
    )
    CANDIDATE_TIMEOUT: float = float(os.getenv("CANDIDATE_TIMEOUT", 10.0))
    DETAIL_TIMEOUT: float = float(os.getenv("DETAIL_TIMEOUT", 8.0))
    MAX_CANDIDATES: int = int(os.getenv("MAX_CANDIDATES", 20))
    HISTORY_LIMIT: int = int(os.getenv("HISTORY_LIMIT", 8))

    STORAGE_BACKEND: Literal["file", "memory", "supabase"] = "file"
    STORAGE_PATH: str = os.getenv("STORAGE_PATH", ".recipe_finder.json")

    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_KEY: str = os.getenv("SUPABASE_KEY", "")
    SUPABASE_KV_TABLE: str = os.getenv("SUPABASE_KV_TABLE", "kv_store")

    ENVIRONMENT: Optional[str] = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @field_validator("CATALOG_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        raise ValueError(f"Invalid LOG_LEVEL: {v}")

    class Config:
        case_sensitive = True
        env_file = [".env", f".env.{os.getenv('ENVIRONMENT', 'development')}"]
        env_file_encoding = "utf-8"
        extra = "ignore"
