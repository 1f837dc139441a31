"""RestFiles configuration — Pydantic BaseSettings loaded from .env."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


@dataclass(frozen=True)
class RootContext:
    """Read-only sandbox configuration handed to every file operation."""

    root_directory: Path
    excluded_directories: frozenset[str]
    text_file_extensions: frozenset[str]


def _split_csv(value: list[str] | str) -> list[str]:
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return list(value)


class Settings(BaseSettings):
    """Application settings."""

    app_name: str = "RestFiles"
    debug: bool = True
    environment: str = "development"
    log_level: str = "INFO"

    # Network
    host: str = "127.0.0.1"
    port: int = 8000
    api_prefix: str = "/api"
    cors_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:5173",
        "http://localhost:8000",
    ]
    uvicorn_workers: int = 1

    # Sandbox (relative root resolved from backend/ at runtime)
    root_directory: str = "./data/files"
    exclude_directories: Annotated[list[str], NoDecode] = [".git", ".svn", "_svn"]
    text_file_extensions: Annotated[list[str], NoDecode] = [
        ".txt", ".md", ".rst", ".log", ".csv",
        ".json", ".xml", ".yml", ".yaml", ".toml", ".ini", ".cfg", ".config",
        ".htm", ".html", ".css", ".js", ".ts",
        ".py", ".rb", ".java", ".cs", ".c", ".h", ".cpp", ".go", ".sh", ".sql",
    ]

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        env_prefix="RESTFILES_",
        extra="ignore",
    )

    @field_validator("cors_origins", "exclude_directories", mode="before")
    @classmethod
    def assemble_lists(cls, value: list[str] | str) -> list[str]:
        return _split_csv(value)

    @field_validator("text_file_extensions", mode="before")
    @classmethod
    def check_extensions(cls, value: list[str] | str) -> list[str]:
        extensions = _split_csv(value)
        for ext in extensions:
            if not ext.startswith(".") or len(ext) < 2:
                raise ValueError(f"Text file extension must start with '.': {ext!r}")
        return extensions

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Ensure the sandbox root is absolute."""
        base = Path(__file__).resolve().parent.parent  # backend/
        if not Path(self.root_directory).is_absolute():
            self.root_directory = str(base / self.root_directory)
        return self

    def root_context(self) -> RootContext:
        return RootContext(
            root_directory=Path(self.root_directory).resolve(),
            excluded_directories=frozenset(self.exclude_directories),
            text_file_extensions=frozenset(self.text_file_extensions),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
