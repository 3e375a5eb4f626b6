"""Worker bridge configuration loading and validation."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, ClassVar, Dict, Iterable, Literal

import yaml
from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_LOCATIONS: tuple[Path, ...] = (
    Path("/etc/wkworkers/workers.yaml"),
    Path("/etc/wkworkers/workers.yml"),
    Path("./config/workers.yaml"),
    Path("./config/workers.yml"),
)


class WorkersSettings(BaseSettings):
    """Validated settings for worker session management."""

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="WKWORKERS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    worker_closed_message: str = Field(
        default="Most likely the worker has been closed.",
        description="Error text used when a request fails because its worker went away.",
    )
    enable_console: bool = Field(
        default=True,
        description="Enable the Console domain in workers and forward their console messages.",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum log level for the process.",
    )
    log_format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        description="Format string passed to logging.basicConfig.",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        if isinstance(value, str):
            return value.upper()
        return value

    config_path: Path | None = Field(
        default=None,
        description="Resolved path to the on-disk config that seeded the settings.",
        exclude=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[WorkersSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            cls._yaml_settings_source,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    @staticmethod
    def _yaml_settings_source(settings_cls: type[WorkersSettings] | None = None) -> Dict[str, Any]:
        candidates: Iterable[Path] = WorkersSettings._resolve_candidate_paths()

        for path in candidates:
            data = WorkersSettings._load_file(path)
            if data is not None:
                data.setdefault("config_path", path)
                return data
        return {}

    @staticmethod
    def _resolve_candidate_paths() -> Iterable[Path]:
        explicit = os.getenv("WKWORKERS_CONFIG_FILE")
        if explicit:
            yield Path(explicit).expanduser()
        yield from DEFAULT_CONFIG_LOCATIONS

    @staticmethod
    def _load_file(path: Path) -> Dict[str, Any] | None:
        if not path.is_file():
            return None
        suffix = path.suffix.lower()
        try:
            with path.open("r", encoding="utf-8") as handle:
                if suffix in {".yaml", ".yml"}:
                    raw = yaml.safe_load(handle)
                elif suffix == ".json":
                    raw = json.load(handle)
                else:
                    return None
        except OSError as exc:
            raise RuntimeError(f"Failed to read workers config file {path}") from exc
        except (yaml.YAMLError, json.JSONDecodeError) as exc:
            raise ValueError(f"Invalid workers config file {path}") from exc

        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ValueError(f"Workers config file {path} must contain a mapping at top level.")
        return raw


@lru_cache()
def get_settings() -> WorkersSettings:
    """Return memoized settings."""

    return WorkersSettings()
