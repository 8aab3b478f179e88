"""Configuration for the citation database tools."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from importlib import resources
from typing import Any

import yaml

from citedb.utils import ARXIV_API, CLAWXIV_API

ENV_DATABASE = "CITEDB_DATABASE"
ENV_SCHEMA = "CITEDB_SCHEMA"


def default_schema_path() -> str:
    """Path of the JSON Schema bundled with the package."""
    return str(resources.files("citedb").joinpath("data").joinpath("schema.json"))


@dataclass
class CitedbConfig:
    """Settings shared by every subcommand.

    Attributes:
        database: Path to the JSON database file
        schema: Path to the JSON Schema document; None selects the bundled schema
        arxiv_api: arXiv API query endpoint
        clawxiv_api: clawXiv API base URL
        timeout: HTTP timeout in seconds
        user_agent: User-Agent header for API requests
        verbose: Enable debug logging
    """

    database: str = "citations.json"
    schema: str | None = None
    arxiv_api: str = ARXIV_API
    clawxiv_api: str = CLAWXIV_API
    timeout: float = 30.0
    user_agent: str = "citedb/0.1 (+https://github.com/)"
    verbose: bool = False

    def schema_path(self) -> str:
        return self.schema or default_schema_path()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CitedbConfig:
        """Create config from a dictionary (e.g., loaded from YAML)."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def load_config_file(path: str) -> dict[str, Any]:
    """Load configuration from a YAML file. An empty file yields an empty dict."""
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Invalid config format in {path}: expected a mapping")
    return data


def resolve_config(
    config_file: str | None = None,
    overrides: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
) -> CitedbConfig:
    """Merge defaults, YAML file, environment, and explicit overrides (in that order)."""
    env = os.environ if environ is None else environ
    data: dict[str, Any] = load_config_file(config_file) if config_file else {}
    if env.get(ENV_DATABASE):
        data["database"] = env[ENV_DATABASE]
    if env.get(ENV_SCHEMA):
        data["schema"] = env[ENV_SCHEMA]
    data.update({k: v for k, v in (overrides or {}).items() if v is not None})
    return CitedbConfig.from_dict(data)
