from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import BaseModel, ValidationError

from routedoc.errors import ConfigurationError
from routedoc.openapi.model import Info


ENV_PREFIX = "ROUTEDOC_"


class Settings(BaseModel):
    """Defaults for a new document and for serving it."""

    title: str = "API"
    version: str = "1.0"
    description: Optional[str] = None
    openapi_version: str = "3.0.3"
    media_type: str = "application/json"
    document_format: str = "json"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Read ROUTEDOC_TITLE, ROUTEDOC_VERSION, ... Unset variables keep their default."""
        environ = os.environ if environ is None else environ
        values = {
            name: environ[ENV_PREFIX + name.upper()]
            for name in cls.model_fields
            if ENV_PREFIX + name.upper() in environ
        }
        return cls._validate(values, "environment")

    @classmethod
    def from_file(cls, path: Path) -> "Settings":
        """Load settings from a JSON or YAML file."""
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"cannot read settings file {path}: {e}") from e

        try:
            if path.suffix.lower() == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text)
        except (ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(f"invalid settings file {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"settings file {path} must contain a mapping")
        return cls._validate(data, str(path))

    @classmethod
    def _validate(cls, data: dict[str, Any], source: str) -> "Settings":
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"invalid settings from {source}: {e}") from e

    def info(self) -> Info:
        return Info(title=self.title, version=self.version, description=self.description)
