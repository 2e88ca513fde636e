"""
Minimal settings base class.

Loads typed attributes from keyword arguments, environment variables and an
optional ``.env`` file, in that order of priority. It mirrors the small part
of the pydantic-settings API the services use, while staying trivial to
override in tests by passing keyword arguments.
"""

from __future__ import annotations

import json
import os
import types
from pathlib import Path
from typing import (
    Any,
    Dict,
    Optional,
    Type,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)


class AliasChoices:
    """Several environment variable names accepted for one field."""

    def __init__(self, *choices: str) -> None:
        self.choices = list(choices)


class FieldInfo:
    """Declared default, description and aliases of a settings field."""

    def __init__(
        self,
        default: Any = None,
        description: str = "",
        validation_alias: Optional[Union[str, list, AliasChoices]] = None,
        required: bool = False,
    ) -> None:
        self.default = default
        self.description = description
        self.validation_alias = validation_alias
        self.required = required

    def env_names(self, field_name: str) -> list[str]:
        names: list[str] = []
        alias = self.validation_alias
        if isinstance(alias, AliasChoices):
            names.extend(alias.choices)
        elif isinstance(alias, list):
            names.extend(alias)
        elif alias:
            names.append(alias)
        names.append(field_name.upper())
        return names


def Field(
    default: Any = None,
    *,
    description: str = "",
    validation_alias: Optional[Union[str, list, AliasChoices]] = None,
) -> Any:
    """Declare a settings field. ``default=...`` marks it as required."""
    required = default is ...
    return FieldInfo(
        default=None if required else default,
        description=description,
        validation_alias=validation_alias,
        required=required,
    )


class SettingsConfigDict:
    """Configuration for settings loading."""

    def __init__(
        self,
        env_file: Optional[str] = None,
        env_file_encoding: str = "utf-8",
        case_sensitive: bool = True,
        extra: str = "forbid",
    ) -> None:
        self.env_file = env_file
        self.env_file_encoding = env_file_encoding
        self.case_sensitive = case_sensitive
        self.extra = extra


class BaseSettings:
    """Base class for settings loaded from the environment."""

    model_config: SettingsConfigDict = SettingsConfigDict()

    def __init__(self, **kwargs: Any) -> None:
        env_file_vars: Dict[str, str] = {}
        if self.model_config.env_file:
            env_file_vars = self._load_env_file(self.model_config.env_file)

        for field_name, field_type in get_type_hints(self.__class__).items():
            if field_name.startswith("_") or field_name == "model_config":
                continue

            declared = getattr(self.__class__, field_name, None)
            info = declared if isinstance(declared, FieldInfo) else FieldInfo(declared)

            if field_name in kwargs:
                value = kwargs[field_name]
            else:
                value = self._lookup(info.env_names(field_name), env_file_vars)
                if value is None:
                    if info.required:
                        raise ValueError(
                            f"Required field '{field_name}' not found in environment"
                        )
                    value = info.default

            setattr(self, field_name, self._convert_value(value, field_type))

    def _lookup(self, names: list[str], env_file_vars: Dict[str, str]) -> Optional[str]:
        if not self.model_config.case_sensitive:
            names = names + [name.lower() for name in names]
        for name in names:
            if name in os.environ:
                return os.environ[name]
            if name in env_file_vars:
                return env_file_vars[name]
        return None

    def _load_env_file(self, env_file_path: str) -> Dict[str, str]:
        env_vars: Dict[str, str] = {}
        env_path = Path(env_file_path)
        if not env_path.exists():
            return env_vars

        with open(env_path, "r", encoding=self.model_config.env_file_encoding) as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    env_vars[key.strip()] = value.strip().strip("\"'")
        return env_vars

    def _convert_value(self, value: Any, target_type: Type) -> Any:
        """Coerce string values from the environment to the annotated type."""
        if value is None or not isinstance(value, str):
            return value

        origin = get_origin(target_type)
        if origin is Union or origin is types.UnionType:
            non_none = [arg for arg in get_args(target_type) if arg is not type(None)]
            if not non_none:
                return value
            if value == "":
                return None
            return self._convert_value(value, non_none[0])

        if target_type is bool:
            return value.lower() in ("true", "1", "yes", "on")
        if target_type is int:
            return int(value)
        if target_type is float:
            return float(value)
        if origin is list:
            if value.startswith("["):
                return json.loads(value)
            return [item.strip() for item in value.split(",") if item.strip()]
        return value
