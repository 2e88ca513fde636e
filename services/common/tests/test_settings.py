"""
Tests for the settings base class.
"""

import os
from typing import List, Optional

import pytest

from services.common.settings import (
    AliasChoices,
    BaseSettings,
    Field,
    SettingsConfigDict,
)

ENV_VARS = (
    "DB_URL",
    "DB_URL_TEST",
    "LEGACY_DB_URL",
    "CACHE_TTL",
    "DEBUG_MODE",
    "REDIS_URL",
    "ORIGINS",
)


class ExampleSettings(BaseSettings):
    db_url: str = Field(
        default=...,
        validation_alias=AliasChoices("DB_URL_TEST", "LEGACY_DB_URL"),
    )
    cache_ttl: int = Field(default=60, validation_alias=AliasChoices("CACHE_TTL"))
    debug_mode: bool = False
    redis_url: Optional[str] = None
    origins: List[str] = ["*"]

    model_config = SettingsConfigDict(case_sensitive=False)


class TestBaseSettings:
    def setup_method(self):
        self._saved = {name: os.environ.pop(name, None) for name in ENV_VARS}

    def teardown_method(self):
        for name, value in self._saved.items():
            os.environ.pop(name, None)
            if value is not None:
                os.environ[name] = value

    def test_required_field_missing(self):
        with pytest.raises(ValueError, match="db_url"):
            ExampleSettings()

    def test_values_from_environment(self):
        os.environ["DB_URL_TEST"] = "sqlite:///test.db"
        os.environ["CACHE_TTL"] = "30"
        os.environ["DEBUG_MODE"] = "true"

        settings = ExampleSettings()

        assert settings.db_url == "sqlite:///test.db"
        assert settings.cache_ttl == 30
        assert settings.debug_mode is True
        assert settings.redis_url is None

    def test_alias_order(self):
        os.environ["LEGACY_DB_URL"] = "sqlite:///legacy.db"
        assert ExampleSettings().db_url == "sqlite:///legacy.db"

        os.environ["DB_URL_TEST"] = "sqlite:///new.db"
        assert ExampleSettings().db_url == "sqlite:///new.db"

    def test_keyword_arguments_win(self):
        os.environ["DB_URL_TEST"] = "sqlite:///env.db"
        settings = ExampleSettings(db_url="sqlite:///kwarg.db", cache_ttl=5)

        assert settings.db_url == "sqlite:///kwarg.db"
        assert settings.cache_ttl == 5

    def test_empty_optional_is_none(self):
        os.environ["DB_URL_TEST"] = "sqlite:///test.db"
        os.environ["REDIS_URL"] = ""
        assert ExampleSettings().redis_url is None

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# comment\nDB_URL_TEST='sqlite:///from-file.db'\nCACHE_TTL=15\n"
        )

        class FileSettings(ExampleSettings):
            model_config = SettingsConfigDict(env_file=str(env_file))

        settings = FileSettings()
        assert settings.db_url == "sqlite:///from-file.db"
        assert settings.cache_ttl == 15

    def test_environment_beats_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("DB_URL_TEST=sqlite:///from-file.db\n")
        os.environ["DB_URL_TEST"] = "sqlite:///from-env.db"

        class FileSettings(ExampleSettings):
            model_config = SettingsConfigDict(env_file=str(env_file))

        assert FileSettings().db_url == "sqlite:///from-env.db"

    def test_list_values(self):
        os.environ["DB_URL_TEST"] = "sqlite:///test.db"
        assert ExampleSettings().origins == ["*"]

        os.environ["ORIGINS"] = "http://a.test, http://b.test"
        assert ExampleSettings().origins == ["http://a.test", "http://b.test"]

        os.environ["ORIGINS"] = '["http://c.test"]'
        assert ExampleSettings().origins == ["http://c.test"]
