"""Application configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parent.parent.parent


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from config/settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        flattened = {}
        if 'server' in data:
            flattened['host'] = data['server'].get('host')
            flattened['port'] = data['server'].get('port')
        if 'storage' in data:
            flattened['data_dir'] = data['storage'].get('data_dir')
            flattened['catalog_path'] = data['storage'].get('catalog_path')
        if 'sessions' in data:
            sessions = data['sessions']
            flattened['new_session_limit'] = sessions.get('new_limit')
            flattened['review_session_limit'] = sessions.get('review_limit')
            flattened['recommendation_count'] = sessions.get('recommendation_count')
        if 'tests' in data:
            tests = data['tests']
            flattened['default_question_count'] = tests.get('question_count')
            flattened['seconds_per_question'] = tests.get('seconds_per_question')
            flattened['random_seed'] = tests.get('random_seed')
        if 'stats' in data:
            flattened['weak_threshold'] = data['stats'].get('weak_threshold')
            flattened['strong_threshold'] = data['stats'].get('strong_threshold')
        if 'goals' in data:
            flattened['daily_goal'] = data['goals'].get('daily')
            flattened['weekly_goal'] = data['goals'].get('weekly')

        # Remove None values
        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)

    # Storage
    data_dir: Path | None = Field(default=None)
    catalog_path: Path | None = Field(default=None)

    # Learning sessions
    new_session_limit: int = Field(default=10, ge=0)
    review_session_limit: int = Field(default=15, ge=0)
    recommendation_count: int = Field(default=10, ge=0)

    # Tests
    default_question_count: int = Field(default=10, ge=1)
    seconds_per_question: int = Field(default=60, ge=1)
    random_seed: int | None = Field(default=None)

    # Stats
    weak_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    strong_threshold: float = Field(default=0.8, ge=0.0, le=1.0)

    # Goals for newly created users
    daily_goal: int = Field(default=20, ge=0)
    weekly_goal: int = Field(default=140, ge=0)

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)

    @property
    def users_dir(self) -> Path:
        base = self.data_dir if self.data_dir is not None else self.project_root / "data"
        d = base / "users"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()
