from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from flashdeck.domain.constants import (
    DEFAULT_DESIRED_RETENTION,
    DEFAULT_LEARNING_STEPS_MINUTES,
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_RELEARNING_STEPS_MINUTES,
    DEFAULT_SESSION_MAX_AGE,
    WEIGHT_COUNT,
)
from flashdeck.domain.scheduling.parameters import ParameterSet, minutes_to_steps


def config_files() -> tuple[Path, ...]:
    return (
        Path.home() / ".config/flashdeck/config.toml",
        Path.home() / ".flashdeck.toml",
    )


class AppConfig(BaseSettings):
    """
    Configuration model for flashdeck.
    Supports loading from:
    1. Environment variables (FLASHDECK_*)
    2. Config file (~/.config/flashdeck/config.toml or ~/.flashdeck.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="FLASHDECK_",
        extra="ignore",
    )

    # Storage
    data_dir: Path = Path("./data")

    # Authentication
    username: str = "admin"
    password: str = "password"
    api_token: str | None = None
    session_secret: str = "flashdeck-secret-key-change-in-production"
    session_max_age: int = DEFAULT_SESSION_MAX_AGE

    # Server
    host: str = "127.0.0.1"
    port: int = 8777

    # Scheduling
    learning_steps: list[float] = Field(
        default_factory=lambda: list(DEFAULT_LEARNING_STEPS_MINUTES)
    )  # minutes
    relearning_steps: list[float] = Field(
        default_factory=lambda: list(DEFAULT_RELEARNING_STEPS_MINUTES)
    )  # minutes
    desired_retention: float = DEFAULT_DESIRED_RETENTION
    maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL
    enable_fuzz: bool = False
    weights: list[float] | None = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins; CLI overrides beat env, env beats the file.
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("data_dir", mode="before")
    @classmethod
    def resolve_data_dir(cls, v: Any) -> Path:
        return Path(v).expanduser()

    @field_validator("learning_steps", "relearning_steps")
    @classmethod
    def check_steps(cls, v: list[float]) -> list[float]:
        if any(step <= 0 for step in v):
            raise ValueError("steps must be positive numbers of minutes")
        return v

    @field_validator("desired_retention")
    @classmethod
    def check_retention(cls, v: float) -> float:
        if not 0.0 < v < 1.0:
            raise ValueError("desired_retention must be between 0 and 1 (exclusive)")
        return v

    @field_validator("weights")
    @classmethod
    def check_weights(cls, v: list[float] | None) -> list[float] | None:
        if v is not None and len(v) != WEIGHT_COUNT:
            raise ValueError(f"weights must contain exactly {WEIGHT_COUNT} values")
        return v

    def scheduler_parameters(self) -> ParameterSet:
        """Build the immutable parameter set the scheduler is called with."""
        kwargs: dict[str, Any] = {
            "learning_steps": minutes_to_steps(self.learning_steps),
            "relearning_steps": minutes_to_steps(self.relearning_steps),
            "desired_retention": self.desired_retention,
            "maximum_interval": self.maximum_interval,
            "enable_fuzz": self.enable_fuzz,
        }
        if self.weights is not None:
            kwargs["weights"] = tuple(self.weights)
        return ParameterSet(**kwargs)


def resolve_config(overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/flashdeck/config.toml (if exists)
    3. Environment variables (FLASHDECK_*)
    4. overrides (passed from Typer)
    """
    # Typer passes every option; only explicit values override.
    return AppConfig(**{k: v for k, v in (overrides or {}).items() if v is not None})
