from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from defcards.domain.constants import (
    DEFAULT_DAILY_NEW_CARDS,
    DEFAULT_DAILY_REVIEW_LIMIT,
    DEFAULT_DEF_FOLDER,
    EXTRA_SESSION_LIMIT,
)
from defcards.domain.errors import ConfigError
from defcards.domain.models import FileKind

CONFIG_FILES = [
    Path.home() / ".config/defcards/config.toml",
    Path.home() / ".defcards.toml",
]


class DividerConfig(BaseModel):
    """Which lines separate terms inside a consolidated file."""

    dash: bool = True  # ---
    underscore: bool = False  # ___

    @model_validator(mode="after")
    def _at_least_one(self) -> "DividerConfig":
        if not (self.dash or self.underscore):
            raise ValueError("At least one divider must be enabled")
        return self

    @property
    def tokens(self) -> tuple[str, ...]:
        out = []
        if self.dash:
            out.append("---")
        if self.underscore:
            out.append("___")
        return tuple(out)


class ParseConfig(BaseModel):
    # Used when a file declares no def-type. None means such files are skipped.
    default_file_kind: FileKind | None = FileKind.CONSOLIDATED
    divider: DividerConfig = Field(default_factory=DividerConfig)
    auto_plurals: bool = False

    @field_validator("default_file_kind", mode="before")
    @classmethod
    def _parse_kind(cls, v: Any) -> Any:
        if v is None or v == "" or (isinstance(v, str) and v.lower() == "none"):
            return None
        return v


class FlashcardConfig(BaseModel):
    daily_new_cards: int = Field(default=DEFAULT_DAILY_NEW_CARDS, ge=0)
    daily_review_limit: int = Field(default=DEFAULT_DAILY_REVIEW_LIMIT, ge=0)
    # Vault-relative files or folders ("folder/"); empty means everything.
    study_scope: list[str] = Field(default_factory=list)
    extra_session_limit: int = Field(default=EXTRA_SESSION_LIMIT, ge=0)

    @field_validator("study_scope", mode="before")
    @classmethod
    def _split_scope(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v


class AppConfig(BaseSettings):
    """
    Configuration model for defcards.
    Supports loading from:
    1. Environment variables (DEFCARDS_*, nested with __)
    2. Config file (~/.config/defcards/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="DEFCARDS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Paths
    vault_root: Path | None = None
    def_folder: str = DEFAULT_DEF_FOLDER
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".config/defcards")
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".config/defcards/logs")

    parse: ParseConfig = Field(default_factory=ParseConfig)
    flashcards: FlashcardConfig = Field(default_factory=FlashcardConfig)

    verbose: int = 1

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

        # Find the first existing file
        toml_file = None
        for f in CONFIG_FILES:
            if f.exists():
                toml_file = f
                break

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

    @field_validator("vault_root", mode="before")
    @classmethod
    def resolve_vault_root(cls, v: Any) -> Path | None:
        if v is None or v == "":
            return None
        return Path(v).expanduser().resolve()

    @field_validator("data_dir", "log_dir", mode="before")
    @classmethod
    def expand_dirs(cls, v: Any) -> Any:
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    @property
    def definitions_root(self) -> Path:
        root = self.vault_root or Path.cwd()
        return root / self.def_folder if self.def_folder else root

    @property
    def sessions_file(self) -> Path:
        return self.data_dir / "sessions.json"


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/defcards/config.toml (if exists)
    3. Environment variables (DEFCARDS_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    try:
        config = AppConfig(**overrides)
    except ValidationError as e:
        raise ConfigError(str(e)) from e

    if config.vault_root is None:
        config.vault_root = Path.cwd().resolve()

    return config
