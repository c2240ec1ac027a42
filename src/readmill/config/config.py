"""
Configuration management for readmill using Pydantic.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar, Dict, List, cast

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from readmill.errors import ConfigurationError

# --- Setup Logging ---
log = logging.getLogger(__name__)

# --- Nested Configuration Models ---


class ConverterSettings(BaseModel):
    """Configuration for the tree-to-model conversion pass."""

    skip_tags: List[str] = Field(
        default=[
            "script",
            "style",
            "noscript",
            "template",
            "head",
            "title",
            "meta",
            "link",
            "svg",
            "canvas",
            "button",
            "input",
            "select",
            "textarea",
            "option",
        ],
        description="Tags that never produce content and whose subtree is skipped.",
    )
    signature_depth: int = Field(default=6, ge=1, description="Number of ancestors kept in a block tag signature.")
    use_data_src: bool = Field(default=True, description="Fall back to data-src for lazy loaded images.")
    prefer_article_root: bool = Field(
        default=True,
        description="Start the walk at the page's only <article> or its schema.org Article items when present.",
    )


class ClassifierSettings(BaseModel):
    """Scoring weights and thresholds for the article classifier."""

    word_weight: float = Field(default=0.1, gt=0, description="Score contributed by each word.")
    word_cap: float = Field(default=5.0, gt=0, description="Maximum score contributed by text length.")
    link_penalty: float = Field(default=1.5, ge=0, description="Multiplier applied to link density.")
    min_sentence_words: float = Field(default=8.0, description="Average sentence length earning the bonus.")
    sentence_bonus: float = Field(default=0.5)
    content_threshold: float = Field(default=1.0, description="Minimum score for a block to be content.")
    bridge_floor: float = Field(default=-2.0, description="Blocks scoring below this are never bridged.")
    title_penalty: float = Field(default=10.0, ge=0, description="Penalty for blocks repeating a title.")
    keyword_weight: float = Field(default=1.5, ge=0)
    keyword_cap: float = Field(default=3.0, ge=0)
    tag_weights: Dict[str, float] = Field(
        default={
            "article": 1.5,
            "main": 1.0,
            "p": 0.5,
            "blockquote": 0.5,
            "pre": 0.5,
            "section": 0.25,
            "li": -0.5,
            "ul": -0.25,
            "ol": -0.25,
            "header": -1.5,
            "form": -2.0,
            "aside": -2.5,
            "footer": -2.5,
            "nav": -3.0,
            "menu": -3.0,
        },
        description="Bonus or penalty for each tag found in a block's tag signature.",
    )
    positive_keywords: List[str] = Field(
        default=["article", "body", "content", "entry", "hentry", "main", "page", "post", "text", "blog", "story"]
    )
    negative_keywords: List[str] = Field(
        default=[
            "ad",
            "ads",
            "advert",
            "banner",
            "combx",
            "comment",
            "contact",
            "foot",
            "footer",
            "footnote",
            "masthead",
            "menu",
            "meta",
            "nav",
            "outbrain",
            "promo",
            "related",
            "share",
            "shoutbox",
            "sidebar",
            "social",
            "sponsor",
            "shopping",
            "tags",
            "tool",
            "widget",
        ]
    )

    @field_validator("tag_weights")
    @classmethod
    def lowercase_tags(cls, v: Dict[str, float]) -> Dict[str, float]:
        """Tag names are compared in lower case."""
        return {tag.lower(): weight for tag, weight in v.items()}


class FilterSettings(BaseModel):
    """Configuration for the refinement filters."""

    min_lead_image_area: int = Field(
        default=0,
        ge=0,
        description="Declared area below which an image cannot be the lead image. 0 disables the check.",
    )
    structural_tags: List[str] = Field(
        default=["li", "td", "th", "dd", "dt", "caption", "figcaption", "pre", "blockquote"],
        description="Text block tags that may be pulled back into content when enclosed by it.",
    )


class OutputSettings(BaseModel):
    """Configuration for the output generator."""

    text_separator: str = Field(default="\n", description="Separator between blocks in text output.")

    @field_validator("text_separator")
    @classmethod
    def validate_separator(cls, v: str) -> str:
        if not v:
            raise ValueError("text_separator must not be empty")
        return v


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    log_level: str = Field(default="WARNING", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(default=None, description="Path to log file. If None, logs to console.")
    metrics_enabled: bool = Field(default=True, description="Record prometheus metrics for each extraction.")

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class Config(BaseSettings):
    project_name: str = "readmill"
    converter: ConverterSettings = Field(default_factory=ConverterSettings)
    classifier: ClassifierSettings = Field(default_factory=ClassifierSettings)
    filters: FilterSettings = Field(default_factory=FilterSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="READMILL_", env_nested_delimiter="__", case_sensitive=False)

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise ConfigurationError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            try:
                yaml_data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Configuration file is not valid YAML: {path}: {e}") from e
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        try:
            return cls.model_validate(yaml_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration in {path}: {e}") from e


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    for name in ("readmill.yaml", "readmill.yml"):
        path = current_dir / name
        if path.exists():
            return path
    return None


# --- Lazy Configuration Loader ---


class LazyConfig:
    """
    A proxy for the Config object that delays its loading and validation
    until an attribute is first accessed.
    """

    _config: ClassVar[Config | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        if self.__class__._config is None:
            with self.__class__._lock:
                if self.__class__._config is None:
                    self.__class__._config = self._load_config_with_fallback()
        return getattr(self.__class__._config, name)

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded configuration so the next access reloads it."""
        with cls._lock:
            cls._config = None

    def _load_config_with_fallback(self) -> Config:
        """Load configuration from file or fall back to defaults."""
        config_path = find_config_file()
        if config_path:
            try:
                log.info("Lazy loading configuration from: %s", config_path)
                return Config.from_yaml(config_path)
            except ConfigurationError as e:
                log.error(
                    "Failed to load configuration from '%s': %s. Falling back to default settings.",
                    config_path,
                    e,
                )
        else:
            log.debug("No config file found. Using default settings for lazy load.")

        try:
            return Config()
        except ValidationError as e:
            log.critical("FATAL: Default configuration is invalid: %s", e, exc_info=True)
            raise ConfigurationError(f"Default configuration is invalid: {e}") from e


# --- Global Settings Instance ---
settings: "Config" = cast("Config", LazyConfig())
