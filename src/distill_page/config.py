"""Configuration loader for distill_page."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from annotate_text.models import DEFAULT_CATEGORIES, DEFAULT_SPACY_MODEL, EntityCategory
from common.config import ConfigSingleton, find_config_path, load_yaml
from extract_content.fetch_page import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT

load_dotenv()

CONFIG_DIR = Path(__file__).parent / "configs"
CONFIG_ENV_VAR = "DISTILL_CONFIG"

RESERVED_KEYS = {"title", "content"}


@dataclass
class FetchConfig:
    request_timeout: int = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT


@dataclass
class ExtractionConfig:
    favor_precision: bool = False
    include_tables: bool = True
    fallback: bool = True  # try readability when trafilatura finds nothing


@dataclass
class ModelsConfig:
    sentences: str = DEFAULT_SPACY_MODEL
    tokens: str = DEFAULT_SPACY_MODEL
    batch_size: int = 32
    preload: bool = False


@dataclass
class PipelineConfig:
    parallel_categories: bool = False
    max_workers: int = 3


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000
    request_timeout: Optional[float] = None  # seconds, checked between pipeline steps


@dataclass
class Config:
    fetch: FetchConfig = field(default_factory=FetchConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    models: ModelsConfig = field(default_factory=ModelsConfig)
    entities: tuple[EntityCategory, ...] = DEFAULT_CATEGORIES
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    def __post_init__(self) -> None:
        if not self.entities:
            raise ValueError("At least one entity category is required")

        names = [category.name for category in self.entities]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate entity category names: {names}")

        keys = [category.output_key for category in self.entities]
        if len(set(keys)) != len(keys):
            raise ValueError(f"Duplicate entity output keys: {keys}")
        clashing = RESERVED_KEYS.intersection(keys)
        if clashing:
            raise ValueError(f"Entity output keys clash with record fields: {sorted(clashing)}")

        if self.models.batch_size < 1:
            raise ValueError(f"Invalid batch_size: {self.models.batch_size}. Must be >= 1")
        if self.pipeline.max_workers < 1:
            raise ValueError(f"Invalid max_workers: {self.pipeline.max_workers}. Must be >= 1")

    def model_keys(self) -> list[str]:
        """Every spaCy pipeline the config refers to, without repeats."""
        keys = [self.models.sentences, self.models.tokens]
        keys.extend(category.model for category in self.entities)
        return list(dict.fromkeys(keys))


def load_config(config_name: str | None = None) -> Config:
    """Load configuration from YAML file.

    Args:
        config_name: Name of config file (without .yaml extension) or path to one.
                    If None, uses DISTILL_CONFIG env var or "prod".

    Returns:
        Loaded Config object
    """
    config_path = find_config_path(config_name, CONFIG_DIR, env_var=CONFIG_ENV_VAR)
    return parse_config(load_yaml(config_path))


def _parse_categories(data: list[dict] | None) -> tuple[EntityCategory, ...]:
    if data is None:
        return DEFAULT_CATEGORIES
    return tuple(
        EntityCategory(
            name=item["name"],
            output_key=item.get("output_key", f"{item['name']}s"),
            model=item.get("model", DEFAULT_SPACY_MODEL),
            labels=frozenset(item.get("labels", [])),
        )
        for item in data
    )


def parse_config(data: dict) -> Config:
    """Parse config dictionary into Config object."""
    fetch_data = data.get("fetch", {})
    fetch = FetchConfig(
        request_timeout=fetch_data.get("request_timeout", DEFAULT_TIMEOUT),
        user_agent=fetch_data.get("user_agent", DEFAULT_USER_AGENT),
    )

    extraction_data = data.get("extraction", {})
    extraction = ExtractionConfig(
        favor_precision=extraction_data.get("favor_precision", False),
        include_tables=extraction_data.get("include_tables", True),
        fallback=extraction_data.get("fallback", True),
    )

    models_data = data.get("models", {})
    models = ModelsConfig(
        sentences=models_data.get("sentences", DEFAULT_SPACY_MODEL),
        tokens=models_data.get("tokens", DEFAULT_SPACY_MODEL),
        batch_size=models_data.get("batch_size", 32),
        preload=models_data.get("preload", False),
    )

    pipeline_data = data.get("pipeline", {})
    pipeline = PipelineConfig(
        parallel_categories=pipeline_data.get("parallel_categories", False),
        max_workers=pipeline_data.get("max_workers", 3),
    )

    server_data = data.get("server", {})
    server = ServerConfig(
        host=server_data.get("host", "0.0.0.0"),
        port=server_data.get("port", 8000),
        request_timeout=server_data.get("request_timeout"),
    )

    return Config(
        fetch=fetch,
        extraction=extraction,
        models=models,
        entities=_parse_categories(data.get("entities")),
        pipeline=pipeline,
        server=server,
    )


# Global config instance (loaded on first access)
_manager = ConfigSingleton(load_config)
get_config = _manager.get
set_config = _manager.set
reset_config = _manager.reset
