"""Shared configuration loading for the pipeline stages and the API."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Generic, Mapping, TypeVar

import yaml

T = TypeVar("T")

CONFIG_DIR = Path(__file__).resolve().parents[2] / "configs"
CONFIG_ENV_VAR = "PULSE_CONFIG"


@dataclass
class DatabaseConfig:
    url: str = "sqlite:///pulsereader.db"
    schema: str | None = None  # applied once via schema_translate_map
    echo: bool = False


@dataclass
class FetchConfig:
    timeout: int = 30
    user_agent: str = "pulsereader/1.0 (RSS reader)"


@dataclass
class ClassificationConfig:
    api_key: str | None = None
    model: str = "openai/gpt-4o-mini"
    base_url: str = "https://openrouter.ai/api/v1"
    timeout: float = 10.0
    temperature: float = 0.1
    max_tokens: int = 500
    delay_seconds: float = 1.0
    referer: str = "https://pulsereader.app"
    app_title: str = "PulseReader"


@dataclass
class CycleConfig:
    max_sources_per_run: int = 1
    max_subrequests: int = 45
    batch_size: int = 20
    source_delay_seconds: float = 0.5


@dataclass
class APIConfig:
    host: str = "0.0.0.0"
    port: int = 8000
    cron_secret: str | None = None


@dataclass
class PipelineConfig:
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    classification: ClassificationConfig = field(default_factory=ClassificationConfig)
    cycle: CycleConfig = field(default_factory=CycleConfig)
    api: APIConfig = field(default_factory=APIConfig)


def find_config_path(
    config_name: str | None,
    config_dir: Path,
    default_name: str = "prod",
    env_var: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Find config file path, checking env var and defaults.

    Args:
        config_name: Name of config (without .yaml) or None for default
        config_dir: Directory containing config files
        default_name: Default config name if config_name is None
        env_var: Environment variable to check for config name
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Path to the config file

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    if config_name is None:
        environ = os.environ if environ is None else environ
        config_name = environ.get(env_var, default_name) if env_var else default_name

    config_path = config_dir / f"{config_name}.yaml"
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    return config_path


def load_yaml(path: Path) -> dict:
    """Load YAML file and return dict."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_config(
    config_name: str | None = None,
    config_dir: Path = CONFIG_DIR,
    environ: dict[str, str] | None = None,
) -> PipelineConfig:
    """Load configuration from YAML, then overlay secrets from the environment.

    Args:
        config_name: Name of config file (without .yaml extension).
                    If None, uses PULSE_CONFIG env var or "prod".
        config_dir: Directory containing config files
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Loaded PipelineConfig object
    """
    environ = os.environ if environ is None else environ
    path = find_config_path(config_name, config_dir, env_var=CONFIG_ENV_VAR, environ=environ)
    return parse_config(load_yaml(path), environ)


def parse_config(data: dict, environ: dict[str, str] | None = None) -> PipelineConfig:
    """Parse config dictionary into a PipelineConfig object."""
    environ = environ or {}
    db = data.get("database", {})
    fetch = data.get("fetch", {})
    ai = data.get("classification", {})
    cycle = data.get("cycle", {})
    api = data.get("api", {})

    database = DatabaseConfig(
        url=environ.get("DATABASE_URL") or db.get("url", DatabaseConfig.url),
        schema=db.get("schema"),
        echo=db.get("echo", False),
    )

    fetch_config = FetchConfig(
        timeout=fetch.get("timeout", 30),
        user_agent=fetch.get("user_agent", FetchConfig.user_agent),
    )

    classification = ClassificationConfig(
        api_key=environ.get("OPENROUTER_API_KEY") or ai.get("api_key"),
        model=environ.get("OPENROUTER_MODEL") or ai.get("model", ClassificationConfig.model),
        base_url=ai.get("base_url", ClassificationConfig.base_url),
        timeout=ai.get("timeout", 10.0),
        temperature=ai.get("temperature", 0.1),
        max_tokens=ai.get("max_tokens", 500),
        delay_seconds=ai.get("delay_seconds", 1.0),
        referer=ai.get("referer", ClassificationConfig.referer),
        app_title=ai.get("app_title", ClassificationConfig.app_title),
    )

    cycle_config = CycleConfig(
        max_sources_per_run=cycle.get("max_sources_per_run", 1),
        max_subrequests=cycle.get("max_subrequests", 45),
        batch_size=cycle.get("batch_size", 20),
        source_delay_seconds=cycle.get("source_delay_seconds", 0.5),
    )

    api_config = APIConfig(
        host=api.get("host", "0.0.0.0"),
        port=api.get("port", 8000),
        cron_secret=environ.get("CRON_SECRET") or api.get("cron_secret"),
    )

    return PipelineConfig(
        database=database,
        fetch=fetch_config,
        classification=classification,
        cycle=cycle_config,
        api=api_config,
    )


class ConfigSingleton(Generic[T]):
    """Generic config singleton manager.

    Provides get/set/reset pattern for managing a global config instance.

    Example:
        >>> _manager = ConfigSingleton(load_config)
        >>> get_config = _manager.get
        >>> set_config = _manager.set
        >>> reset_config = _manager.reset
    """

    def __init__(self, loader: Callable[[], T] | None = None):
        self._config: T | None = None
        self._loader = loader

    def get(self) -> T:
        """Get the config, loading it lazily if needed."""
        if self._config is None:
            if self._loader is None:
                raise RuntimeError("No config loaded and no loader set")
            self._config = self._loader()
        return self._config

    def set(self, config: T) -> None:
        """Set the config directly."""
        self._config = config

    def reset(self) -> None:
        """Reset the config, forcing reload on next get()."""
        self._config = None


_manager: ConfigSingleton[PipelineConfig] = ConfigSingleton(load_config)
get_config = _manager.get
set_config = _manager.set
reset_config = _manager.reset
