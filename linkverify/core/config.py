"""
Configuration file loading for linkverify.

Loads .linkverify.yaml from project root or home directory.
Config values provide defaults that can be overridden by CLI options.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .exceptions import ConfigError
from .logging import get_logger

logger = get_logger(__name__)

CONFIG_FILENAME = ".linkverify.yaml"

DEFAULT_WORKERS = 8
DEFAULT_EXTENSIONS = [".md", ".markdown", ".txt"]


@dataclass
class ConfigCheck:
    """Scan and orchestration settings."""
    workers: int = DEFAULT_WORKERS
    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    strict: bool = False  # Unsupported links fail the run
    exclude: list[str] = field(default_factory=list)


@dataclass
class ConfigWeb:
    """Web verifier settings."""
    enabled: bool = True
    timeout: float = 10.0
    ignored_domains: list[str] = field(default_factory=list)
    user_agent: str = "linkverify/0.1"


@dataclass
class ConfigFiles:
    """File verifier settings."""
    allow_outside_root: bool = False
    ignore: list[str] = field(default_factory=list)


@dataclass
class ConfigCache:
    """In-memory cache TTLs, in seconds."""
    valid_ttl: int = 21600  # 6 hours
    invalid_ttl: int = 900  # 15 minutes


@dataclass
class Config:
    """Loaded configuration."""
    check: ConfigCheck = field(default_factory=ConfigCheck)
    web: ConfigWeb = field(default_factory=ConfigWeb)
    files: ConfigFiles = field(default_factory=ConfigFiles)
    cache: ConfigCache = field(default_factory=ConfigCache)
    source_path: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: dict, source_path: Optional[Path] = None) -> "Config":
        """Create Config from parsed YAML dict."""
        config = cls(source_path=source_path)

        if "check" in data and isinstance(data["check"], dict):
            check = data["check"]
            workers = int(check.get("workers", config.check.workers))
            if workers < 1:
                raise ValueError(f"check.workers must be at least 1, got {workers}")
            config.check.workers = workers
            config.check.extensions = [
                ext if ext.startswith(".") else f".{ext}"
                for ext in check.get("extensions", config.check.extensions)
            ]
            config.check.strict = bool(check.get("strict", config.check.strict))
            config.check.exclude = list(check.get("exclude", config.check.exclude))

        if "web" in data and isinstance(data["web"], dict):
            web = data["web"]
            config.web.enabled = bool(web.get("enabled", config.web.enabled))
            config.web.timeout = float(web.get("timeout", config.web.timeout))
            config.web.ignored_domains = [
                d.lower() for d in web.get("ignored_domains", config.web.ignored_domains)
            ]
            config.web.user_agent = web.get("user_agent", config.web.user_agent)

        if "files" in data and isinstance(data["files"], dict):
            files = data["files"]
            config.files.allow_outside_root = bool(
                files.get("allow_outside_root", config.files.allow_outside_root)
            )
            config.files.ignore = list(files.get("ignore", config.files.ignore))

        if "cache" in data and isinstance(data["cache"], dict):
            cache = data["cache"]
            config.cache.valid_ttl = int(cache.get("valid_ttl", config.cache.valid_ttl))
            config.cache.invalid_ttl = int(cache.get("invalid_ttl", config.cache.invalid_ttl))

        return config


# Global cached config
_cached_config: Optional[Config] = None


def _find_config_file() -> Optional[Path]:
    search_dir = Path.cwd()
    while search_dir != search_dir.parent:
        candidate = search_dir / CONFIG_FILENAME
        if candidate.exists():
            return candidate
        # Stop at git root
        if (search_dir / ".git").exists():
            break
        search_dir = search_dir.parent

    home_config = Path.home() / CONFIG_FILENAME
    if home_config.exists():
        return home_config
    return None


def load_config(path: Optional[Path] = None, use_cache: bool = True) -> Config:
    """Load .linkverify.yaml from project root or home.

    Search order:
    1. Explicit path if provided
    2. .linkverify.yaml in current directory
    3. .linkverify.yaml in parent directories (up to git root or /)
    4. ~/.linkverify.yaml in home directory

    Args:
        path: Explicit path to config file
        use_cache: Whether to use cached config (default True)

    Returns:
        Loaded Config, or default Config if no file found

    Raises:
        ConfigError: If an explicit path is missing or invalid
    """
    global _cached_config

    if path is None and use_cache and _cached_config is not None:
        return _cached_config

    if path is not None:
        if not path.exists():
            raise ConfigError(path, "file not found")
        config_path: Optional[Path] = path
    else:
        config_path = _find_config_file()

    if config_path is None:
        config = Config()
    else:
        try:
            data = yaml.safe_load(config_path.read_text())
            if data is not None and not isinstance(data, dict):
                raise ValueError("top level must be a mapping")
            config = Config.from_dict(data or {}, source_path=config_path)
        except (yaml.YAMLError, OSError, ValueError, TypeError, AttributeError) as e:
            if path is not None:
                raise ConfigError(config_path, str(e)) from e
            logger.warning(f"Failed to load config from {config_path}: {e}")
            config = Config()

    if use_cache and path is None:
        _cached_config = config

    return config


def clear_config_cache() -> None:
    """Clear the cached config (useful for testing)."""
    global _cached_config
    _cached_config = None
