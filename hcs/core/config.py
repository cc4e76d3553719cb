"""Typed configuration loading and access.

Every value has a default matching the production store, so a project
without a config file publishes to the public registry. A TOML file can
override them, e.g. to point at a staging API:

    [registry]
    host = "staging.example.com"
    path = "/staging/apps/publish"

    [assets]
    bucket = "staging-store"
    workers = 4
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_table

__all__ = [
    "PublishConfig",
    "ConfigError",
    "CONFIG_ENV_VAR",
    "CONFIG_FILENAME",
    "config_path_for",
    "load_config",
    "load_config_or_default",
]

CONFIG_ENV_VAR = "HCS_CONFIG"
CONFIG_FILENAME = ".hcs.toml"

DEFAULT_REGION = "eu-central-1"
DEFAULT_API_HOST = "4c23v5xwtc.execute-api.eu-central-1.amazonaws.com"
DEFAULT_API_PATH = "/production/apps/publish"
DEFAULT_SIGNING_SERVICE = "execute-api"
DEFAULT_BUCKET = "homey-community-store"
DEFAULT_KEYRING_SERVICE = "hcs-cli"
DEFAULT_UPLOAD_WORKERS = 8
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class PublishConfig:
    """Registry, content store and keyring settings."""

    region: str = DEFAULT_REGION
    api_host: str = DEFAULT_API_HOST
    api_path: str = DEFAULT_API_PATH
    signing_service: str = DEFAULT_SIGNING_SERVICE
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    bucket: str = DEFAULT_BUCKET
    upload_workers: int = DEFAULT_UPLOAD_WORKERS
    keyring_service: str = DEFAULT_KEYRING_SERVICE

    @property
    def api_url(self) -> str:
        return f"https://{self.api_host}{self.api_path}"

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> PublishConfig:
        """Create PublishConfig from a mapping (parsed TOML)."""
        registry: StrDict = get_table(data, "registry") or {}
        assets: StrDict = get_table(data, "assets") or {}
        credentials: StrDict = get_table(data, "credentials") or {}

        timeout = registry.get("timeout")
        if isinstance(timeout, bool) or not isinstance(timeout, int | float) or timeout <= 0:
            timeout = DEFAULT_TIMEOUT_SECONDS

        workers = get_int(assets, "workers")
        if workers is not None and workers < 1:
            raise ValueError(f"assets.workers must be >= 1 (got {workers})")

        return cls(
            region=get_str(registry, "region") or DEFAULT_REGION,
            api_host=get_str(registry, "host") or DEFAULT_API_HOST,
            api_path=get_str(registry, "path") or DEFAULT_API_PATH,
            signing_service=get_str(registry, "service") or DEFAULT_SIGNING_SERVICE,
            timeout=float(timeout),
            bucket=get_str(assets, "bucket") or DEFAULT_BUCKET,
            upload_workers=workers or DEFAULT_UPLOAD_WORKERS,
            keyring_service=get_str(credentials, "service") or DEFAULT_KEYRING_SERVICE,
        )


def config_path_for(project_root: Path) -> Path:
    """Return the config file location: $HCS_CONFIG, else <project>/.hcs.toml."""
    env = os.environ.get(CONFIG_ENV_VAR)
    if env:
        return Path(env).expanduser()
    return project_root / CONFIG_FILENAME


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except OSError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[PublishConfig, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to the TOML file

    Returns:
        Ok(PublishConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(PublishConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[PublishConfig, ConfigError]:
    """Like load_config, but a missing file yields the defaults."""
    if not path.exists():
        return Ok(PublishConfig())
    return load_config(path)
