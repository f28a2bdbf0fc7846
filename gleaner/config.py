"""Loading scrape configs from JSON or YAML, with environment overrides."""

import json
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from gleaner.exceptions import ConfigError
from gleaner.models.descriptors import ScrapeConfig

logger = logging.getLogger(__name__)

FORMATS = {
    '.json': 'json',
    '.yaml': 'yaml',
    '.yml': 'yaml',
}

_DURATION_RE = re.compile(r'^(\d+(?:\.\d+)?)(ms|s|m|h)?$')
_DURATION_UNITS = {None: 1.0, 'ms': 0.001, 's': 1.0, 'm': 60.0, 'h': 3600.0}


@dataclass(frozen=True)
class EnvMapping:
    """Names of the environment variables that override fetch settings.

    Attributes:
        timeout: Request timeout, seconds or a duration such as '45s' or '2m'
        user_agent: Static User-Agent header
        random_ua: 'true' or '1' to rotate user agents
        max_retries: Extra fetch attempts
        proxy: Proxy URL

    """

    timeout: str = 'GLEANER_TIMEOUT'
    user_agent: str = 'GLEANER_USER_AGENT'
    random_ua: str = 'GLEANER_RANDOM_UA'
    max_retries: str = 'GLEANER_MAX_RETRIES'
    proxy: str = 'GLEANER_PROXY'


DEFAULT_ENV_MAPPING = EnvMapping()


def parse_duration(value: str) -> float | None:
    """Parse '30', '30s', '1.5m', '250ms' or '1h' into seconds; None if malformed."""
    match = _DURATION_RE.match(value.strip().lower())
    if not match:
        return None
    amount, unit = match.groups()
    return float(amount) * _DURATION_UNITS[unit]


def env_overrides(mapping: EnvMapping | None = None, environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Collect fetch setting overrides from the environment.

    Malformed values are logged and ignored.

    Args:
        mapping: Variable names to read, defaults to the GLEANER_* names
        environ: Environment to read, defaults to os.environ

    Returns:
        Fetch settings keyed by field name

    """
    mapping = mapping or DEFAULT_ENV_MAPPING
    environ = os.environ if environ is None else environ
    overrides: dict[str, Any] = {}

    if value := environ.get(mapping.timeout):
        seconds = parse_duration(value)
        if seconds and seconds > 0:
            overrides['timeout'] = seconds
        else:
            logger.warning(f'Ignoring malformed {mapping.timeout}={value!r}')

    if value := environ.get(mapping.user_agent):
        overrides['user_agent'] = value

    if value := environ.get(mapping.random_ua):
        overrides['random_user_agent'] = value.strip().lower() in ('true', '1')

    if value := environ.get(mapping.max_retries):
        if value.strip().isdigit():
            overrides['max_retries'] = int(value)
        else:
            logger.warning(f'Ignoring malformed {mapping.max_retries}={value!r}')

    if value := environ.get(mapping.proxy):
        overrides['proxy'] = value

    return overrides


def config_from_dict(
    data: dict[str, Any],
    env_mapping: EnvMapping | None = None,
    environ: dict[str, str] | None = None,
) -> ScrapeConfig:
    """Build a ScrapeConfig from plain data, applying environment overrides.

    Raises:
        ConfigError: If the data does not describe a valid config

    """
    if not isinstance(data, dict):
        raise ConfigError('config must be a mapping at the top level')

    data = dict(data)
    fetch = dict(data.get('fetch') or {})
    fetch.update(env_overrides(env_mapping, environ))
    data['fetch'] = fetch

    try:
        return ScrapeConfig.model_validate(data)
    except ValidationError as e:
        problems = [f'{".".join(str(loc) for loc in err["loc"]) or "config"}: {err["msg"]}' for err in e.errors()]
        raise ConfigError('invalid config', problems) from e


def parse_config(
    text: str,
    format: str = 'json',
    env_mapping: EnvMapping | None = None,
    environ: dict[str, str] | None = None,
) -> ScrapeConfig:
    """Parse a config from a JSON or YAML string.

    Args:
        text: Config document
        format: 'json' or 'yaml'
        env_mapping: Environment variable names for fetch overrides
        environ: Environment to read, defaults to os.environ

    Returns:
        Validated ScrapeConfig

    Raises:
        ConfigError: On unknown format, syntax errors or invalid content

    """
    format = format.lower()
    try:
        if format == 'json':
            data = json.loads(text)
        elif format in ('yaml', 'yml'):
            data = yaml.safe_load(text)
        else:
            raise ConfigError(f'unsupported config format: {format}')
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigError(f'could not parse {format} config: {e}') from e

    return config_from_dict(data, env_mapping, environ)


def load_config(
    path: str | Path,
    env_mapping: EnvMapping | None = None,
    environ: dict[str, str] | None = None,
) -> ScrapeConfig:
    """Load a config file, picking the format from its extension.

    Args:
        path: Path to a .json, .yaml or .yml file
        env_mapping: Environment variable names for fetch overrides
        environ: Environment to read, defaults to os.environ

    Returns:
        Validated ScrapeConfig

    Raises:
        ConfigError: If the file is missing, has an unknown extension or is invalid

    """
    path = Path(path)
    format = FORMATS.get(path.suffix.lower())
    if format is None:
        raise ConfigError(f'unsupported config file extension: {path.suffix or "(none)"} (use .json, .yaml or .yml)')

    try:
        text = path.read_text(encoding='utf-8')
    except OSError as e:
        raise ConfigError(f'could not read config file {path}: {e}') from e

    logger.debug(f'Loading {format} config from {path}')
    return parse_config(text, format, env_mapping, environ)
