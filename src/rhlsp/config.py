"""
Server settings.

Settings are resolved from, in increasing priority:

1. Built-in defaults.
2. A ``.rhlsp.toml`` project config file in the workspace root.
3. Command-line options of ``rhlsp``.
4. ``initializationOptions`` supplied by the LSP client.

Example ``.rhlsp.toml``::

    concept_modules = ["rhlsp.dsl.default_concepts", "my_project.concepts"]
    publish_interval = 0.5
    log_level = "debug"
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path

from rhlsp.context import DEFAULT_CONCEPT_MODULES
from rhlsp.publisher import CYCLE_INTERVAL

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAME = '.rhlsp.toml'


@dataclass(frozen=True)
class ServerSettings:
    concept_modules: tuple[str, ...] = DEFAULT_CONCEPT_MODULES
    publish_interval: float = CYCLE_INTERVAL
    log_level: str | None = None


def _read_project_config(workspace_root: str | None) -> dict:
    """Parse ``.rhlsp.toml`` in *workspace_root* and return its table, or ``{}``."""
    if not workspace_root:
        return {}
    try:
        import tomllib  # Python 3.11+
    except ImportError:
        import tomli as tomllib

    config_path = Path(workspace_root) / PROJECT_CONFIG_NAME
    if not config_path.exists():
        return {}

    try:
        return tomllib.loads(config_path.read_text(encoding='utf-8'))
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning('Ignoring invalid %s: %s', config_path, e)
        return {}


def _option(options, name: str):
    if options is None:
        return None
    if isinstance(options, dict):
        return options.get(name)
    # Some clients send a typed object; try attribute access
    return getattr(options, name, None)


def _apply(settings: ServerSettings, values) -> ServerSettings:
    modules = _option(values, 'conceptModules') or _option(values, 'concept_modules')
    if modules:
        if isinstance(modules, str):
            modules = [modules]
        settings = replace(settings, concept_modules=tuple(modules))

    interval = _option(values, 'publishInterval') or _option(values, 'publish_interval')
    if interval is not None:
        try:
            settings = replace(settings, publish_interval=max(0.01, float(interval)))
        except (TypeError, ValueError):
            logger.warning('Ignoring invalid publish interval %r', interval)

    level = _option(values, 'logLevel') or _option(values, 'log_level')
    if level:
        settings = replace(settings, log_level=str(level))
    return settings


def load_settings(workspace_root: str | None = None, init_options=None,
                  overrides=None) -> ServerSettings:
    settings = ServerSettings()
    settings = _apply(settings, _read_project_config(workspace_root))
    settings = _apply(settings, overrides)
    settings = _apply(settings, init_options)
    logger.debug('load_settings: %s', settings)
    return settings


def apply_log_level(raw: str | None) -> None:
    """Set the root logger level from a string like 'debug', 'warning', etc."""
    if not raw:
        return
    level = getattr(logging, raw.upper(), None)
    if isinstance(level, int):
        logging.getLogger().setLevel(level)
