"""
Settings for the bridge.

Sources, lowest to highest precedence:
  1. built-in defaults (DEFAULTS)
  2. the JSON config file (~/.config/mpris-ws-bridge/config.json or --config)
  3. command-line flags
"""

import argparse
import json
import logging
import os
import re
from dataclasses import asdict, dataclass, field, replace
from pathlib import Path

from . import __version__
from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(os.environ.get('XDG_CONFIG_HOME', Path.home() / '.config')) / 'mpris-ws-bridge'
CONFIG_FILE = CONFIG_DIR / 'config.json'

DEFAULT_MIN_DELAY = 1.0
DEFAULT_MAX_DELAY = 4.0
DEFAULT_INTERVAL = 0.25
DEFAULT_IP = '127.0.0.1:32100'


@dataclass(frozen=True)
class Settings:
    min_delay: float = DEFAULT_MIN_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    ip: str = DEFAULT_IP
    interval: float = DEFAULT_INTERVAL
    app_names: tuple = field(default_factory=tuple)
    timeout: float = 0.0
    http: str = None
    log_level: str = 'INFO'

    def to_dict(self) -> dict:
        data = asdict(self)
        data['app_names'] = list(self.app_names)
        return data


_FIELDS = set(Settings.__dataclass_fields__)
_STRING_FIELDS = {'ip', 'http', 'log_level'}


# ============================================================================
# CONFIG FILE
# ============================================================================

def load_config(path: Path = CONFIG_FILE) -> dict:
    """Returns the config file as a dict; {} when missing or unreadable."""
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except (OSError, ValueError) as e:
        logger.error(f"Could not read config file {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.error(f"Config file {path} must contain a JSON object, ignoring it")
        return {}

    unknown = set(data) - _FIELDS
    if unknown:
        logger.warning(f"Ignoring unknown config keys in {path}: {', '.join(sorted(unknown))}")
    return _check_types({k: v for k, v in data.items() if k in _FIELDS}, path)


def _check_types(data: dict, path) -> dict:
    """Drops config file values of the wrong type; a bare app name becomes a list."""
    checked = {}
    for key, value in data.items():
        if key == 'app_names':
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                logger.error(f"Config {path}: app_names must be a list of strings, ignoring it")
                continue
        elif key in _STRING_FIELDS and not isinstance(value, str) and not (key == 'http' and value is None):
            logger.error(f"Config {path}: {key} must be a string, ignoring {value!r}")
            continue
        checked[key] = value
    return checked


def save_config(updates: dict, path: Path = CONFIG_FILE):
    """Merges *updates* into the existing config file."""
    current = load_config(path)
    current.update(updates)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(current, indent=2), encoding='utf-8')
    logger.info(f"Config saved to {path}")


# ============================================================================
# COMMAND LINE
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='mpris-ws-bridge',
        description='MPRIS2 player status proxy as a WebSocket server.',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--config', type=Path, default=CONFIG_FILE,
                        help='JSON config file (default: %(default)s)')
    parser.add_argument('--save-config', action='store_true',
                        help='write the effective settings to the config file')
    parser.add_argument('--min-delay', type=float,
                        help='starting time between player searches, in seconds (default: 1.0)')
    parser.add_argument('--max-delay', type=float,
                        help='maximum time between player searches, reached after 16 tries. '
                             'Swapped with --min-delay if smaller (default: 4.0)')
    parser.add_argument('--ip',
                        help=f'address the WebSocket server binds to (default: {DEFAULT_IP})')
    parser.add_argument('-i', '--interval', type=float,
                        help='status update interval, in seconds (default: 0.25)')
    parser.add_argument('-a', '--app-names', action='append', metavar='REGEX',
                        help='only follow players whose name matches; repeatable. '
                             'Leave out to follow the active player')
    parser.add_argument('--timeout', type=float,
                        help='how long a status request waits for a first status, in seconds '
                             '(default: 0, answer right away)')
    parser.add_argument('--http', metavar='HOST:PORT',
                        help='also serve status and artwork over HTTP on this address')
    parser.add_argument('--log-level',
                        help='logging level (default: $MPRIS_BRIDGE_LOG or INFO)')
    return parser


def parse_settings(argv=None):
    """Parses *argv* on top of the config file. Returns (settings, args)."""
    args = build_parser().parse_args(argv)

    values = {'log_level': os.environ.get('MPRIS_BRIDGE_LOG', 'INFO')}
    values.update(load_config(args.config))
    for key in _FIELDS:
        value = getattr(args, key, None)
        if value is not None:
            values[key] = value

    if 'app_names' in values:
        values['app_names'] = tuple(values['app_names'])

    try:
        settings = Settings(**values)
    except TypeError as e:
        raise ConfigError(f'invalid configuration: {e}') from e
    return settings, args


# ============================================================================
# VALIDATION
# ============================================================================

def _positive(value, name, default):
    try:
        value = float(value)
    except (TypeError, ValueError):
        value = 0.0
    if value <= 0:
        logger.error(f"{name} cannot be less than or equal to zero! Setting back to default ({default}).")
        return default
    return value


def validate(settings: Settings) -> Settings:
    """Corrects out-of-range values, logging what was changed."""
    min_delay = _positive(settings.min_delay, 'min_delay', DEFAULT_MIN_DELAY)
    max_delay = _positive(settings.max_delay, 'max_delay', DEFAULT_MAX_DELAY)
    interval = _positive(settings.interval, 'interval', DEFAULT_INTERVAL)

    if max_delay < min_delay:
        logger.warning(
            f"max_delay ({max_delay}) is smaller than min_delay ({min_delay})! Proceeding to swap the two."
        )
        min_delay, max_delay = max_delay, min_delay

    try:
        timeout = float(settings.timeout or 0.0)
    except (TypeError, ValueError):
        logger.error(f"timeout must be a number, got {settings.timeout!r}! Setting back to 0.")
        timeout = 0.0
    if timeout < 0:
        logger.error("timeout cannot be negative! Setting back to 0.")
        timeout = 0.0

    return replace(settings, min_delay=min_delay, max_delay=max_delay,
                   interval=interval, timeout=timeout)


def compile_patterns(names) -> list:
    """Compiles the app name filters, skipping blank and invalid ones."""
    patterns = []
    for name in names:
        if not name:
            continue
        try:
            patterns.append(re.compile(name))
        except re.error as e:
            logger.error(f"Could not parse regex {name!r}: {e}")
    return patterns


def parse_address(address: str):
    """Splits 'host:port' (or '[v6]:port') into (host, port)."""
    host, sep, port = address.rpartition(':')
    if not sep or not host:
        raise ConfigError(f'invalid address {address!r}, expected HOST:PORT')
    try:
        port = int(port)
    except ValueError:
        raise ConfigError(f'invalid port in address {address!r}') from None
    if not 0 <= port <= 65535:
        raise ConfigError(f'port out of range in address {address!r}')
    return host.strip('[]'), port
