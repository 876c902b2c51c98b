import os
from typing import Dict, Mapping, Optional

from errors import InvalidInputError

# Configuration keys, the environment variables that override them, and defaults
DEFAULTS = {
    'MAX_STUDENTS': ('BATCH_MAX_STUDENTS', 1000),
    'MAX_BATCHES': ('BATCH_MAX_BATCHES', 100),
    'DATA_FILE': ('BATCH_DATA_FILE', 'students.csv'),
    'EXPORT_FOLDER': ('BATCH_EXPORT_FOLDER', 'exports'),
    'LOG_LEVEL': ('BATCH_LOG_LEVEL', 'INFO'),
    'RANDOM_SEED': ('BATCH_RANDOM_SEED', None),
}

POSITIVE_INT_KEYS = ('MAX_STUDENTS', 'MAX_BATCHES')


def load_config(environ: Optional[Mapping[str, str]] = None) -> Dict:
    """
    Build the configuration dictionary from environment variables.

    Limits must be positive integers; RANDOM_SEED, when set, must be an integer.
    """
    if environ is None:
        environ = os.environ

    config = {}
    for key, (env_var, default) in DEFAULTS.items():
        config[key] = environ.get(env_var, default)

    for key in POSITIVE_INT_KEYS:
        value = _parse_int(DEFAULTS[key][0], config[key])
        if value <= 0:
            raise InvalidInputError(f"{DEFAULTS[key][0]} must be positive, got {value}")
        config[key] = value

    if config['RANDOM_SEED'] is not None:
        config['RANDOM_SEED'] = _parse_int('BATCH_RANDOM_SEED', config['RANDOM_SEED'])

    config['LOG_LEVEL'] = str(config['LOG_LEVEL']).upper()
    return config


def _parse_int(name: str, value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{name} must be an integer, got {value!r}")
