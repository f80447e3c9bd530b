"""
===============================================================================
QUATERNION NUMERICS - Configuration
===============================================================================
YAML-backed settings for the command-line tools. The library itself takes
every precision as an explicit argument and never reads configuration.

Example ``config/quaternion_config.yaml``::

    numerics:
      default_dtype: float64
      conversion_dtype: float32
      log_level: WARNING
===============================================================================
"""

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from qnumerics.real import resolve_dtype

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / 'config' / 'quaternion_config.yaml'

_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class NumericsConfig:
    """
    Settings of the ``numerics`` config section.

    Parameters
    ----------
    default_dtype : str
        Precision of quaternions built from text input.
    conversion_dtype : str
        Target precision of the rounding and exact conversions.
    log_level : str
        Root logging level name.
    log_format : str
        ``logging`` format string.
    """
    default_dtype: str = 'float64'
    conversion_dtype: str = 'float32'
    log_level: str = 'WARNING'
    log_format: str = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

    def __post_init__(self) -> None:
        for name in ('default_dtype', 'conversion_dtype'):
            value = getattr(self, name)
            try:
                resolve_dtype(value)
            except TypeError as exc:
                raise ValueError(f"Invalid {name}: {exc}") from exc

        self.log_level = str(self.log_level).upper()
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level {self.log_level!r}; "
                f"expected one of {', '.join(_LOG_LEVELS)}"
            )

    @classmethod
    def from_dict(cls, section: Optional[Dict[str, Any]]) -> 'NumericsConfig':
        """Build from a parsed ``numerics`` section; missing keys use defaults."""
        if section is None:
            return cls()
        if not isinstance(section, dict):
            raise ValueError(
                f"'numerics' section must be a mapping, got {type(section).__name__}"
            )
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(section) - known)
        if unknown:
            raise ValueError(f"Unknown numerics settings: {', '.join(unknown)}")
        return cls(**section)


def load_config(config_path: Optional[Union[str, Path]] = None) -> NumericsConfig:
    """
    Load settings from a YAML file.

    Args:
        config_path: Path to YAML config. Defaults to
            config/quaternion_config.yaml; if that default is absent the
            built-in defaults are used.

    Returns:
        Validated NumericsConfig
    """
    if config_path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            logger.debug("No config at %s, using defaults", DEFAULT_CONFIG_PATH)
            return NumericsConfig()
        config_path = DEFAULT_CONFIG_PATH

    logger.info("Loading configuration from: %s", config_path)
    with open(config_path, 'r') as f:
        document = yaml.safe_load(f) or {}

    if not isinstance(document, dict):
        raise ValueError(f"{config_path}: top level must be a mapping")
    return NumericsConfig.from_dict(document.get('numerics'))
