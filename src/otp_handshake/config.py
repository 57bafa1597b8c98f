"""
Handshake configuration
Defaults, then an optional JSON file, then environment variables
"""

import os
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

CONFIG_FILE_ENV = 'OTP_HANDSHAKE_CONFIG'
SEND_SDK_VERSION_ENV = 'OTP_HANDSHAKE_SEND_SDK_VERSION'

_TRUE_VALUES = ('true', '1', 'yes', 'on')


def _parse_flag(value: Any) -> bool:
    """Read a flag from a JSON boolean or a string; raises ValueError otherwise"""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_VALUES
    raise ValueError(f"expected a boolean, got {value!r}")


@dataclass(frozen=True)
class HandshakeConfig:
    """Read-only handshake options, fixed at construction"""
    send_sdk_version: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'HandshakeConfig':
        """
        Load configuration

        A config file that cannot be read, is not a JSON object, or holds a
        value of the wrong type is logged and ignored.

        Args:
            environ: Environment mapping (defaults to os.environ)

        Returns:
            HandshakeConfig with file and environment overrides applied
        """
        if environ is None:
            environ = os.environ

        values: Dict[str, Any] = {}

        config_file = environ.get(CONFIG_FILE_ENV)
        if config_file and os.path.exists(config_file):
            try:
                values.update(cls._load_file(config_file))
                logger.info(f"Loaded handshake configuration from {config_file}")
            except (OSError, ValueError) as e:
                logger.error(f"Failed to load handshake configuration from {config_file}: {e}")

        env_value = environ.get(SEND_SDK_VERSION_ENV)
        if env_value is not None:
            values['send_sdk_version'] = _parse_flag(env_value)

        return cls(**values)

    @staticmethod
    def _load_file(config_file: str) -> Dict[str, Any]:
        with open(config_file, 'r') as f:
            file_config = json.load(f)

        if not isinstance(file_config, dict):
            raise ValueError(f"expected a JSON object, got {type(file_config).__name__}")

        values: Dict[str, Any] = {}
        if 'send_sdk_version' in file_config:
            values['send_sdk_version'] = _parse_flag(file_config['send_sdk_version'])
        return values
