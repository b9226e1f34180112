"""
Configuration management for matter2mqtt-pair.

Every setting is resolved once at startup with the precedence:

    command-line flag > environment variable > built-in default

Malformed values never raise; they fall through to the next source.
"""

import os
from dataclasses import dataclass, asdict
from typing import Mapping, Optional
import logging

logger = logging.getLogger(__name__)

# Defaults
DEFAULT_DEVICES_PATH = "/etc/matter2mqtt/devices.yaml"
DEFAULT_PORT = 8081
DEFAULT_STORAGE_PATH = "/var/lib/matter2mqtt"
DEFAULT_CHIP_TOOL_PATH = "chip-tool"
DEFAULT_CERT_FILE = "cert.pem"
DEFAULT_KEY_FILE = "key.pem"
DEFAULT_HOST = "0.0.0.0"

# Environment variables
ENV_DEVICES = "DEVICES_YAML"
ENV_PORT = "PORT"
ENV_STORAGE = "STORAGE_PATH"
ENV_CHIP_TOOL = "CHIP_TOOL_PATH"
ENV_TLS = "TLS_ENABLED"
ENV_CERT = "TLS_CERT"
ENV_KEY = "TLS_KEY"
ENV_HOST = "HOST"

TRUE_VALUES = ("true", "1", "yes")


@dataclass
class Config:
    """Resolved runtime configuration."""
    devices_path: str = DEFAULT_DEVICES_PATH
    port: int = DEFAULT_PORT
    storage_path: str = DEFAULT_STORAGE_PATH
    chip_tool_path: str = DEFAULT_CHIP_TOOL_PATH
    tls_enabled: bool = False
    cert_file: str = DEFAULT_CERT_FILE
    key_file: str = DEFAULT_KEY_FILE
    host: str = DEFAULT_HOST

    @property
    def scheme(self) -> str:
        return "https" if self.tls_enabled else "http"

    def url_for(self, ip: str) -> str:
        """Service URL as announced to the operator."""
        return f"{self.scheme}://{ip}:{self.port}"

    def to_dict(self) -> dict:
        return asdict(self)


def _string_setting(flag_value: Optional[str], env: Mapping[str, str], key: str, default: str) -> str:
    if flag_value:
        return flag_value
    env_value = env.get(key, "")
    if env_value:
        return env_value
    return default


def _int_setting(flag_value: Optional[int], env: Mapping[str, str], key: str, default: int) -> int:
    # 0 is the "unset" value for integer flags
    if flag_value:
        return flag_value
    env_value = env.get(key, "")
    if env_value:
        try:
            return int(env_value)
        except ValueError:
            logger.debug(f"Ignoring non-integer {key}={env_value!r}")
    return default


def _bool_setting(flag_value: Optional[bool], env: Mapping[str, str], key: str) -> bool:
    if flag_value:
        return True
    env_value = env.get(key, "")
    if env_value:
        return env_value in TRUE_VALUES
    return False


def resolve_config(
    devices: Optional[str] = None,
    port: Optional[int] = None,
    storage: Optional[str] = None,
    chip_tool: Optional[str] = None,
    tls: Optional[bool] = False,
    cert: Optional[str] = None,
    key: Optional[str] = None,
    host: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """
    Merge flags, environment and defaults into a Config.

    Args:
        devices..host: Values given on the command line (None when omitted)
        environ: Environment to read (defaults to os.environ)
    """
    env = os.environ if environ is None else environ

    return Config(
        devices_path=_string_setting(devices, env, ENV_DEVICES, DEFAULT_DEVICES_PATH),
        port=_int_setting(port, env, ENV_PORT, DEFAULT_PORT),
        storage_path=_string_setting(storage, env, ENV_STORAGE, DEFAULT_STORAGE_PATH),
        chip_tool_path=_string_setting(chip_tool, env, ENV_CHIP_TOOL, DEFAULT_CHIP_TOOL_PATH),
        tls_enabled=_bool_setting(tls, env, ENV_TLS),
        cert_file=_string_setting(cert, env, ENV_CERT, DEFAULT_CERT_FILE),
        key_file=_string_setting(key, env, ENV_KEY, DEFAULT_KEY_FILE),
        host=_string_setting(host, env, ENV_HOST, DEFAULT_HOST),
    )


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = resolve_config()
    return _config


def set_config(config: Config) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
