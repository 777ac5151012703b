import os
from pathlib import Path
from typing import Mapping, Optional, Sequence, List

from peerless.domain.config import (
    Config,
    ConfigError,
    DEFAULT_HOST,
    DEFAULT_PORT,
    FieldError,
)

HOST_ENV = "TRANSMISSION_HOST"
PORT_ENV = "TRANSMISSION_PORT"
USER_ENV = "TRANSMISSION_USER"
PASSWORD_ENV = "TRANSMISSION_PASSWORD"


def _option(
    args: Mapping, environ: Mapping[str, str], option: str, variable: str
) -> Optional[str]:
    value = args.get(option)
    if value is None:
        value = environ.get(variable)
    return value


def parse_port(raw_port: Optional[str]) -> int:
    if raw_port is None:
        return DEFAULT_PORT
    try:
        return int(raw_port)
    except ValueError:
        raise ConfigError([FieldError("port", f"port must be a number, got {raw_port}")])


def parse_config(args: Mapping, environ: Optional[Mapping[str, str]] = None) -> Config:
    """Builds the connection config from global options, falling back to
    TRANSMISSION_* environment variables, then to defaults."""
    if environ is None:
        environ = os.environ
    host = _option(args, environ, "--host", HOST_ENV)
    config = Config(
        host=DEFAULT_HOST if host is None else host,
        port=parse_port(_option(args, environ, "--port", PORT_ENV)),
        user=_option(args, environ, "--user", USER_ENV) or "",
        password=_option(args, environ, "--password", PASSWORD_ENV) or "",
    )
    return config.validate()


class PathParser:
    @classmethod
    def parse_paths(cls, raw_paths: Sequence[str]) -> List[Path]:
        return [cls.parse_path(raw_path) for raw_path in raw_paths]

    @classmethod
    def parse_path(cls, raw_path: str) -> Path:
        return Path(raw_path)
