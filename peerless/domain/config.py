import ipaddress
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 9091
MIN_PORT = 1
MAX_PORT = 65535
MAX_HOSTNAME_LENGTH = 253

WEAK_PASSWORDS = ("password", "123456", "admin", "guest")


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def __str__(self):
        return f"{self.field}: {self.message}"


class ConfigError(Exception):
    def __init__(self, errors: Sequence[FieldError]):
        self.errors = list(errors)
        super().__init__("; ".join(str(error) for error in self.errors))


def is_valid_hostname(hostname: str) -> bool:
    if len(hostname) == 0 or len(hostname) > MAX_HOSTNAME_LENGTH:
        return False
    if ".." in hostname:
        return False
    last = len(hostname) - 1
    for index, ch in enumerate(hostname):
        if ch == ".":
            continue
        if ch == "-" and 0 < index < last:
            continue
        if not (ch.isascii() and ch.isalnum()):
            return False
    return True


def is_ip_address(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


@dataclass
class Config:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    user: str = ""
    password: str = ""
    dirs: List[str] = field(default_factory=list)

    def validate(self) -> "Config":
        """Checks every field and raises a single ConfigError listing all problems.
        The host is trimmed in place when valid."""
        errors: List[FieldError] = []
        for check in (
            self._validate_host,
            self._validate_port,
            self._validate_auth,
            self._validate_dirs,
        ):
            error = check()
            if error is not None:
                errors.append(error)
        if errors:
            raise ConfigError(errors)
        return self

    def _validate_host(self) -> Optional[FieldError]:
        if not self.host:
            return FieldError("host", "host is required")
        trimmed = self.host.strip()
        if not trimmed:
            return FieldError("host", "host cannot be empty or whitespace")
        if not is_ip_address(trimmed) and not is_valid_hostname(trimmed):
            return FieldError("host", "host must be a valid IP address or hostname")
        self.host = trimmed
        return None

    def _validate_port(self) -> Optional[FieldError]:
        if self.port < MIN_PORT or self.port > MAX_PORT:
            return FieldError(
                "port",
                f"port must be between {MIN_PORT} and {MAX_PORT}, got {self.port}",
            )
        return None

    def _validate_auth(self) -> Optional[FieldError]:
        if self.user and not self.password:
            return FieldError(
                "password", "password is required when username is provided"
            )
        if self.password and self.password.lower() in WEAK_PASSWORDS:
            weak = self.password.lower()
            return FieldError(
                "password", f"weak password detected: '{weak}' should not be used"
            )
        return None

    def _validate_dirs(self) -> Optional[FieldError]:
        seen = set()
        for directory in self.dirs:
            if directory in seen:
                return FieldError("dirs", f"duplicate directory: {directory}")
            seen.add(directory)
        return None

    @property
    def rpc_url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"http://{host}:{self.port}/transmission/rpc"
