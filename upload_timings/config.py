import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from upload_timings.exceptions import ConfigurationError

REQUIRED_VARIABLES = (
    "INSTANCE_URL",
    "SYS_ADMIN_USERNAME",
    "PASSWORD",
    "CONTENT_RECORD_PATH",
)

TRUE_VALUES = ("true", "1", "yes")
FALSE_VALUES = ("false", "0", "no")


@dataclass(frozen=True)
class Config:
    """
    Settings for one timing run, built once at startup.

    Paths are resolved against base_dir, which is the working directory
    when loaded from the environment.
    """
    instance_url: str
    username: str
    password: str
    content_record_path: str
    num_of_timings: int = 1
    timeout: float | None = None
    headless: bool = True
    log_level: str = "INFO"
    log_file: str | None = None
    base_dir: Path = field(default_factory=Path.cwd)

    @property
    def auth_path(self) -> Path:
        return self.base_dir / ".auth" / "sysAdmin.json"

    @property
    def test_files_path(self) -> Path:
        return self.base_dir / "testFiles"

    @property
    def results_path(self) -> Path:
        return self.base_dir / "results"

    @property
    def record_path(self) -> str:
        return f"{self.content_record_path}/Edit"

    @property
    def save_attachments_path(self) -> str:
        return f"{self.content_record_path}/SaveAttachments"


def _parse_positive_int(name: str, value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")
    if parsed < 1:
        raise ConfigurationError(f"{name} must be at least 1, got {parsed}")
    return parsed


def _parse_timeout(value: str) -> float:
    try:
        parsed = float(value)
    except ValueError:
        raise ConfigurationError(f"TIMEOUT_MS must be a number, got {value!r}")
    if parsed < 0:
        raise ConfigurationError(f"TIMEOUT_MS must not be negative, got {parsed}")
    return parsed


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be true or false, got {value!r}")


def load_config(base_dir: Path | None = None, environ: Mapping[str, str] | None = None) -> Config:
    """
    Builds the run configuration from environment variables.

    When reading the process environment, a .env file in base_dir is loaded
    first without overriding variables that are already set.

    Args:
        base_dir: Directory that holds testFiles/, .auth/ and results/.
            Defaults to the current working directory.
        environ: Mapping to read instead of os.environ.

    Returns:
        The validated Config.

    Raises:
        ConfigurationError: If a required variable is missing or a value
            cannot be parsed.
    """
    base_dir = Path(base_dir) if base_dir is not None else Path.cwd()

    if environ is None:
        load_dotenv(base_dir / ".env")
        environ = os.environ

    missing = [name for name in REQUIRED_VARIABLES if not environ.get(name)]
    if missing:
        raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

    timeout = environ.get("TIMEOUT_MS")

    return Config(
        instance_url=environ["INSTANCE_URL"].rstrip("/"),
        username=environ["SYS_ADMIN_USERNAME"],
        password=environ["PASSWORD"],
        content_record_path=environ["CONTENT_RECORD_PATH"].rstrip("/"),
        num_of_timings=_parse_positive_int("NUM_OF_TIMINGS", environ.get("NUM_OF_TIMINGS", "1")),
        timeout=_parse_timeout(timeout) if timeout else None,
        headless=_parse_bool("HEADLESS", environ.get("HEADLESS", "true")),
        log_level=environ.get("LOG_LEVEL", "INFO"),
        log_file=environ.get("LOG_FILE") or None,
        base_dir=base_dir,
    )
