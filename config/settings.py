"""
Settings and configuration management for the Card Serial Reader.

The persisted file keeps the field names used by existing installations:

    {"organizationChoice": 2, "pollingRate": "250"}

An optional "reader" section holds hardware and runtime tuning.
"""

from dataclasses import dataclass, field, fields, asdict
from enum import IntEnum
from typing import Callable, Optional, Tuple
import json
import os


DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_POLLING_RATE = "250"


class ConfigError(Exception):
    """Raised when configuration is missing, unreadable or invalid."""
    pass


class Organization(IntEnum):
    """Organizations with their own serial number presentation."""
    ASCC = 1
    UTEM = 2
    UPSI = 3
    UUM = 4
    OTHER = 5

    @property
    def numeric_only(self) -> bool:
        """UTEM expects decimal card numbers instead of hex."""
        return self is Organization.UTEM

    @classmethod
    def parse(cls, value) -> 'Organization':
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            choices = ", ".join(f"{o.value}={o.name}" for o in cls)
            raise ConfigError(f"Invalid organization choice {value!r} (expected {choices})")


def parse_polling_rate(value) -> int:
    """Parse a polling rate given in milliseconds; must be a positive integer."""
    try:
        rate = int(str(value).strip())
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid polling rate {value!r}: not an integer")
    if rate <= 0:
        raise ConfigError(f"Invalid polling rate {value!r}: must be positive")
    return rate


@dataclass(frozen=True)
class ProgramConfig:
    """Settings collected on first run; immutable after load."""
    organization_choice: Organization = Organization.OTHER
    polling_rate: str = DEFAULT_POLLING_RATE

    def __post_init__(self):
        object.__setattr__(self, "organization_choice", Organization.parse(self.organization_choice))
        parse_polling_rate(self.polling_rate)

    @property
    def polling_interval_ms(self) -> int:
        return parse_polling_rate(self.polling_rate)

    def to_dict(self) -> dict:
        return {
            "organizationChoice": int(self.organization_choice),
            "pollingRate": str(self.polling_rate)
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ProgramConfig':
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a JSON object")
        for key in ("organizationChoice", "pollingRate"):
            if key not in data:
                raise ConfigError(f"Configuration is missing '{key}'")
        return cls(
            organization_choice=data["organizationChoice"],
            polling_rate=str(data["pollingRate"])
        )


@dataclass
class ReaderSettings:
    """Reader hardware and runtime settings."""
    port: int = 0  # ACR120_USB1
    library_path: Optional[str] = None

    # Reader firmware may report "no tag" as the unsigned view of -3000
    no_tag_codes: Tuple[int, ...] = (62536,)

    # 0 keeps logging transport errors without ever reconnecting
    reconnect_after_errors: int = 5

    connect_backoff_s: float = 0.5
    connect_max_backoff_s: float = 5.0
    startup_delay_ms: int = 1500

    press_enter: bool = False

    PORTS = {
        0: "USB1",
        1: "USB2",
        2: "USB3",
        3: "USB4",
        4: "USB5",
        5: "USB6",
        6: "USB7",
        7: "USB8"
    }

    def get_port_display(self) -> str:
        return f"{self.port} - {self.PORTS.get(self.port, 'Unknown')}"

    def validate(self):
        if self.port not in self.PORTS:
            raise ConfigError(f"Invalid reader port {self.port!r} (expected 0-7)")
        if self.reconnect_after_errors < 0:
            raise ConfigError("reconnect_after_errors must not be negative")
        if self.connect_backoff_s < 0 or self.connect_max_backoff_s < 0:
            raise ConfigError("Connect backoff must not be negative")
        if self.startup_delay_ms < 0:
            raise ConfigError("startup_delay_ms must not be negative")


@dataclass
class Settings:
    """Main application settings container."""
    program: ProgramConfig = field(default_factory=ProgramConfig)
    reader: ReaderSettings = field(default_factory=ReaderSettings)

    app_name: str = "Card Serial Reader"
    version: str = "1.0.0"

    def save_to_file(self, filepath: str = DEFAULT_CONFIG_FILE):
        """Save current settings to JSON file."""
        data = self.program.to_dict()
        reader = asdict(self.reader)
        reader["no_tag_codes"] = list(self.reader.no_tag_codes)
        data["reader"] = reader
        with open(filepath, 'w') as f:
            json.dump(data, f, indent=2)

    @classmethod
    def load_from_file(cls, filepath: str = DEFAULT_CONFIG_FILE) -> 'Settings':
        """
        Load settings from JSON file.

        Raises:
            ConfigError: If the file is missing, unparseable or invalid
        """
        if not os.path.exists(filepath):
            raise ConfigError(f"Configuration file not found: {filepath}")

        try:
            with open(filepath, 'r') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Error loading settings from {filepath}: {e}")

        settings = cls(program=ProgramConfig.from_dict(data))

        reader_data = data.get("reader") or {}
        if not isinstance(reader_data, dict):
            raise ConfigError("'reader' section must be a JSON object")
        known = {f.name for f in fields(ReaderSettings)}
        try:
            for key, value in reader_data.items():
                if key not in known:
                    continue
                if key == "no_tag_codes":
                    if not isinstance(value, list):
                        raise ConfigError("no_tag_codes must be a list of integers")
                    value = tuple(int(v) for v in value)
                setattr(settings.reader, key, value)
            settings.reader.validate()
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid reader settings in {filepath}: {e}")

        return settings


def prompt_program_config(prompt: Callable[[str], str] = input,
                          output: Callable[[str], None] = print) -> ProgramConfig:
    """Ask the operator for the first-run settings."""
    output("\n\n****************PROGRAM INITIALIZATION****************\n")
    for org in Organization:
        output(f"{org.name}: {org.value}")
    choice = prompt("Enter organization: ").strip()
    rate = prompt("Enter polling rate(ms)(recommended 250): ").strip()
    if not rate:
        rate = DEFAULT_POLLING_RATE
    return ProgramConfig(organization_choice=choice, polling_rate=rate)


def initialize_config(
    filepath: str = DEFAULT_CONFIG_FILE,
    attempts: int = 3,
    prompt: Callable[[str], str] = input,
    logger=None
) -> Settings:
    """
    Load settings, running the first-run setup when no file exists.

    Args:
        filepath: Path to the JSON configuration file
        attempts: Number of load/setup attempts before giving up
        prompt: Input function used for the interactive setup
        logger: Optional Logger for progress messages

    Returns:
        Loaded Settings

    Raises:
        ConfigError: If no valid configuration exists after all attempts
    """
    def info(message):
        if logger:
            logger.info(message)

    last_error = None
    for attempt in range(1, attempts + 1):
        if os.path.exists(filepath):
            info("Reading Config File...")
            return Settings.load_from_file(filepath)

        info(f"{filepath} not found. Initiating config initialization...")
        try:
            program = prompt_program_config(prompt)
            info(f"Writing {filepath}...")
            Settings(program=program).save_to_file(filepath)
            info("Successful!")
            return Settings.load_from_file(filepath)
        except (ConfigError, OSError, EOFError) as e:
            last_error = e
            if logger:
                logger.warning(f"Config initialization failed ({attempt}/{attempts}): {e}")

    raise ConfigError(
        f"Unable to initialize {filepath} after {attempts} attempts"
        + (f": {last_error}" if last_error else "")
    )
