"""
User configuration for pizzabox.

The configuration is a YAML file in the pizzabox folder
(``~/.config/pizzabox`` unless ``PIZZABOX_CONFIG_DIR`` is set). Fields can be
read and written by name, case-insensitively, through ``Config.FIELDS``:
``name``, ``address.street``, ``card.expiration``, ...
"""

import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Callable, ClassVar, Dict, Optional, Tuple

import yaml
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from .errors import ValidationError
from .vendor.address import UserAddress
from .vendor.store import CARRYOUT, check_service
from .vendor.transport import DEFAULT_TIMEOUT
from .utils.logging_setup import get_logger


CONFIG_FILE_NAME = "config.yml"
ENV_PREFIX = "PIZZABOX_"

logger = get_logger(__name__)


def config_folder() -> Path:
    """Folder holding the config file, cache and logs."""
    override = os.getenv(f"{ENV_PREFIX}CONFIG_DIR")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "pizzabox"


@dataclass
class CardConfig:
    number: str = ""
    expiration: str = ""


@dataclass
class Config:
    """Everything the user can configure."""
    name: str = ""
    email: str = ""
    phone: str = ""
    address: UserAddress = field(default_factory=UserAddress)
    default_address_name: str = ""
    card: CardConfig = field(default_factory=CardConfig)
    service: str = CARRYOUT
    timeout: float = DEFAULT_TIMEOUT

    # lowercase dotted name -> (getter, setter), filled in below the class
    FIELDS: ClassVar[Dict[str, Tuple[Callable, Callable]]] = {}

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Config":
        data = dict(data or {})
        address = data.pop("address", None) or {}
        card = data.pop("card", None) or {}
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        config = cls(**known)
        config.timeout = _timeout(config.timeout)
        config.address = UserAddress(**{k: str(v) for k, v in address.items() if k in UserAddress.__dataclass_fields__})
        config.card = CardConfig(**{k: str(v) for k, v in card.items() if k in CardConfig.__dataclass_fields__})
        return config

    def get(self, name: str) -> Any:
        """
        Read a field by name, ignoring case.

        Raises:
            KeyError: unknown field name
        """
        getter, _ = self._lookup(name)
        return getter(self)

    def set(self, name: str, value: Any) -> None:
        """Write a field by name, ignoring case."""
        _, setter = self._lookup(name)
        setter(self, value)

    @classmethod
    def _lookup(cls, name: str):
        key = name.strip().lower().replace("_", "-")
        try:
            return cls.FIELDS[key]
        except KeyError:
            raise KeyError(f"cannot find {name}") from None


def _set_service(config: Config, value: Any) -> None:
    config.service = check_service(str(value))


def _timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"timeout must be a number of seconds, got {value!r}", field="timeout", value=value
        ) from None
    if timeout <= 0:
        raise ValidationError(f"timeout must be positive, got {value}", field="timeout", value=value)
    return timeout


def _set_timeout(config: Config, value: Any) -> None:
    config.timeout = _timeout(value)


def _plain(attr: str):
    def getter(config):
        return getattr(config, attr)

    def setter(config, value):
        setattr(config, attr, str(value))
    return getter, setter


def _nested(parent: str, attr: str):
    def getter(config):
        return getattr(getattr(config, parent), attr)

    def setter(config, value):
        setattr(getattr(config, parent), attr, str(value))
    return getter, setter


def _read_only(name: str):
    def setter(config, value):
        raise KeyError(f"cannot set {name} directly, set one of its fields")
    return setter


def _build_fields() -> Dict[str, Tuple[Callable, Callable]]:
    fields = {
        "name": _plain("name"),
        "email": _plain("email"),
        "phone": _plain("phone"),
        "default-address-name": _plain("default_address_name"),
        "service": (lambda c: c.service, _set_service),
        "timeout": (lambda c: c.timeout, _set_timeout),
        "address": (lambda c: c.address, _read_only("address")),
        "card": (lambda c: c.card, _read_only("card")),
    }
    for attr in UserAddress.__dataclass_fields__:
        fields["address." + attr.replace("_", "-")] = _nested("address", attr)
    for attr in CardConfig.__dataclass_fields__:
        fields["card." + attr] = _nested("card", attr)

    return fields


Config.FIELDS = _build_fields()


class ConfigManager:
    """Loads, saves and displays the user configuration."""

    def __init__(self, config_path: Optional[Path] = None, console: Optional[Console] = None):
        """
        Initialize config manager.

        Args:
            config_path: Path to configuration file
            console: Console used by ``display``
        """
        self.console = console or Console()
        self.config_path = Path(config_path) if config_path else config_folder() / CONFIG_FILE_NAME
        self._config: Optional[Config] = None

    @property
    def folder(self) -> Path:
        return self.config_path.parent

    def load(self) -> Config:
        """
        Load configuration from file or create default.

        Returns:
            Loaded or default configuration
        """
        if self._config is not None:
            return self._config

        if self.config_path.exists():
            with open(self.config_path, 'r') as f:
                data = yaml.safe_load(f)
            config = Config.from_dict(data)
            logger.debug(f"loaded config from {self.config_path}")
        else:
            config = Config()
            logger.debug("using default configuration")

        self._apply_env_overrides(config)
        self._config = config
        return config

    def save(self, config: Optional[Config] = None) -> None:
        config = config or self._config or Config()
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w') as f:
            yaml.safe_dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
        logger.debug(f"saved config to {self.config_path}")

    def get(self, name: str) -> Any:
        return self.load().get(name)

    def set(self, name: str, value: Any) -> None:
        self.load().set(name, value)

    def display(self, config: Optional[Config] = None) -> None:
        """Print the configuration as highlighted YAML."""
        config = config or self.load()
        data = config.to_dict()
        if data["card"]["number"]:
            data["card"]["number"] = "***" + data["card"]["number"][-4:]
        yaml_str = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
        syntax = Syntax(yaml_str, "yaml", theme="monokai")
        self.console.print(Panel(syntax, title=str(self.config_path), border_style="cyan"))

    def _apply_env_overrides(self, config: Config) -> None:
        if env_service := os.getenv(f"{ENV_PREFIX}SERVICE"):
            config.set("service", env_service)
            logger.debug(f"applied env override: service={config.service}")

        if env_timeout := os.getenv(f"{ENV_PREFIX}TIMEOUT"):
            config.set("timeout", env_timeout)
            logger.debug(f"applied env override: timeout={config.timeout}")
