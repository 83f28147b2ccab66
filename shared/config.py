"""
Configuration management for the delegate pool gateway.

Configuration is layered, lowest precedence first:

1. Documented defaults declared on the section models below.
2. The first configuration file found: ``config.<ext>`` in the search
   directories, falling back to ``sample.config.<ext>``.
3. ``POOL_*`` environment variables (``POOL_SERVER__PORT=8080``).

File keys are matched case-insensitively and without regard to
underscores, so ``shareRatio``, ``shareratio`` and ``share_ratio`` all
address ``voters.share_ratio``. Unrecognized keys are ignored.
"""

import json
import tomllib
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from shared.errors import ConfigLoadError
from shared.logging import get_logger

logger = get_logger("poolgateway.config")

CONFIG_NAME = "config"
SAMPLE_CONFIG_NAME = "sample.config"
DEFAULT_SEARCH_PATHS: Tuple[str, ...] = ("cfg", "settings")
SUPPORTED_EXTENSIONS: Tuple[str, ...] = (".toml", ".yaml", ".yml", ".json")

MAINNET = "MAINNET"
DEVNET = "DEVNET"

# Levels the listener accepts. logrus spells "warning" as "warn".
LOG_LEVELS: Tuple[str, ...] = ("critical", "error", "warning", "info", "debug", "trace")
LOG_LEVEL_ALIASES: Dict[str, str] = {"warn": "warning", "fatal": "critical", "panic": "critical"}

# Spelling of each field in the configuration files, where it differs from
# the field name.
FILE_KEYS: Dict[str, str] = {
    "d_address": "Daddress",
    "d_pubkey": "Dpubkey",
    "share_ratio": "shareRatio",
    "tx_description": "txdescription",
    "fidelity_limit": "fidelityLimit",
    "min_amount": "minamount",
    "deduct_tx_fees": "deductTxFees",
    "cap_balance": "capBalance",
    "balance_cap_amount": "balanceCapAmount",
    "db_filename": "dbfilename",
    "node_ip": "nodeip",
    "log_level": "loglevel",
    "ark_forum": "arkforum",
    "ark_news_address": "arknewsaddress",
}


def _compact(key: str) -> str:
    return key.lower().replace("_", "").replace("-", "")


def _split_addresses(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class ConfigSection(BaseModel):
    """Immutable group of related settings."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    @classmethod
    def key_for(cls, raw_key: str) -> Optional[str]:
        """Map a file key onto a field name, or None when unrecognized."""
        wanted = _compact(raw_key)
        for name in cls.model_fields:
            if _compact(name) == wanted:
                return name
        return None

    def file_dump(self) -> Dict[str, Any]:
        """Dump the section keyed the way configuration files spell it."""
        return {FILE_KEYS.get(name, name): value for name, value in self.model_dump().items()}


class DelegateSection(ConfigSection):
    address: str = ""
    pubkey: str = ""
    d_address: str = ""
    d_pubkey: str = ""


class VotersSection(ConfigSection):
    share_ratio: float = 0.0
    tx_description: str = "share tx by ark-go"
    fidelity: bool = True
    fidelity_limit: int = 24
    min_amount: float = 0.0
    deduct_tx_fees: bool = True
    blocklist: str = ""
    cap_balance: bool = False
    balance_cap_amount: float = 0.0
    whitelist: str = ""

    @property
    def blocklist_addresses(self) -> List[str]:
        return _split_addresses(self.blocklist)

    @property
    def whitelist_addresses(self) -> List[str]:
        return _split_addresses(self.whitelist)


class PayoutSection(ConfigSection):
    """Shape shared by the costs, reserve and personal payout shares."""

    address: str = ""
    share_ratio: float = 0.0
    tx_description: str = ""
    d_address: str = ""


class CostsSection(PayoutSection):
    tx_description: str = "cost tx by ark-go"


class ReserveSection(PayoutSection):
    tx_description: str = "reserve tx by ark-go"


class PersonalSection(PayoutSection):
    tx_description: str = "personal tx by ark-go"


class ClientSection(ConfigSection):
    network: str = DEVNET


class ServerSection(ConfigSection):
    address: str = "0.0.0.0"
    port: int = 54000
    db_filename: str = "payment.db"
    node_ip: str = ""
    log_level: str = "info"

    @field_validator("log_level", mode="before")
    @classmethod
    def _known_log_level(cls, value: Any) -> str:
        level = str(value).strip().lower()
        level = LOG_LEVEL_ALIASES.get(level, level)
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}, expected one of {', '.join(LOG_LEVELS)}")
        return level


class WebSection(ConfigSection):
    frontend: bool = False
    email: str = ""
    slack: str = ""
    reddit: str = ""
    ark_forum: str = ""
    ark_news_address: str = ""


class PoolConfig(BaseSettings):
    """Immutable configuration snapshot for the pool gateway."""

    model_config = SettingsConfigDict(
        env_prefix="POOL_",
        env_nested_delimiter="__",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    delegate: DelegateSection = Field(default_factory=DelegateSection)
    voters: VotersSection = Field(default_factory=VotersSection)
    costs: CostsSection = Field(default_factory=CostsSection)
    reserve: ReserveSection = Field(default_factory=ReserveSection)
    personal: PersonalSection = Field(default_factory=PersonalSection)
    client: ClientSection = Field(default_factory=ClientSection)
    server: ServerSection = Field(default_factory=ServerSection)
    web: WebSection = Field(default_factory=WebSection)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # Environment beats file values, which arrive as init kwargs.
        return env_settings, dotenv_settings, init_settings

    @property
    def is_devnet(self) -> bool:
        return self.client.network.upper() == DEVNET

    @property
    def delegate_identity(self) -> Tuple[str, str]:
        """(address, public key) of the delegate on the configured network."""
        if self.is_devnet and (self.delegate.d_address or self.delegate.d_pubkey):
            return self.delegate.d_address, self.delegate.d_pubkey
        return self.delegate.address, self.delegate.pubkey

    def get(self, dotted_key: str) -> Any:
        """Read a value by its file key, e.g. ``config.get("server.port")``."""
        section_key, _, field_key = dotted_key.partition(".")
        section_name = _section_for(section_key)
        if section_name is None or not field_key:
            raise KeyError(dotted_key)
        section = getattr(self, section_name)
        field_name = section.key_for(field_key)
        if field_name is None:
            raise KeyError(dotted_key)
        return getattr(section, field_name)


def _section_for(raw_key: str) -> Optional[str]:
    wanted = _compact(raw_key)
    for name in PoolConfig.model_fields:
        if _compact(name) == wanted:
            return name
    return None


def normalize_keys(raw: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Map raw file content onto section and field names, dropping unknown keys."""
    normalized: Dict[str, Dict[str, Any]] = {}
    for raw_section, values in raw.items():
        section_name = _section_for(str(raw_section))
        if section_name is None or not isinstance(values, dict):
            continue
        section_model = PoolConfig.model_fields[section_name].annotation
        fields = {}
        for raw_field, value in values.items():
            field_name = section_model.key_for(str(raw_field))
            if field_name is not None:
                fields[field_name] = value
        normalized[section_name] = fields
    return normalized


def find_config_file(name: str, search_paths: Iterable[str], base_dir: Optional[Path] = None) -> Optional[Path]:
    """Return the first ``<name><ext>`` found across the search directories."""
    root = Path(base_dir) if base_dir is not None else Path.cwd()
    for directory in search_paths:
        for extension in SUPPORTED_EXTENSIONS:
            candidate = root / directory / f"{name}{extension}"
            if candidate.is_file():
                return candidate
    return None


def load_config_file(path: Path) -> Dict[str, Any]:
    """Parse a configuration file according to its extension."""
    suffix = path.suffix.lower()
    if suffix == ".toml":
        with open(path, "rb") as f:
            data = tomllib.load(f)
    elif suffix in (".yaml", ".yml"):
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    elif suffix == ".json":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    else:
        raise ValueError(f"Unsupported configuration format: {path.name}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")
    return data


def _try_load(name: str, search_paths: Tuple[str, ...], base_dir: Optional[Path]) -> Optional[PoolConfig]:
    path = find_config_file(name, search_paths, base_dir)
    if path is None:
        logger.info("Configuration file not found", name=name, search_paths=list(search_paths))
        return None

    try:
        raw = load_config_file(path)
        config = PoolConfig(**normalize_keys(raw))
    except (OSError, ValueError, yaml.YAMLError, ValidationError) as e:
        logger.warning("Configuration file unusable", path=str(path), error=str(e))
        return None

    logger.info("Configuration loaded", path=str(path))
    return config


def resolve_config(search_paths: Iterable[str] = DEFAULT_SEARCH_PATHS,
                   base_dir: Optional[Path] = None) -> PoolConfig:
    """Resolve the configuration snapshot or raise ``ConfigLoadError``."""
    paths = tuple(search_paths)

    config = _try_load(CONFIG_NAME, paths, base_dir)
    if config is not None:
        return config

    logger.info("No productive config found - loading sample")
    config = _try_load(SAMPLE_CONFIG_NAME, paths, base_dir)
    if config is not None:
        return config

    root = Path(base_dir) if base_dir is not None else Path.cwd()
    raise ConfigLoadError(
        "No configuration file loaded",
        searched=[str(root / directory) for directory in paths],
    )
