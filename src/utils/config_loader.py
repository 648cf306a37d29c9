"""
Configuration loader for the EOR quote engine
"""

from __future__ import annotations

import logging
import math
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from src.integrations.contracts.interfaces import ProviderName, ServiceType

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "eor_config.yml"


class ServerConfig(BaseModel):
    port: int = Field(default=3000, ge=1, le=65535)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])


class SimulationConfig(BaseModel):
    """Provider simulation knobs"""

    mock_delay_ms: float = Field(default=300, ge=0)
    jitter_percent: float = Field(default=0.03, ge=0.0, le=1.0)
    salary_band_spread: float = Field(default=0.2, ge=0.0)


class CostsConfig(BaseModel):
    termination_multiplier: float = 0.5


class ReconciliationConfig(BaseModel):
    spread_threshold_percent: float = Field(default=4.0, ge=0.0)
    internal_cost_ratio: float = Field(default=0.8, ge=0.0, le=1.0)
    legacy_max_tce: Optional[float] = None


class MarginThresholdsConfig(BaseModel):
    minimum_margin_percent: float = 15.0
    target_margin_percent: float = 25.0
    risk_threshold_percent: float = 10.0


class ServiceTypeConfig(BaseModel):
    minimum_margin: Optional[float] = None
    acid_test_required: bool = True
    risk_multiplier: float = 1.0


def _default_service_types() -> Dict[ServiceType, ServiceTypeConfig]:
    return {
        ServiceType.FULL_TIME_EMPLOYEE: ServiceTypeConfig(minimum_margin=15, acid_test_required=True, risk_multiplier=1.0),
        ServiceType.CONTRACTOR: ServiceTypeConfig(minimum_margin=10, acid_test_required=False, risk_multiplier=0.8),
        ServiceType.EXECUTIVE: ServiceTypeConfig(minimum_margin=20, acid_test_required=True, risk_multiplier=1.2),
    }


class AcidTestConfig(BaseModel):
    max_tce_threshold: float = 200_000.0
    cash_flow_ratio: float = 1.5
    risk_score_threshold: float = 70.0


class RiskConfig(BaseModel):
    high_risk_countries: List[str] = Field(default_factory=lambda: ["BR", "IN", "MX"])
    low_risk_countries: List[str] = Field(default_factory=lambda: ["US", "GB", "DE", "NL", "SE"])


class ProvidersConfig(BaseModel):
    primary: ProviderName = ProviderName.DEEL
    names: List[ProviderName] = Field(
        default_factory=lambda: [ProviderName.DEEL, ProviderName.REMOTE, ProviderName.OYSTER]
    )
    data_dir: str = "data/providers"

    def data_path(self) -> Path:
        path = Path(self.data_dir)
        if path.is_absolute():
            return path
        return Path(__file__).parent.parent.parent / path


class IntegrationsConfig(BaseModel):
    mode: str = "mock"
    base_urls: Dict[ProviderName, str] = Field(default_factory=dict)
    api_keys: Dict[ProviderName, str] = Field(default_factory=dict)
    timeout_seconds: float = Field(default=15.0, gt=0)

    def use_real(self) -> bool:
        return self.mode.strip().lower() in {"real", "live"}


class EORConfig(BaseModel):
    """Complete engine configuration"""

    server: ServerConfig = Field(default_factory=ServerConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    costs: CostsConfig = Field(default_factory=CostsConfig)
    reconciliation: ReconciliationConfig = Field(default_factory=ReconciliationConfig)
    margin_thresholds: MarginThresholdsConfig = Field(default_factory=MarginThresholdsConfig)
    service_types: Dict[ServiceType, ServiceTypeConfig] = Field(default_factory=_default_service_types)
    acid_test: AcidTestConfig = Field(default_factory=AcidTestConfig)
    risk: RiskConfig = Field(default_factory=RiskConfig)
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    integrations: IntegrationsConfig = Field(default_factory=IntegrationsConfig)

    @field_validator("service_types", mode="before")
    @classmethod
    def _merge_service_type_defaults(cls, value: Any) -> Any:
        """Layer configured service types over the defaults, field by field."""
        if value is None:
            return _default_service_types()
        if not isinstance(value, dict):
            return value
        merged = {st.value: cfg.model_dump() for st, cfg in _default_service_types().items()}
        for key, overrides in value.items():
            name = ServiceType(key).value
            if isinstance(overrides, ServiceTypeConfig):
                overrides = overrides.model_dump(exclude_unset=True)
            merged[name] = {**merged[name], **(overrides or {})}
        return merged


# env var -> (section, key)
_NUMERIC_ENV_OVERRIDES: Dict[str, Tuple[str, str]] = {
    "PORT": ("server", "port"),
    "MOCK_DELAY_MS": ("simulation", "mock_delay_ms"),
    "TERMINATION_MULTIPLIER": ("costs", "termination_multiplier"),
    "MAX_TCE": ("reconciliation", "legacy_max_tce"),
    "MIN_MARGIN_PERCENT": ("margin_thresholds", "minimum_margin_percent"),
    "TARGET_MARGIN_PERCENT": ("margin_thresholds", "target_margin_percent"),
    "RISK_THRESHOLD_PERCENT": ("margin_thresholds", "risk_threshold_percent"),
    "MAX_TCE_THRESHOLD": ("acid_test", "max_tce_threshold"),
    "CASH_FLOW_RATIO": ("acid_test", "cash_flow_ratio"),
    "RISK_SCORE_THRESHOLD": ("acid_test", "risk_score_threshold"),
}


def _env_number(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric value for %s: %r", name, raw)
        return None
    if not math.isfinite(value):
        logger.warning("Ignoring non-finite value for %s: %r", name, raw)
        return None
    return value


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    for env_name, (section, key) in _NUMERIC_ENV_OVERRIDES.items():
        value = _env_number(env_name)
        if value is None:
            continue
        if key == "port":
            value = int(value)
        data.setdefault(section, {})[key] = value

    mode = os.getenv("INTEGRATIONS_MODE")
    if mode:
        data.setdefault("integrations", {})["mode"] = mode

    for provider in ProviderName:
        url = os.getenv(f"EOR_{provider.value.upper()}_API_URL")
        if url:
            data.setdefault("integrations", {}).setdefault("base_urls", {})[provider.value] = url
        api_key = os.getenv(f"EOR_{provider.value.upper()}_API_KEY")
        if api_key:
            data.setdefault("integrations", {}).setdefault("api_keys", {})[provider.value] = api_key

    return data


def load_eor_config(config_path: Optional[Path] = None) -> EORConfig:
    """
    Load and validate the engine configuration

    Args:
        config_path: Path to config file. Defaults to config/eor_config.yml

    Returns:
        Validated EORConfig with environment overrides applied

    Raises:
        ValidationError: If the file or the overrides don't match the schema
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    data: Dict[str, Any] = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    else:
        logger.warning("EOR config file not found at %s, using defaults", config_path)

    data = _apply_env_overrides(data)

    try:
        cfg = EORConfig(**data)
        logger.info("Successfully loaded EOR config from %s", config_path)
        return cfg
    except ValidationError as e:
        logger.error("EOR config validation failed: %s", e)
        raise
