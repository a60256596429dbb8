"""Role configuration: YAML loading and pydantic validation."""

from arbac.config.loader import build_roles, load_config, validate_config
from arbac.config.schema import ArbacConfig, EngineSettings, RoleConfig, RuleConfig

__all__ = [
    "ArbacConfig",
    "EngineSettings",
    "RoleConfig",
    "RuleConfig",
    "build_roles",
    "load_config",
    "validate_config",
]
