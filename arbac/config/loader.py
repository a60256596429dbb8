"""Role configuration loading and validation.

Loads a YAML file, expands ``${ENV_VAR}`` placeholders, validates it
against :class:`~arbac.config.schema.ArbacConfig`, and turns the role
models into :class:`~arbac.rules.Role` objects.

Scope functions cannot live in YAML, so rules name them and the caller
supplies the mapping::

    config = load_config("roles.yaml")
    roles = build_roles(config, {"assignment": lambda a: {"entities": a["assignment"]}})
"""

import logging
import os
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from arbac.config.env import expand_env_vars
from arbac.config.schema import ArbacConfig, RoleConfig, RuleConfig
from arbac.errors import ConfigurationError, UnknownScopeError
from arbac.rules import AllowRule, DenyRule, Role, Rule, ScopeFn

logger = logging.getLogger(__name__)

# Recognised config file extensions.
_YAML_EXTS = frozenset({".yaml", ".yml"})


def _read_config_file(cfg_fpath: str) -> Dict[str, Any]:
    """Read and parse a YAML config file from *cfg_fpath*.

    Raises :class:`ConfigurationError` on I/O or parse errors.
    """
    ext = os.path.splitext(cfg_fpath)[1].lower()
    if ext not in _YAML_EXTS:
        raise ConfigurationError(
            f"Unsupported config file extension '{ext}'. "
            "Only YAML files (.yaml, .yml) are supported."
        )

    try:
        with open(cfg_fpath, "r", encoding="utf-8") as f:
            raw_data = yaml.safe_load(f)
    except Exception as exc:
        raise ConfigurationError(f"Error reading configuration file: {cfg_fpath}\n  {exc}") from exc

    if raw_data is None:
        return {}
    if not isinstance(raw_data, dict):
        raise ConfigurationError(
            "Top-level configuration content must be a YAML mapping (dictionary)."
        )
    return raw_data


def _format_validation_errors(exc: ValidationError) -> str:
    """Format Pydantic validation errors into a readable multi-line string."""
    lines: List[str] = []
    for err in exc.errors():
        loc = " → ".join(str(part) for part in err["loc"])
        lines.append(f"  • {loc}: {err['msg']}")
    return "\n".join(lines)


def validate_config(raw_data: Dict[str, Any]) -> ArbacConfig:
    """Expand env vars in *raw_data* and validate it.

    Raises :class:`ConfigurationError` listing every validation error.
    """
    raw_data = expand_env_vars(raw_data)
    try:
        return ArbacConfig.model_validate(raw_data)
    except ValidationError as exc:
        error_summary = _format_validation_errors(exc)
        raise ConfigurationError(
            f"Configuration validation failed ({len(exc.errors())} error(s)):\n" f"{error_summary}"
        ) from exc


def load_config(cfg_fpath: str) -> ArbacConfig:
    """Load and validate the YAML role configuration at *cfg_fpath*."""
    logger.debug("Loading configuration file: %s", cfg_fpath)

    if not os.path.exists(cfg_fpath):
        raise ConfigurationError(f"Configuration file does not exist: {cfg_fpath}")

    config = validate_config(_read_config_file(cfg_fpath))
    logger.info("Loaded %d role(s) from %s", len(config.roles), cfg_fpath)
    return config


def _build_rule(cfg: RuleConfig, role_id: str, scopes: Dict[str, ScopeFn]) -> Rule:
    if cfg.effect == "deny":
        return DenyRule(resource=cfg.resource, action=cfg.action)
    scope_fn: Optional[ScopeFn] = None
    if cfg.scope is not None:
        if cfg.scope not in scopes:
            raise UnknownScopeError(cfg.scope, role_id)
        scope_fn = scopes[cfg.scope]
    return AllowRule(resource=cfg.resource, action=cfg.action, scope=scope_fn)


def _build_role(cfg: RoleConfig, scopes: Dict[str, ScopeFn]) -> Role:
    return Role(
        id=cfg.id,
        name=cfg.name,
        description=cfg.description,
        rules=tuple(_build_rule(r, cfg.id, scopes) for r in cfg.rules),
    )


def build_roles(
    config: ArbacConfig,
    scopes: Optional[Dict[str, ScopeFn]] = None,
) -> List[Role]:
    """Convert validated role models into :class:`Role` objects.

    Raises :class:`UnknownScopeError` if a rule names a scope missing
    from *scopes*.
    """
    return [_build_role(role, scopes or {}) for role in config.roles]
