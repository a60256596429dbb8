"""Pydantic models for role configuration files."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class RuleConfig(BaseModel):
    """A single rule as written in the config file."""

    resource: str = Field(description="Resource wildcard pattern.")
    action: str = Field(description="Action wildcard pattern.")
    effect: Literal["allow", "deny"] = "allow"
    scope: Optional[str] = Field(
        default=None,
        description="Name of a scope function supplied by the application (allow rules only).",
    )

    @field_validator("effect", mode="before")
    @classmethod
    def _normalise_effect(cls, v: object) -> object:
        """Accept 'Allow', ' DENY ' etc."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @model_validator(mode="after")
    def _deny_has_no_scope(self) -> RuleConfig:
        if self.effect == "deny" and self.scope is not None:
            raise ValueError("deny rules must not declare a scope")
        return self


class RoleConfig(BaseModel):
    """A role: id, display metadata and ordered rules."""

    id: str = Field(min_length=1)
    name: Optional[str] = None
    description: Optional[str] = None
    rules: List[RuleConfig] = Field(default_factory=list)


class EngineSettings(BaseModel):
    """Evaluator settings."""

    warn_unknown_roles: bool = Field(
        default=True,
        description="Log a warning when a principal references an unregistered role.",
    )


class ArbacConfig(BaseModel):
    """Top-level configuration file model."""

    engine: EngineSettings = Field(default_factory=EngineSettings)
    roles: List[RoleConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_role_ids(self) -> ArbacConfig:
        seen = set()
        dupes = []
        for role in self.roles:
            if role.id in seen and role.id not in dupes:
                dupes.append(role.id)
            seen.add(role.id)
        if dupes:
            raise ValueError(f"duplicate role id(s): {', '.join(dupes)}")
        return self
