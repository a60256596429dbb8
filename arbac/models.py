"""Decision request, principal, and evaluation result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple, Union

from arbac.patterns import Matcher
from arbac.rules import ScopeFn

AttributeResolver = Callable[[Any], Union[Any, Awaitable[Any]]]


@dataclass(frozen=True)
class DecisionRequest:
    """The ``(resource, action)`` pair being checked.

    Both values are matched literally against rule patterns.
    """

    resource: str
    action: str

    @classmethod
    def coerce(cls, value: Union[DecisionRequest, Mapping[str, str]]) -> DecisionRequest:
        """Accept either a :class:`DecisionRequest` or a ``{resource, action}`` mapping."""
        if isinstance(value, cls):
            return value
        return cls(resource=value["resource"], action=value["action"])


@dataclass(frozen=True)
class Principal:
    """The subject of a decision.

    Attributes
    ----------
    id:
        Principal identifier, passed to *attrs* when it is a resolver.
    roles:
        Assigned role ids.  Duplicates and unknown ids are allowed.  A
        single string is taken as one role id.
    attrs:
        Either the attribute value itself or a callable
        ``(principal_id) -> attrs`` that may return an awaitable.
    """

    id: Any
    roles: Tuple[str, ...] = field(default_factory=tuple)
    attrs: Union[Any, AttributeResolver] = None

    def __post_init__(self) -> None:
        roles = (self.roles,) if isinstance(self.roles, str) else tuple(self.roles)
        object.__setattr__(self, "roles", roles)


@dataclass(frozen=True)
class CompiledRule:
    """A rule reduced to its compiled action matcher and optional scope."""

    action: Matcher
    scope: Optional[ScopeFn] = None


@dataclass(frozen=True)
class RoleForResource:
    """Allow/deny rules of one role that apply to one resource."""

    role_id: str
    allow: Tuple[CompiledRule, ...] = ()
    deny: Tuple[CompiledRule, ...] = ()


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of :meth:`arbac.engine.Arbac.evaluate`.

    ``scopes`` is ``None`` whenever ``allowed`` is ``False``.
    """

    allowed: bool
    scopes: Optional[List[Any]] = None

    def __bool__(self) -> bool:
        return self.allowed

    def to_dict(self) -> Dict[str, Any]:
        """Return ``{"allowed": ...}`` plus ``"scopes"`` only when allowed."""
        if not self.allowed:
            return {"allowed": False}
        return {"allowed": True, "scopes": list(self.scopes or [])}


DENIED = EvaluationResult(allowed=False)
