"""Role and rule definitions.

A role is a named bundle of rules.  Each rule is one of two variants:

* :class:`AllowRule` grants ``action`` on ``resource`` and may carry a
  ``scope`` function deriving a data-scoping value from the principal's
  attributes.
* :class:`DenyRule` forbids ``action`` on ``resource``.  It has no scope.

Both ``resource`` and ``action`` are wildcard patterns (see
:mod:`arbac.patterns`).

Example role::

    Role(
        id="com.role.wild",
        rules=[
            AllowRule(action="*", resource="com.resource.db.*"),
            DenyRule(action="delete", resource="com.resource.db.findocs"),
        ],
    )

Loose dict form (``effect`` defaults to ``"allow"``)::

    {"action": "read", "resource": "com.resource.db.leads", "scope": fn}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Iterable, Mapping, Optional, Tuple, Union

from arbac.constants import EFFECT_ALLOW, EFFECT_DENY

ScopeFn = Callable[[Any], Any]


class Effect(str, Enum):
    """Whether a rule grants or forbids the matched action."""

    ALLOW = EFFECT_ALLOW
    DENY = EFFECT_DENY


@dataclass(frozen=True)
class AllowRule:
    """Grants *action* on *resource*, optionally deriving a scope."""

    resource: str
    action: str
    scope: Optional[ScopeFn] = None

    effect: ClassVar[Effect] = Effect.ALLOW


@dataclass(frozen=True)
class DenyRule:
    """Forbids *action* on *resource*.  Deny always beats allow."""

    resource: str
    action: str

    effect: ClassVar[Effect] = Effect.DENY


Rule = Union[AllowRule, DenyRule]


def _check_patterns(resource: Any, action: Any) -> None:
    for name, value in (("resource", resource), ("action", action)):
        if not isinstance(value, str):
            raise ValueError(f"Rule {name} must be a string pattern, got {type(value).__name__}")


def parse_rule(data: Union[Rule, Mapping[str, Any]]) -> Rule:
    """Build a rule from its loose dict form.

    Raises :class:`ValueError` for an unknown effect, a missing or
    non-string ``resource``/``action``, or a deny rule that declares a
    scope.
    """
    if isinstance(data, (AllowRule, DenyRule)):
        _check_patterns(data.resource, data.action)
        return data

    try:
        resource = data["resource"]
        action = data["action"]
    except KeyError as exc:
        raise ValueError(f"Rule is missing required field {exc.args[0]!r}: {dict(data)}") from exc
    _check_patterns(resource, action)

    raw_effect = data.get("effect") or EFFECT_ALLOW
    try:
        effect = Effect(raw_effect)
    except ValueError:
        raise ValueError(f"Unknown rule effect {raw_effect!r} (expected 'allow' or 'deny')") from None

    scope = data.get("scope")
    if effect is Effect.DENY:
        if scope is not None:
            raise ValueError(
                f"Deny rule for resource {resource!r} / action {action!r} must not declare a scope"
            )
        return DenyRule(resource=resource, action=action)
    if scope is not None and not callable(scope):
        raise ValueError(f"Rule scope must be callable, got {type(scope).__name__}")
    return AllowRule(resource=resource, action=action, scope=scope)


@dataclass(frozen=True)
class Role:
    """A named, ordered bundle of rules.

    Attributes
    ----------
    id:
        Unique key.  Registering another role with the same id replaces
        this one.
    rules:
        Rule definitions, evaluated in order.
    name, description:
        Display metadata only.
    """

    id: str
    rules: Tuple[Rule, ...] = field(default_factory=tuple)
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "rules", tuple(parse_rule(r) for r in self.rules))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Role:
        """Parse from a dict with ``id``, ``rules`` and optional metadata."""
        if "id" not in data:
            raise ValueError(f"Role is missing required field 'id': {dict(data)}")
        return cls(
            id=data["id"],
            rules=tuple(data.get("rules", ())),
            name=data.get("name"),
            description=data.get("description"),
        )


def parse_roles(items: Iterable[Union[Role, Dict[str, Any]]]) -> Tuple[Role, ...]:
    """Parse a list of role dicts (or :class:`Role` objects)."""
    return tuple(item if isinstance(item, Role) else Role.from_dict(item) for item in items)
