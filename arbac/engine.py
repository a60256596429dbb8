"""ARBAC evaluation engine.

Combines the rules of every role assigned to a principal with
deny-overrides-allow precedence:

1. The requested resource is indexed on first sight.
2. Any matching deny rule, in any role, denies the request.
3. Otherwise any matching allow rule grants it.  Allow rules that carry
   a scope function contribute ``scope(attrs)`` to the result, in match
   order, with the principal's attributes resolved at most once.

Usage::

    engine = Arbac()
    engine.register_role(Role(id="reader", rules=[AllowRule("docs.**", "read")]))
    result = await engine.evaluate(
        DecisionRequest(resource="docs.a.b", action="read"),
        Principal(id="u1", roles=["reader"]),
    )
    result.allowed   # True
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from arbac.index import RuleIndex
from arbac.models import DENIED, DecisionRequest, EvaluationResult, Principal, RoleForResource
from arbac.rules import Role, ScopeFn

logger = logging.getLogger(__name__)

_UNSET = object()


class _LazyAttributes:
    """Resolves a principal's attributes on first use, then caches them."""

    def __init__(self, principal: Principal) -> None:
        self._principal = principal
        self._value: Any = _UNSET

    async def get(self) -> Any:
        if self._value is _UNSET:
            attrs = self._principal.attrs
            if callable(attrs):
                attrs = attrs(self._principal.id)
                if inspect.isawaitable(attrs):
                    attrs = await attrs
            self._value = attrs
        return self._value


class Arbac:
    """Role/attribute based access-control decision engine.

    Parameters
    ----------
    index:
        The :class:`RuleIndex` holding roles and cached rule tables.  A
        new, empty one is created when omitted.
    warn_unknown_roles:
        Log a warning when a principal is assigned a role id that was
        never registered.  The decision is the same either way.
    """

    def __init__(
        self,
        index: Optional[RuleIndex] = None,
        *,
        warn_unknown_roles: bool = True,
    ) -> None:
        self._index = index if index is not None else RuleIndex()
        self._warn_unknown_roles = warn_unknown_roles

    @property
    def index(self) -> RuleIndex:
        return self._index

    # ── Registration ─────────────────────────────────────────────────────

    def register_role(self, role: Union[Role, Mapping[str, Any]]) -> Arbac:
        """Register (or replace) a role.  Accepts a :class:`Role` or its dict form."""
        if not isinstance(role, Role):
            role = Role.from_dict(role)
        self._index.register_role(role)
        return self

    def register_roles(self, roles: Iterable[Union[Role, Mapping[str, Any]]]) -> Arbac:
        for role in roles:
            self.register_role(role)
        return self

    def register_resource(self, resource: str) -> Arbac:
        self._index.register_resource(resource)
        return self

    # ── Evaluation ───────────────────────────────────────────────────────

    def _resolve_roles(self, resource: str, principal: Principal) -> List[RoleForResource]:
        resolved: List[RoleForResource] = []
        for role_id in principal.roles:
            entry = self._index.get_role_for_resource(role_id, resource)
            if entry is None:
                if self._warn_unknown_roles and not self._index.has_role(role_id):
                    logger.warning(
                        'Role "%s" assigned to principal "%s" does not exist.',
                        role_id,
                        principal.id,
                    )
                continue
            resolved.append(entry)
        return resolved

    async def evaluate(
        self,
        request: Union[DecisionRequest, Mapping[str, str]],
        principal: Principal,
    ) -> EvaluationResult:
        """Decide whether *principal* may perform *request*.

        Returns :class:`EvaluationResult` with ``allowed`` and, when
        allowed, the list of scope values from matching allow rules.
        Exceptions raised by the attribute resolver or a scope function
        propagate unchanged.
        """
        request = DecisionRequest.coerce(request)
        self._index.register_resource(request.resource)

        roles = self._resolve_roles(request.resource, principal)
        if not roles:
            logger.debug(
                "No roles resolved for principal=%s, resource=%s → deny",
                principal.id,
                request.resource,
            )
            return DENIED

        for role in roles:
            for rule in role.deny:
                if rule.action.test(request.action):
                    logger.debug(
                        "Deny match: role=%s, action pattern=%r (principal=%s, resource=%s, action=%s)",
                        role.role_id,
                        rule.action.pattern,
                        principal.id,
                        request.resource,
                        request.action,
                    )
                    return DENIED

        attrs = _LazyAttributes(principal)
        scopes: List[Any] = []
        allowed = False
        for role in roles:
            for rule in role.allow:
                if not rule.action.test(request.action):
                    continue
                allowed = True
                if rule.scope is not None:
                    scopes.append(rule.scope(await attrs.get()))

        logger.debug(
            "Decision for principal=%s, resource=%s, action=%s → %s (%d scope(s))",
            principal.id,
            request.resource,
            request.action,
            "allow" if allowed else "deny",
            len(scopes),
        )
        if not allowed:
            return DENIED
        return EvaluationResult(allowed=True, scopes=scopes)

    async def is_allowed(
        self,
        request: Union[DecisionRequest, Mapping[str, str]],
        principal: Principal,
    ) -> bool:
        """Shorthand for ``(await evaluate(...)).allowed``."""
        result = await self.evaluate(request, principal)
        return result.allowed

    async def filter_allowed(
        self,
        resources: Iterable[str],
        action: str,
        principal: Principal,
    ) -> List[str]:
        """Return only the *resources* on which *principal* may perform *action*.

        Each resource is a separate evaluation, so an attribute resolver
        may be called once per resource that hits a scoped rule.
        """
        allowed: List[str] = []
        for resource in resources:
            if await self.is_allowed(DecisionRequest(resource=resource, action=action), principal):
                allowed.append(resource)
        return allowed

    # ── Construction from config ─────────────────────────────────────────

    @classmethod
    def from_config(
        cls,
        cfg_fpath: str,
        scopes: Optional[Dict[str, ScopeFn]] = None,
    ) -> Arbac:
        """Create an engine from a YAML role configuration file.

        *scopes* maps the scope names used in the file to functions.
        """
        from arbac.config.loader import build_roles, load_config

        config = load_config(cfg_fpath)
        engine = cls(warn_unknown_roles=config.engine.warn_unknown_roles)
        engine.register_roles(build_roles(config, scopes))
        logger.info(
            "ARBAC engine created from %s: %d role(s)",
            cfg_fpath,
            len(engine.index.roles),
        )
        return engine

    def __repr__(self) -> str:
        return f"Arbac({self._index!r})"
