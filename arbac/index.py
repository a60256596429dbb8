"""Rule index: registered roles and per-resource rule tables.

For every known resource the index holds one :class:`RoleForResource`
per registered role, built by testing each rule's resource pattern
against the resource id and splitting the matches into allow and deny
lists.  Tables are built lazily: a resource is indexed the first time it
is registered, and a role's entries are rebuilt across all known
resources whenever the role is (re-)registered.

All mutations run under a single lock.  A resource's role table is
fully built before it is published, so lock-free readers only ever see
complete tables.
"""

from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from arbac.models import CompiledRule, RoleForResource
from arbac.patterns import PatternCache
from arbac.rules import AllowRule, Effect, Role

logger = logging.getLogger(__name__)


class RuleIndex:
    """Owns registered roles and the ``(resource, role)`` rule cache.

    Parameters
    ----------
    patterns:
        Compiled-pattern cache to use.  A private one is created when
        omitted.
    """

    def __init__(self, patterns: Optional[PatternCache] = None) -> None:
        self._patterns = patterns if patterns is not None else PatternCache()
        self._roles: Dict[str, Role] = {}
        self._resources: Dict[str, Dict[str, RoleForResource]] = {}
        self._lock = threading.RLock()

    # ── Mutation ─────────────────────────────────────────────────────────

    def register_role(self, role: Role) -> RuleIndex:
        """Store *role* and rebuild its entry for every known resource.

        Entries are built before anything is stored, so a role whose rules
        fail to compile leaves the index untouched.
        """
        with self._lock:
            entries = {
                resource_id: self._build(role, resource_id) for resource_id in self._resources
            }
            replaced = role.id in self._roles
            self._roles[role.id] = role
            for resource_id, entry in entries.items():
                self._resources[resource_id][role.id] = entry
            logger.debug(
                "%s role '%s' (%d rule(s), %d resource(s) reindexed)",
                "Re-registered" if replaced else "Registered",
                role.id,
                len(role.rules),
                len(self._resources),
            )
        return self

    def register_roles(self, roles: Iterable[Role]) -> RuleIndex:
        """Register each role in *roles* in order."""
        for role in roles:
            self.register_role(role)
        return self

    def register_resource(self, resource_id: str) -> RuleIndex:
        """Index *resource_id* against every known role.  No-op if known."""
        if resource_id in self._resources:
            return self
        with self._lock:
            if resource_id in self._resources:
                return self
            table = {role_id: self._build(role, resource_id) for role_id, role in self._roles.items()}
            self._resources[resource_id] = table
            logger.debug("Indexed resource '%s' against %d role(s)", resource_id, len(table))
        return self

    def _build(self, role: Role, resource_id: str) -> RoleForResource:
        allow: List[CompiledRule] = []
        deny: List[CompiledRule] = []
        for rule in role.rules:
            if not self._patterns.get(rule.resource).test(resource_id):
                continue
            action = self._patterns.get(rule.action)
            if rule.effect is Effect.DENY:
                deny.append(CompiledRule(action=action))
            else:
                scope = rule.scope if isinstance(rule, AllowRule) else None
                allow.append(CompiledRule(action=action, scope=scope))
        return RoleForResource(role_id=role.id, allow=tuple(allow), deny=tuple(deny))

    # ── Lookup ───────────────────────────────────────────────────────────

    def get_role_for_resource(self, role_id: str, resource_id: str) -> Optional[RoleForResource]:
        """Return the cached entry for ``(resource_id, role_id)``.

        ``None`` means the resource has not been registered or the role
        is unknown.  A known role with no matching rules still has an
        entry, with empty allow/deny lists.
        """
        table = self._resources.get(resource_id)
        if table is None:
            return None
        return table.get(role_id)

    def has_role(self, role_id: str) -> bool:
        return role_id in self._roles

    def get_role(self, role_id: str) -> Optional[Role]:
        return self._roles.get(role_id)

    def has_resource(self, resource_id: str) -> bool:
        return resource_id in self._resources

    @property
    def roles(self) -> Mapping[str, Role]:
        """Read-only view of registered roles, keyed by id."""
        return MappingProxyType(self._roles)

    @property
    def resources(self) -> List[str]:
        """Known resource ids, in registration order."""
        with self._lock:
            return list(self._resources)

    @property
    def patterns(self) -> PatternCache:
        return self._patterns

    def __repr__(self) -> str:
        return f"RuleIndex(roles={len(self._roles)}, resources={len(self._resources)})"
