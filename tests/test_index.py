"""Tests for the rule index."""

from __future__ import annotations

import threading

import pytest

from arbac.index import RuleIndex
from arbac.patterns import PatternCache
from arbac.rules import AllowRule, DenyRule, Role


def _wild_role() -> Role:
    return Role(
        id="wild",
        rules=[
            AllowRule(action="*", resource="db.*"),
            DenyRule(action="delete", resource="db.findocs"),
        ],
    )


class TestRegisterResource:
    def test_builds_entry_per_role(self):
        index = RuleIndex().register_role(_wild_role())
        index.register_resource("db.findocs")

        entry = index.get_role_for_resource("wild", "db.findocs")
        assert entry is not None
        assert entry.role_id == "wild"
        assert [r.action.pattern for r in entry.allow] == ["*"]
        assert [r.action.pattern for r in entry.deny] == ["delete"]

    def test_resource_pattern_is_full_match(self):
        index = RuleIndex().register_role(_wild_role())
        index.register_resource("db.a.b")

        entry = index.get_role_for_resource("wild", "db.a.b")
        assert entry is not None
        assert entry.allow == ()
        assert entry.deny == ()

    def test_idempotent(self):
        index = RuleIndex().register_role(_wild_role())
        index.register_resource("db.x")
        before = index.get_role_for_resource("wild", "db.x")
        index.register_resource("db.x")
        assert index.get_role_for_resource("wild", "db.x") is before
        assert index.resources == ["db.x"]

    def test_unknown_role_or_resource(self):
        index = RuleIndex().register_role(_wild_role())
        assert index.get_role_for_resource("wild", "db.x") is None
        index.register_resource("db.x")
        assert index.get_role_for_resource("ghost", "db.x") is None

    def test_no_roles(self):
        index = RuleIndex()
        index.register_resource("db.x")
        assert index.has_resource("db.x")
        assert index.get_role_for_resource("wild", "db.x") is None


class TestRegisterRole:
    def test_indexes_known_resources(self):
        index = RuleIndex()
        index.register_resource("db.x")
        index.register_role(_wild_role())
        entry = index.get_role_for_resource("wild", "db.x")
        assert entry is not None
        assert len(entry.allow) == 1

    def test_reregistration_rebuilds(self):
        index = RuleIndex().register_role(_wild_role())
        index.register_resource("db.x")
        index.register_resource("other.y")

        index.register_role(Role(id="wild", rules=[AllowRule(action="read", resource="other.*")]))

        assert index.get_role_for_resource("wild", "db.x").allow == ()
        other = index.get_role_for_resource("wild", "other.y")
        assert [r.action.pattern for r in other.allow] == ["read"]

    def test_scope_carried_to_entry(self):
        fn = lambda attrs: {"entities": attrs}  # noqa: E731
        index = RuleIndex().register_role(
            Role(id="emp", rules=[AllowRule(action="read", resource="leads", scope=fn)])
        )
        index.register_resource("leads")
        assert index.get_role_for_resource("emp", "leads").allow[0].scope is fn

    def test_role_lookup(self):
        index = RuleIndex().register_roles([_wild_role(), Role(id="empty")])
        assert index.has_role("wild")
        assert index.get_role("empty").rules == ()
        assert set(index.roles) == {"wild", "empty"}
        assert not index.has_role("ghost")


class _FailingPatternCache(PatternCache):
    def get(self, pattern: str):
        if pattern == "boom":
            raise RuntimeError("cannot compile")
        return super().get(pattern)


class TestFailedRegistration:
    def test_bad_role_dict_rejected_before_indexing(self):
        index = RuleIndex().register_role(Role(id="good", rules=[AllowRule(action="*", resource="**")]))
        index.register_resource("R")

        with pytest.raises(ValueError, match="resource must be a string"):
            index.register_role(Role.from_dict({"id": "bad", "rules": [{"resource": None, "action": "read"}]}))

        assert not index.has_role("bad")
        index.register_resource("S")
        assert len(index.get_role_for_resource("good", "S").allow) == 1

    def test_build_failure_leaves_index_untouched(self):
        index = RuleIndex(_FailingPatternCache())
        index.register_role(Role(id="r", rules=[AllowRule(action="read", resource="R")]))
        index.register_resource("R")
        before = index.get_role_for_resource("r", "R")

        with pytest.raises(RuntimeError, match="cannot compile"):
            index.register_role(Role(id="r", rules=[AllowRule(action="read", resource="boom")]))
        with pytest.raises(RuntimeError):
            index.register_role(Role(id="new", rules=[DenyRule(action="x", resource="boom")]))

        assert index.get_role("r").rules[0].resource == "R"
        assert index.get_role_for_resource("r", "R") is before
        assert not index.has_role("new")
        index.register_resource("S")
        assert index.get_role_for_resource("r", "S") is not None


class TestPatternReuse:
    def test_patterns_compiled_once(self):
        cache = PatternCache()
        index = RuleIndex(cache).register_role(_wild_role())
        for res in ("db.a", "db.b", "db.c", "db.findocs"):
            index.register_resource(res)
        # db.*, db.findocs (resources) and *, delete (actions)
        assert len(cache) == 4
        a = index.get_role_for_resource("wild", "db.a").allow[0].action
        b = index.get_role_for_resource("wild", "db.b").allow[0].action
        assert a is b


class TestConcurrentRegistration:
    def test_parallel_resource_registration(self):
        index = RuleIndex().register_roles(
            [Role(id=f"r{i}", rules=[AllowRule(action="*", resource="db.**")]) for i in range(20)]
        )
        errors = []

        def worker(n: int) -> None:
            try:
                for i in range(50):
                    res = f"db.{i % 10}"
                    index.register_resource(res)
                    for r in range(20):
                        entry = index.get_role_for_resource(f"r{r}", res)
                        assert entry is not None
                        assert len(entry.allow) == 1
            except Exception as exc:  # pragma: no cover
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert sorted(index.resources) == sorted(f"db.{i}" for i in range(10))
