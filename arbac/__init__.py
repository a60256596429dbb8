"""
ARBAC - an attribute/role-based access-control decision engine.

Roles bundle wildcard allow/deny rules over dot-separated resource and
action identifiers.  The engine decides whether a principal holding some
roles may perform an action on a resource, and collects scope values
derived from the principal's attributes.
"""

from arbac.constants import PACKAGE_NAME, PACKAGE_VERSION
from arbac.engine import Arbac
from arbac.errors import ArbacBaseError, ConfigurationError, UnknownScopeError
from arbac.index import RuleIndex
from arbac.models import DecisionRequest, EvaluationResult, Principal, RoleForResource
from arbac.patterns import Matcher, PatternCache, compile_pattern
from arbac.rules import AllowRule, DenyRule, Effect, Role, Rule, parse_rule

__version__ = PACKAGE_VERSION
__app_name__ = PACKAGE_NAME

__all__ = [
    "AllowRule",
    "Arbac",
    "ArbacBaseError",
    "ConfigurationError",
    "DecisionRequest",
    "DenyRule",
    "Effect",
    "EvaluationResult",
    "Matcher",
    "PatternCache",
    "Principal",
    "Role",
    "RoleForResource",
    "Rule",
    "RuleIndex",
    "UnknownScopeError",
    "compile_pattern",
    "parse_rule",
    "__version__",
    "__app_name__",
]
