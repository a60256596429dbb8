"""Custom exception classes for the ARBAC engine."""

from typing import Optional


class ArbacBaseError(Exception):
    """Base class for all custom exceptions in the ARBAC engine."""

    pass


class ConfigurationError(ArbacBaseError):
    """Raised when loading or validating a role configuration file fails."""

    pass


class UnknownScopeError(ConfigurationError):
    """
    Raised when a configured rule references a scope function name that
    the embedding application did not supply.
    """

    def __init__(self, scope_name: str, role_id: Optional[str] = None):
        self.scope_name = scope_name
        self.role_id = role_id

        message = f"Unknown scope function '{scope_name}'"
        if role_id:
            message += f" (role: {role_id})"
        super().__init__(message)
