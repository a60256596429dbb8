"""Shared constants for the ARBAC engine."""

PACKAGE_NAME = "arbac"
PACKAGE_VERSION = "0.1.0"

# Wildcards
SEGMENT_SEPARATOR = "."
SINGLE_WILDCARD = "*"
DOUBLE_WILDCARD = "**"

# Rule effects
EFFECT_ALLOW = "allow"
EFFECT_DENY = "deny"

# Logging defaults
LOG_DIR = "logs"
DEFAULT_LOG_LEVEL = "INFO"
