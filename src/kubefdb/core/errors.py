#!/usr/bin/env python3
"""
KUBEFDB ERRORS
--------------
The two failure modes of the configuration compiler. Everything else
is a programming error and is allowed to surface as-is.

Author: KubeFDB Team
Date: 2026-10-19
"""


class ConfigurationError(ValueError):
    """Malformed or contradictory cluster input. The build is aborted."""


class EnvironmentLookupError(LookupError):
    """A process client could not supply a required environment value."""

    def __init__(self, name: str):
        super().__init__(f"Environment variable '{name}' is not set for this process")
        self.name = name
