#!/usr/bin/env python3
"""
KUBEFDB VERSIONS
----------------
FoundationDB version identifiers and the capability table the
compiler consults when choosing where server binaries live.

Author: KubeFDB Team
Date: 2026-10-19
"""

import re
from dataclasses import dataclass

from kubefdb.core.errors import ConfigurationError

VERSION_PATTERN = re.compile(r'^(\d+)\.(\d+)\.(\d+)$')

# Releases whose main container image does not ship fdbserver. Those
# binaries are copied into the shared volume by the sidecar instead.
# Releases after 6.2.14 bundle them. Malformed strings never get here:
# the validator rejects them before a build starts.
VERSIONS_WITHOUT_MAIN_CONTAINER_BINARIES = frozenset(
    [f"5.0.{patch}" for patch in range(9)]
    + [f"5.1.{patch}" for patch in range(8)]
    + [f"5.2.{patch}" for patch in range(9)]
    + [f"6.0.{patch}" for patch in range(19)]
    + [f"6.1.{patch}" for patch in range(13)]
    + [f"6.2.{patch}" for patch in range(15)]
)


@dataclass(frozen=True, order=True)
class FdbVersion:
    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, text: str) -> "FdbVersion":
        match = VERSION_PATTERN.match(str(text).strip())
        if not match:
            raise ConfigurationError(f"Invalid FoundationDB version '{text}'")
        return cls(*(int(part) for part in match.groups()))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def supports_binaries_from_main_container(version: str) -> bool:
    """Exact lookup of a version string against the capability table."""
    return version not in VERSIONS_WITHOUT_MAIN_CONTAINER_BINARIES


class Versions:
    """Well-known versions referenced by defaults and tests."""
    DEFAULT = FdbVersion(6, 2, 20)
    WITH_BINARIES_FROM_MAIN_CONTAINER = FdbVersion(6, 2, 15)
    WITHOUT_BINARIES_FROM_MAIN_CONTAINER = FdbVersion(6, 2, 11)
