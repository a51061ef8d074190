#!/usr/bin/env python3
"""
KUBEFDB BINARY PATHS
--------------------
Both builders ask the same question: does the running version ship
fdbserver inside the main container? If not, the binary comes from the
sidecar's shared volume under a version-qualified directory.

Author: KubeFDB Team
Date: 2026-10-19
"""

import logging

from kubefdb.core.models import FoundationDBCluster
from kubefdb.core.versions import supports_binaries_from_main_container

logger = logging.getLogger("kubefdb.monitor.binaries")

DEFAULT_BINARY_PATH = "/usr/bin/fdbserver"
SHARED_BINARY_ROOT = "/var/dynamic-conf/bin"


def uses_main_container_binaries(cluster: FoundationDBCluster) -> bool:
    return supports_binaries_from_main_container(cluster.effective_version)


def shared_binary_path(version: str) -> str:
    return f"{SHARED_BINARY_ROOT}/{version}/fdbserver"


def server_binary_path(cluster: FoundationDBCluster) -> str:
    """Leading token of a legacy start command."""
    if uses_main_container_binaries(cluster):
        return DEFAULT_BINARY_PATH
    path = shared_binary_path(cluster.effective_version)
    logger.debug("Version %s needs sidecar binaries at %s", cluster.effective_version, path)
    return path


def monitor_binary_path(cluster: FoundationDBCluster) -> str:
    """binaryPath of a monitor configuration. Empty lets the monitor use its default."""
    if uses_main_container_binaries(cluster):
        return ""
    return shared_binary_path(cluster.effective_version)
