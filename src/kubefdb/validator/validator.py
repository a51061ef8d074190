#!/usr/bin/env python3
"""
KUBEFDB VALIDATOR - The Judge
-----------------------------
The Validator is the first gate of every build. It checks the cluster
and the process identity up front so that a builder either produces a
complete configuration or refuses outright, never half of one.

Author: KubeFDB Team
Date: 2026-10-19
"""

import logging
from typing import List, Optional, Tuple

from kubefdb.core.errors import ConfigurationError
from kubefdb.core.models import FoundationDBCluster, ProcessClass, ProcessIdentity, PublicIPSource
from kubefdb.core.versions import FdbVersion
from kubefdb.monitor.parameters import ParameterMerger

logger = logging.getLogger("kubefdb.validator")


class ClusterValidator:
    """
    Enforces input integrity ahead of argument construction.
    `validate_*` methods report (ok, message); `require_*` raise.
    """

    def __init__(self):
        self.merger = ParameterMerger()

    def validate_cluster(self, cluster: FoundationDBCluster) -> Tuple[bool, str]:
        if not cluster.name:
            return False, "Cluster name is required."

        for label, version in (("spec.version", cluster.spec.version),
                               ("status.runningVersion", cluster.status.running_version)):
            if not version:
                continue
            try:
                FdbVersion.parse(version)
            except ConfigurationError as e:
                return False, f"{label}: {e}"

        if not isinstance(cluster.spec.routing.public_ip_source, PublicIPSource):
            return False, f"Unknown public IP source '{cluster.spec.routing.public_ip_source}'."

        for process_class, settings in cluster.spec.processes.items():
            for parameter in settings.custom_parameters or ():
                try:
                    self.merger.normalize(parameter)
                except ConfigurationError as e:
                    return False, f"processes.{ProcessClass.parse(process_class).value}: {e}"

        return True, "Cluster passes input validation."

    def validate_process(self, identity: ProcessIdentity) -> Tuple[bool, str]:
        if not isinstance(identity.process_class, ProcessClass):
            return False, f"Unknown process class '{identity.process_class}'."
        if identity.process_class == ProcessClass.GENERAL:
            return False, "The general class only holds defaults and cannot be rendered."
        if identity.process_count < 1:
            return False, f"Process count must be at least 1, got {identity.process_count}."
        if not 1 <= identity.process_number <= identity.process_count:
            return False, (f"Process number {identity.process_number} is outside "
                           f"[1, {identity.process_count}].")
        return True, "Process identity is valid."

    def require(self, cluster: FoundationDBCluster, identity: Optional[ProcessIdentity] = None):
        problems: List[str] = []
        ok, message = self.validate_cluster(cluster)
        if not ok:
            problems.append(message)
        if identity is not None:
            ok, message = self.validate_process(identity)
            if not ok:
                problems.append(message)

        if problems:
            logger.debug("Rejecting build for %s: %s", cluster.name, "; ".join(problems))
            raise ConfigurationError(" ".join(problems))
