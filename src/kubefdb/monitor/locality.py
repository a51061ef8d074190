#!/usr/bin/env python3
"""
KUBEFDB LOCALITY RESOLVER
-------------------------
Works out the instance, machine and zone identifiers (plus the optional
data center and data hall) that tell FoundationDB where a process lives.

Two views of the same rules are exposed: `resolve` gives concrete values
for a pod (what the pod environment carries), `arguments` gives the
symbolic --locality_* arguments the monitor resolves at start time.

Author: KubeFDB Team
Date: 2026-10-19
"""

from dataclasses import dataclass
from typing import List, Optional

from kubefdb.core.models import FoundationDBCluster, PodFacts
from kubefdb.monitor.arguments import Argument, EnvironmentReference, Literal, ProcessNumberComputed, concat

INSTANCE_ID_VARIABLE = "FDB_INSTANCE_ID"
MACHINE_ID_VARIABLE = "FDB_MACHINE_ID"
ZONE_ID_VARIABLE = "FDB_ZONE_ID"


@dataclass(frozen=True)
class Locality:
    instance_id: str
    machine_id: str
    zone_id: str
    data_center: Optional[str] = None
    data_hall: Optional[str] = None


class LocalityResolver:
    """Resolves locality identifiers from the cluster spec and pod placement."""

    def resolve(self, cluster: FoundationDBCluster, pod: PodFacts) -> Locality:
        fault_domain = cluster.spec.fault_domain.normalized()
        instance_id = pod.process_group_id

        if fault_domain.host_replication:
            machine_id = pod.node_name
        else:
            machine_id = f"{cluster.name}-{instance_id}"

        variable = fault_domain.environment_variable
        if variable and variable in pod.env:
            zone_id = pod.env[variable]
        elif fault_domain.value:
            zone_id = fault_domain.value
        else:
            zone_id = machine_id

        return Locality(
            instance_id=instance_id,
            machine_id=machine_id,
            zone_id=zone_id,
            data_center=cluster.spec.data_center or None,
            data_hall=cluster.spec.data_hall or None,
        )

    def arguments(self, cluster: FoundationDBCluster) -> List[Argument]:
        """instance, machine and zone, then data center and data hall when set."""
        args: List[Argument] = [
            concat("--locality_instance_id=", EnvironmentReference(INSTANCE_ID_VARIABLE)),
            concat("--locality_machineid=", EnvironmentReference(MACHINE_ID_VARIABLE)),
            self.zone_argument(cluster),
        ]
        if cluster.spec.data_center:
            args.append(Literal(f"--locality_dcid={cluster.spec.data_center}"))
        if cluster.spec.data_hall:
            args.append(Literal(f"--locality_data_hall={cluster.spec.data_hall}"))
        return args

    def zone_argument(self, cluster: FoundationDBCluster) -> Argument:
        fault_domain = cluster.spec.fault_domain.normalized()
        variable = fault_domain.environment_variable
        if variable:
            return concat("--locality_zoneid=", EnvironmentReference(variable))
        if fault_domain.value:
            # Shared across Kubernetes clusters, so it cannot come from the pod
            return Literal(f"--locality_zoneid={fault_domain.value}")
        return concat("--locality_zoneid=", EnvironmentReference(ZONE_ID_VARIABLE))

    def process_id_argument(self) -> Argument:
        """--locality_process_id=<instanceID>-<processNumber>, for pods with several processes."""
        return concat(
            "--locality_process_id=",
            EnvironmentReference(INSTANCE_ID_VARIABLE),
            "-",
            ProcessNumberComputed(),
        )
