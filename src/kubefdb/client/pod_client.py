#!/usr/bin/env python3
"""
KUBEFDB POD CLIENTS
-------------------
The start command builder reads environment values from the pod a
process runs in. Anything offering `get_environment_value(name)` will
do; two implementations ship here:

- StaticPodClient: a fixed mapping, e.g. values scraped from a sidecar.
- PodFactsClient: derives the FDB_* substitutions from the cluster spec
  and pod placement, the way the pod's environment is populated.

Author: KubeFDB Team
Date: 2026-10-19
"""

from typing import Dict, Mapping, Protocol

from kubefdb.core.errors import EnvironmentLookupError
from kubefdb.core.models import FoundationDBCluster, PodFacts, PublicIPSource
from kubefdb.monitor.address import POD_IP_VARIABLE, PUBLIC_IP_VARIABLE
from kubefdb.monitor.locality import (
    INSTANCE_ID_VARIABLE,
    MACHINE_ID_VARIABLE,
    ZONE_ID_VARIABLE,
    LocalityResolver,
)


class ProcessClient(Protocol):
    def get_environment_value(self, name: str) -> str:
        """Returns the variable's value or raises a LookupError."""


class StaticPodClient:

    def __init__(self, variables: Mapping[str, str]):
        self.variables: Dict[str, str] = dict(variables)

    def get_environment_value(self, name: str) -> str:
        try:
            return self.variables[name]
        except KeyError:
            raise EnvironmentLookupError(name) from None


class PodFactsClient(StaticPodClient):

    def __init__(self, cluster: FoundationDBCluster, pod: PodFacts):
        super().__init__(self.substitutions(cluster, pod))

    @staticmethod
    def substitutions(cluster: FoundationDBCluster, pod: PodFacts) -> Dict[str, str]:
        locality = LocalityResolver().resolve(cluster, pod)

        public_ip = pod.pod_ip
        if cluster.spec.routing.public_ip_source == PublicIPSource.SERVICE and pod.service_ip:
            public_ip = pod.service_ip

        variables = {
            PUBLIC_IP_VARIABLE: public_ip,
            POD_IP_VARIABLE: pod.pod_ip,
            INSTANCE_ID_VARIABLE: locality.instance_id,
            MACHINE_ID_VARIABLE: locality.machine_id,
            ZONE_ID_VARIABLE: locality.zone_id,
        }
        # An unset variable must fail the lookup, not render as empty
        variables = {name: value for name, value in variables.items() if value}
        variables.update(pod.env)
        return variables
