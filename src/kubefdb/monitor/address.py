#!/usr/bin/env python3
"""
KUBEFDB ADDRESS RESOLVER
------------------------
Builds the --public_address (and, when safe, --listen_address) argument
for a process.

Ports are allocated per process number n: the TLS listener sits on
4498 + 2n and the plain listener on 4499 + 2n, so both families can be
served side by side while a cluster migrates between them.

A pod running several process classes shifts each class by a port base,
the number of processes placed before it, so n is the position across
the whole pod.

Author: KubeFDB Team
Date: 2026-10-19
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from kubefdb.core.errors import ConfigurationError
from kubefdb.core.models import ClusterStatus, FoundationDBCluster, PublicIPSource
from kubefdb.monitor.arguments import Argument, EnvironmentReference, Literal, ProcessNumberComputed, concat

logger = logging.getLogger("kubefdb.monitor.address")

PUBLIC_IP_VARIABLE = "FDB_PUBLIC_IP"
POD_IP_VARIABLE = "FDB_POD_IP"

TLS_PORT_OFFSET = 4498
NON_TLS_PORT_OFFSET = 4499
PORT_MULTIPLIER = 2


@dataclass(frozen=True)
class AddressSpec:
    public: Argument
    listen: Optional[Argument] = None


def required_families(status: ClusterStatus) -> Tuple[bool, bool]:
    """Returns (tls, non_tls). A status requiring neither is treated as plain only."""
    tls = status.required_addresses.tls
    non_tls = status.required_addresses.non_tls
    if not tls and not non_tls:
        return False, True
    return tls, non_tls


def port_offset(tls: bool, port_base: int = 0) -> int:
    offset = TLS_PORT_OFFSET if tls else NON_TLS_PORT_OFFSET
    return offset + PORT_MULTIPLIER * port_base


def port_for(process_number: int, tls: bool, port_base: int = 0) -> int:
    return ProcessNumberComputed(port_offset(tls, port_base), PORT_MULTIPLIER).resolve(process_number)


class AddressResolver:
    """
    Renders address expressions.

    bracketed=True produces the "[ip]:port" form used by the monitor and the
    unified image; bracketed=False keeps the bare "ip:port" form of the
    split-image start command.
    """

    def __init__(self, bracketed: bool = True):
        self.bracketed = bracketed

    def resolve(self, cluster: FoundationDBCluster, port_base: int = 0) -> AddressSpec:
        if port_base < 0:
            raise ConfigurationError(f"Port base must not be negative, got {port_base}")

        tls, non_tls = required_families(cluster.status)
        logger.debug("Address families for %s: tls=%s non_tls=%s port_base=%d",
                     cluster.name, tls, non_tls, port_base)

        public = self._expression("--public_address", PUBLIC_IP_VARIABLE, tls, non_tls, port_base)

        listen = None
        if cluster.spec.routing.public_ip_source == PublicIPSource.SERVICE:
            # Only reference FDB_POD_IP once every pod is known to define it
            if cluster.status.has_listen_ips_for_all_pods:
                listen = self._expression("--listen_address", POD_IP_VARIABLE, tls, non_tls, port_base)
            else:
                logger.debug("Skipping listen address for %s: not all pods expose %s",
                             cluster.name, POD_IP_VARIABLE)

        return AddressSpec(public=public, listen=listen)

    def _expression(self, flag: str, variable: str, tls: bool, non_tls: bool, port_base: int) -> Argument:
        parts: List[Argument] = []
        families = [family for family, wanted in (("tls", tls), ("non_tls", non_tls)) if wanted]
        for index, family in enumerate(families):
            lead = f"{flag}=" if index == 0 else ","
            parts.extend(self._address(lead, variable, family == "tls", port_base))
        return concat(*parts)

    def _address(self, lead: str, variable: str, tls: bool, port_base: int) -> List[Argument]:
        opener, closer = ("[", "]:") if self.bracketed else ("", ":")
        parts: List[Argument] = [
            Literal(lead + opener),
            EnvironmentReference(variable),
            Literal(closer),
            ProcessNumberComputed(port_offset(tls, port_base), PORT_MULTIPLIER),
        ]
        if tls:
            parts.append(Literal(":tls"))
        return parts
