#!/usr/bin/env python3
"""
KUBEFDB START COMMAND BUILDER
-----------------------------
Renders the literal fdbserver command line used by pods that are not
driven by the monitor. Every environment reference is fetched from the
live pod through a process client and every process-number expression
is computed on the spot.

Split images sort the arguments by flag name; unified images keep the
monitor's construction order.

Author: KubeFDB Team
Date: 2026-10-19
"""

import logging
from typing import List, Union

from kubefdb.client.pod_client import ProcessClient
from kubefdb.core.models import FoundationDBCluster, ProcessClass, ProcessIdentity
from kubefdb.monitor.arguments import evaluate
from kubefdb.monitor.binaries import server_binary_path
from kubefdb.monitor.conf import MonitorConfBuilder

logger = logging.getLogger("kubefdb.monitor.command")


def flag_name(argument: str) -> str:
    return argument.partition("=")[0]


class StartCommandBuilder:

    def __init__(self):
        self.conf_builder = MonitorConfBuilder()

    def build(self, cluster: FoundationDBCluster, process_class: Union[ProcessClass, str],
              client: ProcessClient, process_number: int, process_count: int,
              port_base: int = 0) -> str:
        process_class = ProcessClass.parse(process_class)
        self.conf_builder.validator.require(
            cluster, ProcessIdentity(process_class, process_number, process_count))

        split_image = not cluster.spec.use_unified_image
        symbolic = self.conf_builder.arguments(
            cluster, process_class, process_count,
            bracketed_addresses=not split_image,
            include_process_id=split_image,
            port_base=port_base,
        )

        # Lookup failures propagate: a command is either complete or not produced
        resolved: List[str] = [
            evaluate(argument, client.get_environment_value, process_number)
            for argument in symbolic
        ]
        if split_image:
            resolved = sorted(resolved, key=flag_name)

        binary = server_binary_path(cluster)
        logger.debug("Start command for %s %s #%d/%d uses %s (%s image)",
                     cluster.name, process_class.value, process_number, process_count,
                     binary, "split" if split_image else "unified")
        return " ".join([binary] + resolved)
