#!/usr/bin/env python3
"""
KUBEFDB MONITOR CONFIGURATION BUILDER
-------------------------------------
Produces the structured configuration read by the process monitor that
starts and restarts fdbserver inside a unified-image pod.

Argument order is a contract: the monitor and the reconciler compare
configurations position by position. The fixed prefix is

    cluster_file, seed_cluster_file, public_address, class, logdir,
    loggroup, datadir, locality_instance_id, locality_machineid,
    locality_zoneid

followed, when present, by locality_dcid, locality_data_hall, the custom
parameters, tls_verify_peers and finally listen_address.

Author: KubeFDB Team
Date: 2026-10-19
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple, Union

from kubefdb.core.models import FoundationDBCluster, ProcessClass, ProcessIdentity
from kubefdb.core.versions import Versions
from kubefdb.monitor.address import AddressResolver
from kubefdb.monitor.arguments import Argument, Literal, ProcessNumberComputed, concat
from kubefdb.monitor.binaries import monitor_binary_path
from kubefdb.monitor.locality import LocalityResolver
from kubefdb.monitor.parameters import ParameterMerger
from kubefdb.validator.validator import ClusterValidator

logger = logging.getLogger("kubefdb.monitor.conf")

CLUSTER_FILE_PATH = "/var/fdb/data/fdb.cluster"
SEED_CLUSTER_FILE_PATH = "/var/dynamic-conf/fdb.cluster"
LOG_DIRECTORY = "/var/log/fdb-trace-logs"
DATA_DIRECTORY = "/var/fdb/data"


@dataclass(frozen=True)
class MonitorConfiguration:
    """
    What the monitor runs. server_count == 0 is the placeholder a pod gets
    before the cluster has a connection string.
    """
    version: str
    server_count: int
    arguments: Tuple[Argument, ...] = ()
    binary_path: str = ""


class MonitorConfBuilder:
    """Assembles the ordered argument list shared by both output formats."""

    def __init__(self):
        self.locality = LocalityResolver()
        self.parameters = ParameterMerger()
        self.validator = ClusterValidator()

    def build(self, cluster: FoundationDBCluster, process_class: Union[ProcessClass, str],
              process_count: int, port_base: int = 0) -> MonitorConfiguration:
        process_class = ProcessClass.parse(process_class)
        self.validator.require(cluster)

        if not cluster.status.connection_string:
            logger.debug("No connection string for %s yet, emitting placeholder configuration", cluster.name)
            return MonitorConfiguration(version=str(Versions.DEFAULT), server_count=0)

        arguments = self.arguments(cluster, process_class, process_count, port_base=port_base)
        conf = MonitorConfiguration(
            version=cluster.spec.version,
            server_count=process_count,
            arguments=tuple(arguments),
            binary_path=monitor_binary_path(cluster),
        )
        logger.debug("Built %s monitor configuration for %s: %d servers, %d arguments",
                     process_class.value, cluster.name, conf.server_count, len(conf.arguments))
        return conf

    def arguments(self, cluster: FoundationDBCluster, process_class: Union[ProcessClass, str],
                  process_count: int, bracketed_addresses: bool = True,
                  include_process_id: bool = False, port_base: int = 0) -> List[Argument]:
        """
        The full ordered argument list for one process class.

        bracketed_addresses=False and include_process_id=True give the
        variant used by split-image start commands. port_base shifts the
        ports past processes of other classes sharing the pod; data
        directories stay numbered within the class.
        """
        process_class = ProcessClass.parse(process_class)
        self.validator.require(cluster, ProcessIdentity(process_class, 1, process_count))

        # Resolve everything that can fail before emitting anything
        custom_parameters = self.parameters.merge(cluster.spec, process_class)
        addresses = AddressResolver(bracketed=bracketed_addresses).resolve(cluster, port_base)

        if process_count == 1:
            data_directory: Argument = Literal(f"--datadir={DATA_DIRECTORY}")
        else:
            data_directory = concat(f"--datadir={DATA_DIRECTORY}/", ProcessNumberComputed())

        locality = self.locality.arguments(cluster)
        fixed_locality, optional_locality = locality[:3], locality[3:]

        args: List[Argument] = [
            Literal(f"--cluster_file={CLUSTER_FILE_PATH}"),
            Literal(f"--seed_cluster_file={SEED_CLUSTER_FILE_PATH}"),
            addresses.public,
            Literal(f"--class={process_class.value}"),
            Literal(f"--logdir={LOG_DIRECTORY}"),
            Literal(f"--loggroup={cluster.log_group}"),
            data_directory,
        ]
        args.extend(fixed_locality[:2])
        if include_process_id and process_count > 1:
            args.append(self.locality.process_id_argument())
        args.append(fixed_locality[2])
        args.extend(optional_locality)

        args.extend(Literal(f"--{parameter}") for parameter in custom_parameters)

        rules = cluster.spec.main_container.peer_verification_rules
        if rules:
            args.append(Literal(f"--tls_verify_peers={rules}"))

        if addresses.listen is not None:
            args.append(addresses.listen)

        return args
