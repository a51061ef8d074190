#!/usr/bin/env python3
"""
KUBEFDB CORE MODELS
-------------------
Defines the read-only data structures the configuration compiler works on.
These models mirror the FoundationDBCluster custom resource: a spec the
user declares, a status the operator observes, and the identity of the
single process being rendered.

Nothing here is mutated by the compiler. Tests and loaders derive new
instances with dataclasses.replace().

Author: KubeFDB Team
Date: 2026-10-19
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple

from kubefdb.core.errors import ConfigurationError
from kubefdb.core.versions import Versions

# Fault domain keys understood by the operator
NONE_FAULT_DOMAIN_KEY = "foundationdb.org/none"
HOSTNAME_FAULT_DOMAIN_KEY = "kubernetes.io/hostname"
NODE_NAME_VALUE_FROM = "spec.nodeName"


class ProcessClass(str, Enum):
    """The role a database process plays. GENERAL is the class-agnostic key."""

    GENERAL = "general"
    STORAGE = "storage"
    LOG = "log"
    TRANSACTION = "transaction"
    STATELESS = "stateless"
    CLUSTER_CONTROLLER = "cluster_controller"
    PROXY = "proxy"
    RESOLUTION = "resolution"
    COORDINATOR = "coordinator"
    TEST = "test"

    @classmethod
    def parse(cls, value) -> "ProcessClass":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value))
        except ValueError:
            raise ConfigurationError(f"Unknown process class '{value}'")


class PublicIPSource(str, Enum):
    """Where a process gets the address it advertises to the cluster."""

    POD = "pod"
    SERVICE = "service"

    @classmethod
    def parse(cls, value) -> "PublicIPSource":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ConfigurationError(f"Unknown public IP source '{value}'")


@dataclass(frozen=True)
class FaultDomain:
    """
    The locality grouping used for replica placement.

    An empty fault domain means host replication (one zone per node).
    A value_from starting with '$' names an environment variable on the pod.
    """
    key: str = ""
    value: str = ""
    value_from: str = ""

    def normalized(self) -> "FaultDomain":
        if not self.key:
            return FaultDomain(key=HOSTNAME_FAULT_DOMAIN_KEY, value_from=NODE_NAME_VALUE_FROM)
        return self

    @property
    def host_replication(self) -> bool:
        return self.normalized().key != NONE_FAULT_DOMAIN_KEY

    @property
    def environment_variable(self) -> Optional[str]:
        if self.value_from.startswith("$") and len(self.value_from) > 1:
            return self.value_from[1:]
        return None


@dataclass(frozen=True)
class ProcessSettings:
    # None means "not declared", which falls back to the general class.
    # An empty tuple is a declared, empty override.
    custom_parameters: Optional[Tuple[str, ...]] = None


@dataclass(frozen=True)
class MainContainerSettings:
    enable_tls: bool = False
    peer_verification_rules: str = ""


@dataclass(frozen=True)
class RoutingSettings:
    public_ip_source: PublicIPSource = PublicIPSource.POD


@dataclass(frozen=True)
class ClusterSpec:
    """The declarative half of a FoundationDBCluster."""
    version: str = str(Versions.DEFAULT)
    log_group: str = ""                    # Falls back to the cluster name
    data_center: str = ""
    data_hall: str = ""
    use_unified_image: bool = False        # Split image (sidecar binaries) by default
    fault_domain: FaultDomain = field(default_factory=FaultDomain)
    processes: Mapping[ProcessClass, ProcessSettings] = field(default_factory=dict)
    main_container: MainContainerSettings = field(default_factory=MainContainerSettings)
    routing: RoutingSettings = field(default_factory=RoutingSettings)


@dataclass(frozen=True)
class RequiredAddresses:
    """Address families the cluster currently needs. Both are set mid-migration."""
    tls: bool = False
    non_tls: bool = False


@dataclass(frozen=True)
class ClusterStatus:
    """The observed half of a FoundationDBCluster."""
    connection_string: str = ""
    required_addresses: RequiredAddresses = field(default_factory=RequiredAddresses)
    running_version: str = ""
    has_listen_ips_for_all_pods: bool = False


@dataclass(frozen=True)
class FoundationDBCluster:
    name: str
    spec: ClusterSpec = field(default_factory=ClusterSpec)
    status: ClusterStatus = field(default_factory=ClusterStatus)

    @property
    def log_group(self) -> str:
        return self.spec.log_group or self.name

    @property
    def effective_version(self) -> str:
        """The version processes are running now, or will run once started."""
        return self.status.running_version or self.spec.version


@dataclass(frozen=True)
class ProcessIdentity:
    """
    A single process inside a pod.

    process_number is 1-based across all processes of the pod and drives
    port allocation; process_count is the number of processes of this
    class colocated in the pod.
    """
    process_class: ProcessClass
    process_number: int = 1
    process_count: int = 1


@dataclass(frozen=True)
class PodFacts:
    """Runtime placement facts about the pod hosting a process group."""
    process_group_id: str
    pod_ip: str = ""
    service_ip: str = ""
    node_name: str = ""
    env: Dict[str, str] = field(default_factory=dict)  # Extra pod environment (e.g. RACK)
