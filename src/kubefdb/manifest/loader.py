#!/usr/bin/env python3
"""
KUBEFDB MANIFEST LOADER
-----------------------
Reads a FoundationDBCluster custom resource (YAML) into the compiler's
data model. Only the fields the compiler consumes are read; everything
else in the manifest is ignored.

Author: KubeFDB Team
Date: 2026-10-19
"""

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from kubefdb.core.errors import ConfigurationError
from kubefdb.core.models import (
    ClusterSpec,
    ClusterStatus,
    FaultDomain,
    FoundationDBCluster,
    MainContainerSettings,
    ProcessClass,
    ProcessSettings,
    PublicIPSource,
    RequiredAddresses,
    RoutingSettings,
)
from kubefdb.core.versions import Versions

logger = logging.getLogger("kubefdb.loader")

CLUSTER_KIND = "FoundationDBCluster"


class ClusterManifestLoader:

    def __init__(self):
        self.yaml = YAML(typ='safe')

    def load_path(self, path: Union[str, Path]) -> FoundationDBCluster:
        path = Path(path)
        try:
            # BOM-aware, manifests exported from Windows tooling carry one
            text = path.read_text(encoding='utf-8-sig')
        except OSError as e:
            raise ConfigurationError(f"Unable to read manifest {path}: {e}")
        return self.load_text(text, source=str(path))

    def load_text(self, text: str, source: str = "<string>") -> FoundationDBCluster:
        try:
            documents = [doc for doc in self.yaml.load_all(text) if doc is not None]
        except YAMLError as e:
            raise ConfigurationError(f"{source}: invalid YAML: {e}")

        for doc in documents:
            if isinstance(doc, dict) and doc.get("kind") == CLUSTER_KIND:
                cluster = self.from_dict(doc)
                logger.debug("Loaded cluster %s from %s", cluster.name, source)
                return cluster

        raise ConfigurationError(f"{source}: no {CLUSTER_KIND} document found")

    def from_dict(self, doc: Mapping[str, Any]) -> FoundationDBCluster:
        metadata = self._section(doc, "metadata")
        name = metadata.get("name")
        if not name:
            raise ConfigurationError("metadata.name is required")

        return FoundationDBCluster(
            name=str(name),
            spec=self._spec(self._section(doc, "spec")),
            status=self._status(self._section(doc, "status")),
        )

    def _spec(self, spec: Mapping[str, Any]) -> ClusterSpec:
        fault_domain = self._section(spec, "faultDomain")
        main_container = self._section(spec, "mainContainer")
        routing = self._section(spec, "routing")

        processes = {}
        for class_name, settings in self._section(spec, "processes").items():
            if not isinstance(settings, dict):
                raise ConfigurationError(f"spec.processes.{class_name} must be a map")
            processes[ProcessClass.parse(class_name)] = ProcessSettings(
                custom_parameters=self._string_list(settings.get("customParameters"),
                                                    f"spec.processes.{class_name}.customParameters"),
            )

        return ClusterSpec(
            version=str(spec.get("version") or Versions.DEFAULT),
            log_group=str(spec.get("logGroup") or ""),
            data_center=str(spec.get("dataCenter") or ""),
            data_hall=str(spec.get("dataHall") or ""),
            use_unified_image=bool(spec.get("useUnifiedImage", False)),
            fault_domain=FaultDomain(
                key=str(fault_domain.get("key") or ""),
                value=str(fault_domain.get("value") or ""),
                value_from=str(fault_domain.get("valueFrom") or ""),
            ),
            processes=processes,
            main_container=MainContainerSettings(
                enable_tls=bool(main_container.get("enableTLS", False)),
                peer_verification_rules=str(main_container.get("peerVerificationRules") or ""),
            ),
            routing=RoutingSettings(
                public_ip_source=PublicIPSource.parse(routing.get("publicIPSource") or PublicIPSource.POD.value),
            ),
        )

    def _status(self, status: Mapping[str, Any]) -> ClusterStatus:
        required = self._section(status, "requiredAddresses")
        return ClusterStatus(
            connection_string=str(status.get("connectionString") or ""),
            required_addresses=RequiredAddresses(
                tls=bool(required.get("tls", False)),
                non_tls=bool(required.get("nonTLS", False)),
            ),
            running_version=str(status.get("runningVersion") or ""),
            has_listen_ips_for_all_pods=bool(status.get("hasListenIPsForAllPods", False)),
        )

    def _section(self, parent: Mapping[str, Any], key: str) -> Dict[str, Any]:
        value = parent.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ConfigurationError(f"'{key}' must be a map, got {type(value).__name__}")
        return value

    def _string_list(self, value: Any, label: str) -> Optional[tuple]:
        if value is None:
            return None
        if not isinstance(value, list):
            raise ConfigurationError(f"{label} must be a list of strings")
        return tuple(str(item) for item in value)
