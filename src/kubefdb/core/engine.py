#!/usr/bin/env python3
"""
KUBEFDB ENGINE - The Orchestrator
---------------------------------
The CompilerEngine wraps the configuration builders for callers that
want reports rather than exceptions: the CLI, batch rendering of a whole
pod, and the positional change check a reconciler runs before rolling
out a new configuration.

The builders themselves stay pure; the engine holds no state besides
the cluster it was created for.

Author: KubeFDB Team
Date: 2026-10-19
"""

import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from kubefdb.client.pod_client import ProcessClient
from kubefdb.core.errors import ConfigurationError
from kubefdb.core.models import FoundationDBCluster, ProcessClass
from kubefdb.manifest.exporter import MonitorConfExporter
from kubefdb.manifest.loader import ClusterManifestLoader
from kubefdb.monitor.command import StartCommandBuilder
from kubefdb.monitor.conf import MonitorConfBuilder, MonitorConfiguration

logger = logging.getLogger("kubefdb.engine")

STATUS_READY = "READY"
STATUS_PLACEHOLDER = "PLACEHOLDER"
STATUS_CONFIG_ERROR = "CONFIG_ERROR"
STATUS_LOOKUP_ERROR = "LOOKUP_ERROR"


class CompilerEngine:
    """
    Principal entry point for rendering process configuration.
    Converts builder failures into status-tagged report dictionaries.
    """

    def __init__(self, cluster: FoundationDBCluster):
        self.cluster = cluster
        self.conf_builder = MonitorConfBuilder()
        self.command_builder = StartCommandBuilder()
        self.exporter = MonitorConfExporter()

    @classmethod
    def from_manifest(cls, path: Union[str, Path]) -> "CompilerEngine":
        return cls(ClusterManifestLoader().load_path(path))

    def monitor_conf(self, process_class: Union[ProcessClass, str], process_count: int,
                     port_base: int = 0) -> MonitorConfiguration:
        return self.conf_builder.build(self.cluster, process_class, process_count, port_base)

    def start_command(self, process_class: Union[ProcessClass, str], client: ProcessClient,
                      process_number: int, process_count: int, port_base: int = 0) -> str:
        return self.command_builder.build(self.cluster, process_class, client,
                                          process_number, process_count, port_base)

    def monitor_conf_report(self, process_class: Union[ProcessClass, str], process_count: int,
                            port_base: int = 0) -> Dict[str, Any]:
        try:
            conf = self.monitor_conf(process_class, process_count, port_base)
        except ConfigurationError as e:
            logger.error(f"Invalid configuration for {self.cluster.name}/{self._class_name(process_class)}: {e}")
            return self._error_report(process_class, STATUS_CONFIG_ERROR, str(e))

        return {
            "cluster": self.cluster.name,
            "process_class": self._class_name(process_class),
            "status": STATUS_PLACEHOLDER if conf.server_count == 0 else STATUS_READY,
            "success": True,
            "server_count": conf.server_count,
            "argument_count": len(conf.arguments),
            "binary_path": conf.binary_path,
            "conf": self.exporter.to_dict(conf),
            "timestamp": time.time(),
        }

    def start_command_report(self, process_class: Union[ProcessClass, str], client: ProcessClient,
                             process_number: int, process_count: int,
                             port_base: int = 0) -> Dict[str, Any]:
        try:
            command = self.start_command(process_class, client, process_number, process_count, port_base)
        except ConfigurationError as e:
            logger.error(f"Invalid configuration for {self.cluster.name}/{self._class_name(process_class)}: {e}")
            return self._error_report(process_class, STATUS_CONFIG_ERROR, str(e))
        except LookupError as e:
            logger.error(f"Missing pod variable for {self.cluster.name}/{self._class_name(process_class)}: {e}")
            return self._error_report(process_class, STATUS_LOOKUP_ERROR, str(e))

        return {
            "cluster": self.cluster.name,
            "process_class": self._class_name(process_class),
            "status": STATUS_READY,
            "success": True,
            "process_number": process_number,
            "port_number": process_number + port_base,
            "command": command,
            "timestamp": time.time(),
        }

    def compile_pod(self, process_layout: Mapping[Union[ProcessClass, str], int],
                    client: Union[ProcessClient, Mapping[Any, ProcessClient], None] = None
                    ) -> List[Dict[str, Any]]:
        """
        Renders every process of a pod. process_layout maps class -> count.

        Without a client only monitor configurations are produced. With
        one, each process of a class also gets its start command. client
        may also be a mapping of class -> client when the classes run under
        different process groups; classes missing from it get no commands.

        Data directories are numbered 1..count within each class, while
        ports follow the position across the whole pod in layout order.
        """
        clients = self._clients_by_class(client)
        reports = []
        port_base = 0
        for process_class, count in process_layout.items():
            reports.append(self.monitor_conf_report(process_class, count, port_base))
            class_client = clients(process_class)
            if class_client is not None:
                for process_number in range(1, count + 1):
                    reports.append(self.start_command_report(
                        process_class, class_client, process_number, count, port_base))
            port_base += max(count, 0)
        return reports

    def has_changed(self, current: Optional[MonitorConfiguration], desired: MonitorConfiguration) -> bool:
        """Positional comparison, the way the monitor decides whether to restart."""
        if current is None:
            return True
        return (current.version != desired.version
                or current.binary_path != desired.binary_path
                or current.server_count != desired.server_count
                or tuple(current.arguments) != tuple(desired.arguments))

    def generate_summary(self, reports: List[Dict[str, Any]]) -> Dict[str, Any]:
        if not reports:
            return {"total": 0, "successful": 0, "config_errors": 0,
                    "lookup_errors": 0, "placeholders": 0}

        return {
            "total": len(reports),
            "successful": sum(1 for r in reports if r.get("success", False)),
            "config_errors": sum(1 for r in reports if r.get("status") == STATUS_CONFIG_ERROR),
            "lookup_errors": sum(1 for r in reports if r.get("status") == STATUS_LOOKUP_ERROR),
            "placeholders": sum(1 for r in reports if r.get("status") == STATUS_PLACEHOLDER),
            "summary_timestamp": time.strftime("%Y-%m-%d %H:%M:%S"),
        }

    def _class_name(self, process_class: Union[ProcessClass, str]) -> str:
        return process_class.value if isinstance(process_class, ProcessClass) else str(process_class)

    def _clients_by_class(self, client) -> Callable[[Union[ProcessClass, str]], Optional[ProcessClient]]:
        if isinstance(client, Mapping):
            by_name = {self._class_name(key): value for key, value in client.items()}
            return lambda process_class: by_name.get(self._class_name(process_class))
        return lambda process_class: client

    def _error_report(self, process_class, status: str, error: str) -> Dict[str, Any]:
        return {
            "cluster": self.cluster.name,
            "process_class": self._class_name(process_class),
            "status": status,
            "success": False,
            "error": error,
        }
