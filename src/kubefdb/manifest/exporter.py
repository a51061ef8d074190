#!/usr/bin/env python3
"""
KUBEFDB EXPORTER - Monitor Configuration Round-Trip
---------------------------------------------------
Serializes a MonitorConfiguration into the document the monitor reads
(JSON) or a YAML rendering for humans, and reads existing documents back
so they can be compared with a freshly built one.

Author: KubeFDB Team
Date: 2026-10-19
"""

import io
import json
from typing import Any, Dict, Mapping

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from kubefdb.core.errors import ConfigurationError
from kubefdb.monitor.arguments import defer, undefer
from kubefdb.monitor.conf import MonitorConfiguration


class MonitorConfExporter:
    """
    Converts monitor configurations to and from their serialized forms.
    Key order is fixed so identical configurations give identical bytes.
    """

    def __init__(self):
        self.yaml = YAML(typ='rt')
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096

    def to_dict(self, conf: MonitorConfiguration) -> Dict[str, Any]:
        data: Dict[str, Any] = {"version": conf.version}
        if conf.binary_path:
            data["binaryPath"] = conf.binary_path
        data["serverCount"] = conf.server_count
        data["arguments"] = [defer(argument) for argument in conf.arguments]
        return data

    def to_json(self, conf: MonitorConfiguration) -> str:
        return json.dumps(self.to_dict(conf), indent=2) + "\n"

    def to_yaml(self, conf: MonitorConfiguration) -> str:
        stream = io.StringIO()
        self.yaml.dump(self._commented(self.to_dict(conf)), stream)
        return stream.getvalue()

    def from_dict(self, data: Mapping[str, Any]) -> MonitorConfiguration:
        try:
            return MonitorConfiguration(
                version=str(data["version"]),
                server_count=int(data.get("serverCount", 0)),
                arguments=tuple(undefer(argument) for argument in data.get("arguments") or []),
                binary_path=str(data.get("binaryPath") or ""),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Malformed monitor configuration: {e}")

    def load_json(self, text: str) -> MonitorConfiguration:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Monitor configuration is not valid JSON: {e}")
        if not isinstance(data, dict):
            raise ConfigurationError("Monitor configuration must be a JSON object")
        return self.from_dict(data)

    def _commented(self, data: Any) -> Any:
        """Rebuilds plain containers as ruamel types so the dumper keeps block style."""
        if isinstance(data, dict):
            mapped = CommentedMap()
            for key, value in data.items():
                mapped[key] = self._commented(value)
            return mapped
        if isinstance(data, list):
            return [self._commented(item) for item in data]
        return data
