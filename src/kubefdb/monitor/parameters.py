#!/usr/bin/env python3
"""
KUBEFDB PARAMETER MERGER
------------------------
Picks the custom fdbserver parameters (knobs) for a process class.

A class that declares its own customParameters replaces the general
list outright; there is no per-key merge. Shared knobs must be repeated
on every class that overrides.

Author: KubeFDB Team
Date: 2026-10-19
"""

from typing import List

from kubefdb.core.errors import ConfigurationError
from kubefdb.core.models import ClusterSpec, ProcessClass


class ParameterMerger:

    def merge(self, spec: ClusterSpec, process_class: ProcessClass) -> List[str]:
        """Returns normalized "key=value" strings in their declared order."""
        return [self.normalize(parameter) for parameter in self.declared(spec, process_class)]

    def declared(self, spec: ClusterSpec, process_class: ProcessClass) -> List[str]:
        settings = spec.processes.get(process_class)
        if settings is not None and settings.custom_parameters is not None:
            return list(settings.custom_parameters)

        general = spec.processes.get(ProcessClass.GENERAL)
        if general is not None and general.custom_parameters is not None:
            return list(general.custom_parameters)
        return []

    @staticmethod
    def normalize(parameter: str) -> str:
        """'knob_x = 1' -> 'knob_x=1'"""
        key, separator, value = parameter.partition("=")
        key = key.strip()
        if not separator or not key:
            raise ConfigurationError(f"Custom parameter '{parameter}' must have the form key=value")
        return f"{key}={value.strip()}"
