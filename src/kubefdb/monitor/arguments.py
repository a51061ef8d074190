#!/usr/bin/env python3
"""
KUBEFDB ARGUMENTS - The Vocabulary
----------------------------------
A startup parameter for fdbserver is one of four immutable shapes:

    Literal                 "--class=storage"
    Concatenation           ordered parts glued together at resolution time
    EnvironmentReference    a pod variable, e.g. FDB_PUBLIC_IP
    ProcessNumberComputed   offset + multiplier * processNumber

The same argument list feeds two evaluators. `defer` serializes the
symbolic form for the monitor to resolve when it starts a process;
`evaluate` resolves everything now for the legacy start command.

Author: KubeFDB Team
Date: 2026-10-19
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple, Union

# Tags written into the monitor configuration file
CONCATENATE_TYPE = "Concatenate"
ENVIRONMENT_TYPE = "Environment"
PROCESS_NUMBER_TYPE = "ProcessNumber"


@dataclass(frozen=True)
class Literal:
    value: str


@dataclass(frozen=True)
class EnvironmentReference:
    name: str


@dataclass(frozen=True)
class ProcessNumberComputed:
    offset: int = 0
    multiplier: int = 1

    def resolve(self, process_number: int) -> int:
        return self.offset + self.multiplier * process_number


@dataclass(frozen=True)
class Concatenation:
    parts: Tuple["Argument", ...]

    def __post_init__(self):
        for part in self.parts:
            if isinstance(part, Literal) and not part.value:
                raise ValueError("Concatenation parts cannot contain an empty literal")


Argument = Union[Literal, Concatenation, EnvironmentReference, ProcessNumberComputed]


def concat(*parts: Union[Argument, str]) -> Concatenation:
    """Builds a Concatenation, promoting strings to literals and dropping empty ones."""
    normalized = []
    for part in parts:
        if isinstance(part, str):
            if not part:
                continue
            part = Literal(part)
        normalized.append(part)
    return Concatenation(tuple(normalized))


def defer(argument: Argument) -> Dict[str, Any]:
    """Serializes an argument for the monitor, keeping every symbolic piece."""
    if isinstance(argument, Literal):
        return {"value": argument.value}
    if isinstance(argument, Concatenation):
        return {"type": CONCATENATE_TYPE, "values": [defer(part) for part in argument.parts]}
    if isinstance(argument, EnvironmentReference):
        return {"type": ENVIRONMENT_TYPE, "source": argument.name}
    if isinstance(argument, ProcessNumberComputed):
        data: Dict[str, Any] = {"type": PROCESS_NUMBER_TYPE}
        if argument.offset:
            data["offset"] = argument.offset
        data["multiplier"] = argument.multiplier
        return data
    raise TypeError(f"Unsupported argument type: {type(argument).__name__}")


def undefer(data: Dict[str, Any]) -> Argument:
    """Reads back an argument written by `defer`."""
    kind = data.get("type", "")
    if kind == CONCATENATE_TYPE:
        return Concatenation(tuple(undefer(part) for part in data.get("values", [])))
    if kind == ENVIRONMENT_TYPE:
        return EnvironmentReference(data["source"])
    if kind == PROCESS_NUMBER_TYPE:
        # The monitor treats a missing multiplier as 1
        return ProcessNumberComputed(offset=data.get("offset", 0), multiplier=data.get("multiplier", 1) or 1)
    if kind in ("", "Value"):
        return Literal(data.get("value", ""))
    raise ValueError(f"Unknown argument type '{kind}'")


def evaluate(argument: Argument, lookup: Callable[[str], str], process_number: int) -> str:
    """
    Resolves an argument to its final text.

    `lookup` fetches environment values (usually a process client's
    get_environment_value). Its LookupError propagates untouched.
    """
    if isinstance(argument, Literal):
        return argument.value
    if isinstance(argument, Concatenation):
        return "".join(evaluate(part, lookup, process_number) for part in argument.parts)
    if isinstance(argument, EnvironmentReference):
        return lookup(argument.name)
    if isinstance(argument, ProcessNumberComputed):
        return str(argument.resolve(process_number))
    raise TypeError(f"Unsupported argument type: {type(argument).__name__}")
