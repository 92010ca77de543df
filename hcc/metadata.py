"""Plain data shared by the compiler stages."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ABIMetadata:
    """Calling convention of a backend."""

    return_register: str = ""
    args_registers: list[str] = field(default_factory=list)


@dataclass
class TypeMetadata:
    """A named type and its size in bytes."""

    name: str = ""
    size: int = 0


@dataclass
class FunctionMetadata:
    """State of the function being compiled."""

    name: str = ""
    align: int = 0
    variables: dict[str, Any] = field(default_factory=dict)


class Optimization(enum.Enum):
    """Optimizations the compiler can apply."""

    CONSTANT_FOLDING = enum.auto()
    FUNCTION_BODY_ELIMINATION = enum.auto()
    DCE = enum.auto()
    FP_OMISSION = enum.auto()
    STACK_RESERVE = enum.auto()
    CONSTANT_PROPAGATION = enum.auto()


_OPTIMIZATION_NAMES: dict[str, Optimization] = {
    "constant-folding": Optimization.CONSTANT_FOLDING,
    "emit-frame-pointer": Optimization.FP_OMISSION,
    "function-body-elimination": Optimization.FUNCTION_BODY_ELIMINATION,
    "dce": Optimization.DCE,
    "stack-reserve": Optimization.STACK_RESERVE,
    "constant-propagation": Optimization.CONSTANT_PROPAGATION,
}


def optimization_from_name(name: str) -> Optimization | None:
    """Return the optimization with the given command-line name, or None."""
    return _OPTIMIZATION_NAMES.get(name)