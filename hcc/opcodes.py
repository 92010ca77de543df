"""Opcodes of the intermediate representation."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from hcc.metadata import TypeMetadata


class IrKind(enum.Enum):
    """The kind of an IR opcode."""

    NULL = enum.auto()
    END = enum.auto()
    FUNCDEF = enum.auto()
    CREG = enum.auto()  # create register value
    CCTV = enum.auto()  # create compile time value
    CSV = enum.auto()  # create stack value
    RET = enum.auto()
    ALLOCA = enum.auto()
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()
    ASSIGN = enum.auto()
    ASM = enum.auto()
    VARREF = enum.auto()
    ADDROF = enum.auto()
    CALL = enum.auto()
    LINE = enum.auto()  # marker used by the static optimizations
    RESET = enum.auto()  # resets the register counter
    RESERVE = enum.auto()


@dataclass
class IrOpcode:
    """One IR instruction.

    Which fields matter depends on ``kind``:
    ``name`` for FUNCDEF, ALLOCA, ASSIGN, VARREF, ADDROF and CALL;
    ``value`` for CREG and CCTV; ``reg_name`` for CREG; ``md`` for CSV and
    ALLOCA; ``code`` for ASM; ``size`` (bytes) for RESERVE; ``arg_names``,
    ``arg_types`` and ``need_stack`` for FUNCDEF.
    """

    kind: IrKind = IrKind.NULL
    name: str = ""
    value: int = 0
    reg_name: str = ""
    md: TypeMetadata = field(default_factory=TypeMetadata)
    code: str = ""
    size: int = 0
    arg_names: list[str] = field(default_factory=list)
    arg_types: list[TypeMetadata] = field(default_factory=list)
    need_stack: bool = False