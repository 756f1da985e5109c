"""Intermediate representation of a converted shader program.

The converter collaborator produces an ``IntermediateProgram`` per variant. The
qualifier rewriter and layout annotator mutate it in place, then the GLSL
writer turns it into text and the program is discarded.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class PipelineStage(Enum):
    """Pipeline stage the GLSL program is written for."""

    VERTEX = auto()
    PIXEL = auto()


class Qualifier(Enum):
    """Storage qualifier attached to a variable declaration.

    INPUT, OUTPUT and INOUT are the generic source-dialect markers; ATTRIBUTE
    and VARYING only exist in the legacy GLSL dialects.
    """

    INPUT = "in"
    OUTPUT = "out"
    INOUT = "inout"
    UNIFORM = "uniform"
    CONST = "const"
    ATTRIBUTE = "attribute"
    VARYING = "varying"


@dataclass
class LayoutQualifier:
    """A ``layout(...)`` qualifier made of ordered key/value entries."""

    entries: list[tuple[str, str | None]] = field(default_factory=list)

    def has(self, key: str) -> bool:
        return any(k == key for k, _ in self.entries)

    def add(self, key: str, value: str | None = None) -> None:
        """Add an entry, keeping any entry already present for the key."""
        if not self.has(key):
            self.entries.append((key, value))

    def __bool__(self) -> bool:
        return bool(self.entries)

    def __str__(self) -> str:
        parts = [k if v is None else f"{k} = {v}" for k, v in self.entries]
        return f"layout({', '.join(parts)})"


# Types


@dataclass
class IRType:
    """Type in the IR."""

    base: str
    array_size: int | None = None

    def __str__(self) -> str:
        if self.array_size:
            return f"{self.base}[{self.array_size}]"
        return self.base


# Declarations


@dataclass
class IRVariable:
    """A variable declaration."""

    name: str
    type: IRType
    qualifiers: list[Qualifier] = field(default_factory=list)
    layout: LayoutQualifier = field(default_factory=LayoutQualifier)
    init_value: str | None = None


@dataclass
class IRParameter:
    """Function parameter."""

    name: str
    type: IRType
    qualifier: Qualifier | None = None


@dataclass
class IRUniformBlock:
    """Aggregate uniform declaration (a constant buffer in the source dialect)."""

    name: str
    members: list[IRVariable] = field(default_factory=list)
    layout: LayoutQualifier = field(default_factory=LayoutQualifier)
    instance_name: str | None = None


# Expressions


@dataclass
class IRExpr:
    """Base for all expressions."""

    result_type: IRType


@dataclass
class IRLiteral(IRExpr):
    """Literal value.

    ``value`` is either a Python value or the literal's source spelling
    (e.g. ``"1.5f"``), which the target reformats.
    """

    value: Any


@dataclass
class IRName(IRExpr):
    """Variable reference."""

    name: str


@dataclass
class IRBinOp(IRExpr):
    """Binary operation."""

    op: str
    left: IRExpr
    right: IRExpr


@dataclass
class IRUnaryOp(IRExpr):
    """Unary operation."""

    op: str
    operand: IRExpr


@dataclass
class IRCall(IRExpr):
    """Function call."""

    func: str
    args: list[IRExpr]


@dataclass
class IRSwizzle(IRExpr):
    """Vector swizzle (e.g., .xyz)."""

    base: IRExpr
    components: str


@dataclass
class IRFieldAccess(IRExpr):
    """Struct field access."""

    base: IRExpr
    field: str


@dataclass
class IRSubscript(IRExpr):
    """Array subscript."""

    base: IRExpr
    index: IRExpr


@dataclass
class IRTernary(IRExpr):
    """Ternary conditional."""

    condition: IRExpr
    true_expr: IRExpr
    false_expr: IRExpr


@dataclass
class IRConstruct(IRExpr):
    """Type constructor (e.g., vec3(1.0, 2.0, 3.0))."""

    args: list[IRExpr]


# Statements


@dataclass
class IRStmt:
    """Base for all statements."""

    pass


@dataclass
class IRDeclare(IRStmt):
    """Local variable declaration."""

    var: IRVariable
    init: IRExpr | None = None


@dataclass
class IRAssign(IRStmt):
    """Assignment."""

    target: IRExpr
    value: IRExpr


@dataclass
class IRAugmentedAssign(IRStmt):
    """Augmented assignment (+=, -=, etc.)."""

    target: IRExpr
    op: str
    value: IRExpr


@dataclass
class IRReturn(IRStmt):
    """Return statement."""

    value: IRExpr | None = None


@dataclass
class IRIf(IRStmt):
    """If statement."""

    condition: IRExpr
    then_body: list[IRStmt] = field(default_factory=list)
    else_body: list[IRStmt] = field(default_factory=list)


@dataclass
class IRFor(IRStmt):
    """For loop."""

    init: IRStmt | None
    condition: IRExpr | None
    update: IRStmt | None
    body: list[IRStmt] = field(default_factory=list)


@dataclass
class IRWhile(IRStmt):
    """While loop."""

    condition: IRExpr
    body: list[IRStmt] = field(default_factory=list)


@dataclass
class IRExprStmt(IRStmt):
    """Expression as statement."""

    expr: IRExpr


@dataclass
class IRBreak(IRStmt):
    """Break statement."""

    pass


@dataclass
class IRContinue(IRStmt):
    """Continue statement."""

    pass


@dataclass
class IRDiscard(IRStmt):
    """Fragment discard."""

    pass


# Functions and Structs


@dataclass
class IRFunction:
    """Function definition."""

    name: str
    params: list[IRParameter]
    return_type: IRType | None
    body: list[IRStmt] = field(default_factory=list)


@dataclass
class IRStruct:
    """Struct definition."""

    name: str
    fields: list[tuple[str, IRType]]


IRDeclaration = IRStruct | IRUniformBlock | IRVariable | IRFunction


# Complete Program


@dataclass
class IntermediateProgram:
    """A converted program for one variant, in declaration order."""

    stage: PipelineStage
    declarations: list[IRDeclaration] = field(default_factory=list)
    entry_point: str = "main"

    def variables(self) -> list[IRVariable]:
        return [d for d in self.declarations if isinstance(d, IRVariable)]

    def uniform_blocks(self) -> list[IRUniformBlock]:
        return [d for d in self.declarations if isinstance(d, IRUniformBlock)]
