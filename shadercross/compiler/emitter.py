"""GLSL writer that generates program text from the intermediate program."""

from shadercross.compiler.constants import OPERATOR_PRECEDENCE
from shadercross.compiler.ir import (
    IRAssign,
    IRAugmentedAssign,
    IRBinOp,
    IRBreak,
    IRCall,
    IRConstruct,
    IRContinue,
    IRDeclaration,
    IRDeclare,
    IRDiscard,
    IRExpr,
    IRExprStmt,
    IRFieldAccess,
    IRFor,
    IRFunction,
    IRIf,
    IRLiteral,
    IRName,
    IRParameter,
    IRReturn,
    IRStmt,
    IRStruct,
    IRSubscript,
    IRSwizzle,
    IRTernary,
    IRUnaryOp,
    IRUniformBlock,
    IRVariable,
    IRWhile,
    IntermediateProgram,
    Qualifier,
)
from shadercross.compiler.target import Target


def _get_precedence(expr: IRExpr) -> int:
    """Get the precedence of an expression for parenthesization."""
    match expr:
        case IRBinOp(_, op, _, _):
            return OPERATOR_PRECEDENCE.get(op, 0)
        case IRUnaryOp():
            return OPERATOR_PRECEDENCE["unary"]
        case IRTernary():
            return OPERATOR_PRECEDENCE["?"]
        case IRCall() | IRConstruct():
            return OPERATOR_PRECEDENCE["call"]
        case IRFieldAccess() | IRSwizzle() | IRSubscript():
            return OPERATOR_PRECEDENCE["member"]
        case _:
            # Literals, names - highest precedence (no parens needed)
            return 100


class GLSLWriter:
    """Generates the GLSL body of a program using a Target."""

    def __init__(self, target: Target):
        self.target = target

    def emit(self, program: IntermediateProgram) -> str:
        """Generate the program body, declarations in program order."""
        lines: list[str] = []
        for decl in program.declarations:
            lines.extend(self._emit_declaration(decl))
        return "\n".join(lines) + "\n" if lines else ""

    def _emit_declaration(self, decl: IRDeclaration) -> list[str]:
        match decl:
            case IRStruct():
                return self._emit_struct(decl) + [""]
            case IRUniformBlock():
                return self._emit_uniform_block(decl) + [""]
            case IRVariable():
                return [self._emit_variable_decl(decl)]
            case IRFunction():
                return self._emit_function(decl) + [""]
        return []

    def _emit_struct(self, struct: IRStruct) -> list[str]:
        lines = [f"struct {struct.name} {{"]
        for name, type_ in struct.fields:
            lines.append(f"    {self._declarator(type_.base, name, type_.array_size)};")
        lines.append("};")
        return lines

    def _emit_uniform_block(self, block: IRUniformBlock) -> list[str]:
        if not self.target.generates_uniform_blocks():
            # Legacy dialects have no blocks; members become plain uniforms
            return [
                self._emit_variable_decl(member, forced=[Qualifier.UNIFORM])
                for member in block.members
            ]
        header = f"uniform {block.name} {{"
        if block.layout:
            header = f"{block.layout} {header}"
        lines = [header]
        for member in block.members:
            lines.append(f"    {self._emit_variable_decl(member)}")
        if block.instance_name:
            lines.append(f"}} {block.instance_name};")
        else:
            lines.append("};")
        return lines

    def _emit_variable_decl(
        self, var: IRVariable, forced: list[Qualifier] | None = None
    ) -> str:
        parts: list[str] = []
        if var.layout:
            parts.append(str(var.layout))
        qualifiers = forced if forced is not None else var.qualifiers
        parts.extend(self.target.storage_qualifier(q) for q in qualifiers)
        parts.append(
            self._declarator(self.target.type_name(var.type), var.name, var.type.array_size)
        )
        decl = " ".join(parts)
        if var.init_value is not None:
            return f"{decl} = {var.init_value};"
        return f"{decl};"

    @staticmethod
    def _declarator(type_str: str, name: str, array_size: int | None) -> str:
        # Arrays are declared as: float arr[3]
        if array_size is not None:
            return f"{type_str} {name}[{array_size}]"
        return f"{type_str} {name}"

    def _emit_function(self, func: IRFunction) -> list[str]:
        return_type = (
            self.target.type_name(func.return_type) if func.return_type else "void"
        )
        params = self._emit_params(func.params)
        lines = [f"{return_type} {func.name}({params}) {{"]
        for stmt in func.body:
            lines.extend(self._emit_stmt(stmt, indent=1))
        lines.append("}")
        return lines

    def _emit_params(self, params: list[IRParameter]) -> str:
        parts = []
        for p in params:
            decl = self._declarator(self.target.type_name(p.type), p.name, p.type.array_size)
            if p.qualifier:
                parts.append(f"{self.target.storage_qualifier(p.qualifier)} {decl}")
            else:
                parts.append(decl)
        return ", ".join(parts)

    def _emit_stmt(self, stmt: IRStmt, indent: int = 0) -> list[str]:
        prefix = "    " * indent

        match stmt:
            case IRDeclare(var, init):
                var_decl = self._declarator(
                    self.target.type_name(var.type), var.name, var.type.array_size
                )
                if var.qualifiers:
                    quals = " ".join(self.target.storage_qualifier(q) for q in var.qualifiers)
                    var_decl = f"{quals} {var_decl}"
                if init:
                    return [f"{prefix}{var_decl} = {self._emit_expr(init)};"]
                return [f"{prefix}{var_decl};"]

            case IRAssign(target, value):
                target_str = self._emit_expr(target)
                value_str = self._emit_expr(value)
                return [f"{prefix}{target_str} = {value_str};"]

            case IRAugmentedAssign(target, op, value):
                target_str = self._emit_expr(target)
                value_str = self._emit_expr(value)
                return [f"{prefix}{target_str} {op}= {value_str};"]

            case IRReturn(value):
                if value:
                    return [f"{prefix}return {self._emit_expr(value)};"]
                return [f"{prefix}return;"]

            case IRIf(condition, then_body, else_body):
                cond_str = self._emit_expr(condition)
                lines = [f"{prefix}if ({cond_str}) {{"]
                for s in then_body:
                    lines.extend(self._emit_stmt(s, indent + 1))
                if else_body:
                    lines.append(f"{prefix}}} else {{")
                    for s in else_body:
                        lines.extend(self._emit_stmt(s, indent + 1))
                lines.append(f"{prefix}}}")
                return lines

            case IRFor(init, condition, update, body):
                init_str = self._emit_for_init(init) if init else ""
                cond_str = self._emit_expr(condition) if condition else ""
                update_str = self._emit_for_update(update) if update else ""
                lines = [f"{prefix}for ({init_str}; {cond_str}; {update_str}) {{"]
                for s in body:
                    lines.extend(self._emit_stmt(s, indent + 1))
                lines.append(f"{prefix}}}")
                return lines

            case IRWhile(condition, body):
                cond_str = self._emit_expr(condition)
                lines = [f"{prefix}while ({cond_str}) {{"]
                for s in body:
                    lines.extend(self._emit_stmt(s, indent + 1))
                lines.append(f"{prefix}}}")
                return lines

            case IRExprStmt(expr):
                return [f"{prefix}{self._emit_expr(expr)};"]

            case IRBreak():
                return [f"{prefix}break;"]

            case IRContinue():
                return [f"{prefix}continue;"]

            case IRDiscard():
                return [f"{prefix}discard;"]

        return []

    def _emit_for_init(self, stmt: IRStmt) -> str:
        match stmt:
            case IRDeclare(var, init):
                type_str = self.target.type_name(var.type)
                if init:
                    return f"{type_str} {var.name} = {self._emit_expr(init)}"
                return f"{type_str} {var.name}"
            case IRAssign(target, value):
                return f"{self._emit_expr(target)} = {self._emit_expr(value)}"
        return ""

    def _emit_for_update(self, stmt: IRStmt) -> str:
        match stmt:
            case IRAssign(target, value):
                return f"{self._emit_expr(target)} = {self._emit_expr(value)}"
            case IRAugmentedAssign(target, op, value):
                return f"{self._emit_expr(target)} {op}= {self._emit_expr(value)}"
            case IRExprStmt(expr):
                return self._emit_expr(expr)
        return ""

    def _emit_expr(self, expr: IRExpr, parent_precedence: int = 0) -> str:
        """Emit an expression, adding parentheses only when necessary.

        Args:
            expr: The IR expression to emit
            parent_precedence: Precedence of parent operator (0 = top-level/statement)
        """
        result = self._emit_expr_inner(expr)
        expr_prec = _get_precedence(expr)
        if parent_precedence > 0 and expr_prec < parent_precedence:
            return f"({result})"
        return result

    def _emit_expr_inner(self, expr: IRExpr) -> str:
        """Emit expression without outer parentheses."""
        match expr:
            case IRLiteral(result_type, value):
                return self.target.literal(value, result_type)

            case IRName(_, name):
                return name

            case IRBinOp(_, op, left, right):
                my_prec = OPERATOR_PRECEDENCE.get(op, 0)
                left_str = self._emit_expr(left, my_prec)
                # Left-associative: force parens on a right child of equal precedence
                right_str = self._emit_expr(right, my_prec + 1)
                return f"{left_str} {op} {right_str}"

            case IRUnaryOp(_, op, operand):
                operand_str = self._emit_expr(operand, OPERATOR_PRECEDENCE["unary"])
                # "--x" and "--1.0" would read as a decrement
                if operand_str.startswith(("-", "+")):
                    operand_str = f"({operand_str})"
                return f"{op}{operand_str}"

            case IRCall(_, func, args):
                args_str = ", ".join(self._emit_expr(a, 0) for a in args)
                return f"{func}({args_str})"

            case IRConstruct(result_type, args):
                base_type = self.target.type_name(result_type)
                if result_type.array_size is not None:
                    type_str = f"{base_type}[{result_type.array_size}]"
                else:
                    type_str = base_type
                args_str = ", ".join(self._emit_expr(a, 0) for a in args)
                return f"{type_str}({args_str})"

            case IRSwizzle(_, base, components):
                base_str = self._emit_expr(base, OPERATOR_PRECEDENCE["member"])
                return f"{base_str}.{components}"

            case IRFieldAccess(_, base, field):
                base_str = self._emit_expr(base, OPERATOR_PRECEDENCE["member"])
                return f"{base_str}.{field}"

            case IRSubscript(_, base, index):
                base_str = self._emit_expr(base, OPERATOR_PRECEDENCE["member"])
                index_str = self._emit_expr(index, 0)
                return f"{base_str}[{index_str}]"

            case IRTernary(_, cond, true_e, false_e):
                prec = OPERATOR_PRECEDENCE["?"]
                cond_str = self._emit_expr(cond, prec + 1)
                true_str = self._emit_expr(true_e, 0)
                false_str = self._emit_expr(false_e, prec)
                return f"{cond_str} ? {true_str} : {false_str}"

        return ""
