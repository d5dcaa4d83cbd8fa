"""
Renders class declarations of one namespace to Python source.

Rendering is syntax-directed: each expression, check and body shape maps to
a fixed Python construct. Names referring to other modules are written fully
qualified.

Generated namespaces may reference each other, so a generated module is only
imported at the top when it provides a base class. Modules used in
annotations are imported for type checkers only, and modules used in method
bodies are imported inside those methods.
"""

import keyword

from ...core.builtins import BUILTIN_TYPES
from ...generator.declarations import (
    AttributeRef,
    Body,
    CallArgument,
    ClassDeclaration,
    ClassKind,
    ClassRef,
    CompareFields,
    ConstructFrom,
    Decode,
    Encode,
    EncodeToContainer,
    Expr,
    FieldRef,
    HashValues,
    IfPresent,
    Initialize,
    KeyGet,
    KeyRef,
    LiteralValue,
    MapEach,
    MappingExpr,
    MethodBinding,
    MethodDescriptor,
    Parameter,
    ParamRef,
    PresenceGuardedDecode,
    RawKind,
    ReturnField,
    ReturnValue,
    SelfRef,
    SwitchOnDiscriminant,
    TypeRef,
    ValueCheck,
)
from .layout import order_declarations

INDENT = "    "
RESERVED_NAMES = frozenset({"self", "cls"})
STDLIB_MODULES = frozenset(fqcn.rpartition(".")[0] for fqcn in BUILTIN_TYPES)

PREDICATES = {
    RawKind.DICT: "isinstance({0}, dict)",
    RawKind.STR: "isinstance({0}, str)",
    RawKind.INT: "isinstance({0}, int) and not isinstance({0}, bool)",
    RawKind.FLOAT: "isinstance({0}, (int, float)) and not isinstance({0}, bool)",
    RawKind.BOOL: "isinstance({0}, bool)",
    RawKind.LIST: "isinstance({0}, list)",
}


def identifier(name: str) -> str:
    """Escape names that are Python keywords or the implicit receivers."""
    if keyword.iskeyword(name) or name in RESERVED_NAMES:
        return f"{name}_"
    return name


def indent(lines: list[str], depth: int = 1) -> list[str]:
    return [f"{INDENT * depth}{line}" if line else "" for line in lines]


class ModuleRenderer:
    """Renders the declarations of one namespace into one module."""

    def __init__(self, namespace: str, declarations: list[ClassDeclaration]):
        self.namespace = namespace
        self.declarations = declarations
        self.imports: set[str] = set()
        self.type_checking_imports: set[str] = set()
        self._referenced: set[str] = set()

    def render(self) -> str:
        body: list[str] = []
        for declaration in order_declarations(self.declarations):
            if body:
                body.extend(["", ""])
            body.extend(self._class(declaration))

        header = [
            f'"""Generated by typecraft from namespace {self.namespace}. Do not edit."""',
            "",
            "from __future__ import annotations",
        ]
        imports = set(self.imports)
        type_checking = self.type_checking_imports - imports
        if type_checking:
            imports.add("typing")
        if imports:
            header.append("")
            header.extend(f"import {module}" for module in sorted(imports))
        if type_checking:
            header.extend(["", "if typing.TYPE_CHECKING:"])
            header.extend(indent([f"import {module}" for module in sorted(type_checking)]))

        return "\n".join([*header, "", "", *body, ""])

    # Names

    def name(self, fqcn: str) -> str:
        """How ``fqcn`` is spelled inside this module."""
        module, _, classname = fqcn.rpartition(".")
        if not module:
            return fqcn
        if module == self.namespace:
            return classname
        if module in STDLIB_MODULES:
            self.imports.add(module)
        else:
            self._referenced.add(module)
        return fqcn

    def _collect(self) -> set[str]:
        """Generated modules referenced since the last call."""
        referenced, self._referenced = self._referenced, set()
        return referenced

    def annotation(self, type_ref: TypeRef) -> str:
        if type_ref.name is None:
            self.imports.add("typing")
            text = "typing.Any"
        else:
            text = self.name(type_ref.name)
        if type_ref.is_list:
            text = f"list[{text}]"
        if type_ref.nullable:
            text = f"{text} | None"
        return text

    # Classes

    def _class(self, declaration: ClassDeclaration) -> list[str]:
        bases = [self.name(b) for b in declaration.bases]
        self.imports |= self._collect()
        lines: list[str] = []

        match declaration.kind:
            case ClassKind.FINAL:
                self.imports.add("typing")
                lines.append("@typing.final")
            case ClassKind.ABSTRACT:
                self.imports.add("abc")
                bases.append("abc.ABC")
            case ClassKind.ENUM:
                self.imports.add("enum")
                bases.insert(0, "enum.Enum")

        header = f"class {declaration.classname}"
        lines.append(f"{header}({', '.join(bases)}):" if bases else f"{header}:")

        members: list[list[str]] = []
        if declaration.doc:
            members.append([f'"""{declaration.doc}"""'])
        if declaration.constants:
            members.append([f"{c.name} = {self.expr(c.value)}" for c in declaration.constants])
            self.imports |= self._collect()
        if declaration.fields:
            members.append(
                [f"_{f.name}: {self.annotation(f.type)}" for f in declaration.fields]
            )
            self.type_checking_imports |= self._collect()
        members.extend(self._method(m) for m in declaration.methods)

        if not members:
            members.append(["pass"])

        for i, member in enumerate(members):
            if i:
                lines.append("")
            lines.extend(indent(member))
        return lines

    def _method(self, method: MethodDescriptor) -> list[str]:
        lines: list[str] = []
        receiver = "self"
        if method.binding is MethodBinding.CLASS:
            lines.append("@classmethod")
            receiver = "cls"
        if method.abstract:
            self.imports.add("abc")
            lines.append("@abc.abstractmethod")

        params = [receiver]
        keyword_only = False
        for param in method.params:
            if param.keyword_only and not keyword_only:
                params.append("*")
                keyword_only = True
            params.append(self._param(param))

        returns = f" -> {self.annotation(method.return_type)}" if method.return_type else ""
        lines.append(f"def {identifier(method.name)}({', '.join(params)}){returns}:")
        self.type_checking_imports |= self._collect()

        if method.abstract or method.body is None:
            lines.extend(indent(["raise NotImplementedError"]))
            return lines

        body = self.body(method.body)
        local = sorted(self._collect() - self.imports)
        lines.extend(indent([*(f"import {module}" for module in local), *body]))
        return lines

    def _param(self, param: Parameter) -> str:
        text = identifier(param.name)
        if param.type is not None:
            text = f"{text}: {self.annotation(param.type)}"
            if param.default is not None:
                return f"{text} = {self.expr(param.default)}"
        elif param.default is not None:
            return f"{text}={self.expr(param.default)}"
        return text

    # Bodies

    def body(self, body: Body) -> list[str]:
        match body:
            case ReturnField():
                return [f"return self._{body.field}"]
            case ReturnValue():
                return [*self.checks(body.checks), f"return {self.expr(body.value)}"]
            case Initialize():
                lines = self.checks(body.checks)
                if body.super_arguments is not None:
                    lines.append(f"super().__init__({self.arguments(body.super_arguments)})")
                lines.extend(f"self._{a.field} = {self.expr(a.value)}" for a in body.assignments)
                return lines or ["pass"]
            case ConstructFrom():
                call = f"{self.expr(body.target)}({self.arguments(body.arguments)})"
                return [*self.checks(body.checks), f"return {call}"]
            case PresenceGuardedDecode():
                cache = f"self._{body.cache}[{body.key!r}]"
                return [
                    f"if {body.key!r} not in self._{body.cache}:",
                    f"{INDENT}{cache} = {self.expr(body.value)}",
                    f"return {cache}",
                ]
            case EncodeToContainer():
                return [
                    "return {",
                    *(f"{INDENT}{e.key!r}: {self.expr(e.value)}," for e in body.entries),
                    "}",
                ]
            case SwitchOnDiscriminant():
                variable = identifier(body.variable)
                arguments = self.arguments(body.arguments)
                lines = [*self.checks(body.checks), f"{variable} = {self.expr(body.subject)}"]
                for case in body.cases:
                    lines.append(f"if {variable} == {case.value!r}:")
                    lines.append(f"{INDENT}return {self.name(case.target)}({arguments})")
                lines.append(f"raise ValueError({body.error!r} % ({variable},))")
                return lines
            case CompareFields():
                comparison = " and ".join(
                    f"self._{f} == other._{f}" for f in body.fields
                )
                return [
                    "if type(other) is not type(self):",
                    f"{INDENT}return False",
                    f"return {comparison or 'True'}",
                ]
            case HashValues():
                values = "".join(f", {self.expr(v)}" for v in body.values)
                return [f"return hash((type(self){values}))"]

    def checks(self, checks: list[ValueCheck]) -> list[str]:
        lines: list[str] = []
        for check in checks:
            subject = self.expr(check.subject)
            predicate = PREDICATES[check.raw].format(subject)
            if check.member_of:
                predicate = f"{predicate} and {subject} in {self.name(check.member_of)}.__members__"
            if " and " in predicate:
                predicate = f"({predicate})"
            if check.nullable:
                lines.append(f"if {subject} is not None and not {predicate}:")
            else:
                lines.append(f"if not {predicate}:")
            lines.append(f"{INDENT}raise ValueError({check.message!r})")
        return lines

    def arguments(self, arguments: list[CallArgument]) -> str:
        return ", ".join(
            f"{identifier(a.name)}={self.expr(a.value)}" if a.name else self.expr(a.value)
            for a in arguments
        )

    # Expressions

    def expr(self, expr: Expr) -> str:
        match expr:
            case SelfRef():
                return "self"
            case ParamRef():
                return identifier(expr.name)
            case FieldRef():
                return f"self._{expr.name}"
            case ClassRef():
                return self.name(expr.fqcn)
            case AttributeRef():
                return f"{self.expr(expr.source)}.{expr.name}"
            case LiteralValue():
                return repr(expr.value)
            case KeyRef():
                return f"{self.expr(expr.source)}[{self.expr(expr.key)}]"
            case KeyGet():
                return f"{self.expr(expr.source)}.get({self.expr(expr.key)})"
            case Decode():
                target = self.name(expr.target)
                if expr.method:
                    target = f"{target}.{expr.method}"
                return f"{target}({self.expr(expr.value)})"
            case Encode():
                value = self.expr(expr.value)
                if expr.function:
                    return f"{expr.function}({value})"
                return f"{value}.{expr.method}()"
            case MapEach():
                return (
                    f"[{self.expr(expr.element)} for {identifier(expr.var)} "
                    f"in {self.expr(expr.source)}]"
                )
            case IfPresent():
                return (
                    f"({self.expr(expr.then)} if {self.expr(expr.value)} is not None "
                    f"else {self.expr(expr.otherwise)})"
                )
            case MappingExpr():
                entries = ", ".join(f"{e.key!r}: {self.expr(e.value)}" for e in expr.entries)
                return f"{{{entries}}}"
