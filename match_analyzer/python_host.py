"""
Python host for the exhaustiveness engine.

Supplies everything the engine consumes from a "compiler" for Python source:

- DeclarationIndex: classes, enums, @closed declarations and imports across
  a set of modules; answers the TypeOracle queries
- collect_switches: one SwitchConstruct per `match` statement, with the
  subject's static type taken from its annotation

Only this module looks at syntax trees.
"""

import ast
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Sequence

from .config import CLOSED_DECORATORS
from .model import (
    ArgKind,
    ClauseShape,
    PatternShape,
    RaiseShape,
    SourceSpan,
    SwitchConstruct,
)

logger = logging.getLogger(__name__)

ENUM_BASES = frozenset({
    "enum.Enum",
    "enum.IntEnum",
    "enum.StrEnum",
    "enum.Flag",
    "enum.IntFlag",
    "enum.ReprEnum",
})
OPTIONAL_FORMS = frozenset({"typing.Optional", "typing_extensions.Optional"})
UNION_FORMS = frozenset({"typing.Union", "typing_extensions.Union"})
WRAPPER_FORMS = frozenset({
    "typing.Final",
    "typing.ClassVar",
    "typing.Annotated",
    "typing_extensions.Final",
    "typing_extensions.Annotated",
})
# Calls in an enum body that do not define members
NON_MEMBER_CALLS = frozenset({"nonmember", "property", "staticmethod", "classmethod"})

# Bound on re-export chains and enum base chains
MAX_HOPS = 16


def dotted_name(node: ast.AST) -> Optional[str]:
    """`a.b.c` for Name/Attribute chains, None for anything else."""
    parts = []
    while isinstance(node, ast.Attribute):
        parts.append(node.attr)
        node = node.value
    if not isinstance(node, ast.Name):
        return None
    parts.append(node.id)
    return ".".join(reversed(parts))


def package_directories(paths: Iterable[str]) -> frozenset[Path]:
    """Directories that hold an `__init__.py` among `paths`."""
    return frozenset(
        Path(path).parent for path in paths if Path(path).name == "__init__.py"
    )


def module_name_for(path: str, packages: Iterable[Path] = ()) -> str:
    """
    Dotted module name, walking up through package directories.

    A directory is a package when it is one of `packages` (sources that are
    not on disk) or holds an `__init__.py` on the filesystem.
    """
    packages = frozenset(packages)
    file_path = Path(path)
    parts = [] if file_path.stem == "__init__" else [file_path.stem]
    parent = file_path.parent
    while parent.name and (parent in packages or (parent / "__init__.py").exists()):
        parts.insert(0, parent.name)
        parent = parent.parent
    return ".".join(parts) or file_path.stem


def _is_reserved_name(name: str) -> bool:
    """Dunder, sunder and mangled-private names never become enum members."""
    if name.startswith("__"):
        return True
    return len(name) > 2 and name.startswith("_") and name.endswith("_")


def _ignored_names(value: ast.expr) -> list[str]:
    """Names listed by an enum's `_ignore_`: a string or a list/tuple of strings."""
    if isinstance(value, ast.Constant) and isinstance(value.value, str):
        return value.value.replace(",", " ").split()
    if isinstance(value, (ast.List, ast.Tuple)):
        return [
            elt.value for elt in value.elts
            if isinstance(elt, ast.Constant) and isinstance(elt.value, str)
        ]
    return []


@dataclass
class ModuleSymbols:
    """Per-module facts gathered without resolution."""

    name: str
    path: str
    source: str
    tree: ast.Module = field(repr=False)
    is_package: bool = False
    aliases: dict[str, str] = field(default_factory=dict)
    classes: dict[str, "ClassDeclaration"] = field(default_factory=dict, repr=False)
    annotations: dict[str, ast.expr] = field(default_factory=dict, repr=False)


@dataclass
class ClassDeclaration:
    qualified_name: str
    module: ModuleSymbols = field(repr=False)
    node: ast.ClassDef = field(repr=False)
    # Enclosing class names, innermost last
    scope: tuple[str, ...]
    span: SourceSpan
    members: list[str] = field(default_factory=list)
    member_aliases: dict[str, str] = field(default_factory=dict)


class DeclarationIndex:
    """Declarations of a set of modules, queried by qualified name."""

    def __init__(self, closed_decorators: Sequence[str] = CLOSED_DECORATORS):
        self.closed_decorators = frozenset(closed_decorators)
        # Every parsed file, in insertion order; _modules maps names for resolution
        self._files: list[ModuleSymbols] = []
        self._modules: dict[str, ModuleSymbols] = {}
        self._classes: dict[str, ClassDeclaration] = {}
        self._enum_cache: dict[str, bool] = {}
        self._closed_cache: dict[str, Optional[list[str]]] = {}

    @property
    def modules(self) -> list[ModuleSymbols]:
        return list(self._files)

    def add_module(
        self, source: str, path: str, module_name: Optional[str] = None
    ) -> ModuleSymbols:
        """
        Parse and index one module.

        Raises:
            SyntaxError: If the source cannot be parsed
        """
        tree = ast.parse(source, filename=path)
        name = module_name or module_name_for(path)
        if name in self._modules:
            logger.warning(f"Module {name} indexed twice; imports resolve to {path}")

        module = ModuleSymbols(
            name=name,
            path=path,
            source=source,
            tree=tree,
            is_package=Path(path).stem == "__init__",
        )
        self._collect_imports(module)
        self._collect_classes(module, tree.body, scope=())
        for stmt in tree.body:
            if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
                module.annotations[stmt.target.id] = stmt.annotation

        self._files.append(module)
        self._modules[name] = module
        self._enum_cache.clear()
        self._closed_cache.clear()
        return module

    def _collect_imports(self, module: ModuleSymbols) -> None:
        for node in ast.walk(module.tree):
            if isinstance(node, ast.Import):
                for alias in node.names:
                    if alias.asname:
                        module.aliases[alias.asname] = alias.name
                    else:
                        top = alias.name.split(".")[0]
                        module.aliases[top] = top
            elif isinstance(node, ast.ImportFrom):
                base = self._import_base(module, node)
                for alias in node.names:
                    if alias.name == "*":
                        continue
                    local = alias.asname or alias.name
                    module.aliases[local] = f"{base}.{alias.name}" if base else alias.name

    def _import_base(self, module: ModuleSymbols, node: ast.ImportFrom) -> str:
        if not node.level:
            return node.module or ""
        package = module.name.split(".")
        if not module.is_package:
            package = package[:-1]
        if node.level > 1:
            package = package[: len(package) - (node.level - 1)]
        if node.module:
            package.append(node.module)
        return ".".join(package)

    def _collect_classes(
        self, module: ModuleSymbols, body: list[ast.stmt], scope: tuple[str, ...]
    ) -> None:
        for stmt in body:
            if not isinstance(stmt, ast.ClassDef):
                continue
            local_name = ".".join(scope + (stmt.name,))
            decl = ClassDeclaration(
                qualified_name=f"{module.name}.{local_name}",
                module=module,
                node=stmt,
                scope=scope,
                span=SourceSpan(module.path, stmt.lineno, stmt.col_offset + 1),
            )
            decl.members, decl.member_aliases = self._enum_body(stmt)
            module.classes[local_name] = decl
            self._classes[decl.qualified_name] = decl
            self._collect_classes(module, stmt.body, scope + (stmt.name,))

    @staticmethod
    def _enum_body(node: ast.ClassDef) -> tuple[list[str], dict[str, str]]:
        """Candidate enum members and aliases, in declaration order."""
        members: list[str] = []
        aliases: dict[str, str] = {}
        literal_owners: dict[str, str] = {}
        ignored: set[str] = set()

        for stmt in node.body:
            if (
                isinstance(stmt, ast.Assign)
                and len(stmt.targets) == 1
                and isinstance(stmt.targets[0], ast.Name)
            ):
                name, value = stmt.targets[0].id, stmt.value
            elif (
                isinstance(stmt, ast.AnnAssign)
                and stmt.value is not None
                and isinstance(stmt.target, ast.Name)
            ):
                name, value = stmt.target.id, stmt.value
            else:
                continue

            if name == "_ignore_":
                ignored.update(_ignored_names(value))
                continue
            if name in ignored or _is_reserved_name(name) or isinstance(value, ast.Lambda):
                continue
            if isinstance(value, ast.Call):
                func = (dotted_name(value.func) or "").split(".")[-1]
                if func in NON_MEMBER_CALLS:
                    continue
                if func == "member" and value.args:
                    value = value.args[0]

            if isinstance(value, ast.Name) and value.id in members:
                aliases[name] = value.id
                continue
            if isinstance(value, (ast.Constant, ast.Tuple, ast.UnaryOp)):
                key = ast.dump(value)
                if key in literal_owners:
                    aliases[name] = literal_owners[key]
                    continue
                literal_owners[key] = name
            members.append(name)

        return members, aliases

    # --- Resolution -----------------------------------------------------------

    def resolve(
        self, module: ModuleSymbols, dotted: str, scope: tuple[str, ...] = ()
    ) -> str:
        """Qualified name for a dotted reference written in `module`."""
        head, _, rest = dotted.partition(".")
        base = None
        for depth in range(len(scope), 0, -1):
            candidate = ".".join(scope[:depth] + (head,))
            if candidate in module.classes:
                base = f"{module.name}.{candidate}"
                break
        if base is None:
            if head in module.classes:
                base = f"{module.name}.{head}"
            elif head in module.aliases:
                base = module.aliases[head]
            else:
                base = head
        return self.canonical(f"{base}.{rest}" if rest else base)

    def canonical(self, qualified: str) -> str:
        """Follow re-exports (`from .shapes import Shape` in a package) to the definition."""
        for _ in range(MAX_HOPS):
            if qualified in self._classes:
                return qualified
            module, remainder = self._split_module(qualified)
            if module is None or not remainder:
                return qualified
            head, _, rest = remainder.partition(".")
            target = module.aliases.get(head)
            if target is None or target == qualified:
                return qualified
            qualified = f"{target}.{rest}" if rest else target
        return qualified

    def _split_module(self, qualified: str) -> tuple[Optional[ModuleSymbols], str]:
        parts = qualified.split(".")
        for i in range(len(parts) - 1, 0, -1):
            module = self._modules.get(".".join(parts[:i]))
            if module is not None:
                return module, ".".join(parts[i:])
        return None, ""

    def find_type(self, name: str) -> Optional[str]:
        """Qualified name for a qualified or unambiguous unqualified class name."""
        if name in self._classes:
            return name
        matches = [
            q for q, decl in self._classes.items()
            if q.endswith(f".{name}")
        ]
        return matches[0] if len(matches) == 1 else None

    # --- TypeOracle -----------------------------------------------------------

    def enum_members(self, type_name: str) -> Optional[list[str]]:
        decl = self._classes.get(type_name)
        if decl is None or not self._is_enum(decl):
            return None
        return list(decl.members)

    def enum_aliases(self, type_name: str) -> dict[str, str]:
        decl = self._classes.get(type_name)
        if decl is None:
            return {}
        return dict(decl.member_aliases)

    def closed_subtypes(self, type_name: str) -> Optional[list[str]]:
        decl = self._classes.get(type_name)
        if decl is None:
            return None
        if type_name not in self._closed_cache:
            self._closed_cache[type_name] = self._closed_declaration(decl)
        return self._closed_cache[type_name]

    def declaration_span(self, type_name: str) -> Optional[SourceSpan]:
        decl = self._classes.get(type_name)
        return decl.span if decl else None

    def _is_enum(self, decl: ClassDeclaration, hops: int = 0) -> bool:
        cached = self._enum_cache.get(decl.qualified_name)
        if cached is not None:
            return cached

        result = False
        for base in decl.node.bases:
            name = dotted_name(base)
            if name is None:
                continue
            resolved = self.resolve(decl.module, name, decl.scope)
            if resolved in ENUM_BASES:
                result = True
                break
            parent = self._classes.get(resolved)
            # Only memberless enums may be subclassed
            if (
                parent is not None
                and parent is not decl
                and hops < MAX_HOPS
                and not parent.members
                and self._is_enum(parent, hops + 1)
            ):
                result = True
                break

        self._enum_cache[decl.qualified_name] = result
        return result

    def _closed_declaration(self, decl: ClassDeclaration) -> Optional[list[str]]:
        for decorator in decl.node.decorator_list:
            if not isinstance(decorator, ast.Call):
                continue
            name = dotted_name(decorator.func)
            if name is None:
                continue
            if self.resolve(decl.module, name, decl.scope) not in self.closed_decorators:
                continue

            subtypes = []
            for arg in decorator.args:
                if isinstance(arg, ast.Constant) and isinstance(arg.value, str):
                    reference = arg.value
                else:
                    reference = dotted_name(arg)
                if reference is None:
                    logger.debug(
                        f"Ignoring permitted subtype {ast.unparse(arg)!r} of {decl.qualified_name}"
                    )
                    continue
                subtypes.append(self.resolve(decl.module, reference, decl.scope))
            return subtypes
        return None


@dataclass
class _ClassFrame:
    name: str
    attributes: dict[str, ast.expr]


@dataclass
class _FunctionFrame:
    annotations: dict[str, ast.expr]
    self_name: Optional[str] = None
    class_attributes: dict[str, ast.expr] = field(default_factory=dict)


class MatchCollector(ast.NodeVisitor):
    """Collect the `match` statements of one module as SwitchConstructs."""

    def __init__(self, index: DeclarationIndex, module: ModuleSymbols):
        self.index = index
        self.module = module
        self.lines = module.source.splitlines()
        self.switches: list[SwitchConstruct] = []
        self._frames: list[_ClassFrame | _FunctionFrame] = []

    def collect(self) -> list[SwitchConstruct]:
        self.visit(self.module.tree)
        return self.switches

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        self._frames.append(_ClassFrame(node.name, self._attribute_annotations(node)))
        self.generic_visit(node)
        self._frames.pop()

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._visit_function(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._visit_function(node)

    def _visit_function(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        args = node.args
        positional = args.posonlyargs + args.args
        annotations = {
            arg.arg: arg.annotation
            for arg in positional + args.kwonlyargs
            if arg.annotation is not None
        }
        for stmt in _own_nodes(node):
            if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
                annotations[stmt.target.id] = stmt.annotation

        frame = _FunctionFrame(annotations)
        enclosing = self._frames[-1] if self._frames else None
        is_static = any(
            dotted_name(d) in ("staticmethod", "classmethod") for d in node.decorator_list
        )
        if isinstance(enclosing, _ClassFrame) and positional and not is_static:
            frame.self_name = positional[0].arg
            frame.class_attributes = enclosing.attributes

        self._frames.append(frame)
        self.generic_visit(node)
        self._frames.pop()

    def visit_Match(self, node: ast.Match) -> None:
        self.switches.append(self._switch(node))
        self.generic_visit(node)

    # --- Subject type ---------------------------------------------------------

    @property
    def _class_scope(self) -> tuple[str, ...]:
        return tuple(f.name for f in self._frames if isinstance(f, _ClassFrame))

    def _resolve(self, dotted: str) -> str:
        return self.index.resolve(self.module, dotted, self._class_scope)

    def _attribute_annotations(self, node: ast.ClassDef) -> dict[str, ast.expr]:
        """`x: T` in the class body and `self.x: T` in its methods."""
        attributes: dict[str, ast.expr] = {}
        for stmt in node.body:
            if isinstance(stmt, ast.AnnAssign) and isinstance(stmt.target, ast.Name):
                attributes[stmt.target.id] = stmt.annotation
            elif isinstance(stmt, (ast.FunctionDef, ast.AsyncFunctionDef)) and stmt.args.args:
                self_name = stmt.args.args[0].arg
                for inner in _own_nodes(stmt):
                    if (
                        isinstance(inner, ast.AnnAssign)
                        and isinstance(inner.target, ast.Attribute)
                        and isinstance(inner.target.value, ast.Name)
                        and inner.target.value.id == self_name
                    ):
                        attributes.setdefault(inner.target.attr, inner.annotation)
        return attributes

    def _subject_annotation(self, subject: ast.expr) -> Optional[ast.expr]:
        functions = [f for f in self._frames if isinstance(f, _FunctionFrame)]
        if isinstance(subject, ast.Name):
            for frame in reversed(functions):
                if subject.id in frame.annotations:
                    return frame.annotations[subject.id]
            return self.module.annotations.get(subject.id)

        if (
            isinstance(subject, ast.Attribute)
            and isinstance(subject.value, ast.Name)
            and functions
            and functions[-1].self_name == subject.value.id
        ):
            return functions[-1].class_attributes.get(subject.attr)
        return None

    def _annotation_type(self, annotation: ast.expr) -> tuple[Optional[str], bool]:
        """
        Qualified type named by an annotation, and whether None is allowed.

        Optional/Union-with-None wrappers and string annotations are unwrapped;
        unions of several types are not a single subject type.
        """
        if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
            try:
                annotation = ast.parse(annotation.value, mode="eval").body
            except SyntaxError:
                return None, False

        if isinstance(annotation, ast.BinOp) and isinstance(annotation.op, ast.BitOr):
            return self._union_type(_flatten_union(annotation))

        if isinstance(annotation, ast.Subscript):
            form = dotted_name(annotation.value)
            form = self._resolve(form) if form else None
            arguments = annotation.slice
            elements = list(arguments.elts) if isinstance(arguments, ast.Tuple) else [arguments]
            if form in OPTIONAL_FORMS:
                inner, _ = self._annotation_type(elements[0])
                return inner, True
            if form in UNION_FORMS:
                return self._union_type(elements)
            if form in WRAPPER_FORMS:
                return self._annotation_type(elements[0])
            return None, False

        name = dotted_name(annotation)
        if name is None:
            return None, False
        return self._resolve(name), False

    def _union_type(self, elements: list[ast.expr]) -> tuple[Optional[str], bool]:
        others = [e for e in elements if not _is_none(e)]
        nullable = len(others) < len(elements)
        if len(others) != 1:
            return None, False
        inner, inner_nullable = self._annotation_type(others[0])
        return inner, nullable or inner_nullable

    # --- Clauses --------------------------------------------------------------

    def _switch(self, node: ast.Match) -> SwitchConstruct:
        annotation = self._subject_annotation(node.subject)
        subject_type, nullable = (None, False)
        if annotation is not None:
            subject_type, nullable = self._annotation_type(annotation)

        clauses: list[ClauseShape] = []
        for index, case in enumerate(node.cases):
            guard_span = self._guard_span(case) if case.guard is not None else None
            binding = None
            if isinstance(case.pattern, ast.MatchAs) and case.pattern.pattern is None:
                binding = case.pattern.name
            raises = tuple(
                self._raise_shape(stmt.exc, node.subject, subject_type, binding)
                for stmt in case.body
                if isinstance(stmt, ast.Raise) and stmt.exc is not None
            )

            alternatives = _alternatives(case.pattern)
            for alternative in alternatives:
                shape, target = self._pattern_shape(alternative)
                if len(alternatives) == 1:
                    span = self._clause_span(case.pattern)
                else:
                    span = self._span(alternative)
                clauses.append(ClauseShape(
                    clause_index=index,
                    pattern=shape,
                    span=span,
                    source_text=f"case {self._segment(alternative)}:",
                    target=target,
                    guard_span=guard_span,
                    raises=raises,
                ))

        return SwitchConstruct(
            span=SourceSpan(
                self.module.path,
                node.lineno,
                self._column(node.lineno, node.col_offset),
                node.subject.end_lineno,
                self._column(node.subject.end_lineno, node.subject.end_col_offset),
            ),
            subject_text=ast.unparse(node.subject),
            subject_type=subject_type,
            nullable=nullable,
            clauses=tuple(clauses),
        )

    def _pattern_shape(self, pattern: ast.pattern) -> tuple[PatternShape, Optional[str]]:
        if isinstance(pattern, ast.MatchAs):
            if pattern.pattern is None:
                return PatternShape.WILDCARD, None
            # The binding name is irrelevant to coverage
            return self._pattern_shape(pattern.pattern)

        if isinstance(pattern, ast.MatchSingleton):
            if pattern.value is None:
                return PatternShape.NONE, None
            return PatternShape.OTHER, None

        if isinstance(pattern, ast.MatchValue):
            name = dotted_name(pattern.value)
            if name is not None and "." in name:
                return PatternShape.MEMBER, self._resolve(name)
            return PatternShape.OTHER, None

        if isinstance(pattern, ast.MatchClass):
            name = dotted_name(pattern.cls)
            refining = [
                p for p in list(pattern.patterns) + list(pattern.kwd_patterns)
                if not _is_irrefutable(p)
            ]
            if name is not None and not refining:
                return PatternShape.TYPE, self._resolve(name)

        return PatternShape.OTHER, None

    def _raise_shape(
        self,
        exc: ast.expr,
        subject: ast.expr,
        subject_type: Optional[str],
        binding: Optional[str],
    ) -> RaiseShape:
        if not isinstance(exc, ast.Call):
            name = dotted_name(exc)
            return RaiseShape(target=self._resolve(name) if name else None)

        name = dotted_name(exc.func)
        subject_dump = ast.dump(subject)

        def kind(arg: ast.expr) -> ArgKind:
            if ast.dump(arg) == subject_dump:
                return ArgKind.SUBJECT
            if isinstance(arg, ast.Name) and binding is not None and arg.id == binding:
                return ArgKind.SUBJECT
            arg_name = dotted_name(arg)
            if arg_name is not None and subject_type is not None:
                if self._resolve(arg_name) == subject_type:
                    return ArgKind.SUBJECT_TYPE
            return ArgKind.OTHER

        return RaiseShape(
            target=self._resolve(name) if name else None,
            args=tuple(
                ArgKind.OTHER if isinstance(a, ast.Starred) else kind(a)
                for a in exc.args
            ),
            # `**kwargs` is recorded under a name no idiom declares
            keywords=tuple((kw.arg or "**", kind(kw.value)) for kw in exc.keywords),
        )

    # --- Locations ------------------------------------------------------------

    def _column(self, lineno: int, byte_offset: int) -> int:
        """1-based character column for an ast (UTF-8 byte) offset."""
        if not 0 < lineno <= len(self.lines):
            return byte_offset + 1
        encoded = self.lines[lineno - 1].encode("utf-8")
        return len(encoded[:byte_offset].decode("utf-8", errors="replace")) + 1

    def _span(self, node: ast.AST) -> SourceSpan:
        return SourceSpan(
            self.module.path,
            node.lineno,
            self._column(node.lineno, node.col_offset),
            node.end_lineno,
            self._column(node.end_lineno, node.end_col_offset),
        )

    def _keyword_offset(self, lineno: int, start: int, end: int, keyword: str) -> Optional[int]:
        if not 0 < lineno <= len(self.lines):
            return None
        encoded = self.lines[lineno - 1].encode("utf-8")
        found = encoded.rfind(keyword.encode(), start, end)
        return found if found >= 0 else None

    def _clause_span(self, pattern: ast.pattern) -> SourceSpan:
        """From the `case` keyword to the end of the pattern."""
        span = self._span(pattern)
        offset = self._keyword_offset(pattern.lineno, 0, pattern.col_offset, "case")
        if offset is None:
            return span
        return SourceSpan(
            span.path,
            span.line,
            self._column(pattern.lineno, offset),
            span.end_line,
            span.end_column,
        )

    def _guard_span(self, case: ast.match_case) -> SourceSpan:
        """From the `if` keyword to the end of the guard expression."""
        guard = case.guard
        span = self._span(guard)
        pattern = case.pattern
        start = pattern.end_col_offset if pattern.end_lineno == guard.lineno else 0
        offset = self._keyword_offset(guard.lineno, start, guard.col_offset, "if")
        if offset is None:
            return span
        return SourceSpan(
            span.path,
            span.line,
            self._column(guard.lineno, offset),
            span.end_line,
            span.end_column,
        )

    def _segment(self, node: ast.AST) -> str:
        segment = ast.get_source_segment(self.module.source, node)
        return segment if segment is not None else ast.unparse(node)


def _own_nodes(node: ast.AST):
    """Nodes of a function body, not descending into nested scopes."""
    pending = list(ast.iter_child_nodes(node))
    while pending:
        child = pending.pop(0)
        if isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef, ast.Lambda)):
            continue
        yield child
        pending.extend(ast.iter_child_nodes(child))


def _alternatives(pattern: ast.pattern) -> list[ast.pattern]:
    """Or-pattern alternatives (each a separate case label), flattened."""
    if isinstance(pattern, ast.MatchOr):
        return [alt for p in pattern.patterns for alt in _alternatives(p)]
    if isinstance(pattern, ast.MatchAs) and isinstance(pattern.pattern, ast.MatchOr):
        return _alternatives(pattern.pattern)
    return [pattern]


def _is_irrefutable(pattern: ast.pattern) -> bool:
    if isinstance(pattern, ast.MatchAs):
        return pattern.pattern is None or _is_irrefutable(pattern.pattern)
    return False


def _is_none(node: ast.expr) -> bool:
    return isinstance(node, ast.Constant) and node.value is None


def _flatten_union(node: ast.expr) -> list[ast.expr]:
    if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
        return _flatten_union(node.left) + _flatten_union(node.right)
    return [node]


def collect_switches(index: DeclarationIndex, module: ModuleSymbols) -> list[SwitchConstruct]:
    """SwitchConstructs for every `match` statement of an indexed module, in source order."""
    return MatchCollector(index, module).collect()
