# src/catalog/manifest/parser.py
"""
Package.swift -> structured manifest.

The manifest is a plain JSON-ready dict:

    {
        "tools_version": "5.5",
        "name": "Vapor",
        "platforms": [{"platform": "macOS", "version": "10.15"}],
        "products": [{"type": "library", "name": "Vapor", "targets": ["Vapor"], "linkage": "automatic"}],
        "dependencies": [{"name": "swift-nio", "url": "...", "requirement": {...}}],
        "targets": [{"type": "regular", "name": "Vapor", "dependencies": [...]}],
        ...
    }
"""

import re
from typing import Any, Dict, List, Optional

from catalog.manifest.syntax import (
    ArrayExpr,
    Call,
    Concat,
    DictExpr,
    Literal,
    Member,
    Name,
    Opaque,
    Program,
    RangeExpr,
    parse_program,
)
from core.errors import ManifestParseError
from core.logging.logger import get_logger

logger = get_logger(__name__)

_TOOLS_VERSION_RE = re.compile(r"^\s*//\s*swift-tools-version\s*:\s*([0-9][0-9.]*)", re.IGNORECASE)
_VERSION_CASE_RE = re.compile(r"^v(\d+(?:_\d+)*)$")
_SEMVER_RE = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?")
_MAX_DEREF_DEPTH = 32

TARGET_TYPES = {
    "target": "regular",
    "executableTarget": "executable",
    "testTarget": "test",
    "systemLibrary": "system",
    "binaryTarget": "binary",
    "plugin": "plugin",
    "macro": "macro",
    # Swift 3 manifests
    "Target": "regular",
}

PRODUCT_TYPES = {
    "library": "library",
    "executable": "executable",
    "plugin": "plugin",
}

PACKAGE_FIELDS = (
    "name",
    "default_localization",
    "platforms",
    "pkg_config",
    "providers",
    "products",
    "dependencies",
    "targets",
    "swift_language_versions",
    "c_language_standard",
    "cxx_language_standard",
)


def snake_case(label: str) -> str:
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", label).lower()


def tools_version(source: str) -> Optional[str]:
    first_line = source.lstrip("\ufeff").split("\n", 1)[0]
    match = _TOOLS_VERSION_RE.match(first_line)
    return match.group(1) if match else None


def _semver(version: str) -> Optional[List[int]]:
    match = _SEMVER_RE.match(version)
    if not match:
        return None
    return [int(part or 0) for part in match.groups()]


def next_major(version: str) -> Optional[str]:
    parts = _semver(version)
    return f"{parts[0] + 1}.0.0" if parts else None


def next_minor(version: str) -> Optional[str]:
    parts = _semver(version)
    return f"{parts[0]}.{parts[1] + 1}.0" if parts else None


def next_patch(version: str) -> Optional[str]:
    parts = _semver(version)
    return f"{parts[0]}.{parts[1]}.{parts[2] + 1}" if parts else None


class ManifestBuilder:
    """
    Walks the expression tree of a parsed Package.swift and resolves
    references to top-level bindings.
    """

    def __init__(self, program: Program):
        self.bindings = program.bindings
        self.mutations = program.mutations

    # ---- references ----

    def deref(self, node: Any) -> Any:
        for _ in range(_MAX_DEREF_DEPTH):
            if isinstance(node, Name) and node.ident in self.bindings:
                node = self.bindings[node.ident]
            else:
                return node
        raise ManifestParseError("Circular reference between manifest bindings")

    def elements(self, node: Any) -> List[Any]:
        node = self.deref(node)
        if node is None:
            return []
        if isinstance(node, ArrayExpr):
            return [self.deref(item) for item in node.items]
        if isinstance(node, Concat):
            return self.elements(node.left) + self.elements(node.right)
        if isinstance(node, Literal) and node.value is None:
            return []
        logger.debug(f"Ignoring non-array manifest value {node!r}")
        return []

    def find_package(self) -> Optional[str]:
        for name, node in self.bindings.items():
            node = self.deref(node)
            if isinstance(node, Call) and node.name == "Package":
                return name
        return None

    # ---- generic values ----

    def value(self, node: Any) -> Any:
        node = self.deref(node)

        if node is None:
            return None
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Name):
            return node.ident
        if isinstance(node, Member):
            return node.name
        if isinstance(node, ArrayExpr):
            return [self.value(item) for item in node.items]
        if isinstance(node, DictExpr):
            return {str(self.value(key)): self.value(val) for key, val in node.pairs}
        if isinstance(node, Concat):
            left, right = self.value(node.left), self.value(node.right)
            if isinstance(left, list) and isinstance(right, list):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            return [left, right]
        if isinstance(node, RangeExpr):
            return {
                "lower_bound": self.version(node.lower),
                "upper_bound": self.version(node.upper),
                "closed": node.closed,
            }
        if isinstance(node, Call):
            if node.name == "Version":
                return self.version(node)
            result: Dict[str, Any] = {"kind": node.name}
            positional = [self.value(arg) for arg in node.positional()]
            if positional:
                result["arguments"] = positional
            for argument in node.args:
                if argument.label is not None:
                    result[snake_case(argument.label)] = self.value(argument.value)
            return result
        if isinstance(node, Opaque):
            return node.text
        return None

    def version(self, node: Any) -> Optional[str]:
        node = self.deref(node)
        if isinstance(node, Literal):
            return None if node.value is None else str(node.value)
        if isinstance(node, Member):
            match = _VERSION_CASE_RE.match(node.name)
            return match.group(1).replace("_", ".") if match else node.name
        if isinstance(node, Call):
            if node.name == "Version":
                parts = [str(self.value(arg)) for arg in node.positional()]
                return ".".join(parts) if parts else self.version(node.arg("stringLiteral"))
            positional = node.positional()
            # .version("6"), .iOS("13.0"), .custom("x", versionString: "1.0")
            if node.arg("versionString") is not None:
                return self.version(node.arg("versionString"))
            if positional:
                return self.version(positional[-1])
        return None

    # ---- package sections ----

    def platform(self, node: Any) -> Dict[str, Any]:
        if isinstance(node, Call):
            positional = node.positional()
            name = node.name
            if name == "custom" and positional:
                name = self.value(positional[0])
            return {"platform": name, "version": self.version(node)}
        return {"platform": self.value(node), "version": None}

    def product(self, node: Any) -> Dict[str, Any]:
        if not isinstance(node, Call):
            return {"type": None, "name": self.value(node), "targets": []}

        product = {
            "type": PRODUCT_TYPES.get(node.name, node.name),
            "name": self.value(node.arg("name")),
            "targets": [self.value(target) for target in self.elements(node.arg("targets"))],
        }
        if node.name == "library":
            linkage = node.arg("type")
            product["linkage"] = self.value(linkage) if linkage is not None else "automatic"
        return product

    def requirement(self, node: Call) -> Dict[str, Any]:
        lower = node.arg("from")
        if lower is not None:
            return self._range_from(self.version(lower), next_major)

        for kind in ("exact", "branch", "revision"):
            labeled = node.arg(kind)
            if labeled is not None:
                return {"kind": kind, "identifier": self.value(labeled)}

        versions = node.arg("versions")
        if versions is not None:
            return self._range(self.deref(versions))

        major = node.arg("majorVersion")
        if major is not None:
            minor = node.arg("minor")
            if minor is not None:
                return self._range_from(f"{self.value(major)}.{self.value(minor)}.0", next_minor)
            return self._range_from(f"{self.value(major)}.0.0", next_major)

        if node.arg("path") is not None:
            return {"kind": "local"}

        for positional in node.positional():
            positional = self.deref(positional)
            if isinstance(positional, RangeExpr):
                return self._range(positional)
            if isinstance(positional, Call):
                if positional.name == "upToNextMajor":
                    return self._range_from(self.version(positional.arg("from")), next_major)
                if positional.name == "upToNextMinor":
                    return self._range_from(self.version(positional.arg("from")), next_minor)
                if positional.name in ("exact", "branch", "revision"):
                    identifier = positional.positional()
                    return {
                        "kind": positional.name,
                        "identifier": self.value(identifier[0]) if identifier else None,
                    }
            if isinstance(positional, Literal) and isinstance(positional.value, str):
                # .package(url: "...", "1.0.0") is an exact pin
                return {"kind": "exact", "identifier": positional.value}

        return {"kind": "unknown"}

    def _range_from(self, lower: Optional[str], upper_of) -> Dict[str, Any]:
        return {
            "kind": "range",
            "lower_bound": lower,
            "upper_bound": upper_of(lower) if lower else None,
        }

    def _range(self, node: Any) -> Dict[str, Any]:
        if not isinstance(node, RangeExpr):
            return {"kind": "unknown"}
        upper = self.version(node.upper)
        if node.closed and upper:
            # ClosedRange is widened to the next patch release
            upper = next_patch(upper)
        return {"kind": "range", "lower_bound": self.version(node.lower), "upper_bound": upper}

    def dependency(self, node: Any) -> Dict[str, Any]:
        if not isinstance(node, Call):
            return {"name": None, "url": self.value(node), "requirement": {"kind": "unknown"}}

        url = self.value(node.arg("url"))
        path = self.value(node.arg("path"))
        identity = self.value(node.arg("id"))
        name = self.value(node.arg("name"))

        location = url or path or identity
        if name is None and isinstance(location, str):
            name = location.rstrip("/").rsplit("/", 1)[-1]
            if name.endswith(".git"):
                name = name[: -len(".git")]

        dependency: Dict[str, Any] = {"name": name}
        if url is not None:
            dependency["url"] = url
        if path is not None:
            dependency["path"] = path
        if identity is not None:
            dependency["id"] = identity
        dependency["requirement"] = self.requirement(node)
        return dependency

    def target_dependency(self, node: Any) -> Dict[str, Any]:
        if isinstance(node, Literal):
            return {"kind": "by_name", "name": node.value}
        if not isinstance(node, Call):
            return {"kind": "by_name", "name": self.value(node)}

        kind = {"target": "target", "product": "product"}.get(node.name, "by_name")
        positional = node.positional()
        name_node = node.arg("name")
        if name_node is None and positional:
            name_node = positional[0]

        dependency: Dict[str, Any] = {"kind": kind, "name": self.value(name_node)}
        if kind == "product":
            dependency["package"] = self.value(node.arg("package"))
        condition = node.arg("condition")
        if condition is not None:
            dependency["condition"] = self.condition(condition)
        return dependency

    def condition(self, node: Any) -> Any:
        node = self.deref(node)
        if isinstance(node, Call) and node.name == "when":
            return {
                snake_case(argument.label): self.value(argument.value)
                for argument in node.args
                if argument.label is not None
            }
        return self.value(node)

    def target(self, node: Any) -> Dict[str, Any]:
        if not isinstance(node, Call):
            return {"type": None, "name": self.value(node), "dependencies": []}

        target: Dict[str, Any] = {
            "type": TARGET_TYPES.get(node.name, node.name),
            "name": self.value(node.arg("name")),
            "dependencies": [
                self.target_dependency(dependency)
                for dependency in self.elements(node.arg("dependencies"))
            ],
        }
        for argument in node.args:
            if argument.label in (None, "name", "dependencies"):
                continue
            target[snake_case(argument.label)] = self.value(argument.value)
        return target

    # ---- assembly ----

    def arguments(self, package: Call, binding: str) -> Dict[str, Any]:
        args: Dict[str, Any] = {}
        for argument in package.args:
            if argument.label is not None:
                args[argument.label] = argument.value

        for mutation in self.mutations:
            if mutation.target != binding:
                continue
            if mutation.op == "=":
                args[mutation.attribute] = mutation.value
            elif mutation.attribute in args:
                args[mutation.attribute] = Concat(args[mutation.attribute], mutation.value)
            else:
                args[mutation.attribute] = mutation.value
        return args

    def build(self) -> Dict[str, Any]:
        binding = self.find_package()
        if binding is None:
            raise ManifestParseError("No Package(...) declaration found in manifest")
        package = self.deref(self.bindings[binding])
        args = self.arguments(package, binding)

        manifest: Dict[str, Any] = {field: None for field in PACKAGE_FIELDS}
        manifest.update({"platforms": [], "products": [], "dependencies": [], "targets": []})

        for label, node in args.items():
            key = snake_case(label)
            if key == "platforms":
                manifest[key] = [self.platform(item) for item in self.elements(node)]
            elif key == "products":
                manifest[key] = [self.product(item) for item in self.elements(node)]
            elif key == "dependencies":
                manifest[key] = [self.dependency(item) for item in self.elements(node)]
            elif key == "targets":
                manifest[key] = [self.target(item) for item in self.elements(node)]
            elif key == "swift_language_versions":
                manifest[key] = [self.version(item) for item in self.elements(node)]
            else:
                manifest[key] = self.value(node)

        return manifest


def parse_manifest(source: str) -> Dict[str, Any]:
    """
    Parse the text of a Package.swift file

    Raises:
        ManifestParseError: the text has no readable Package(...) declaration
    """
    program = parse_program(source)
    builder = ManifestBuilder(program)

    if builder.find_package() is None:
        if program.errors:
            raise ManifestParseError(f"Invalid manifest: {program.errors[0]}")
        raise ManifestParseError("No Package(...) declaration found in manifest")

    manifest = {"tools_version": tools_version(source)}
    manifest.update(builder.build())
    return manifest
