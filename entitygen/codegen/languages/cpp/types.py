"""
C++ type system for code generation.

Maps language-neutral TypeRefs to C++ spellings, together with the headers
they need and how values of the type are passed around.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List

from ...core.schema import TypeKind, TypeRef
from .config import CppConfig, ReferenceStyle


@dataclass(frozen=True)
class CppType:
    """
    Immutable representation of a C++ type with all metadata.

    Carries everything needed to declare fields, parameters and return
    values of this type.
    """

    name: str
    includes: FrozenSet[str] = field(default_factory=frozenset)
    pass_by_value: bool = False  # Cheap to copy: primitives, raw pointers
    move_only: bool = False  # unique_ptr and containers of it

    @property
    def parameter(self) -> str:
        """Spelling of the type as a parameter."""
        if self.pass_by_value or self.move_only:
            return self.name
        return f"const {self.name}&"

    @property
    def returned(self) -> str:
        """Spelling of the type as an accessor return value."""
        if self.move_only:
            return f"const {self.name}&"
        return self.name

    def assign(self, expression: str) -> str:
        """Expression that stores a parameter into a field."""
        if self.move_only:
            return f"std::move({expression})"
        return expression


PRIMITIVE_TYPES = {
    "void": ("void", None),
    "bool": ("bool", None),
    "char": ("char", None),
    "byte": ("std::uint8_t", "<cstdint>"),
    "short": ("short", None),
    "int": ("int", None),
    "long": ("long", None),
    "float": ("float", None),
    "double": ("double", None),
    "int8": ("std::int8_t", "<cstdint>"),
    "int16": ("std::int16_t", "<cstdint>"),
    "int32": ("std::int32_t", "<cstdint>"),
    "int64": ("std::int64_t", "<cstdint>"),
    "uint8": ("std::uint8_t", "<cstdint>"),
    "uint16": ("std::uint16_t", "<cstdint>"),
    "uint32": ("std::uint32_t", "<cstdint>"),
    "uint64": ("std::uint64_t", "<cstdint>"),
    "size": ("std::size_t", "<cstddef>"),
}

COLLECTION_INCLUDES = {
    "std::vector": "<vector>",
    "std::list": "<list>",
    "std::deque": "<deque>",
}


class CppTypeMapper:
    """Central engine for mapping schema types to C++ types."""

    def __init__(self, config: CppConfig):
        self.config = config

    def map_type(self, type_ref: TypeRef) -> CppType:
        """Map a TypeRef to its C++ type."""
        if type_ref.kind == TypeKind.PRIMITIVE:
            if type_ref.name in self.config.type_overrides:
                return CppType(self.config.type_overrides[type_ref.name], pass_by_value=True)
            name, include = PRIMITIVE_TYPES[type_ref.name]
            return CppType(
                name,
                frozenset([include]) if include else frozenset(),
                pass_by_value=True,
            )

        if type_ref.kind == TypeKind.STRING:
            name = self.config.type_overrides.get("string", self.config.string_type)
            include = "<string_view>" if "string_view" in name else "<string>"
            return CppType(name, frozenset([include]))

        if type_ref.kind == TypeKind.REFERENCE:
            return self._reference(type_ref.name)

        element = self.map_type(type_ref.element)
        container = self.config.collection_type
        return CppType(
            f"{container}<{element.name}>",
            element.includes | {COLLECTION_INCLUDES[container]},
            move_only=element.move_only,
        )

    def _reference(self, entity_name: str) -> CppType:
        style = self.config.reference_style
        if style == ReferenceStyle.SHARED_PTR:
            return CppType(f"std::shared_ptr<{entity_name}>", frozenset(["<memory>"]))
        if style == ReferenceStyle.UNIQUE_PTR:
            return CppType(
                f"std::unique_ptr<{entity_name}>",
                frozenset(["<memory>", "<utility>"]),
                move_only=True,
            )
        return CppType(f"{entity_name}*", pass_by_value=True)

    def get_all_includes(self, types: Iterable[CppType]) -> List[str]:
        """Sorted, deduplicated headers needed by a set of types."""
        includes = set()
        for cpp_type in types:
            includes.update(cpp_type.includes)
        return sorted(includes)
