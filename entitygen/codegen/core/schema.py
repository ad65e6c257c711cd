"""
Core schema representation for code generation.

Entities, attributes and methods as loaded from an upstream schema document,
normalized into immutable records that the resolver and generators share.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
from enum import Enum

from .errors import (
    EntityNotFoundError,
    InvalidSchemaError,
    UnknownParentError,
)


class TypeKind(Enum):
    """Semantic categories of attribute and parameter types."""

    PRIMITIVE = "primitive"
    STRING = "string"
    REFERENCE = "reference"  # Reference to another entity
    COLLECTION = "collection"


class Visibility(Enum):
    PRIVATE = "private"
    PROTECTED = "protected"
    PUBLIC = "public"


class Mutability(Enum):
    CONST = "const"
    MUTABLE = "mutable"


class Polymorphism(Enum):
    """How a method participates in dynamic dispatch."""

    NONE = "none"
    VIRTUAL = "virtual"
    OVERRIDE = "override"
    PURE_VIRTUAL = "pure_virtual"

    @property
    def is_dispatched(self) -> bool:
        """True for kinds a descendant can override."""
        return self is not Polymorphism.NONE


PRIMITIVE_TYPES = frozenset(
    {
        "void",
        "bool",
        "char",
        "byte",
        "short",
        "int",
        "long",
        "float",
        "double",
        "int8",
        "int16",
        "int32",
        "int64",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "size",
    }
)

_LIST_PATTERN = re.compile(r"^(?:list|collection)\s*<\s*(.+)\s*>$", re.IGNORECASE)
_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class TypeRef:
    """
    Language-neutral type of an attribute, parameter or return value.

    Equality is structural, so two TypeRefs parsed from the same text compare
    equal and can be used as part of method signatures.
    """

    kind: TypeKind
    name: str = ""
    element: Optional["TypeRef"] = None

    @classmethod
    def primitive(cls, name: str) -> "TypeRef":
        return cls(TypeKind.PRIMITIVE, name)

    @classmethod
    def string(cls) -> "TypeRef":
        return cls(TypeKind.STRING, "string")

    @classmethod
    def reference(cls, entity_name: str) -> "TypeRef":
        return cls(TypeKind.REFERENCE, entity_name)

    @classmethod
    def collection(cls, element: "TypeRef") -> "TypeRef":
        return cls(TypeKind.COLLECTION, "list", element)

    @property
    def is_void(self) -> bool:
        return self.kind == TypeKind.PRIMITIVE and self.name == "void"

    @property
    def contains_void(self) -> bool:
        """True for void itself and for collections of void at any depth."""
        if self.kind == TypeKind.COLLECTION and self.element is not None:
            return self.element.contains_void
        return self.is_void

    def referenced_entity(self) -> Optional[str]:
        """Entity this type points at, looking through collections."""
        if self.kind == TypeKind.REFERENCE:
            return self.name
        if self.kind == TypeKind.COLLECTION and self.element is not None:
            return self.element.referenced_entity()
        return None

    def __str__(self) -> str:
        if self.kind == TypeKind.COLLECTION:
            return f"list<{self.element}>"
        return self.name


def parse_type(text: str) -> TypeRef:
    """
    Parse a schema type expression.

    Accepts primitive names, ``string``, ``list<T>`` / ``T[]`` collections
    and any other identifier as a reference to an entity.
    """
    text = (text or "").strip()
    if not text:
        raise InvalidSchemaError("Empty type expression")

    if text.endswith("[]"):
        return TypeRef.collection(parse_type(text[:-2]))

    match = _LIST_PATTERN.match(text)
    if match:
        return TypeRef.collection(parse_type(match.group(1)))

    lowered = text.lower()
    if lowered in PRIMITIVE_TYPES:
        return TypeRef.primitive(lowered)
    if lowered in ("string", "str"):
        return TypeRef.string()

    if not _NAME_PATTERN.match(text):
        raise InvalidSchemaError(f"Invalid type expression: {text!r}")
    return TypeRef.reference(text)


@dataclass(frozen=True)
class Attribute:
    """A data member of an entity."""

    name: str
    type: TypeRef
    default: Optional[str] = None  # Literal in the target language
    visibility: Visibility = Visibility.PRIVATE
    derives_accessor: bool = False
    derives_mutator: bool = False
    is_const_expr: bool = False

    @property
    def is_required(self) -> bool:
        """Required attributes have no default and must be constructor-initialized."""
        return self.default is None and not self.is_const_expr


@dataclass(frozen=True)
class Parameter:
    name: str
    type: TypeRef
    default: Optional[str] = None


@dataclass(frozen=True)
class Method:
    """An explicitly declared method, beyond synthesized accessors."""

    name: str
    return_type: TypeRef = field(default_factory=lambda: TypeRef.primitive("void"))
    parameters: Tuple[Parameter, ...] = ()
    mutability: Mutability = Mutability.MUTABLE
    polymorphism: Polymorphism = Polymorphism.NONE
    has_body: bool = False
    body: Optional[str] = None
    is_noexcept: bool = False
    documentation: Optional[str] = None

    @property
    def signature(self) -> Tuple[str, Tuple[TypeRef, ...]]:
        """Override-matching identity: name plus parameter types."""
        return (self.name, tuple(p.type for p in self.parameters))

    @property
    def is_const(self) -> bool:
        return self.mutability == Mutability.CONST


@dataclass(frozen=True)
class Entity:
    """A named class-like definition in the schema."""

    name: str
    parent: Optional[str] = None
    attributes: Tuple[Attribute, ...] = ()
    methods: Tuple[Method, ...] = ()
    documentation: Optional[str] = None
    is_abstract: bool = False

    def get_attribute(self, name: str) -> Optional[Attribute]:
        """Get an own attribute by name."""
        for attribute in self.attributes:
            if attribute.name == name:
                return attribute
        return None

    def get_method(self, name: str) -> Optional[Method]:
        """Get an own method by name."""
        for method in self.methods:
            if method.name == name:
                return method
        return None


class Schema:
    """
    Read-only snapshot of all entities for one generation run.

    Entities keep their declaration order, which every downstream step uses
    as its stable ordering.
    """

    def __init__(self, entities: List[Entity], namespace: Optional[str] = None):
        self._entities: Tuple[Entity, ...] = tuple(entities)
        self._namespace = namespace or None
        self._index: Dict[str, Entity] = {}

        for entity in self._entities:
            _validate_entity(entity)
            if entity.name in self._index:
                raise InvalidSchemaError(
                    f"Duplicate entity name: {entity.name}", entity.name
                )
            self._index[entity.name] = entity

        for entity in self._entities:
            if entity.parent and entity.parent not in self._index:
                raise UnknownParentError(
                    f"Entity '{entity.name}' extends unknown entity '{entity.parent}'",
                    entity.name,
                )

    @property
    def namespace(self) -> Optional[str]:
        return self._namespace

    def entity(self, name: str) -> Entity:
        """Get entity by name."""
        try:
            return self._index[name]
        except KeyError:
            raise EntityNotFoundError(f"Unknown entity: {name}", name) from None

    def has_entity(self, name: str) -> bool:
        return name in self._index

    def all_entities(self) -> Tuple[Entity, ...]:
        """All entities in declaration order."""
        return self._entities

    def parent_of(self, entity: Entity) -> Optional[Entity]:
        if not entity.parent:
            return None
        return self.entity(entity.parent)

    def children_of(self, name: str) -> Tuple[Entity, ...]:
        """Direct children of an entity, in declaration order."""
        return tuple(e for e in self._entities if e.parent == name)

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self):
        return iter(self._entities)


def _validate_entity(entity: Entity) -> None:
    """Check the within-entity guarantees the upstream loader must provide."""
    if not entity.name or not entity.name.strip():
        raise InvalidSchemaError("Entity with empty name")

    seen = set()
    for attribute in entity.attributes:
        if not attribute.name:
            raise InvalidSchemaError(
                f"Entity '{entity.name}' has an attribute with an empty name",
                entity.name,
            )
        if attribute.name in seen:
            raise InvalidSchemaError(
                f"Duplicate attribute name in {entity.name}: {attribute.name}",
                entity.name,
            )
        if attribute.type.contains_void:
            raise InvalidSchemaError(
                f"Attribute {entity.name}.{attribute.name} cannot have type "
                f"'{attribute.type}'",
                entity.name,
            )
        if attribute.is_const_expr and attribute.default is None:
            raise InvalidSchemaError(
                f"Constant attribute {entity.name}.{attribute.name} needs a default value",
                entity.name,
            )
        seen.add(attribute.name)

    seen = set()
    for method in entity.methods:
        if not method.name:
            raise InvalidSchemaError(
                f"Entity '{entity.name}' has a method with an empty name",
                entity.name,
            )
        if method.name in seen:
            raise InvalidSchemaError(
                f"Duplicate method name in {entity.name}: {method.name}",
                entity.name,
            )
        seen.add(method.name)
        _validate_signature(entity, method)


def _validate_signature(entity: Entity, method: Method) -> None:
    """Parameters need distinct names and a value type; void only as a bare return."""
    where = f"{entity.name}.{method.name}"
    if method.return_type.contains_void and not method.return_type.is_void:
        raise InvalidSchemaError(
            f"Method {where} cannot return '{method.return_type}'", entity.name
        )

    names = set()
    for position, parameter in enumerate(method.parameters, 1):
        if not parameter.name or not parameter.name.strip():
            raise InvalidSchemaError(
                f"Parameter {position} of {where} has an empty name", entity.name
            )
        if parameter.name in names:
            raise InvalidSchemaError(
                f"Duplicate parameter name in {where}: {parameter.name}", entity.name
            )
        if parameter.type.contains_void:
            raise InvalidSchemaError(
                f"Parameter {where}({parameter.name}) cannot have type "
                f"'{parameter.type}'",
                entity.name,
            )
        names.add(parameter.name)


def schema_from_dict(document: Dict[str, Any]) -> Schema:
    """
    Convert a schema document into the internal Schema representation.

    Args:
        document: Parsed JSON document with ``namespace`` and ``entities`` keys

    Returns:
        Schema: Validated, immutable schema

    Raises:
        InvalidSchemaError: If the document is malformed
        UnknownParentError: If an entity extends an undeclared entity
    """
    if not isinstance(document, dict):
        raise InvalidSchemaError("Schema document must be a JSON object")

    raw_entities = document.get("entities", [])
    if not isinstance(raw_entities, list):
        raise InvalidSchemaError("'entities' must be a list")

    def enum_value(enum_cls, raw, default, context):
        if raw is None:
            return default
        try:
            return enum_cls(str(raw).lower().replace("-", "_"))
        except ValueError:
            raise InvalidSchemaError(f"Invalid {context}: {raw!r}") from None

    def convert_attribute(data: Dict[str, Any]) -> Attribute:
        default = data.get("default")
        return Attribute(
            name=data.get("name", ""),
            type=parse_type(data.get("type", "")),
            default=None if default is None else str(default),
            visibility=enum_value(
                Visibility, data.get("visibility"), Visibility.PRIVATE, "visibility"
            ),
            derives_accessor=bool(data.get("accessor", False)),
            derives_mutator=bool(data.get("mutator", False)),
            is_const_expr=bool(data.get("constexpr", False)),
        )

    def convert_parameter(data: Dict[str, Any]) -> Parameter:
        default = data.get("default")
        return Parameter(
            name=data.get("name", ""),
            type=parse_type(data.get("type", "")),
            default=None if default is None else str(default),
        )

    def convert_method(data: Dict[str, Any]) -> Method:
        body = data.get("body")
        return Method(
            name=data.get("name", ""),
            return_type=parse_type(data.get("returns", "void")),
            parameters=tuple(
                convert_parameter(p) for p in data.get("parameters", [])
            ),
            mutability=Mutability.CONST if data.get("const") else Mutability.MUTABLE,
            polymorphism=enum_value(
                Polymorphism, data.get("kind"), Polymorphism.NONE, "method kind"
            ),
            has_body=bool(data.get("inline", False)) or body is not None,
            body=body,
            is_noexcept=bool(data.get("noexcept", False)),
            documentation=data.get("documentation"),
        )

    entities = []
    for data in raw_entities:
        if not isinstance(data, dict):
            raise InvalidSchemaError(f"Entity entry must be an object, got {data!r}")
        entities.append(
            Entity(
                name=data.get("name", ""),
                parent=data.get("parent") or data.get("extends") or None,
                attributes=tuple(
                    convert_attribute(a) for a in data.get("attributes", [])
                ),
                methods=tuple(convert_method(m) for m in data.get("methods", [])),
                documentation=data.get("documentation"),
                is_abstract=bool(data.get("abstract", False)),
            )
        )

    return Schema(entities, namespace=document.get("namespace"))
