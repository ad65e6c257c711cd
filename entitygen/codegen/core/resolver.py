"""
Inheritance hierarchy resolution.

Validates the parent-pointer forest of a schema and computes, for every
entity, the closure that generators consume: ancestor chain, merged
attributes and methods, and cross-entity dependencies.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from ...logging_config import get_logger
from .errors import (
    AttributeTypeConflictError,
    CyclicInheritanceError,
    InvalidOverrideError,
    UnimplementedAbstractMethodError,
    UnknownReferenceError,
)
from .naming import accessor_name
from .schema import (
    Attribute,
    Entity,
    Method,
    Mutability,
    Parameter,
    Polymorphism,
    Schema,
    TypeRef,
)

logger = get_logger(__name__)

Signature = Tuple[str, Tuple[TypeRef, ...]]


@dataclass(frozen=True)
class ResolvedMethod:
    """A method in an entity's merged set, with its effective dispatch kind."""

    method: Method
    owner: str
    kind: Polymorphism
    field: Optional[str] = None  # Set for accessors and mutators

    @property
    def name(self) -> str:
        return self.method.name

    @property
    def signature(self) -> Signature:
        return self.method.signature

    @property
    def is_derived(self) -> bool:
        """True for accessors and mutators derived from an attribute."""
        return self.field is not None


@dataclass(frozen=True)
class ResolvedEntity:
    """Entity plus its precomputed inheritance closure."""

    entity: Entity
    ancestors: Tuple[str, ...]  # Root first, excluding the entity itself
    attributes: Mapping[str, Attribute]
    attribute_origins: Mapping[str, str]
    methods: Mapping[Signature, ResolvedMethod]
    inherited_methods: Mapping[Signature, ResolvedMethod]
    children: Tuple[str, ...]
    references: Tuple[str, ...]
    namespace: Optional[str] = None

    @property
    def name(self) -> str:
        return self.entity.name

    @property
    def parent(self) -> Optional[str]:
        return self.entity.parent

    @property
    def child_count(self) -> int:
        return len(self.children)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def dependencies(self) -> Tuple[str, ...]:
        """Entities that must be available first: parent, then references."""
        deps = [self.parent] if self.parent else []
        deps.extend(r for r in self.references if r != self.parent)
        return tuple(deps)

    @property
    def unimplemented_methods(self) -> Tuple[ResolvedMethod, ...]:
        return tuple(
            m for m in self.methods.values() if m.kind == Polymorphism.PURE_VIRTUAL
        )

    @property
    def is_abstract(self) -> bool:
        return self.entity.is_abstract or bool(self.unimplemented_methods)

    @property
    def is_polymorphic(self) -> bool:
        return any(m.kind.is_dispatched for m in self.methods.values())

    def own_methods(self) -> Tuple[ResolvedMethod, ...]:
        """Explicit methods declared on this entity, in declaration order."""
        return tuple(self.methods[m.signature] for m in self.entity.methods)

    def method_names(self) -> Tuple[str, ...]:
        """Names in the merged method set, accessors and mutators included."""
        return tuple(m.name for m in self.methods.values())


class HierarchyResolver:
    """
    Resolves a whole schema in one pass.

    The merged method set of an entity holds explicit methods plus the
    accessors and mutators derived from attributes along the chain, so the
    names depend on the accessor and mutator prefixes in use.

    Args:
        schema: Schema to resolve
        check_abstract: Fail on concrete leaves with unimplemented pure-virtual
            methods. When False the check is left to the member synthesizer.
        accessor_prefix: Prefix of derived accessors
        mutator_prefix: Prefix of derived mutators
    """

    def __init__(
        self,
        schema: Schema,
        check_abstract: bool = True,
        accessor_prefix: str = "get",
        mutator_prefix: str = "set",
    ):
        self.schema = schema
        self.check_abstract = check_abstract
        self.accessor_prefix = accessor_prefix
        self.mutator_prefix = mutator_prefix

    def resolve(self) -> Dict[str, ResolvedEntity]:
        """Resolve every entity, in declaration order."""
        self._check_cycles()

        children: Dict[str, List[str]] = {e.name: [] for e in self.schema}
        for entity in self.schema:
            if entity.parent:
                children[entity.parent].append(entity.name)

        resolved = {}
        for entity in self.schema:
            chain = self._ancestor_chain(entity)
            attributes, origins = self._merge_attributes(entity, chain)
            inherited = self._merge_methods(entity, chain[:-1])
            methods = self._merge_methods(entity, chain)

            resolved_entity = ResolvedEntity(
                entity=entity,
                ancestors=tuple(e.name for e in chain[:-1]),
                attributes=MappingProxyType(attributes),
                attribute_origins=MappingProxyType(origins),
                methods=MappingProxyType(methods),
                inherited_methods=MappingProxyType(inherited),
                children=tuple(children[entity.name]),
                references=self._references(entity),
                namespace=self.schema.namespace,
            )

            if self.check_abstract:
                check_implemented(resolved_entity)

            resolved[entity.name] = resolved_entity

        logger.debug("Resolved %d entities", len(resolved))
        return resolved

    def _check_cycles(self) -> None:
        """Walk from every entity toward its root; a revisit means a cycle."""
        for entity in self.schema:
            path: List[str] = []
            visited = set()
            current: Optional[Entity] = entity

            while current is not None:
                if current.name in visited:
                    cycle = path[path.index(current.name):] + [current.name]
                    raise CyclicInheritanceError(
                        f"Circular inheritance detected: {' -> '.join(cycle)}",
                        entity.name,
                    )
                visited.add(current.name)
                path.append(current.name)
                current = self.schema.parent_of(current)

    def _ancestor_chain(self, entity: Entity) -> List[Entity]:
        """Root-first chain ending with the entity itself."""
        chain = []
        current: Optional[Entity] = entity
        while current is not None:
            chain.append(current)
            current = self.schema.parent_of(current)
        chain.reverse()
        return chain

    def _merge_attributes(
        self, entity: Entity, chain: List[Entity]
    ) -> Tuple[Dict[str, Attribute], Dict[str, str]]:
        merged: Dict[str, Attribute] = {}
        origins: Dict[str, str] = {}

        for owner in chain:
            for attribute in owner.attributes:
                previous = merged.get(attribute.name)
                if previous is not None and previous.type != attribute.type:
                    raise AttributeTypeConflictError(
                        f"Attribute {owner.name}.{attribute.name} redefines "
                        f"{origins[attribute.name]}.{attribute.name} with type "
                        f"'{attribute.type}' (was '{previous.type}')",
                        entity.name,
                    )
                merged[attribute.name] = attribute
                origins[attribute.name] = owner.name

        return merged, origins

    def derived_methods(self, entity: Entity) -> List[Tuple[Method, str]]:
        """Accessor and mutator signatures an entity's attributes derive, with their field."""
        derived = []
        for attribute in entity.attributes:
            if attribute.derives_accessor:
                derived.append(
                    (
                        Method(
                            accessor_name(self.accessor_prefix, attribute.name),
                            return_type=attribute.type,
                            mutability=Mutability.CONST,
                        ),
                        attribute.name,
                    )
                )
            # Constant attributes never get a mutator
            if attribute.derives_mutator and not attribute.is_const_expr:
                derived.append(
                    (
                        Method(
                            accessor_name(self.mutator_prefix, attribute.name),
                            parameters=(Parameter("value", attribute.type),),
                        ),
                        attribute.name,
                    )
                )
        return derived

    def _merge_methods(
        self, entity: Entity, chain: List[Entity]
    ) -> Dict[Signature, ResolvedMethod]:
        merged: Dict[Signature, ResolvedMethod] = {}

        for owner in chain:
            declared: List[Tuple[Method, Optional[str]]] = list(
                self.derived_methods(owner)
            )
            declared.extend((m, None) for m in owner.methods)

            for method, field_name in declared:
                previous = merged.get(method.signature)
                kind = method.polymorphism

                if previous is not None and previous.kind.is_dispatched:
                    if method.return_type != previous.method.return_type:
                        raise InvalidOverrideError(
                            f"{owner.name}.{method.name} overrides "
                            f"{previous.owner}.{method.name} with return type "
                            f"'{method.return_type}' (expected "
                            f"'{previous.method.return_type}')",
                            entity.name,
                        )
                    if method.is_const != previous.method.is_const:
                        raise InvalidOverrideError(
                            f"{owner.name}.{method.name} changes the constness of "
                            f"{previous.owner}.{method.name}",
                            entity.name,
                        )
                    if kind != Polymorphism.PURE_VIRTUAL:
                        kind = Polymorphism.OVERRIDE
                elif kind == Polymorphism.OVERRIDE:
                    raise InvalidOverrideError(
                        f"{owner.name}.{method.name} is marked override but no "
                        f"ancestor declares a virtual method with that signature",
                        entity.name,
                    )

                merged[method.signature] = ResolvedMethod(
                    method, owner.name, kind, field_name
                )

        return merged

    def _references(self, entity: Entity) -> Tuple[str, ...]:
        """Entities named by own attribute, parameter and return types."""
        types = [a.type for a in entity.attributes]
        for method in entity.methods:
            types.append(method.return_type)
            types.extend(p.type for p in method.parameters)

        names = set()
        for type_ref in types:
            target = type_ref.referenced_entity()
            if target is None or target == entity.name:
                continue
            if not self.schema.has_entity(target):
                raise UnknownReferenceError(
                    f"Entity '{entity.name}' references unknown entity '{target}'",
                    entity.name,
                )
            names.add(target)

        return tuple(sorted(names))


def check_implemented(resolved: ResolvedEntity) -> None:
    """Fail if a concrete leaf still carries pure-virtual methods."""
    if resolved.entity.is_abstract or not resolved.is_leaf:
        return

    missing = resolved.unimplemented_methods
    if missing:
        names = ", ".join(f"{m.owner}.{m.name}" for m in missing)
        raise UnimplementedAbstractMethodError(
            f"Concrete entity '{resolved.name}' does not implement: {names}",
            resolved.name,
        )


def resolve(
    schema: Schema,
    check_abstract: bool = True,
    accessor_prefix: str = "get",
    mutator_prefix: str = "set",
) -> Dict[str, ResolvedEntity]:
    """
    Resolve the inheritance closure of every entity in a schema.

    Args:
        schema: Validated schema
        check_abstract: See HierarchyResolver
        accessor_prefix: Prefix of derived accessors in the merged method set
        mutator_prefix: Prefix of derived mutators in the merged method set

    Returns:
        Dict mapping entity name to ResolvedEntity, in declaration order

    Raises:
        ResolutionError: On cycles, conflicting redefinitions, invalid
            overrides, unknown references or unimplemented abstract methods
    """
    return HierarchyResolver(
        schema, check_abstract, accessor_prefix, mutator_prefix
    ).resolve()
