"""
Member synthesis.

Turns a resolved entity into an emittable one: constructors, destructor,
accessors and mutators derived from attributes, and the entity's explicit
methods tagged with their resolved dispatch kind.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from ...logging_config import get_logger
from .config import GeneratorConfig
from .errors import DuplicateMethodSignatureError
from .naming import accessor_name
from .resolver import ResolvedEntity, check_implemented
from .schema import Attribute, Parameter, Polymorphism, TypeRef

logger = get_logger(__name__)


class MemberKind(Enum):
    CONSTRUCTOR = "constructor"
    DESTRUCTOR = "destructor"
    METHOD = "method"
    ACCESSOR = "accessor"
    MUTATOR = "mutator"


@dataclass(frozen=True)
class Member:
    """A language-neutral member declaration ready for rendering."""

    kind: MemberKind
    name: str
    return_type: Optional[TypeRef] = None
    parameters: Tuple[Parameter, ...] = ()
    is_const: bool = False
    polymorphism: Polymorphism = Polymorphism.NONE
    is_explicit: bool = False
    is_noexcept: bool = False
    field: Optional[str] = None  # Attribute read or written by accessors
    initializes: Tuple[str, ...] = ()  # Attributes set by a constructor
    has_body: bool = False
    body: Optional[str] = None
    documentation: Optional[str] = None

    @property
    def signature(self) -> Tuple[str, Tuple[TypeRef, ...]]:
        return (self.name, tuple(p.type for p in self.parameters))

    @property
    def is_virtual(self) -> bool:
        return self.polymorphism.is_dispatched

    @property
    def is_pure(self) -> bool:
        return self.polymorphism == Polymorphism.PURE_VIRTUAL


@dataclass(frozen=True)
class EmittableEntity:
    """Everything a generator needs to render one entity."""

    name: str
    parent: Optional[str]
    namespace: Optional[str]
    documentation: Optional[str]
    attributes: Tuple[Attribute, ...]  # Own attributes only
    constructors: Tuple[Member, ...]
    destructor: Member
    methods: Tuple[Member, ...]  # Explicit methods, declaration order
    accessors: Tuple[Member, ...]  # Accessors and mutators, attribute order
    dependencies: Tuple[str, ...]  # Entity names: parent first, then references
    references: Tuple[str, ...]
    is_abstract: bool = False
    notes: Tuple[str, ...] = ()  # Non-fatal remarks collected during synthesis

    @property
    def members(self) -> Tuple[Member, ...]:
        """All members in emission order."""
        return self.constructors + (self.destructor,) + self.methods + self.accessors


class MemberSynthesizer:
    """Synthesizes members for resolved entities using naming conventions."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        self.config = config or GeneratorConfig()

    def synthesize(self, resolved: ResolvedEntity) -> EmittableEntity:
        """
        Build the emittable form of one resolved entity.

        Raises:
            UnimplementedAbstractMethodError: Concrete leaf with pure-virtual methods
            DuplicateMethodSignatureError: Colliding member signatures
        """
        check_implemented(resolved)

        notes: List[str] = []
        methods = self._explicit_methods(resolved)
        accessors = self._accessors(resolved, notes)
        self._check_signatures(resolved, methods, accessors)

        emittable = EmittableEntity(
            name=resolved.name,
            parent=resolved.parent,
            namespace=self.config.namespace or resolved.namespace,
            documentation=resolved.entity.documentation,
            attributes=resolved.entity.attributes,
            constructors=self._constructors(resolved),
            destructor=self._destructor(resolved),
            methods=methods,
            accessors=accessors,
            dependencies=resolved.dependencies,
            references=resolved.references,
            is_abstract=resolved.is_abstract,
            notes=tuple(notes),
        )
        logger.debug(
            "Synthesized %s: %d members", resolved.name, len(emittable.members)
        )
        return emittable

    def _constructors(self, resolved: ResolvedEntity) -> Tuple[Member, ...]:
        constructors = [Member(MemberKind.CONSTRUCTOR, resolved.name)]

        required = [a for a in resolved.entity.attributes if a.is_required]
        if required:
            constructors.append(
                Member(
                    MemberKind.CONSTRUCTOR,
                    resolved.name,
                    parameters=tuple(Parameter(a.name, a.type) for a in required),
                    is_explicit=len(required) == 1,
                    initializes=tuple(a.name for a in required),
                )
            )

        return tuple(constructors)

    def _destructor(self, resolved: ResolvedEntity) -> Member:
        # Every ancestor has at least one child, so any entity with a parent
        # inherits a virtual destructor.
        virtual = (
            resolved.child_count > 0
            or bool(resolved.ancestors)
            or resolved.is_polymorphic
        )
        return Member(
            MemberKind.DESTRUCTOR,
            f"~{resolved.name}",
            polymorphism=Polymorphism.VIRTUAL if virtual else Polymorphism.NONE,
        )

    def _explicit_methods(self, resolved: ResolvedEntity) -> Tuple[Member, ...]:
        members = []
        for resolved_method in resolved.own_methods():
            method = resolved_method.method
            members.append(
                Member(
                    MemberKind.METHOD,
                    method.name,
                    return_type=method.return_type,
                    parameters=method.parameters,
                    is_const=method.is_const,
                    polymorphism=resolved_method.kind,
                    is_noexcept=method.is_noexcept,
                    has_body=method.has_body,
                    body=method.body,
                    documentation=method.documentation,
                )
            )
        return tuple(members)

    def _accessors(
        self, resolved: ResolvedEntity, notes: List[str]
    ) -> Tuple[Member, ...]:
        members = []
        for attribute in resolved.entity.attributes:
            if attribute.derives_accessor:
                members.append(
                    Member(
                        MemberKind.ACCESSOR,
                        accessor_name(self.config.accessor_prefix, attribute.name),
                        return_type=attribute.type,
                        is_const=True,
                        field=attribute.name,
                    )
                )
            if attribute.derives_mutator:
                if attribute.is_const_expr:
                    notes.append(
                        f"Mutator skipped for constant attribute "
                        f"{resolved.name}.{attribute.name}"
                    )
                    continue
                members.append(
                    Member(
                        MemberKind.MUTATOR,
                        accessor_name(self.config.mutator_prefix, attribute.name),
                        return_type=TypeRef.primitive("void"),
                        parameters=(Parameter("value", attribute.type),),
                        field=attribute.name,
                    )
                )
        return tuple(members)

    def _check_signatures(
        self,
        resolved: ResolvedEntity,
        methods: Tuple[Member, ...],
        accessors: Tuple[Member, ...],
    ) -> None:
        seen: Dict[Tuple, Member] = {m.signature: m for m in methods}

        for member in accessors:
            other = seen.get(member.signature)
            if other is not None:
                raise DuplicateMethodSignatureError(
                    f"Synthesized {member.kind.value} {resolved.name}.{member.name} "
                    f"collides with {other.kind.value} {other.name}",
                    resolved.name,
                )
            seen[member.signature] = member

        # Inherited accessors and mutators are non-virtual, so an explicit
        # method may not hide them. A same-named attribute may re-derive them.
        for member in methods + accessors:
            inherited = resolved.inherited_methods.get(member.signature)
            if inherited is None or inherited.kind.is_dispatched:
                continue
            if member.kind != MemberKind.METHOD and inherited.is_derived:
                continue
            origin = "derived " if inherited.is_derived else ""
            raise DuplicateMethodSignatureError(
                f"{resolved.name}.{member.name} redeclares non-virtual "
                f"{origin}{inherited.owner}.{inherited.name}",
                resolved.name,
            )


def synthesize(
    resolved: ResolvedEntity, config: Optional[GeneratorConfig] = None
) -> EmittableEntity:
    """Convenience wrapper around MemberSynthesizer."""
    return MemberSynthesizer(config).synthesize(resolved)
