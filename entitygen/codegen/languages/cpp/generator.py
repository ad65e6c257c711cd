"""
C++ code generator implementation.

Renders each entity into a header (declaration unit) and, when definitions
are split, a source file (definition unit) using templates.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional

from ...core.config import GeneratorConfig, load_config
from ...core.generator import CodeGenerator, Diagnostic, OutputUnit, UnitKind
from ...core.members import EmittableEntity, Member, MemberKind
from ...core.schema import Attribute, Polymorphism, Schema, TypeKind
from .config import CppConfig
from .naming import cpp_namespace, create_cpp_sanitizer, include_guard
from .types import CppType, CppTypeMapper


class CppGenerator(CodeGenerator):
    """Code generator for C++ class headers."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize C++ generator with configuration."""
        super().__init__(config)

        self.sanitizer = create_cpp_sanitizer()
        self.cpp_config = CppConfig(**self.config.custom)
        self.type_mapper = CppTypeMapper(self.cpp_config)

    @property
    def language_name(self) -> str:
        """Return the language name."""
        return "cpp"

    def get_template_directory(self) -> Path:
        """Return the C++ templates directory."""
        return Path(__file__).parent / "templates"

    # Units

    def render(self, entity: EmittableEntity) -> OutputUnit:
        """Render the header of one entity."""
        text = self.render_template("header.h.j2", self._header_context(entity))
        return OutputUnit(
            id=self.unit_id(entity.name),
            entity_name=entity.name,
            kind=UnitKind.DECLARATION,
            dependencies=tuple(self.unit_id(name) for name in entity.dependencies),
            text=self.format_code(text),
        )

    def render_definition(self, entity: EmittableEntity) -> OutputUnit:
        """Render the source file holding out-of-line definitions."""
        header = self.unit_id(entity.name)
        context = {
            "source_comment": self.cpp_config.source_comment,
            "header": header,
            "namespace": self._namespace(entity),
            "definitions": [
                self._definition(entity, member, inline=False)
                for member in self._out_of_line_members(entity, split=True)
            ],
        }
        text = self.render_template("source.cpp.j2", context)
        return OutputUnit(
            id=self.unit_id(entity.name, UnitKind.DEFINITION),
            entity_name=entity.name,
            kind=UnitKind.DEFINITION,
            dependencies=(header,),
            text=self.format_code(text),
        )

    def render_units(self, entity: EmittableEntity) -> List[OutputUnit]:
        units = [self.render(entity)]
        if self.config.split_definitions:
            units.append(self.render_definition(entity))
        return units

    # Template contexts

    def _header_context(self, entity: EmittableEntity) -> Dict[str, Any]:
        split = self.config.split_definitions
        add_comments = self.config.add_comments
        fields = {
            visibility: [
                self._field(a) for a in entity.attributes if a.visibility.value == visibility
            ]
            for visibility in ("private", "protected", "public")
        }

        inline_definitions = []
        if not split:
            inline_definitions = [
                self._definition(entity, member, inline=True)
                for member in self._out_of_line_members(entity, split=False)
            ]

        return {
            "header_comment": self.cpp_config.header_comment,
            "guard": include_guard(
                self.sanitizer,
                entity.name,
                self.config.header_extension.lstrip(".").upper() or "H",
            ),
            "include_groups": self._include_groups(entity),
            "namespace": self._namespace(entity),
            "forward_declarations": [
                name for name in entity.references if name != entity.parent
            ],
            "class_name": entity.name,
            "base_class": entity.parent,
            "doc_lines": self._doc_lines(entity.documentation) if add_comments else [],
            "add_comments": add_comments,
            "indent": self.config.indent,
            "private_fields": fields["private"],
            "protected_fields": fields["protected"],
            "public_fields": fields["public"],
            "lifecycle": [
                self._declaration(entity, m)
                for m in entity.constructors + (entity.destructor,)
            ],
            "methods": [self._declaration(entity, m) for m in entity.methods],
            "accessors": [self._declaration(entity, m) for m in entity.accessors],
            "inline_definitions": inline_definitions,
        }

    def _namespace(self, entity: EmittableEntity) -> Optional[str]:
        if not entity.namespace:
            return None
        return cpp_namespace(entity.namespace) or None

    @staticmethod
    def _doc_lines(documentation: Optional[str]) -> List[str]:
        if not documentation:
            return []
        return [line.rstrip() for line in documentation.strip().splitlines()]

    def _include_groups(self, entity: EmittableEntity) -> List[Dict[str, Any]]:
        """Standard, project and entity includes; each sorted and deduplicated."""
        types: List[CppType] = []
        for attribute in entity.attributes:
            types.append(self._field_type(attribute))
        for member in entity.members:
            if member.return_type is not None:
                types.append(self._result_type(entity, member))
            types.extend(self.type_mapper.map_type(p.type) for p in member.parameters)

        standard = set(self.cpp_config.standard_includes)
        standard.update(self.type_mapper.get_all_includes(types))

        project = set(self.cpp_config.project_includes)
        if entity.parent:
            project.add(self._quoted_header(entity.parent))

        own = {
            self._quoted_header(name)
            for name in entity.references
            if name != entity.name
        }
        own -= project

        groups = [
            ("Standard library includes", standard),
            ("Project includes", project),
            ("Entity includes", own),
        ]
        return [
            {"title": title, "includes": sorted(includes)}
            for title, includes in groups
            if includes
        ]

    def _quoted_header(self, entity_name: str) -> str:
        return f'"{self.unit_id(entity_name)}"'

    # Declarations

    def _field_type(self, attribute: Attribute) -> CppType:
        if attribute.is_const_expr and attribute.type.kind == TypeKind.STRING:
            return CppType(
                "std::string_view", frozenset(["<string_view>"]), pass_by_value=True
            )
        return self.type_mapper.map_type(attribute.type)

    def _field(self, attribute: Attribute) -> str:
        cpp_type = self._field_type(attribute)
        if attribute.is_const_expr:
            return f"static constexpr {cpp_type.name} {attribute.name} = {attribute.default};"
        if attribute.default is not None:
            return f"{cpp_type.name} {attribute.name} = {attribute.default};"
        return f"{cpp_type.name} {attribute.name};"

    def _parameters(self, parameters: tuple, with_defaults: bool) -> str:
        parts = []
        for parameter in parameters:
            text = f"{self.type_mapper.map_type(parameter.type).parameter} {parameter.name}"
            if with_defaults and parameter.default is not None:
                text += f" = {parameter.default}"
            parts.append(text)
        return ", ".join(parts)

    def _result_type(self, entity: EmittableEntity, member: Member) -> CppType:
        """Accessors return the declared field type, which differs for constants."""
        if member.kind == MemberKind.ACCESSOR:
            for attribute in entity.attributes:
                if attribute.name == member.field:
                    return self._field_type(attribute)
        return self.type_mapper.map_type(member.return_type)

    def _return_type(self, entity: EmittableEntity, member: Member) -> str:
        cpp_type = self._result_type(entity, member)
        if member.kind == MemberKind.ACCESSOR:
            return cpp_type.returned
        return cpp_type.name

    def _is_inline(self, member: Member) -> bool:
        """Whether the member's body is written inside the class body."""
        if member.kind in (MemberKind.ACCESSOR, MemberKind.MUTATOR):
            return self.config.inline_accessors
        if member.kind == MemberKind.METHOD:
            return member.has_body and not member.is_pure
        return False

    def _declaration(self, entity: EmittableEntity, member: Member) -> str:
        """In-class declaration of a member, possibly with an inline body."""
        if member.kind == MemberKind.CONSTRUCTOR:
            explicit = "explicit " if member.is_explicit else ""
            params = self._parameters(member.parameters, with_defaults=True)
            return f"{explicit}{entity.name}({params});"

        if member.kind == MemberKind.DESTRUCTOR:
            virtual = "virtual " if member.is_virtual else ""
            return f"{virtual}{member.name}();"

        prefix = ""
        if member.polymorphism in (Polymorphism.VIRTUAL, Polymorphism.PURE_VIRTUAL):
            prefix = "virtual "
        params = self._parameters(member.parameters, with_defaults=True)
        signature = f"{prefix}{self._return_type(entity, member)} {member.name}({params})"
        signature += self._qualifiers(member)
        if member.polymorphism == Polymorphism.OVERRIDE:
            signature += " override"

        if member.is_pure:
            declaration = f"{signature} = 0;"
        elif self._is_inline(member):
            declaration = self._with_body(signature, self._body_lines(member))
        else:
            declaration = f"{signature};"

        if member.documentation and self.config.add_comments:
            docs = "\n".join(f"/// {line}" for line in self._doc_lines(member.documentation))
            declaration = f"{docs}\n{declaration}"
        return declaration

    @staticmethod
    def _qualifiers(member: Member) -> str:
        qualifiers = ""
        if member.is_const:
            qualifiers += " const"
        if member.is_noexcept:
            qualifiers += " noexcept"
        return qualifiers

    def _with_body(self, signature: str, lines: List[str]) -> str:
        if not lines:
            return f"{signature} {{}}"
        if len(lines) == 1:
            return f"{signature} {{ {lines[0]} }}"
        indent = self.config.indent
        body = "\n".join(f"{indent}{line}" if line else "" for line in lines)
        return f"{signature} {{\n{body}\n}}"

    def _body_lines(self, member: Member) -> List[str]:
        if member.kind == MemberKind.ACCESSOR:
            return [f"return {member.field};"]

        if member.kind == MemberKind.MUTATOR:
            value_type = self.type_mapper.map_type(member.parameters[0].type)
            return [f"{member.field} = {value_type.assign('value')};"]

        if member.body:
            return [line.rstrip() for line in member.body.strip("\n").splitlines()]
        if member.return_type is not None and not member.return_type.is_void:
            return ["return {};"]
        return []

    # Out-of-line definitions

    def _out_of_line_members(self, entity: EmittableEntity, split: bool) -> List[Member]:
        """
        Members defined outside the class body.

        Constructors, the destructor and non-inline accessors always are.
        Declaration-only methods get stub definitions in the source file only.
        """
        members = list(entity.constructors) + [entity.destructor]
        if split:
            members.extend(
                m for m in entity.methods if not m.is_pure and not self._is_inline(m)
            )
        members.extend(m for m in entity.accessors if not self._is_inline(m))
        return members

    def _definition(self, entity: EmittableEntity, member: Member, inline: bool) -> str:
        prefix = "inline " if inline else ""
        name = entity.name

        if member.kind == MemberKind.CONSTRUCTOR:
            params = self._parameters(member.parameters, with_defaults=False)
            if not member.initializes:
                return f"{prefix}{name}::{name}({params}) = default;"
            initializers = ", ".join(
                f"{p.name}({self.type_mapper.map_type(p.type).assign(p.name)})"
                for p in member.parameters
            )
            indent = self.config.indent
            return f"{prefix}{name}::{name}({params})\n{indent}: {initializers} {{}}"

        if member.kind == MemberKind.DESTRUCTOR:
            return f"{prefix}{name}::{member.name}() = default;"

        params = self._parameters(member.parameters, with_defaults=False)
        signature = (
            f"{prefix}{self._return_type(entity, member)} {name}::{member.name}({params})"
            f"{self._qualifiers(member)}"
        )
        lines = self._body_lines(member)
        if not lines:
            return f"{signature} {{\n}}"
        indent = self.config.indent
        body = "\n".join(f"{indent}{line}" if line else "" for line in lines)
        return f"{signature} {{\n{body}\n}}"

    # Validation

    def validate_schema(self, schema: Schema) -> List[Diagnostic]:
        """Add C++ keyword checks to the base naming checks."""
        warnings = super().validate_schema(schema)

        for entity in schema:
            names = [("Entity", entity.name)]
            names.extend(("Attribute", a.name) for a in entity.attributes)
            for method in entity.methods:
                names.append(("Method", method.name))
                names.extend(("Parameter", p.name) for p in method.parameters)

            for label, name in names:
                if self.sanitizer.is_reserved(name):
                    warnings.append(
                        Diagnostic.warning(
                            entity.name,
                            f"{label} name '{name}' in {entity.name} is a C++ "
                            f"reserved word; the generated code will not compile",
                            "ReservedWord",
                        )
                    )

        return warnings


def create_cpp_generator(config: Optional[Dict[str, Any]] = None) -> CppGenerator:
    """Create a C++ generator from a plain configuration dict."""
    return CppGenerator(load_config("cpp", custom_config=config))
