"""
Core code generation components.

Provides the schema model, hierarchy resolution, member synthesis and the
base classes used by all language generators.
"""

from .errors import (
    GeneratorError,
    SchemaError,
    InvalidSchemaError,
    EntityNotFoundError,
    ResolutionError,
    UnknownParentError,
    UnknownReferenceError,
    CyclicInheritanceError,
    AttributeTypeConflictError,
    InvalidOverrideError,
    UnimplementedAbstractMethodError,
    SynthesisError,
    DuplicateMethodSignatureError,
)
from .schema import (
    Schema,
    Entity,
    Attribute,
    Method,
    Parameter,
    TypeRef,
    TypeKind,
    Visibility,
    Mutability,
    Polymorphism,
    parse_type,
    schema_from_dict,
)
from .resolver import HierarchyResolver, ResolvedEntity, ResolvedMethod, resolve
from .members import EmittableEntity, Member, MemberKind, MemberSynthesizer, synthesize
from .generator import (
    CodeGenerator,
    Diagnostic,
    GenerationResult,
    OutputUnit,
    Severity,
    UnitKind,
    generate_code,
)
from .naming import NameSanitizer, NamingCase, accessor_name, capitalize_first
from .config import GeneratorConfig, ConfigManager, ConfigError, load_config
from .templates import TemplateEngine, TemplateError, create_template_engine

__all__ = [
    # Errors
    "GeneratorError",
    "SchemaError",
    "InvalidSchemaError",
    "EntityNotFoundError",
    "ResolutionError",
    "UnknownParentError",
    "UnknownReferenceError",
    "CyclicInheritanceError",
    "AttributeTypeConflictError",
    "InvalidOverrideError",
    "UnimplementedAbstractMethodError",
    "SynthesisError",
    "DuplicateMethodSignatureError",
    # Schema model
    "Schema",
    "Entity",
    "Attribute",
    "Method",
    "Parameter",
    "TypeRef",
    "TypeKind",
    "Visibility",
    "Mutability",
    "Polymorphism",
    "parse_type",
    "schema_from_dict",
    # Resolution and synthesis
    "HierarchyResolver",
    "ResolvedEntity",
    "ResolvedMethod",
    "resolve",
    "EmittableEntity",
    "Member",
    "MemberKind",
    "MemberSynthesizer",
    "synthesize",
    # Generator interface and driver
    "CodeGenerator",
    "Diagnostic",
    "GenerationResult",
    "OutputUnit",
    "Severity",
    "UnitKind",
    "generate_code",
    # Naming utilities
    "NameSanitizer",
    "NamingCase",
    "accessor_name",
    "capitalize_first",
    # Configuration system
    "GeneratorConfig",
    "ConfigManager",
    "ConfigError",
    "load_config",
    # Template system
    "TemplateEngine",
    "TemplateError",
    "create_template_engine",
]
