"""
Exception hierarchy for code generation.

Schema errors carry the offending entity name so the driver can turn every
failure into exactly one diagnostic record.
"""

from typing import Optional


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    def __init__(self, message: str, entity_name: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.entity_name = entity_name

    @property
    def error_kind(self) -> str:
        """Name of the violated rule, e.g. 'CyclicInheritanceError'."""
        return type(self).__name__


class SchemaError(GeneratorError):
    """Structural problem in the entity schema."""

    pass


class InvalidSchemaError(SchemaError):
    """The upstream loader broke the schema contract (names, duplicates)."""

    pass


class EntityNotFoundError(SchemaError):
    """Lookup of an entity name that is not part of the schema."""

    pass


class ResolutionError(SchemaError):
    """Whole-graph error found while resolving the hierarchy. Fatal to a run."""

    pass


class UnknownParentError(ResolutionError):
    """An entity declares a parent that the schema does not contain."""

    pass


class UnknownReferenceError(ResolutionError):
    """A reference-typed member points at an entity missing from the schema."""

    pass


class CyclicInheritanceError(ResolutionError):
    """An entity is (directly or transitively) its own ancestor."""

    pass


class AttributeTypeConflictError(ResolutionError):
    """A redefined attribute changes the type declared by an ancestor."""

    pass


class InvalidOverrideError(ResolutionError):
    """An override matches no ancestor virtual method, or changes its contract."""

    pass


class UnimplementedAbstractMethodError(ResolutionError):
    """A concrete entity leaves an inherited pure-virtual method unimplemented."""

    pass


class SynthesisError(SchemaError):
    """Per-entity error found while synthesizing members."""

    pass


class DuplicateMethodSignatureError(SynthesisError):
    """Two members of one entity end up with the same signature."""

    pass
