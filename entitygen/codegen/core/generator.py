"""
Base generator interface and generation driver.

Defines the contract that all language generators must implement, the
output records they produce, and the driver that runs
resolve -> synthesize -> render over a whole schema.
"""

import re
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ...logging_config import get_logger
from .config import GeneratorConfig
from .errors import GeneratorError, ResolutionError
from .members import EmittableEntity, MemberSynthesizer
from .resolver import ResolvedEntity, resolve
from .schema import Schema
from .templates import TemplateEngine, create_template_engine

logger = get_logger(__name__)

MAX_NAME_LENGTH = 100
NAMESPACE_PATTERN = re.compile(r"^[a-z][a-z0-9_]*(\.[a-z][a-z0-9_]*)*$")


class UnitKind(Enum):
    DECLARATION = "declaration"
    DEFINITION = "definition"


@dataclass(frozen=True)
class OutputUnit:
    """One named block of generated text plus the units it depends on."""

    id: str
    entity_name: str
    kind: UnitKind
    dependencies: Tuple[str, ...]
    text: str


class Severity(Enum):
    FATAL = "fatal"
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Diagnostic:
    """A problem reported during generation."""

    severity: Severity
    entity_name: Optional[str]
    message: str
    error_kind: str

    @classmethod
    def from_error(cls, error: Exception, severity: Severity) -> "Diagnostic":
        return cls(
            severity=severity,
            entity_name=getattr(error, "entity_name", None),
            message=str(error),
            error_kind=getattr(error, "error_kind", type(error).__name__),
        )

    @classmethod
    def warning(
        cls, entity_name: Optional[str], message: str, kind: str = "Warning"
    ) -> "Diagnostic":
        return cls(Severity.WARNING, entity_name, message, kind)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "entity_name": self.entity_name,
            "message": self.message,
            "error_kind": self.error_kind,
        }


class CodeGenerator(ABC):
    """Abstract base class for all code generators."""

    def __init__(self, config: Optional[GeneratorConfig] = None):
        """Initialize generator with optional configuration."""
        self.config = config or GeneratorConfig()
        self._template_engine = None
        self._setup_templates()

    def _setup_templates(self):
        """Setup template engine for this generator."""
        self._template_engine = create_template_engine(self.get_template_directory())

    @property
    @abstractmethod
    def language_name(self) -> str:
        """Return the name of the target language (e.g., 'cpp')."""
        pass

    @property
    def file_extension(self) -> str:
        """Extension of declaration units."""
        return self.config.header_extension

    @property
    def definition_extension(self) -> str:
        """Extension of definition units."""
        return self.config.source_extension

    def get_template_directory(self) -> Optional[Path]:
        """
        Return the directory containing templates for this generator.

        Return None to use in-memory templates only.
        """
        return None

    @property
    def template_engine(self) -> TemplateEngine:
        """Get the template engine for this generator."""
        if self._template_engine is None:
            self._setup_templates()
        return self._template_engine

    def unit_id(self, entity_name: str, kind: UnitKind = UnitKind.DECLARATION) -> str:
        """Identifier of an entity's output unit, e.g. 'Person.h'."""
        if kind == UnitKind.DEFINITION:
            return f"{entity_name}{self.definition_extension}"
        return f"{entity_name}{self.file_extension}"

    @abstractmethod
    def render(self, entity: EmittableEntity) -> OutputUnit:
        """
        Render the declaration unit of one entity.

        Must be a pure function of the entity and the configuration.
        """
        pass

    def render_units(self, entity: EmittableEntity) -> List[OutputUnit]:
        """Render every unit of an entity. One unit unless overridden."""
        return [self.render(entity)]

    def validate_schema(self, schema: Schema) -> List[Diagnostic]:
        """
        Check naming conventions of a schema.

        Language generators should extend this with language-specific checks.

        Returns:
            List of warning diagnostics (empty if no issues)
        """
        warnings = []

        namespace = self.config.namespace or schema.namespace
        if namespace and not NAMESPACE_PATTERN.match(namespace):
            warnings.append(
                Diagnostic.warning(
                    None,
                    f"Namespace should be lowercase with dots: {namespace}",
                    "NamingConvention",
                )
            )

        for entity in schema:
            if not entity.name[0].isupper():
                warnings.append(
                    Diagnostic.warning(
                        entity.name,
                        f"Entity name should start with an uppercase letter: {entity.name}",
                        "NamingConvention",
                    )
                )
            if len(entity.name) > MAX_NAME_LENGTH:
                warnings.append(
                    Diagnostic.warning(
                        entity.name,
                        f"Entity name is too long: {entity.name}",
                        "NamingConvention",
                    )
                )
            if not entity.attributes and not entity.methods:
                warnings.append(
                    Diagnostic.warning(
                        entity.name,
                        f"Entity '{entity.name}' has no attributes or methods",
                        "EmptyEntity",
                    )
                )

            for attribute in entity.attributes:
                if not attribute.name[0].islower() and not attribute.is_const_expr:
                    warnings.append(
                        Diagnostic.warning(
                            entity.name,
                            f"Attribute name should start with a lowercase letter: "
                            f"{entity.name}.{attribute.name}",
                            "NamingConvention",
                        )
                    )
                if len(attribute.name) > MAX_NAME_LENGTH:
                    warnings.append(
                        Diagnostic.warning(
                            entity.name,
                            f"Attribute name is too long: {entity.name}.{attribute.name}",
                            "NamingConvention",
                        )
                    )

        return warnings

    def format_code(self, code: str) -> str:
        """
        Apply language-independent cleanup to generated code.

        Strips trailing whitespace, collapses runs of blank lines to one,
        ends the text with exactly one line ending.
        """
        formatted_lines = []
        blank_count = 0

        for line in code.split("\n"):
            stripped = line.rstrip()
            if not stripped:
                blank_count += 1
                if blank_count <= 1 and formatted_lines:
                    formatted_lines.append("")
            else:
                blank_count = 0
                formatted_lines.append(stripped)

        while formatted_lines and not formatted_lines[-1]:
            formatted_lines.pop()

        ending = self.config.line_ending
        return ending.join(formatted_lines) + ending

    # Template helper methods

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """Render a template with context."""
        return self.template_engine.render_template(template_name, context)

    def template_exists(self, template_name: str) -> bool:
        """Check if a template exists."""
        return self.template_engine.template_exists(template_name)


@dataclass
class GenerationResult:
    """Container for generation results and metadata."""

    units: Dict[str, OutputUnit] = field(default_factory=dict)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def fatal(
        cls, diagnostic: Diagnostic, metadata: Optional[Dict[str, Any]] = None
    ) -> "GenerationResult":
        """Create a failed generation result: no units, one fatal diagnostic."""
        return cls(units={}, diagnostics=[diagnostic], metadata=metadata or {})

    @property
    def success(self) -> bool:
        return not any(d.severity == Severity.FATAL for d in self.diagnostics)

    @property
    def has_errors(self) -> bool:
        return any(d.severity != Severity.WARNING for d in self.diagnostics)

    @property
    def error_message(self) -> Optional[str]:
        for diagnostic in self.diagnostics:
            if diagnostic.severity == Severity.FATAL:
                return diagnostic.message
        return None

    @property
    def warnings(self) -> List[str]:
        return [
            d.message for d in self.diagnostics if d.severity == Severity.WARNING
        ]

    def units_for(self, entity_name: str) -> List[OutputUnit]:
        return [u for u in self.units.values() if u.entity_name == entity_name]

    def build_order(self) -> List[str]:
        """
        Unit ids ordered so that every unit follows its dependencies.

        Dependencies on units missing from the result are ignored; ties are
        broken alphabetically.
        """
        pending = {
            uid: {d for d in unit.dependencies if d in self.units}
            for uid, unit in self.units.items()
        }
        ordered: List[str] = []

        while pending:
            ready = sorted(uid for uid, deps in pending.items() if not deps)
            if not ready:
                # Mutual references between units; fall back to id order
                ready = sorted(pending)
            for uid in ready:
                ordered.append(uid)
                del pending[uid]
            for deps in pending.values():
                deps.difference_update(ready)

        return ordered


@dataclass
class _EntityOutcome:
    entity_name: str
    units: List[OutputUnit]
    diagnostics: List[Diagnostic]


def _render_entity(
    generator: CodeGenerator,
    synthesizer: MemberSynthesizer,
    resolved: ResolvedEntity,
) -> _EntityOutcome:
    """Synthesize and render one entity; failures become one diagnostic."""
    try:
        emittable = synthesizer.synthesize(resolved)
        units = generator.render_units(emittable)
    except GeneratorError as e:
        logger.warning("Skipping %s: %s", resolved.name, e)
        return _EntityOutcome(
            resolved.name, [], [Diagnostic.from_error(e, Severity.ERROR)]
        )

    notes = [
        Diagnostic.warning(resolved.name, note, "SynthesisNote")
        for note in emittable.notes
    ]
    return _EntityOutcome(resolved.name, units, notes)


def generate_code(generator: CodeGenerator, schema: Schema) -> GenerationResult:
    """
    Generate output units for a whole schema with error handling.

    Resolution failures abort the run with a single fatal diagnostic.
    Synthesis and render failures only drop the affected entity.

    Args:
        generator: Code generator instance
        schema: Schema to generate code for

    Returns:
        GenerationResult with units, diagnostics and metadata
    """
    metadata = {
        "language": generator.language_name,
        "file_extension": generator.file_extension,
        "entity_count": len(schema),
    }

    try:
        diagnostics = generator.validate_schema(schema)

        try:
            resolved = resolve(
                schema,
                accessor_prefix=generator.config.accessor_prefix,
                mutator_prefix=generator.config.mutator_prefix,
            )
        except ResolutionError as e:
            logger.error("Resolution failed: %s", e)
            return GenerationResult.fatal(
                Diagnostic.from_error(e, Severity.FATAL), metadata
            )

        synthesizer = MemberSynthesizer(generator.config)
        names = sorted(resolved)

        def task(name: str) -> _EntityOutcome:
            return _render_entity(generator, synthesizer, resolved[name])

        workers = max(1, generator.config.max_workers)
        if workers > 1 and len(names) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                outcomes = list(pool.map(task, names))
        else:
            outcomes = [task(name) for name in names]

        # pool.map preserves input order, so the merge is sorted by entity name
        units: Dict[str, OutputUnit] = {}
        for outcome in outcomes:
            for unit in outcome.units:
                units[unit.id] = unit
            diagnostics.extend(outcome.diagnostics)

        metadata.update(
            {
                "unit_count": len(units),
                "root_entities": [e.name for e in schema if not e.parent],
                "failed_entities": [o.entity_name for o in outcomes if not o.units],
            }
        )
        logger.info(
            "Generated %d units for %d entities (%d diagnostics)",
            len(units),
            len(names),
            len(diagnostics),
        )
        return GenerationResult(
            units=dict(sorted(units.items())),
            diagnostics=diagnostics,
            metadata=metadata,
        )

    except Exception as e:
        logger.exception("Code generation failed")
        return GenerationResult.fatal(
            Diagnostic(
                Severity.FATAL,
                None,
                f"Code generation failed: {e}",
                getattr(e, "error_kind", type(e).__name__),
            ),
            metadata,
        )
