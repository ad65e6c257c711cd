"""
Entity Code Generation Module

Generates class definitions from entity schemas with inheritance.
"""

from typing import Dict

from .registry import (
    GeneratorRegistry,
    RegistryError,
    get_generator,
    get_language_info,
    list_supported_languages,
)
from .core.errors import GeneratorError, SchemaError
from .core.generator import (
    CodeGenerator,
    Diagnostic,
    GenerationResult,
    OutputUnit,
    Severity,
    generate_code,
)
from .core.schema import Schema, Entity, Attribute, Method, schema_from_dict
from .core.resolver import resolve
from .core.members import synthesize
from .core.config import GeneratorConfig, ConfigManager, load_config
from ..logging_config import get_logger

logger = get_logger(__name__)

# Version info
__version__ = "0.1.0"


def generate_from_document(document, language="cpp", config=None) -> GenerationResult:
    """
    Generate output units from a schema document.

    Args:
        document: Parsed schema document (see schema_from_dict)
        language: Target language name
        config: Generator configuration object, dict or path

    Returns:
        GenerationResult; loader errors become a single fatal diagnostic
    """
    generator = get_generator(language, config)

    try:
        schema = schema_from_dict(document)
    except SchemaError as e:
        logger.error("Invalid schema document: %s", e)
        return GenerationResult.fatal(
            Diagnostic.from_error(e, Severity.FATAL),
            {"language": generator.language_name},
        )

    return generate_code(generator, schema)


def quick_generate(document, language="cpp", **options) -> Dict[str, str]:
    """
    Quick code generation from a schema document.

    Returns:
        Dict mapping unit id to generated text
    """
    result = generate_from_document(document, language, options or None)

    if result.success:
        return {uid: unit.text for uid, unit in result.units.items()}
    else:
        raise RuntimeError(f"Code generation failed: {result.error_message}")


# Export main interfaces
__all__ = [
    "GeneratorRegistry",
    "RegistryError",
    "CodeGenerator",
    "GenerationResult",
    "OutputUnit",
    "Diagnostic",
    "Severity",
    "GeneratorError",
    "Schema",
    "Entity",
    "Attribute",
    "Method",
    "GeneratorConfig",
    "ConfigManager",
    "load_config",
    "schema_from_dict",
    "resolve",
    "synthesize",
    "generate_code",
    "generate_from_document",
    "quick_generate",
    "get_generator",
    "get_language_info",
    "list_supported_languages",
]
