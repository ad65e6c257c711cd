"""
Naming utilities for safe code generation.

Handles case conversions, accessor naming and keyword conflicts across
target languages.
"""

import re
from typing import Dict, Optional, Set
from enum import Enum


class NamingCase(Enum):
    """Different naming case styles."""

    SNAKE_CASE = "snake"  # user_name
    CAMEL_CASE = "camel"  # userName
    PASCAL_CASE = "pascal"  # UserName
    SCREAMING_SNAKE = "screaming_snake"  # USER_NAME


def capitalize_first(name: str) -> str:
    """Upper-case the first character only: employeeId -> EmployeeId."""
    return name[:1].upper() + name[1:]


def accessor_name(prefix: str, attribute_name: str) -> str:
    """Build an accessor/mutator name such as getName or setSalary."""
    if not prefix:
        return attribute_name
    return f"{prefix}{capitalize_first(attribute_name)}"


class NameSanitizer:
    """Handles case conversion and reserved-word checks."""

    def __init__(
        self,
        reserved_words: Optional[Set[str]] = None,
        builtin_types: Optional[Set[str]] = None,
    ):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Set of language reserved words
            builtin_types: Set of builtin type names that might conflict
        """
        self.reserved_words = reserved_words or set()
        self.builtin_types = builtin_types or set()
        self._name_cache: Dict[str, str] = {}

    def is_reserved(self, name: str) -> bool:
        """True if the name is a keyword or builtin type of the target language."""
        return name in self.reserved_words or name in self.builtin_types

    def convert(self, name: str, target_case: NamingCase) -> str:
        """Convert a name to the target case, caching results."""
        cache_key = f"{name}_{target_case.value}"
        if cache_key not in self._name_cache:
            self._name_cache[cache_key] = self._convert_case(
                self._clean_basic(name), target_case
            )
        return self._name_cache[cache_key]

    def sanitize_name(
        self,
        name: str,
        target_case: NamingCase = NamingCase.SNAKE_CASE,
        suffix_on_conflict: str = "_",
    ) -> str:
        """
        Convert a name and append a suffix if it collides with a keyword.

        Args:
            name: Original name to sanitize
            target_case: Desired case style
            suffix_on_conflict: Suffix to add for conflicts

        Returns:
            Sanitized name safe for use
        """
        converted = self.convert(name, target_case)
        if self.is_reserved(converted):
            converted = f"{converted}{suffix_on_conflict}"
        return converted

    def _clean_basic(self, name: str) -> str:
        """Basic name cleanup - remove invalid characters."""
        cleaned = re.sub(r"[^a-zA-Z0-9_-]", "_", name)
        cleaned = cleaned.strip("_-")

        # Ensure doesn't start with number
        if cleaned and cleaned[0].isdigit():
            cleaned = f"_{cleaned}"

        return cleaned or "unnamed"

    def _convert_case(self, name: str, target_case: NamingCase) -> str:
        """Convert name to target case style."""
        if target_case == NamingCase.SNAKE_CASE:
            return self._to_snake_case(name)
        elif target_case == NamingCase.CAMEL_CASE:
            return self._to_camel_case(name)
        elif target_case == NamingCase.PASCAL_CASE:
            return self._to_pascal_case(name)
        elif target_case == NamingCase.SCREAMING_SNAKE:
            return self._to_snake_case(name).upper()
        else:
            return name

    def _to_snake_case(self, name: str) -> str:
        """Convert to snake_case."""
        name = name.replace("-", "_")

        # Split acronym runs (HTTPServer -> HTTP_Server) and lower/upper joins
        name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
        name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)

        name = name.lower()
        name = re.sub(r"_+", "_", name)

        return name.strip("_")

    def _to_camel_case(self, name: str) -> str:
        """Convert to camelCase."""
        parts = self._to_snake_case(name).split("_")
        return parts[0] + "".join(part.capitalize() for part in parts[1:])

    def _to_pascal_case(self, name: str) -> str:
        """Convert to PascalCase."""
        parts = self._to_snake_case(name).split("_")
        return "".join(part.capitalize() for part in parts if part)
