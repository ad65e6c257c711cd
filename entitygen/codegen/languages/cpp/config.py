"""
C++-specific configuration and validation.

Reads the language-specific settings out of GeneratorConfig.custom.
"""

from enum import Enum
from typing import Any, Dict, List

from ...core.config import ConfigError


class ReferenceStyle(Enum):
    """How reference-typed attributes hold other entities."""

    SHARED_PTR = "shared_ptr"
    UNIQUE_PTR = "unique_ptr"
    RAW = "raw"


VALID_COLLECTION_TYPES = {"std::vector", "std::list", "std::deque"}


class CppConfig:
    """C++-specific configuration."""

    def __init__(self, **kwargs):
        """Initialize C++ configuration from GeneratorConfig.custom."""
        style = kwargs.get("reference_style", "shared_ptr")
        if isinstance(style, ReferenceStyle):
            self.reference_style = style
        else:
            try:
                self.reference_style = ReferenceStyle(style)
            except ValueError:
                raise ConfigError(f"Invalid reference_style: {style}") from None

        self.string_type = kwargs.get("string_type", "std::string")
        self.collection_type = kwargs.get("collection_type", "std::vector")
        self.standard_includes = self._includes(kwargs.get("standard_includes", []))
        self.project_includes = self._includes(kwargs.get("project_includes", []))
        self.type_overrides: Dict[str, str] = dict(kwargs.get("type_overrides", {}))
        self.header_comment = kwargs.get(
            "header_comment", "Auto-generated C++ header file"
        )
        self.source_comment = kwargs.get(
            "source_comment", "Auto-generated C++ source file"
        )

        self._validate()

    @staticmethod
    def _includes(values: Any) -> List[str]:
        if isinstance(values, str):
            values = [values]
        return [str(v) for v in values]

    def _validate(self):
        if self.collection_type not in VALID_COLLECTION_TYPES:
            raise ConfigError(f"Invalid collection_type: {self.collection_type}")

        for include in self.standard_includes + self.project_includes:
            if not (
                (include.startswith("<") and include.endswith(">"))
                or (include.startswith('"') and include.endswith('"'))
            ):
                raise ConfigError(
                    f"Include must be written as <header> or \"header\": {include}"
                )
