"""
C++ code generator module.

Generates C++ class headers (and optional source files) from resolved
entity schemas.
"""

from .config import CppConfig, ReferenceStyle
from .generator import CppGenerator, create_cpp_generator
from .naming import create_cpp_sanitizer
from .types import CppType, CppTypeMapper

__all__ = [
    "CppGenerator",
    "CppConfig",
    "CppType",
    "CppTypeMapper",
    "ReferenceStyle",
    "create_cpp_generator",
    "create_cpp_sanitizer",
]
