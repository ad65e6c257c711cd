"""
Language-specific code generators.

This module contains generators for different target languages.
"""

from .cpp import CppGenerator, create_cpp_generator

__all__ = ["CppGenerator", "create_cpp_generator"]
