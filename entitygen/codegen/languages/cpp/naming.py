"""
C++-specific naming utilities.

Handles C++ keywords, include guards and namespace spelling.
"""

from ...core.naming import NameSanitizer, NamingCase


CPP_RESERVED_WORDS = {
    "alignas",
    "alignof",
    "and",
    "asm",
    "auto",
    "bool",
    "break",
    "case",
    "catch",
    "char",
    "class",
    "const",
    "constexpr",
    "const_cast",
    "continue",
    "decltype",
    "default",
    "delete",
    "do",
    "double",
    "dynamic_cast",
    "else",
    "enum",
    "explicit",
    "export",
    "extern",
    "false",
    "float",
    "for",
    "friend",
    "goto",
    "if",
    "inline",
    "int",
    "long",
    "mutable",
    "namespace",
    "new",
    "noexcept",
    "not",
    "nullptr",
    "operator",
    "or",
    "private",
    "protected",
    "public",
    "register",
    "reinterpret_cast",
    "return",
    "short",
    "signed",
    "sizeof",
    "static",
    "static_assert",
    "static_cast",
    "struct",
    "switch",
    "template",
    "this",
    "throw",
    "true",
    "try",
    "typedef",
    "typeid",
    "typename",
    "union",
    "unsigned",
    "using",
    "virtual",
    "void",
    "volatile",
    "while",
    "xor",
}

CPP_BUILTIN_TYPES = {
    "std",
    "size_t",
    "int8_t",
    "int16_t",
    "int32_t",
    "int64_t",
    "uint8_t",
    "uint16_t",
    "uint32_t",
    "uint64_t",
}


def create_cpp_sanitizer() -> NameSanitizer:
    """Create a name sanitizer configured for C++."""
    return NameSanitizer(CPP_RESERVED_WORDS, CPP_BUILTIN_TYPES)


def include_guard(sanitizer: NameSanitizer, entity_name: str, suffix: str = "H") -> str:
    """Include guard macro: EmployeeRecord -> EMPLOYEE_RECORD_H."""
    return f"{sanitizer.convert(entity_name, NamingCase.SCREAMING_SNAKE)}_{suffix}"


def cpp_namespace(namespace: str) -> str:
    """Normalize a dotted package name to a nested C++ namespace."""
    parts = [p for p in namespace.replace("::", ".").split(".") if p]
    return "::".join(parts)
