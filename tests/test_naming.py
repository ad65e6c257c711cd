"""
Tests for naming helpers and the template engine filters.
"""

import pytest

from entitygen.codegen.core.naming import (
    NameSanitizer,
    NamingCase,
    accessor_name,
    capitalize_first,
)
from entitygen.codegen.core.templates import TemplateEngine, TemplateError


class TestAccessorNames:
    def test_capitalize_first(self):
        assert capitalize_first("employeeId") == "EmployeeId"
        assert capitalize_first("") == ""

    @pytest.mark.parametrize(
        "prefix,name,expected",
        [
            ("get", "name", "getName"),
            ("set", "employeeId", "setEmployeeId"),
            ("is", "active", "isActive"),
            ("", "salary", "salary"),
        ],
    )
    def test_accessor_name(self, prefix, name, expected):
        assert accessor_name(prefix, name) == expected


class TestNameSanitizer:
    @pytest.mark.parametrize(
        "name,case,expected",
        [
            ("EmployeeRecord", NamingCase.SNAKE_CASE, "employee_record"),
            ("HTTPServer", NamingCase.SNAKE_CASE, "http_server"),
            ("employee_record", NamingCase.CAMEL_CASE, "employeeRecord"),
            ("employee-record", NamingCase.PASCAL_CASE, "EmployeeRecord"),
            ("EmployeeRecord", NamingCase.SCREAMING_SNAKE, "EMPLOYEE_RECORD"),
        ],
    )
    def test_convert(self, name, case, expected):
        assert NameSanitizer().convert(name, case) == expected

    def test_reserved_suffix(self):
        sanitizer = NameSanitizer(reserved_words={"class"})
        assert sanitizer.is_reserved("class")
        assert sanitizer.sanitize_name("class") == "class_"
        assert sanitizer.sanitize_name("klass") == "klass"

    def test_cleans_invalid_characters(self):
        sanitizer = NameSanitizer()
        assert sanitizer.convert("2nd value!", NamingCase.SNAKE_CASE) == "2nd_value"
        assert sanitizer.convert("???", NamingCase.SNAKE_CASE) == "unnamed"


class TestTemplateEngine:
    def test_indent_filter(self):
        engine = TemplateEngine()
        text = engine.render_string("{{ body | indent(2) }}", {"body": "a\n\nb"})
        assert text == "  a\n\n  b"

    def test_indent_filter_with_prefix(self):
        engine = TemplateEngine()
        text = engine.render_string("{{ body | indent(pad) }}", {"body": "a", "pad": "\t"})
        assert text == "\ta"

    def test_comment_filter(self):
        engine = TemplateEngine()
        text = engine.render_string("{{ text | comment }}", {"text": "one\n\ntwo"})
        assert text == "// one\n//\n// two"

    def test_case_filters(self):
        engine = TemplateEngine()
        text = engine.render_string(
            "{{ n | snake_case }} {{ n | camel_case }} {{ n | pascal_case }} {{ n | screaming_snake }}",
            {"n": "EmployeeRecord"},
        )
        assert text == "employee_record employeeRecord EmployeeRecord EMPLOYEE_RECORD"

    def test_in_memory_template(self):
        engine = TemplateEngine()
        assert not engine.template_exists("unit.j2")
        engine.add_template("unit.j2", "class {{ name }};")
        assert engine.template_exists("unit.j2")
        assert engine.render_template("unit.j2", {"name": "Person"}) == "class Person;"

    def test_strict_undefined(self):
        engine = TemplateEngine()
        with pytest.raises(TemplateError):
            engine.render_string("{{ missing }}", {})
