"""
Tests for the generator registry.
"""

import pytest

from entitygen.codegen.core.config import GeneratorConfig
from entitygen.codegen.languages.cpp import CppGenerator
from entitygen.codegen.registry import (
    GeneratorRegistry,
    RegistryError,
    get_generator,
    get_language_info,
    is_language_supported,
    list_supported_languages,
)


class TestGlobalRegistry:
    def test_cpp_registered(self):
        assert list_supported_languages() == ["cpp"]

    @pytest.mark.parametrize("name", ["cpp", "CPP", "c++", "cxx"])
    def test_aliases(self, name):
        assert is_language_supported(name)
        assert isinstance(get_generator(name), CppGenerator)

    def test_unknown_language(self):
        assert not is_language_supported("cobol")
        with pytest.raises(RegistryError, match="Available: cpp"):
            get_generator("cobol")

    def test_language_info(self):
        info = get_language_info("c++")
        assert info["name"] == "cpp"
        assert info["class"] == "CppGenerator"
        assert info["file_extension"] == ".h"
        assert info["definition_extension"] == ".cpp"
        assert info["aliases"] == ["c++", "cxx"]

    def test_config_forms(self, write_json):
        assert get_generator("cpp", {"indent_size": 2}).config.indent_size == 2
        assert get_generator("cpp", GeneratorConfig(use_tabs=True)).config.use_tabs
        path = write_json({"namespace": "acme"}, "config.json")
        assert get_generator("cpp", path).config.namespace == "acme"

    def test_invalid_config_type(self):
        with pytest.raises(RegistryError, match="Invalid config type"):
            get_generator("cpp", 42)

    def test_invalid_language_settings(self):
        with pytest.raises(RegistryError, match="Failed to create"):
            get_generator("cpp", {"collection_type": "std::set"})


class TestGeneratorRegistry:
    def test_register_rejects_non_generator(self):
        registry = GeneratorRegistry()
        with pytest.raises(RegistryError):
            registry.register("text", str)

    def test_register_keeps_existing(self):
        registry = GeneratorRegistry()
        registry.register("cpp", CppGenerator)

        class OtherGenerator(CppGenerator):
            pass

        registry.register("cpp", OtherGenerator)
        assert registry.get_generator_class("cpp") is CppGenerator
        registry.register("cpp", OtherGenerator, replace=True)
        assert registry.get_generator_class("cpp") is OtherGenerator

    def test_alias_conflict(self):
        registry = GeneratorRegistry()
        registry.register("cpp", CppGenerator, aliases=["c++"])
        with pytest.raises(RegistryError, match="already points"):
            registry.register("cpp2", CppGenerator, aliases=["c++"])
        with pytest.raises(RegistryError, match="conflicts"):
            registry.register("cpp3", CppGenerator, aliases=["cpp"])

    def test_unregister(self):
        registry = GeneratorRegistry()
        registry.register("cpp", CppGenerator, aliases=["cxx"])
        registry.unregister("cpp")
        assert registry.list_languages() == []
        assert not registry.is_supported("cxx")
