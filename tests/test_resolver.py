"""
Tests for hierarchy resolution: cycles, linearization, merges, overrides.
"""

import pytest

from entitygen.codegen import generate_from_document
from entitygen.codegen.core.errors import (
    AttributeTypeConflictError,
    CyclicInheritanceError,
    InvalidOverrideError,
    ResolutionError,
    UnimplementedAbstractMethodError,
    UnknownReferenceError,
)
from entitygen.codegen.core.members import synthesize
from entitygen.codegen.core.resolver import check_implemented, resolve
from entitygen.codegen.core.schema import (
    Attribute,
    Entity,
    Method,
    Mutability,
    Parameter,
    Polymorphism,
    Schema,
    TypeRef,
    parse_type,
    schema_from_dict,
)


def _method(name, returns="void", kind=Polymorphism.NONE, const=False, params=()):
    return Method(
        name=name,
        return_type=parse_type(returns),
        parameters=tuple(Parameter(n, parse_type(t)) for n, t in params),
        mutability=Mutability.CONST if const else Mutability.MUTABLE,
        polymorphism=kind,
    )


def _attr(name, type_text="int"):
    return Attribute(name, parse_type(type_text))


# ── Cycles ───────────────────────────────────────────────────────────


class TestCycles:
    def test_self_parent(self):
        with pytest.raises(CyclicInheritanceError, match="A -> A"):
            resolve(Schema([Entity("A", parent="A")]))

    def test_two_entities(self, cyclic_schema):
        with pytest.raises(CyclicInheritanceError) as exc_info:
            resolve(cyclic_schema)
        assert "Circular inheritance detected" in str(exc_info.value)
        assert exc_info.value.error_kind == "CyclicInheritanceError"

    def test_three_entities(self):
        schema = Schema(
            [Entity("A", parent="C"), Entity("B", parent="A"), Entity("C", parent="B")]
        )
        with pytest.raises(CyclicInheritanceError, match="A -> C -> B -> A"):
            resolve(schema)

    def test_cycle_reached_from_outside(self):
        schema = Schema(
            [Entity("Leaf", parent="A"), Entity("A", parent="B"), Entity("B", parent="A")]
        )
        with pytest.raises(CyclicInheritanceError, match="A -> B -> A"):
            resolve(schema)

    def test_is_resolution_error(self, cyclic_schema):
        with pytest.raises(ResolutionError):
            resolve(cyclic_schema)


# ── Ancestry ─────────────────────────────────────────────────────────


class TestAncestry:
    def test_root_first_chain(self):
        schema = Schema(
            [Entity("C", parent="B"), Entity("B", parent="A"), Entity("A")]
        )
        resolved = resolve(schema)
        assert resolved["C"].ancestors == ("A", "B")
        assert resolved["B"].ancestors == ("A",)
        assert resolved["A"].ancestors == ()

    def test_children(self):
        schema = Schema(
            [Entity("A"), Entity("B", parent="A"), Entity("C", parent="A")]
        )
        resolved = resolve(schema)
        assert resolved["A"].children == ("B", "C")
        assert resolved["A"].child_count == 2
        assert resolved["B"].is_leaf

    def test_declaration_order(self):
        schema = Schema([Entity("Z"), Entity("A"), Entity("M", parent="Z")])
        assert list(resolve(schema)) == ["Z", "A", "M"]

    def test_namespace_carried(self, person_document):
        resolved = resolve(schema_from_dict(person_document))
        assert resolved["Employee"].namespace == "com.example"

    def test_idempotent(self, person_document):
        schema = schema_from_dict(person_document)
        first, second = resolve(schema), resolve(schema)
        assert list(first) == list(second)
        for name in first:
            assert first[name].ancestors == second[name].ancestors
            assert dict(first[name].attributes) == dict(second[name].attributes)
            assert dict(first[name].methods) == dict(second[name].methods)
            assert first[name].dependencies == second[name].dependencies


# ── Attribute merge ──────────────────────────────────────────────────


class TestAttributes:
    def test_inherited_attributes_root_first(self, person_document):
        resolved = resolve(schema_from_dict(person_document))
        employee = resolved["Employee"]
        assert list(employee.attributes) == ["name", "age", "employeeId"]
        assert employee.attribute_origins["name"] == "Person"
        assert employee.attribute_origins["employeeId"] == "Employee"

    def test_same_type_shadowing_allowed(self):
        schema = Schema(
            [
                Entity("A", attributes=(_attr("x"),)),
                Entity("B", parent="A", attributes=(_attr("x"),)),
            ]
        )
        assert resolve(schema)["B"].attribute_origins["x"] == "B"

    def test_type_conflict(self):
        schema = Schema(
            [
                Entity("A", attributes=(_attr("x"),)),
                Entity("B", parent="A", attributes=(_attr("x", "string"),)),
            ]
        )
        with pytest.raises(AttributeTypeConflictError) as exc_info:
            resolve(schema)
        assert exc_info.value.entity_name == "B"


# ── Methods and overrides ────────────────────────────────────────────


class TestOverrides:
    def test_implicit_override(self, person_document):
        resolved = resolve(schema_from_dict(person_document))
        signature = ("display", ())
        assert resolved["Person"].methods[signature].kind == Polymorphism.VIRTUAL
        assert resolved["Employee"].methods[signature].kind == Polymorphism.OVERRIDE
        assert resolved["Employee"].methods[signature].owner == "Employee"
        assert resolved["Employee"].inherited_methods[signature].owner == "Person"

    def test_overloads_are_distinct(self):
        schema = Schema(
            [
                Entity("A", methods=(_method("f", kind=Polymorphism.VIRTUAL),)),
                Entity(
                    "B",
                    parent="A",
                    methods=(_method("f", params=[("x", "int")]),),
                ),
            ]
        )
        methods = resolve(schema)["B"].methods
        assert methods[("f", ())].kind == Polymorphism.VIRTUAL
        assert methods[("f", (TypeRef.primitive("int"),))].kind == Polymorphism.NONE

    def test_return_type_mismatch(self):
        schema = Schema(
            [
                Entity("A", methods=(_method("f", "int", Polymorphism.VIRTUAL),)),
                Entity("B", parent="A", methods=(_method("f", "double"),)),
            ]
        )
        with pytest.raises(InvalidOverrideError, match="return type"):
            resolve(schema)

    def test_constness_mismatch(self):
        schema = Schema(
            [
                Entity("A", methods=(_method("f", kind=Polymorphism.VIRTUAL, const=True),)),
                Entity("B", parent="A", methods=(_method("f"),)),
            ]
        )
        with pytest.raises(InvalidOverrideError, match="constness"):
            resolve(schema)

    def test_override_without_base(self):
        schema = Schema([Entity("A", methods=(_method("f", kind=Polymorphism.OVERRIDE),))])
        with pytest.raises(InvalidOverrideError):
            resolve(schema)

    def test_polymorphic(self, person_document):
        resolved = resolve(schema_from_dict(person_document))
        assert resolved["Person"].is_polymorphic
        assert not resolve(Schema([Entity("A")]))["A"].is_polymorphic


# ── Abstract methods ─────────────────────────────────────────────────


class TestAbstract:
    def test_implemented(self, shapes_document):
        resolved = resolve(schema_from_dict(shapes_document))
        assert resolved["Shape"].is_abstract
        assert not resolved["Circle"].is_abstract
        assert resolved["Circle"].methods[("area", ())].kind == Polymorphism.OVERRIDE

    def test_unimplemented_leaf(self, shapes_document):
        shapes_document["entities"].append({"name": "Square", "parent": "Shape"})
        with pytest.raises(UnimplementedAbstractMethodError, match="Shape.area"):
            resolve(schema_from_dict(shapes_document))

    def test_abstract_leaf_allowed(self, shapes_document):
        shapes_document["entities"].append(
            {"name": "Polygon", "parent": "Shape", "abstract": True}
        )
        assert resolve(schema_from_dict(shapes_document))["Polygon"].is_abstract

    def test_deferred_check(self, shapes_document):
        shapes_document["entities"].append({"name": "Square", "parent": "Shape"})
        resolved = resolve(schema_from_dict(shapes_document), check_abstract=False)
        assert resolved["Square"].is_abstract
        with pytest.raises(UnimplementedAbstractMethodError):
            check_implemented(resolved["Square"])


# ── References ───────────────────────────────────────────────────────


class TestReferences:
    def test_dependencies_parent_first(self, company_document):
        resolved = resolve(schema_from_dict(company_document))
        assert resolved["Employee"].dependencies == ("Person",)
        assert resolved["Employee"].references == ()
        assert resolved["Company"].references == ("Employee", "Person")
        assert resolved["Company"].dependencies == ("Employee", "Person")

    def test_method_types_count(self):
        schema = Schema(
            [
                Entity("A"),
                Entity("B", methods=(_method("make", returns="A"),)),
            ]
        )
        assert resolve(schema)["B"].references == ("A",)

    def test_unknown_reference(self):
        schema = Schema([Entity("A", attributes=(_attr("b", "Missing"),))])
        with pytest.raises(UnknownReferenceError, match="Missing"):
            resolve(schema)


# ── Derived accessors in the merged method set ───────────────────────


class TestDerivedMethods:
    def test_inherited_accessors_merged(self, staff_document):
        employee = resolve(schema_from_dict(staff_document))["Employee"]
        get_name = employee.methods[("getName", ())]
        assert get_name.owner == "Person"
        assert get_name.field == "name"
        assert get_name.kind == Polymorphism.NONE
        assert get_name.method.is_const
        assert get_name.method.return_type == TypeRef.string()

        set_salary = employee.methods[("setSalary", (TypeRef.primitive("double"),))]
        assert set_salary.owner == "Employee"
        assert set_salary.method.return_type.is_void
        assert not set_salary.method.is_const

    def test_explicit_methods_not_derived(self, staff_document):
        employee = resolve(schema_from_dict(staff_document))["Employee"]
        assert not employee.methods[("display", ())].is_derived
        assert [m.name for m in employee.own_methods()] == ["display"]

    def test_constant_attribute_has_no_mutator(self):
        schema = schema_from_dict({"entities": [{"name": "A", "attributes": [
            {"name": "LIMIT", "type": "int", "constexpr": True, "default": 3,
             "accessor": True, "mutator": True},
        ]}]})
        assert resolve(schema)["A"].method_names() == ("getLIMIT",)

    def test_prefixes(self, staff_document):
        resolved = resolve(
            schema_from_dict(staff_document),
            accessor_prefix="fetch",
            mutator_prefix="assign",
        )
        assert "fetchName" in resolved["Employee"].method_names()
        assert "assignSalary" in resolved["Employee"].method_names()
        assert "getName" not in resolved["Employee"].method_names()

    def test_accessor_overriding_virtual_checked(self):
        schema = schema_from_dict({"entities": [
            {"name": "A", "methods": [
                {"name": "getId", "returns": "int", "const": True, "kind": "virtual"}
            ]},
            {"name": "B", "parent": "A", "attributes": [
                {"name": "id", "type": "string", "accessor": True}
            ]},
        ]})
        with pytest.raises(InvalidOverrideError, match="return type"):
            resolve(schema)


# ── Person/Employee worked example ───────────────────────────────────


class TestStaffExample:
    def test_closure(self, staff_document):
        resolved = resolve(schema_from_dict(staff_document))
        employee = resolved["Employee"]

        assert set(employee.attributes) == {"name", "age", "employeeId", "salary"}
        assert set(employee.method_names()) == {
            "getName",
            "setName",
            "getAge",
            "display",
            "getEmployeeId",
            "setSalary",
        }
        assert len(employee.methods) == 6
        assert employee.methods[("display", ())].kind == Polymorphism.OVERRIDE

        assert employee.child_count == 0
        assert synthesize(employee).destructor.is_virtual

        result = generate_from_document(staff_document, "cpp")
        assert result.success
        assert result.diagnostics == []
        assert result.units["Employee.h"].dependencies == ("Person.h",)

    def test_making_person_a_root(self, staff_document):
        staff_document["entities"].insert(
            0,
            {"name": "Being", "attributes": [
                {"name": "id", "type": "int", "default": 0, "accessor": True}
            ]},
        )
        staff_document["entities"][1]["parent"] = "Being"
        before = resolve(schema_from_dict(staff_document))

        del staff_document["entities"][1]["parent"]
        after = resolve(schema_from_dict(staff_document))

        assert list(after) == list(before)
        assert before["Employee"].ancestors == ("Being", "Person")
        assert after["Employee"].ancestors == ("Person",)

        # Only Being's contributions drop out; everything else keeps its order
        assert list(after["Employee"].attributes) == [
            name for name in before["Employee"].attributes if name != "id"
        ]
        assert after["Employee"].method_names() == tuple(
            name for name in before["Employee"].method_names() if name != "getId"
        )
        assert after["Employee"].dependencies == before["Employee"].dependencies
