from __future__ import annotations

from metadata.models import (
    Access,
    Class,
    Constructor,
    Function,
    Interface,
    Method,
    Module,
    Parameter,
    Primitive,
    Property,
    TypeReference,
    Variable,
)
from parse.treesitter_declarations import extract_module
from render.dumper import UNKNOWN_RENDERING, render

SCENARIO = """
interface AS {}
interface Lorem<T> extends AS {
  greeting(v: T): string;
}
abstract class Foo<T> {}
class Test extends Foo<string> implements Lorem<number>, AS {
  private static name: string;
  constructor(private a: AS, public b?: Lorem<AS>, c = 13) {}
  public greeting(v?: number): string {
    return "";
  }
}
"""

EXPECTED_SCENARIO = "\n".join(
    [
        "interface AS {}",
        "interface Lorem<T> extends AS {",
        "\tgreeting(v: T): string",
        "}",
        "abstract class Foo<T> {}",
        "class Test extends Foo<string> implements Lorem<number>, AS {",
        "\tprivate static name: string",
        "\tprivate a: AS",
        "\tpublic b?: Lorem<AS>",
        "\tconstructor(private a: AS, public b?: Lorem<AS>, c?)",
        "\tpublic greeting(v?: number): string",
        "}",
    ]
)


def _number() -> TypeReference:
    return TypeReference(name=Primitive.NUMBER)


def test_scenario_module_rendering() -> None:
    module = extract_module("scenario.ts", SCENARIO)

    assert render(module) == EXPECTED_SCENARIO


def test_rendering_is_stable_across_calls() -> None:
    module = extract_module("scenario.ts", SCENARIO)

    assert render(module) == render(module)


def test_rendering_ignores_source_formatting() -> None:
    compact = "class   Test{constructor(private a:AS,c=13){}}"
    spaced = (
        "class Test {\n  constructor(\n    private a: AS,\n    c = 13,\n  ) {}\n}\n"
    )

    assert render(extract_module("a.ts", compact)) == render(
        extract_module("b.ts", spaced)
    )


def test_let_variable() -> None:
    assert render(Variable(name="index", type=_number())) == "let index: number"


def test_const_variable_without_type() -> None:
    assert render(Variable(name="x", constant=True)) == "const x"


def test_empty_module_renders_empty_string() -> None:
    assert render(Module(path="empty.ts")) == ""


def test_function_rendering() -> None:
    fn = Function(
        name="load",
        is_async=True,
        type_parameters=("T",),
        parameters=(
            Parameter(index=0, name="key", type=TypeReference(name=Primitive.STRING)),
            Parameter(index=1, name="rest", rest=True),
        ),
        return_type=TypeReference(
            name="Promise", type_arguments=(TypeReference(name="T"),)
        ),
    )

    assert render(fn) == "function async load<T>(key: string, ...rest): Promise<T>"


def test_generator_function_rendering() -> None:
    assert render(Function(name="ids", is_generator=True)) == "function ids*()"


def test_method_member_prefix_order() -> None:
    method = Method(
        name="find",
        access=Access.PROTECTED,
        static=True,
        abstract=True,
        is_async=True,
    )

    assert render(method) == "protected static abstract async find()"


def test_generator_method_rendering() -> None:
    assert render(Method(name="keys", is_generator=True)) == "keys*()"


def test_property_rendering() -> None:
    prop = Property(name="size", access=Access.PUBLIC, optional=True, type=_number())

    assert render(prop) == "public size?: number"


def test_class_body_order_is_properties_constructor_methods() -> None:
    cls = Class(
        name="Box",
        methods=(Method(name="open"),),
        constructor=Constructor(),
        properties=(Property(name="size"),),
    )

    assert render(cls) == "class Box {\n\tsize\n\tconstructor()\n\topen()\n}"


def test_interface_with_multiple_extends() -> None:
    iface = Interface(
        name="Both",
        extends=(TypeReference(name="A"), TypeReference(name="B")),
    )

    assert render(iface) == "interface Both extends A, B {}"


def test_name_fallbacks() -> None:
    fn = Function(parameters=(Parameter(index=0), Parameter(index=1, optional=True)))

    assert render(fn) == "function _($0, $1?)"
    assert render(Class()) == "class _ {}"


def test_empty_type_argument_list_renders_brackets() -> None:
    type_ref = TypeReference(name="Map", type_arguments=())

    assert render(Variable(name="m", type=type_ref)) == "let m: Map<>"


def test_nested_type_arguments() -> None:
    type_ref = TypeReference(
        name="Map",
        type_arguments=(
            TypeReference(name=Primitive.STRING),
            TypeReference(name="Array", type_arguments=(_number(),)),
        ),
    )

    assert render(type_ref) == "Map<string, Array<number>>"


def test_promoted_parameter_renders_access() -> None:
    param = Parameter(index=0, name="a", access=Access.PRIVATE, rest=True)

    assert render(param) == "private ...a"


def test_unknown_element_renders_placeholder() -> None:
    assert render(object()) == UNKNOWN_RENDERING
    assert render(None) == "<unknown>"


def test_async_generator_callables_from_source() -> None:
    module = extract_module(
        "m.ts", "async function* f() {}\nclass C { public async *g() {} }"
    )

    assert render(module) == "function async f*()\nclass C {\n\tpublic async g*()\n}"


def test_readonly_promoted_parameter_renders_readonly() -> None:
    cls = extract_module(
        "m.ts", "class P { constructor(readonly id: string, private readonly k) {} }"
    ).children[0]

    assert render(cls.constructor) == (
        "constructor(readonly id: string, private readonly k)"
    )
