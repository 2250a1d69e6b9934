"""Tests for loading TOML program descriptions."""

import textwrap

import pytest

from bindgen_descriptor import shared
from bindgen_descriptor.compiler.loader import default_shim, load_program, load_program_from_string
from bindgen_descriptor.internals.report import Reporter
from bindgen_descriptor.semantics import ast

DESCRIPTION = textwrap.dedent("""
    [[structs]]
    name = "Point"

    [[enums]]
    name = "Color"
    variants = ["Red", "Green", { name = "Blue", value = 10 }, "Violet"]

    [[exports]]
    class = "Counter"
    name = "new"
    ret = "Counter"

    [[exports]]
    class = "Counter"
    method = true
    name = "add"
    arguments = [{ type = "Counter", kind = "mut_ref" }, "u32"]
    ret = "u32"

    [[exports]]
    name = "paint"
    arguments = ["Color", { type = "Point", kind = "ref" }]
    ret = { type = "str", kind = "ref" }

    [[imports]]
    js_namespace = "console"
    name = "log"
    arguments = [{ type = "str", kind = "ref" }]

    [[imports]]
    module = "./dom.js"
    kind = "type"
    name = "Element"

    [[imports]]
    module = "./dom.js"
    class = "Element"
    method = true
    setter = true
    name = "set_id"
    shim = "__wbg_element_set_id"
    arguments = [{ type = "Element", kind = "ref" }, { type = "str", kind = "ref" }]

    [[imports]]
    module = "./dom.js"
    class = "Element"
    constructor = true
    catch = true
    name = "new"
    ret = "Element"

    [[imports]]
    module = "./dom.js"
    kind = "static"
    name = "document"
""")


def load(text: str):
    reporter = Reporter(filename="desc.toml")
    return load_program_from_string(textwrap.dedent(text), reporter), reporter


def codes(reporter: Reporter) -> list[str]:
    return [d.code for d in reporter.items]


def test_full_description():
    program, reporter = load(DESCRIPTION)
    assert not reporter.items
    assert [s.name for s in program.structs] == ["Point"]
    assert [(v.name, v.value) for v in program.enums[0].variants] == \
        [("Red", 0), ("Green", 1), ("Blue", 10), ("Violet", 11)]

    new, add, paint = program.exports
    assert new.class_name == "Counter" and not new.method
    assert new.function.ret.loc is ast.TypeLocation.EXPORT_RET
    assert add.method
    assert [(t.ty.name, t.kind, t.loc) for t in add.function.arguments] == [
        ("Counter", ast.TypeKind.BY_MUT_REF, ast.TypeLocation.EXPORT_ARGUMENT),
        ("u32", ast.TypeKind.BY_VALUE, ast.TypeLocation.EXPORT_ARGUMENT),
    ]
    assert paint.class_name is None
    assert paint.function.arguments[0].ty.descriptor == shared.TYPE_ENUM
    assert paint.function.ret.kind is ast.TypeKind.BY_REF

    log, element, set_id, make, document = program.imports
    assert log.js_namespace == "console"
    assert log.kind.kind == ast.Normal()
    assert log.kind.shim == default_shim("log", None, None)
    assert log.kind.function.arguments[0].loc is ast.TypeLocation.IMPORT_ARGUMENT
    assert isinstance(element.kind, ast.ImportType)
    assert set_id.kind.kind == ast.Method("Element")
    assert set_id.kind.shim == "__wbg_element_set_id"
    assert set_id.kind.setter_property() == "id"
    assert make.kind.kind == ast.JsConstructor("Element")
    assert make.kind.opts.catch
    assert make.kind.function.ret.loc is ast.TypeLocation.IMPORT_RET
    assert make.kind.function.ret.ty.descriptor == shared.TYPE_JS_OWNED
    assert document.kind == ast.ImportStatic("document", default_shim("document", "./dom.js", None))


def test_default_shim_depends_on_origin():
    assert default_shim("f", None, None).startswith("__wbg_f_")
    assert default_shim("f", "a.js", None) != default_shim("f", "b.js", None)


def test_unknown_type():
    program, reporter = load("""
        [[exports]]
        name = "f"
        arguments = ["Mystery"]
    """)
    assert program is None
    assert codes(reporter) == ["CE4104"]
    assert reporter.items[0].span.where == "exports[0].arguments[0]"


def test_type_without_capability_for_position():
    program, reporter = load("""
        [[exports]]
        name = "f"
        arguments = ["str"]
    """)
    assert program is None
    assert codes(reporter) == ["CE4107"]
    assert "by value as an export argument" in reporter.items[0].message


def test_unknown_type_kind():
    _, reporter = load("""
        [[exports]]
        name = "f"
        arguments = [{ type = "u32", kind = "pointer" }]
    """)
    assert codes(reporter) == ["CE4105"]


@pytest.mark.parametrize("kind", ['["ref"]', '{ name = "ref" }', "1"])
def test_type_kind_must_be_a_string(kind):
    program, reporter = load(f"""
        [[exports]]
        name = "f"
        arguments = [{{ type = "u32", kind = {kind} }}]
    """)
    assert program is None
    assert codes(reporter) == ["CE4103"]
    assert str(reporter.items[0].span) == "exports[0].arguments[0].kind"


def test_setter_needs_prefix_or_name():
    _, reporter = load("""
        [[imports]]
        name = "width"
        setter = true
    """)
    assert codes(reporter) == ["CE4110"]

    program, reporter = load("""
        [[imports]]
        name = "width"
        setter = "width"
    """)
    assert not reporter.items
    assert program.imports[0].kind.setter_property() == "width"


def test_method_needs_class():
    _, reporter = load("""
        [[imports]]
        name = "go"
        method = true
    """)
    assert codes(reporter) == ["CE4111"]


def test_function_flags_rejected_on_statics():
    _, reporter = load("""
        [[imports]]
        kind = "static"
        name = "window"
        catch = true
    """)
    assert codes(reporter) == ["CE4111"]


def test_unknown_import_kind():
    _, reporter = load("""
        [[imports]]
        kind = "module"
        name = "x"
    """)
    assert codes(reporter) == ["CE4106"]


@pytest.mark.parametrize("name", ["has space", "9lives", "dash-name"])
def test_invalid_identifier(name):
    _, reporter = load(f"""
        [[structs]]
        name = "{name}"
    """)
    assert codes(reporter) == ["CE4108"]


def test_module_must_be_escape_free():
    _, reporter = load("""
        [[imports]]
        module = 'a\\b.js'
        kind = "type"
        name = "T"
    """)
    assert codes(reporter) == ["CE4103"]


def test_missing_name():
    _, reporter = load("""
        [[exports]]
        arguments = ["u32"]
    """)
    assert codes(reporter) == ["CE4102"]


def test_enum_value_range_and_duplicates():
    _, reporter = load("""
        [[enums]]
        name = "E"
        variants = [{ name = "A", value = -1 }]
    """)
    assert codes(reporter) == ["CE4109"]
    assert "'A'" in reporter.items[0].message

    _, reporter = load("""
        [[enums]]
        name = "E"
        variants = [{ name = "1bad", value = -1 }]
    """)
    assert codes(reporter) == ["CE4108", "CE4109"]
    assert "'E'" in reporter.items[1].message
    assert "None" not in reporter.items[1].message

    program, reporter = load("""
        [[enums]]
        name = "E"
        variants = [{ name = "A", value = 3 }, { name = "B", value = 3 }]
    """)
    assert codes(reporter) == ["CW4112"]
    assert program is not None
    assert not reporter.has_errors


def test_all_problems_are_reported():
    _, reporter = load("""
        [[exports]]
        name = "f"
        arguments = ["Nope", "str"]

        [[exports]]
        name = "g"
        ret = "AlsoNope"
    """)
    assert codes(reporter) == ["CE4104", "CE4107", "CE4104"]


def test_invalid_toml():
    program, reporter = load("this is = = not toml")
    assert program is None
    assert codes(reporter) == ["CE4101"]


def test_missing_file(tmp_path):
    reporter = Reporter()
    assert load_program(tmp_path / "nope.toml", reporter) is None
    assert codes(reporter) == ["CE4101"]


def test_reporter_format():
    _, reporter = load("""
        [[exports]]
        name = "f"
        arguments = ["Mystery"]
    """)
    assert reporter.format(use_color=False) == \
        "desc.toml:exports[0].arguments[0]: error [CE4104]: unknown type 'Mystery'."
