"""Pytest configuration and shared builders for the descriptor tests."""

import pytest

from bindgen_descriptor.semantics import ast, boundary


def arg(name: str, kind=ast.TypeKind.BY_VALUE, loc=ast.TypeLocation.EXPORT_ARGUMENT,
        classes=("Counter",)) -> ast.Type:
    """Type occurrence for a named boundary type."""
    ty = boundary.lookup(name, classes=classes)
    assert ty is not None, name
    return ast.Type(ty, kind, loc)


@pytest.fixture
def counter_program() -> ast.Program:
    """A small program touching every node kind."""
    add = ast.Function(
        "add",
        [
            arg("Counter", ast.TypeKind.BY_MUT_REF, ast.TypeLocation.EXPORT_ARGUMENT),
            arg("u32"),
        ],
        arg("u32", loc=ast.TypeLocation.EXPORT_RET),
    )
    new = ast.Function("new", [], arg("Counter", loc=ast.TypeLocation.EXPORT_RET))
    greet = ast.Function(
        "greet",
        [arg("str", ast.TypeKind.BY_REF, ast.TypeLocation.EXPORT_ARGUMENT)],
    )

    log = ast.ImportFunction(
        ast.Function("log", [arg("str", ast.TypeKind.BY_REF, ast.TypeLocation.IMPORT_ARGUMENT)]),
        shim="__wbg_log",
    )
    title = ast.ImportFunction(
        ast.Function(
            "set_title",
            [
                arg("JsValue", ast.TypeKind.BY_REF, ast.TypeLocation.IMPORT_ARGUMENT),
                arg("str", ast.TypeKind.BY_REF, ast.TypeLocation.IMPORT_ARGUMENT),
            ],
        ),
        shim="__wbg_set_title",
        kind=ast.Method("Document"),
        opts=ast.FunctionOpts(setter=ast.Accessor()),
    )
    make = ast.ImportFunction(
        ast.Function("new", [], arg("JsValue", loc=ast.TypeLocation.IMPORT_RET)),
        shim="__wbg_new",
        kind=ast.JsConstructor("Date"),
        opts=ast.FunctionOpts(catch=True),
    )

    return ast.Program(
        exports=[
            ast.Export(new, class_name="Counter"),
            ast.Export(add, class_name="Counter", method=True),
            ast.Export(greet),
        ],
        imports=[
            ast.Import(ast.ImportFunction(log.function, log.shim), js_namespace="console"),
            ast.Import(title, module="./dom.js"),
            ast.Import(make),
            ast.Import(ast.ImportStatic("document", "__wbg_static_document"), module="./dom.js"),
            ast.Import(ast.ImportType("Element"), module="./dom.js"),
        ],
        enums=[
            ast.Enum("Color", [ast.Variant("Red", 0), ast.Variant("Green", 1), ast.Variant("Blue", 10)]),
        ],
        structs=[ast.Struct("Point")],
    )
