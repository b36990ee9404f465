"""Template function classification tests."""

import pytest

from tgo import UnsupportedImportError, parse_file
from tgo.analyzer.funcs import ShadowSet, runtime_aliases, template_funcs

IMPORT = 'package main\n\nimport "github.com/mateusz834/tgo"\n\n'


def template_lines(text: str) -> list[int]:
    """Return the sorted lines of the template functions in text."""
    file, source = parse_file(text)
    return sorted(source.position(node.pos).line for node in template_funcs(file, source))


def test_signatures():
    text = IMPORT + (
        "func a(ctx tgo.Ctx) error { return nil }\n"
        "func b(ctx tgo.Ctx, n int) (err error) { return nil }\n"
        "func c(tgo.Ctx) (error) { return nil }\n"
        "func d(ctx tgo.Ctx) (int, error) { return 0, nil }\n"
        "func e(ctx tgo.Ctx) {}\n"
        "func f(n int, ctx tgo.Ctx) error { return nil }\n"
        "func g(ctx *tgo.Ctx) error { return nil }\n"
        "func h(ctx other.Ctx) error { return nil }\n"
        "func i(ctx tgo.Context) error { return nil }\n"
        "func j() error { return nil }\n"
    )
    assert template_lines(text) == [5, 6, 7]


def test_methods_are_classified():
    text = IMPORT + "func (p *Page) Render(ctx tgo.Ctx) error { return nil }\n"
    assert template_lines(text) == [5]


def test_aliased_import():
    text = 'package main\n\nimport t "github.com/mateusz834/tgo"\n\nfunc a(ctx t.Ctx) error { return nil }\nfunc b(ctx tgo.Ctx) error { return nil }\n'
    assert template_lines(text) == [5]


def test_imported_twice():
    text = (
        'package main\n\nimport (\n\t"github.com/mateusz834/tgo"\n\tt "github.com/mateusz834/tgo"\n)\n\n'
        "func a(ctx t.Ctx) error { return nil }\n"
        "func b(ctx tgo.Ctx) error { return nil }\n"
    )
    assert template_lines(text) == [8, 9]


def test_without_import():
    text = "package main\n\nfunc a(ctx tgo.Ctx) error { return nil }\n"
    assert template_lines(text) == []


def test_blank_import():
    text = 'package main\n\nimport _ "github.com/mateusz834/tgo"\n\nfunc a(ctx tgo.Ctx) error { return nil }\n'
    assert template_lines(text) == []


def test_runtime_aliases():
    text = 'package main\n\nimport (\n\t"fmt"\n\tx "github.com/mateusz834/tgo"\n\t"github.com/mateusz834/tgo"\n)\n'
    file, source = parse_file(text)
    assert runtime_aliases(file, source) == ["x", "tgo"]


def test_dot_import_is_rejected():
    text = 'package main\n\nimport . "github.com/mateusz834/tgo"\n'
    file, source = parse_file(text)
    with pytest.raises(UnsupportedImportError):
        template_funcs(file, source)


def test_function_literals():
    text = IMPORT + (
        "func outer() {\n"
        "\tf := func(ctx tgo.Ctx) error { return nil }\n"
        "\tg := func(n int) error { return nil }\n"
        "\t_, _ = f, g\n"
        "}\n"
    )
    assert template_lines(text) == [6]


def test_local_declaration_shadows_package():
    text = IMPORT + (
        "func outer() {\n"
        "\tbefore := func(ctx tgo.Ctx) error { return nil }\n"
        "\ttgo := 1\n"
        "\tafter := func(ctx tgo.Ctx) error { return nil }\n"
        "\t_, _, _ = before, tgo, after\n"
        "}\n"
    )
    assert template_lines(text) == [6]


def test_var_declaration_shadows_package():
    text = IMPORT + (
        "func outer() {\n"
        "\tvar tgo int\n"
        "\tf := func(ctx tgo.Ctx) error { return nil }\n"
        "\t_, _ = tgo, f\n"
        "}\n"
    )
    assert template_lines(text) == []


def test_parameter_shadows_package():
    text = IMPORT + (
        "func outer(tgo int) {\n"
        "\tf := func(ctx tgo.Ctx) error { return nil }\n"
        "\t_ = f\n"
        "}\n"
    )
    assert template_lines(text) == []


def test_type_parameter_shadows_package():
    text = IMPORT + "func a[tgo any](ctx tgo.Ctx) error { return nil }\n"
    assert template_lines(text) == []


def test_shadowing_ends_with_the_block():
    text = IMPORT + (
        "func outer() {\n"
        "\t{\n"
        "\t\ttgo := 1\n"
        "\t\t_ = tgo\n"
        "\t}\n"
        "\tf := func(ctx tgo.Ctx) error { return nil }\n"
        "\t_ = f\n"
        "}\n"
    )
    assert template_lines(text) == [10]


def test_if_init_shadows_only_the_if():
    text = IMPORT + (
        "func outer() {\n"
        "\tif tgo := 1; tgo > 0 {\n"
        "\t\tf := func(ctx tgo.Ctx) error { return nil }\n"
        "\t\t_ = f\n"
        "\t}\n"
        "\tg := func(ctx tgo.Ctx) error { return nil }\n"
        "\t_ = g\n"
        "}\n"
    )
    assert template_lines(text) == [10]


def test_tag_body_is_its_own_scope():
    text = IMPORT + (
        "func page(ctx tgo.Ctx) error {\n"
        "\t<div>\n"
        "\t\ttgo := 1\n"
        "\t\t_ = tgo\n"
        "\t</div>\n"
        "\tf := func(c tgo.Ctx) error { return nil }\n"
        "\t_ = f\n"
        "\treturn nil\n"
        "}\n"
    )
    assert template_lines(text) == [5, 10]


def test_classification_is_repeatable():
    text = IMPORT + "func a(ctx tgo.Ctx) error { return nil }\n"
    file, source = parse_file(text)
    assert template_funcs(file, source) == template_funcs(file, source)


def test_shadow_set():
    s = ShadowSet()
    assert not s.has(0)
    t = s.with_index(2)
    assert t.has(2)
    assert not t.has(0)
    assert not s.has(2)
    assert t.union(ShadowSet().with_index(0)) == ShadowSet(0b101)
