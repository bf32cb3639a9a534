from __future__ import annotations

import os

import pytest

from extension_injector import (
    SymbolMapping,
    apply_symbol_mappings,
    find_symbol_mappings,
    push_extensions,
    remap_symbols,
    resolve_extension,
)


def test_remap_rewrites_following_line_only() -> None:
    content = "// spicetify_map{foo}{bar}\nfoo.init()"
    assert remap_symbols(content) == "// spicetify_map{foo}{bar}\nbar.init()"


def test_remap_replaces_first_occurrence_once() -> None:
    content = "//spicetify_map{a}{b}\na + a\na"
    assert remap_symbols(content) == "//spicetify_map{a}{b}\nb + a\na"


def test_multiple_directives_apply_independently() -> None:
    content = "\n".join(
        [
            "// spicetify_map{React}{Spicetify.React}",
            "const h = React.createElement;",
            "let x = 1;",
            "// spicetify_map{x}{y}",
            "x = 2;",
        ]
    )

    lines = remap_symbols(content).split("\n")

    assert lines[1] == "const h = Spicetify.React.createElement;"
    assert lines[2] == "let x = 1;"
    assert lines[4] == "y = 2;"


def test_directive_on_last_line_is_noop() -> None:
    content = "foo()\n// spicetify_map{foo}{bar}"
    assert find_symbol_mappings(content.split("\n")) == []
    assert remap_symbols(content) == content


def test_two_pass_scanner_separates_detection_and_rewrite() -> None:
    lines = ["// spicetify_map{old}{new}", "old()"]
    mappings = find_symbol_mappings(lines)

    assert mappings == [SymbolMapping(1, "old", "new")]
    assert apply_symbol_mappings(lines, mappings) == ["// spicetify_map{old}{new}", "new()"]
    assert lines[1] == "old()"


def test_user_folder_takes_precedence(client) -> None:
    (client["user_ext"] / "a.js").write_text("user", encoding="utf-8")
    (client["bundled_ext"] / "a.js").write_text("bundled", encoding="utf-8")
    dest = client["root"] / "xpui"

    result = push_extensions(["a.js"], dest, [client["user_ext"], client["bundled_ext"]])

    assert result.installed == ["a.js"]
    assert (dest / "a.js").read_text(encoding="utf-8") == "user"


def test_falls_back_to_bundled_folder(client) -> None:
    (client["bundled_ext"] / "b.js").write_text("bundled", encoding="utf-8")

    descriptor = resolve_extension("b.js", [client["user_ext"], client["bundled_ext"]])

    assert descriptor is not None
    assert descriptor.source == client["bundled_ext"] / "b.js"
    assert not descriptor.is_module_script


def test_absolute_path_uses_base_name(client, tmp_path) -> None:
    source = tmp_path / "elsewhere" / "abs.mjs"
    source.parent.mkdir()
    source.write_text("// spicetify_map{x}{y}\nx()", encoding="utf-8")
    dest = client["root"] / "xpui"

    result = push_extensions([str(source)], dest, [client["user_ext"]])

    assert result.installed == ["abs.mjs"]
    assert (dest / "abs.mjs").read_text(encoding="utf-8") == "// spicetify_map{x}{y}\ny()"


def test_unresolved_item_does_not_stop_others(client, capsys) -> None:
    (client["user_ext"] / "first.js").write_text("1", encoding="utf-8")
    (client["user_ext"] / "third.js").write_text("3", encoding="utf-8")
    dest = client["root"] / "xpui"

    result = push_extensions(["first.js", "missing.js", "third.js"], dest, [client["user_ext"]])

    assert result.installed == ["first.js", "third.js"]
    assert result.errors == ['Extension "missing.js" not found.']
    assert (dest / "first.js").exists()
    assert (dest / "third.js").exists()
    assert "missing.js" in capsys.readouterr().err


def test_plain_script_is_copied_verbatim(client) -> None:
    content = "// spicetify_map{foo}{bar}\nfoo.init()"
    (client["user_ext"] / "plain.js").write_text(content, encoding="utf-8")
    dest = client["root"] / "xpui"

    push_extensions(["plain.js"], dest, [client["user_ext"]])

    assert (dest / "plain.js").read_text(encoding="utf-8") == content


@pytest.mark.skipif(not hasattr(os, "symlink") or os.name == "nt", reason="symlinks need a POSIX host")
def test_dangling_user_link_falls_back_to_bundled(client) -> None:
    os.symlink(client["root"] / "gone.js", client["user_ext"] / "a.js")
    (client["bundled_ext"] / "a.js").write_text("bundled", encoding="utf-8")
    dest = client["root"] / "xpui"

    result = push_extensions(["a.js"], dest, [client["user_ext"], client["bundled_ext"]])

    assert result.installed == ["a.js"]
    assert result.errors == []
    assert (dest / "a.js").read_text(encoding="utf-8") == "bundled"


def test_copy_failure_does_not_stop_others(client, tmp_path, capsys) -> None:
    (client["user_ext"] / "ok.js").write_text("ok", encoding="utf-8")
    missing = tmp_path / "elsewhere" / "nope.js"
    dest = client["root"] / "xpui"

    result = push_extensions([str(missing), "ok.js"], dest, [client["user_ext"]])

    assert result.installed == ["ok.js"]
    assert len(result.errors) == 1
    assert result.errors[0].startswith('Cannot copy extension "nope.js"')
    assert not (dest / "nope.js").exists()
    assert (dest / "ok.js").read_text(encoding="utf-8") == "ok"
    assert "nope.js" in capsys.readouterr().err
