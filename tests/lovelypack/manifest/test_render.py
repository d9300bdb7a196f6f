# tests/lovelypack/manifest/test_render.py
from __future__ import annotations

import tomllib

from lovelypack.annotations.descriptor import PatchDescriptor
from lovelypack.manifest.render import renderCopyManifest, renderPatchManifest


def _descriptor(**kwargs) -> PatchDescriptor:
    values = {
        "functionName": "onLoad",
        "patchType": "pattern",
        "target": "game.lua",
        "pattern": "function love.load",
        "position": "after",
        "locals": ("self",),
    }
    values.update(kwargs)
    return PatchDescriptor(**values)


def test_render_empty_manifest_is_header_only():
    assert renderPatchManifest([]) == '[manifest]\nversion = "1.0.0"'


def test_render_single_block_exact_text():
    assert renderPatchManifest([_descriptor()]) == (
        '[manifest]\n'
        'version = "1.0.0"\n'
        '\n'
        '[[patches]]\n'
        '[patches.pattern]\n'
        'target = "game.lua"\n'
        'pattern = "function love.load"\n'
        'position = "after"\n'
        'match_indent = true\n'
        'payload = """onLoad(self)"""\n'
    )


def test_render_match_indent_always_true():
    text = renderPatchManifest([_descriptor(matchIndent=False)])
    assert "match_indent = true" in text
    assert "false" not in text


def test_render_keeps_order_and_duplicates():
    first = _descriptor(functionName="a")
    second = _descriptor(functionName="b", patchType="regex")
    text = renderPatchManifest([second, first, second])
    assert text.count("[[patches]]") == 3
    assert text.index("b(self)") < text.index("a(self)")

    parsed = tomllib.loads(text)
    assert parsed["manifest"]["version"] == "1.0.0"
    assert [list(patch)[0] for patch in parsed["patches"]] == ["regex", "pattern", "regex"]
    assert parsed["patches"][1]["pattern"]["payload"] == "a(self)"


def test_render_prefix_suffix_payload():
    text = renderPatchManifest([
        _descriptor(payloadPrefix="local ok = ", payloadSuffix=" or ok", locals=("card", "context")),
    ])
    assert 'payload = """local ok = onLoad(card, context) or ok"""' in text


def test_render_skips_untyped_descriptor():
    assert renderPatchManifest([_descriptor(patchType="")]) == '[manifest]\nversion = "1.0.0"'


def test_render_custom_version():
    assert renderPatchManifest([], version="2.0.0") == '[manifest]\nversion = "2.0.0"'


def test_render_copy_manifest_exact_text():
    assert renderCopyManifest(["extra_lua/a.lua", "extra_lua/b.lua"]) == (
        '[manifest]\n'
        'version = "1.0.0"\n'
        '\n'
        '[[patches]]\n'
        '[patches.copy]\n'
        'target="main.lua"\n'
        'sources=["extra_lua/a.lua"]\n'
        'position="append"\n'
        '\n'
        '[[patches]]\n'
        '[patches.copy]\n'
        'target="main.lua"\n'
        'sources=["extra_lua/b.lua"]\n'
        'position="append"\n'
    )


def test_render_copy_manifest_parses():
    parsed = tomllib.loads(renderCopyManifest(["extra_lua/x.lua"], target="init.lua"))
    assert parsed["patches"] == [
        {"copy": {"target": "init.lua", "sources": ["extra_lua/x.lua"], "position": "append"}}
    ]
