# tests/lovelypack/transpile/test_jobs_and_embed.py
from __future__ import annotations

from pathlib import Path

from lovelypack.transpile.embed import (
    embedFileInPlace,
    embeddedVariableName,
    longBracketLevel,
    wrapAsLuaString,
)
from lovelypack.transpile.jobs import discoverAuxiliaryScripts

SENTINEL = "// $love2d-compile-to-string$ //"


def test_discover_filters_and_sorts(tmp_path):
    aux = tmp_path / "extra_lua"
    aux.mkdir()
    (aux / "zeta.ts").write_text("export {}", encoding="utf-8")
    (aux / "alpha.ts").write_text(f"{SENTINEL}\nexport {{}}", encoding="utf-8")
    (aux / "types.d.ts").write_text("declare const x: number;", encoding="utf-8")
    (aux / ".hidden.ts").write_text("", encoding="utf-8")
    (aux / "tsconfig.json").write_text("{}", encoding="utf-8")
    (aux / "folder.ts").mkdir()

    deploy = tmp_path / "deploy"
    jobs = discoverAuxiliaryScripts(aux, deploy, sentinel=SENTINEL)

    assert [job.sourcePath.name for job in jobs] == ["alpha.ts", "zeta.ts"]
    alpha, zeta = jobs
    assert alpha.compileToString is True
    assert zeta.compileToString is False
    assert alpha.outputPath == aux / "alpha.lua"
    assert alpha.deployPath == deploy / "extra_lua" / "alpha.lua"
    assert alpha.relativePath == "extra_lua/alpha.lua"
    assert alpha.stem == "alpha"


def test_discover_sentinel_only_counts_on_first_line(tmp_path):
    aux = tmp_path / "extra_lua"
    aux.mkdir()
    (aux / "late.ts").write_text(f"export {{}}\n{SENTINEL}\n", encoding="utf-8")
    (aux / "spaced.ts").write_text(f"  {SENTINEL}\n", encoding="utf-8")
    jobs = discoverAuxiliaryScripts(aux, tmp_path / "deploy", sentinel=SENTINEL)
    assert [job.compileToString for job in jobs] == [False, False]


def test_discover_missing_directory_is_empty(tmp_path):
    assert discoverAuxiliaryScripts(tmp_path / "nope", tmp_path / "deploy") == []


def test_discover_separate_out_dir(tmp_path):
    aux = tmp_path / "extra_lua"
    aux.mkdir()
    (aux / "a.ts").write_text("", encoding="utf-8")
    jobs = discoverAuxiliaryScripts(aux, tmp_path / "deploy", outDir=tmp_path / "out")
    assert jobs[0].outputPath == tmp_path / "out" / "a.lua"


def test_variable_name_uppercased_and_normalized():
    assert embeddedVariableName("my-mod", "shader") == "MY_MOD_SHADER_CODE_STR"
    assert embeddedVariableName("cool.mod", "post-fx.v2") == "COOL_MOD_POST_FX_V2_CODE_STR"


def test_long_bracket_level_avoids_closing_sequence():
    assert longBracketLevel("print('hi')") == 1
    assert longBracketLevel("x = [=[ a ]=]") == 2
    assert longBracketLevel("]=] ]==]") == 3


def test_wrap_as_lua_string():
    assert wrapAsLuaString("X_CODE_STR", "return 1") == "X_CODE_STR = [=[\nreturn 1\n]=]\n"


def test_embed_file_in_place(tmp_path):
    path = tmp_path / "shader.lua"
    path.write_text("local a = 1\nreturn a", encoding="utf-8")
    embedFileInPlace(path, "MY_MOD_SHADER_CODE_STR")
    assert path.read_text(encoding="utf-8") == "MY_MOD_SHADER_CODE_STR = [=[\nlocal a = 1\nreturn a\n]=]\n"


def test_discover_keeps_unreadable_script_with_its_error(tmp_path):
    aux = tmp_path / "extra_lua"
    aux.mkdir()
    (aux / "broken.ts").write_bytes(b"\xff\xfe not utf-8\n")
    (aux / "fine.ts").write_text("export {}", encoding="utf-8")

    jobs = discoverAuxiliaryScripts(aux, tmp_path / "deploy", sentinel=SENTINEL)

    assert [job.sourcePath.name for job in jobs] == ["broken.ts", "fine.ts"]
    assert isinstance(jobs[0].readError, UnicodeDecodeError)
    assert jobs[0].compileToString is False
    assert jobs[1].readError is None
