import pytest

from snipit.cli import CommandError, build_parser, run
from snipit.config import AppSettings


async def _run(settings, *argv):
    return await run(build_parser().parse_args(list(argv)), settings)


@pytest.mark.asyncio
async def test_add_then_list_with_filter(tmp_path, capsys):
    settings = AppSettings(home=tmp_path / "home")
    code_file = tmp_path / "snippet.py"
    code_file.write_text("print('hello')\n", encoding="utf-8")

    assert await _run(settings, "add", "--title", "Hello", "--code-file", str(code_file), "-l", "Python") == 0
    assert await _run(settings, "list", "-f", "python", "title:hello") == 0

    out = capsys.readouterr().out
    assert "Hello  [Python]  unlabeled" in out
    assert "1 of 1 snippets" in out


@pytest.mark.asyncio
async def test_show_unknown_snippet_raises(tmp_path):
    settings = AppSettings(home=tmp_path)

    with pytest.raises(CommandError):
        await _run(settings, "show", "123456789")


@pytest.mark.asyncio
async def test_collections_add_and_select(tmp_path, capsys):
    settings = AppSettings(home=tmp_path / "home")
    extra = tmp_path / "extra"
    extra.mkdir()

    assert await _run(settings, "collections", "add", "Extra", str(extra)) == 0
    with pytest.raises(CommandError):
        await _run(settings, "collections", "add", "Again", str(extra))
    assert await _run(settings, "collections", "select", "default") == 0
    assert await _run(settings, "collections", "list") == 0

    lines = capsys.readouterr().out.splitlines()
    assert any(line.startswith("* default  Default Collection") for line in lines)
    assert any("Extra" in line and str(extra.resolve()) in line for line in lines)
