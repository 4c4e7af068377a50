"""Tests for the command line entry point."""

import json

import pytest

from msgkit.cli import main


@pytest.fixture
def schema_file(tmp_path, registry_document):
    path = tmp_path / "registry.json"
    path.write_text(json.dumps(registry_document), encoding="utf-8")
    return path


def test_check(schema_file, capsys) -> None:
    assert main(["check", str(schema_file)]) == 0

    out = capsys.readouterr().out
    assert out.strip() == f"ok: 2 interface(s), 1 contract(s) in {schema_file}"


def test_messages(schema_file, capsys) -> None:
    assert main(["messages", str(schema_file)]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "interface Ownable"
    assert "  exec: transfer_owner" in lines
    assert "  privileged: -" in lines
    assert "contract Registry" in lines
    assert "  exec: transfer_owner, pause, unpause, register" in lines
    assert "  migrate: migrate" in lines


def test_schema_error_exits_with_one(tmp_path, registry_document, capsys) -> None:
    registry_document["contracts"][0]["operations"].append(
        {"name": "pause", "category": "exec"}
    )
    path = tmp_path / "broken.json"
    path.write_text(json.dumps(registry_document), encoding="utf-8")

    assert main(["check", str(path)]) == 1

    err = capsys.readouterr().err
    assert err.startswith("error: ")
    assert "`pause` overlaps between `Pausable` and `Registry`" in err


def test_missing_file(tmp_path, capsys) -> None:
    assert main(["check", str(tmp_path / "missing.toml")]) == 1
    assert "cannot read schema file" in capsys.readouterr().err


def test_types_module(tmp_path, monkeypatch, capsys) -> None:
    (tmp_path / "club_types.py").write_text(
        "from pydantic import BaseModel\n\n\nclass Member(BaseModel):\n    name: str\n",
        encoding="utf-8",
    )
    monkeypatch.syspath_prepend(str(tmp_path))
    path = tmp_path / "club.json"
    path.write_text(
        json.dumps(
            {
                "contracts": [
                    {
                        "name": "Club",
                        "error": "ClubError",
                        "operations": [
                            {"name": "instantiate", "category": "init"},
                            {"name": "join", "category": "exec", "params": ["member: Member"]},
                        ],
                    }
                ]
            }
        ),
        encoding="utf-8",
    )

    assert main(["check", str(path)]) == 1
    assert "unknown type `Member`" in capsys.readouterr().err
    assert main(["check", str(path), "--types", "club_types"]) == 0


def test_subcommand_required() -> None:
    with pytest.raises(SystemExit):
        main([])
