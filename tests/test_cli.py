"""End-to-end tests for the dock CLI against a JSON store in a temp directory."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from dock import __version__
from dock.cli import cli


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch) -> dict[str, str]:
    monkeypatch.chdir(tmp_path)
    for name in ("DOCK_CONFIG", "DOCK_CREDENTIAL", "DOCK_STORE_PATH", "DOCK_AUDIT_LOG"):
        monkeypatch.delenv(name, raising=False)
    return {
        "DOCK_STORE_PATH": str(tmp_path / "store.json"),
        "DOCK_AUDIT_LOG": str(tmp_path / "audit.log"),
        "DOCK_TOKEN": "s3cret",
    }


def _run(env: dict, *args: str):
    return CliRunner().invoke(cli, list(args), env=env)


def _created_id(result) -> str:
    assert result.exit_code == 0, result.output
    return result.output.strip().split()[-1]


def test_version() -> None:
    result = CliRunner().invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_create_get_update_note(cli_env) -> None:
    note_id = _created_id(_run(cli_env, "create", "note", "--title", "Ideas", "--content", "See #plans", "--tags", "a, b"))

    result = _run(cli_env, "get", "note", "--id", note_id)
    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["title"] == "Ideas"
    assert data["body"] == "See #plans"
    assert data["tags"] == ["a", "b"]
    assert data["type"] == "note"

    result = _run(cli_env, "update", "note", "--id", note_id, "--title", "Ideas v2")
    assert result.exit_code == 0, result.output
    assert f"Updated note {note_id}" in result.output
    data = json.loads(_run(cli_env, "get", "note", "--id", note_id).stdout)
    assert data["title"] == "Ideas v2"
    assert data["body"] == "See #plans"


def test_create_from_file(cli_env, tmp_path: Path) -> None:
    source = tmp_path / "draft.md"
    source.write_text("## Heading\n\nFrom a file", encoding="utf-8")
    note_id = _created_id(_run(cli_env, "create", "brief", "--title", "Brief", "--file", str(source)))
    data = json.loads(_run(cli_env, "get", "brief", "--id", note_id).stdout)
    assert data["body"] == "## Heading\n\nFrom a file"


def test_create_and_update_list_items(cli_env) -> None:
    list_id = _created_id(_run(cli_env, "create", "list", "--title", "Groceries", "--items", "milk;eggs"))
    data = json.loads(_run(cli_env, "get", "list", "--id", list_id).stdout)
    assert [item["text"] for item in data["items"]] == ["milk", "eggs"]
    assert all(not item["completed"] for item in data["items"])

    assert _run(cli_env, "update", "list", "--id", list_id, "--items", '["bread"]').exit_code == 0
    data = json.loads(_run(cli_env, "get", "list", "--id", list_id).stdout)
    assert [item["text"] for item in data["items"]] == ["bread"]


def test_list_command(cli_env) -> None:
    for title in ("one", "two", "three"):
        _created_id(_run(cli_env, "create", "note", "--title", title))
    _created_id(_run(cli_env, "create", "journal", "--title", "entry"))

    data = json.loads(_run(cli_env, "list", "note").stdout)
    assert [item["title"] for item in data["items"]] == ["three", "two", "one"]

    data = json.loads(_run(cli_env, "list", "note", "--limit", "1").stdout)
    assert len(data["items"]) == 1


def test_delete_soft_then_hard(cli_env) -> None:
    note_id = _created_id(_run(cli_env, "create", "note", "--title", "temp"))

    assert _run(cli_env, "delete", "note", "--id", note_id).exit_code == 0
    assert json.loads(_run(cli_env, "list", "note").stdout)["items"] == []
    deleted = json.loads(_run(cli_env, "list", "note", "--status", "deleted").stdout)["items"]
    assert [item["id"] for item in deleted] == [note_id]

    assert _run(cli_env, "delete", "note", "--id", note_id, "--hard").exit_code == 0
    result = _run(cli_env, "get", "note", "--id", note_id)
    assert result.exit_code == 1
    assert f"Not found: {note_id}" in result.output


def test_errors_exit_with_status_one(cli_env) -> None:
    note_id = _created_id(_run(cli_env, "create", "note", "--title", "n"))

    result = _run(cli_env, "get", "list", "--id", note_id)
    assert result.exit_code == 1
    assert "is a note, not a list" in result.output

    result = _run(cli_env, "update", "note", "--id", note_id, "--status", "archived")
    assert result.exit_code == 0

    result = _run(cli_env, "get", "note", "--id", "missing")
    assert result.exit_code == 1
    assert "Not found: missing" in result.output


def test_authentication_failures(cli_env) -> None:
    result = _run({**cli_env, "DOCK_TOKEN": None}, "list", "note")
    assert result.exit_code == 1
    assert "Missing auth token" in result.output

    result = _run({**cli_env, "DOCK_CREDENTIAL": "env:OTHER", "OTHER": "nope"}, "list", "note")
    assert result.exit_code == 1
    assert "Invalid auth token" in result.output


def test_malformed_config_file(cli_env, tmp_path: Path) -> None:
    (tmp_path / "dock.yml").write_text("- not\n- a mapping\n", encoding="utf-8")
    result = _run(cli_env, "list", "note")
    assert result.exit_code == 1
    assert "must be a mapping" in result.output


def test_item_commands(cli_env) -> None:
    list_id = _created_id(_run(cli_env, "create", "list", "--title", "Chores", "--items", "dishes"))

    result = _run(cli_env, "item", "add", list_id, "laundry")
    assert result.exit_code == 0, result.output
    assert "laundry" in result.output

    assert _run(cli_env, "item", "toggle", list_id, "0").exit_code == 0
    items = json.loads(_run(cli_env, "get", "list", "--id", list_id).stdout)["items"]
    assert [(item["text"], item["completed"]) for item in items] == [("dishes", False), ("laundry", True)]

    dishes = items[0]["id"]
    assert _run(cli_env, "item", "edit", list_id, dishes, "all dishes").exit_code == 0
    assert _run(cli_env, "item", "delete", list_id, items[1]["id"]).exit_code == 0
    items = json.loads(_run(cli_env, "get", "list", "--id", list_id).stdout)["items"]
    assert [item["text"] for item in items] == ["all dishes"]

    result = _run(cli_env, "item", "toggle", list_id, "7")
    assert result.exit_code == 1
    assert "No item 7" in result.output


def test_show_and_search(cli_env) -> None:
    atlas = _created_id(
        _run(cli_env, "create", "note", "--title", "Atlas", "--content", "## Scope\n\n## Risks", "--tags", "work")
    )
    _created_id(_run(cli_env, "create", "journal", "--title", "Standup", "--content", "Atlas slipped", "--tags", "work"))

    result = _run(cli_env, "show", atlas)
    assert result.exit_code == 0, result.output
    assert "Atlas" in result.output
    assert "Outline" in result.output
    assert "Scope" in result.output
    assert "Backlinks" in result.output
    assert "Standup" in result.output

    result = _run(cli_env, "search", "slipped")
    assert result.exit_code == 0, result.output
    assert "Standup" in result.output
    assert "1 of 2 shown" in result.output

    assert _run(cli_env, "show", "nothing-here").exit_code == 1


def test_import_and_export(cli_env, tmp_path: Path) -> None:
    source = tmp_path / "vault"
    (source / "notes").mkdir(parents=True)
    (source / "lists").mkdir()
    (source / "notes" / "plans.md").write_text("---\ntitle: Plans\ntags: [work]\n---\n\nShip it #q1\n", encoding="utf-8")
    (source / "lists" / "groceries.md").write_text("- [ ] milk\n- [x] eggs\n", encoding="utf-8")

    result = _run(cli_env, "import", str(source))
    assert result.exit_code == 0, result.output
    assert "Imported 2 records" in result.output

    lists = json.loads(_run(cli_env, "list", "list").stdout)["items"]
    assert [entry["title"] for entry in lists] == ["groceries"]
    assert [(i["text"], i["completed"]) for i in lists[0]["items"]] == [("milk", False), ("eggs", True)]

    notes = json.loads(_run(cli_env, "list", "note").stdout)["items"]
    assert notes[0]["title"] == "Plans"
    assert notes[0]["tags"] == ["work"]

    out = tmp_path / "out"
    result = _run(cli_env, "export", str(out))
    assert result.exit_code == 0, result.output
    exported_note = next((out / "notes").glob("plans-*.md")).read_text(encoding="utf-8")
    assert "title: Plans" in exported_note
    assert "tags: [work]" in exported_note
    assert "Ship it #q1" in exported_note
    exported_list = next((out / "lists").glob("groceries-*.md")).read_text(encoding="utf-8")
    assert "- [ ] milk\n- [x] eggs" in exported_list

    fresh = {**cli_env, "DOCK_STORE_PATH": str(tmp_path / "fresh.json")}
    assert _run(fresh, "import", str(out)).exit_code == 0
    reimported = json.loads(_run(fresh, "list", "note").stdout)["items"]
    assert [(n["title"], n["tags"]) for n in reimported] == [("Plans", ["work"])]


def test_history(cli_env) -> None:
    _created_id(_run(cli_env, "create", "note", "--title", "logged"))
    result = _run(cli_env, "history", "--format", "json")
    assert result.exit_code == 0, result.output
    entry = json.loads(result.stdout.strip().splitlines()[-1])
    assert entry["operation"] == "create"
    assert entry["user_id"] == "local"


def test_completed_items_show_checked_marker(cli_env) -> None:
    list_id = _created_id(_run(cli_env, "create", "list", "--title", "Groceries", "--items", "milk;eggs"))
    result = _run(cli_env, "item", "toggle", list_id, "0")
    assert result.exit_code == 0, result.output
    assert "[ ] eggs" in result.output
    assert "[x] milk" in result.output


def test_bracketed_user_text_is_printed_literally(cli_env) -> None:
    note_id = _created_id(
        _run(
            cli_env,
            "create",
            "note",
            "--title",
            "Plan [/draft]",
            "--content",
            "## Step [bold]one\n\nbody",
            "--tags",
            "[red]",
        )
    )
    _created_id(_run(cli_env, "create", "journal", "--title", "Log [/x]", "--content", "See Plan [/draft] [i]", "--tags", "[red]"))
    list_id = _created_id(_run(cli_env, "create", "list", "--title", "[b]Chores", "--items", "sweep [/dim]"))

    result = _run(cli_env, "show", note_id)
    assert result.exit_code == 0, result.output
    assert "Plan [/draft]" in result.output
    assert "Step [bold]one" in result.output
    assert "Log [/x]" in result.output

    result = _run(cli_env, "show", list_id)
    assert result.exit_code == 0, result.output
    assert "[b]Chores" in result.output
    assert "sweep [/dim]" in result.output

    result = _run({**cli_env, "COLUMNS": "200"}, "search", "")
    assert result.exit_code == 0, result.output
    assert "Plan [/draft]" in result.output


def test_export_round_trips_quoted_and_long_titles(cli_env, tmp_path: Path) -> None:
    long_title = ("A very long title " * 6).strip()
    titles = ["Bob's: plan", 'Say "hi": now', long_title]
    for title in titles:
        _created_id(_run(cli_env, "create", "note", "--title", title, "--content", "body", "--tags", "it's"))

    out = tmp_path / "out"
    assert _run(cli_env, "export", str(out)).exit_code == 0

    fresh = {**cli_env, "DOCK_STORE_PATH": str(tmp_path / "fresh.json")}
    result = _run(fresh, "import", str(out))
    assert result.exit_code == 0, result.output
    reimported = json.loads(_run(fresh, "list", "note").stdout)["items"]
    assert sorted(n["title"] for n in reimported) == sorted(titles)
    assert all(n["tags"] == ["it's"] for n in reimported)


def test_history_last_zero_prints_nothing(cli_env) -> None:
    _created_id(_run(cli_env, "create", "note", "--title", "logged"))
    result = _run(cli_env, "history", "--format", "json", "-n", "0")
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == "No history found."
