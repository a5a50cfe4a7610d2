"""Tests for 'optiban task' commands."""

import json
from argparse import Namespace

import pytest

from optiban.cli.task import task_add, task_archive, task_done, task_list, task_move, task_update


def _args(repo, **kwargs):
    return Namespace(repo=str(repo), json=True, **kwargs)


def test_task_list(initialized_repo, capsys):
    args = Namespace(repo=str(initialized_repo), json=False, column=None)
    assert task_list(args) == 0

    out = capsys.readouterr().out
    assert "To Do" in out
    assert "   1  [ ] First task  (medium)" in out
    assert "   2  [ ] Second task  (medium)" in out


def test_task_list_json(initialized_repo, capsys):
    assert task_list(_args(initialized_repo, column=None)) == 0

    data = json.loads(capsys.readouterr().out)
    assert [t["id"] for t in data] == ["1", "2"]
    assert data[0]["column"]["name"] == "To Do"
    assert data[0]["creator"] == "Alice"


def test_task_list_column_filter(initialized_repo, capsys, read_board):
    done = read_board(initialized_repo)["columns"][2]["id"]
    assert task_list(_args(initialized_repo, column=done)) == 0

    assert json.loads(capsys.readouterr().out) == []


def test_task_add(initialized_repo, capsys, read_board, read_task):
    doing = read_board(initialized_repo)["columns"][1]["id"]
    args = _args(initialized_repo, column=doing, title="Review", description="Look it over.", priority="high")
    assert task_add(args) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["id"] == "3"
    assert data["title"] == "Review"
    assert data["priority"] == "high"
    assert data["column"] == {"id": doing, "name": "In Progress"}

    doc = read_task(initialized_repo, "3")
    assert doc["description"] == "Look it over."
    assert doc["creator_id"] == "alice@example.com"
    assert read_board(initialized_repo)["columns"][1]["task_ids"] == ["3"]


def test_task_add_text(initialized_repo, capsys):
    args = Namespace(
        repo=str(initialized_repo), json=False, column=None, title="Plan", description="", priority=None
    )
    assert task_add(args) == 0

    out = capsys.readouterr().out
    assert 'Created task 3 "Plan" in To Do' in out


def test_task_update(initialized_repo, capsys, read_task):
    args = _args(initialized_repo, id="1", title="First task, revised", description=None, priority="low")
    assert task_update(args) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["title"] == "First task, revised"
    doc = read_task(initialized_repo, "1")
    assert doc["priority"] == "low"
    assert doc["description"] == "First task description."


def test_task_update_not_found(initialized_repo, capsys):
    args = _args(initialized_repo, id="99", title="x", description=None, priority=None)
    with pytest.raises(SystemExit, match="1"):
        task_update(args)


def test_task_move(initialized_repo, capsys, read_board, read_task):
    done = read_board(initialized_repo)["columns"][2]["id"]
    assert task_move(_args(initialized_repo, id="1", column=done, before=None)) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["column"]["id"] == done
    board = read_board(initialized_repo)
    assert board["columns"][0]["task_ids"] == ["2"]
    assert board["columns"][2]["task_ids"] == ["1"]
    assert read_task(initialized_repo, "1")["column_id"] == done


def test_task_move_before(initialized_repo, capsys, read_board):
    todo = read_board(initialized_repo)["columns"][0]["id"]
    assert task_move(_args(initialized_repo, id="2", column=todo, before="1")) == 0

    assert read_board(initialized_repo)["columns"][0]["task_ids"] == ["2", "1"]


def test_task_move_unknown_column(initialized_repo, capsys, read_board):
    with pytest.raises(SystemExit, match="1"):
        task_move(_args(initialized_repo, id="1", column="nope", before=None))

    assert "Column nope not found" in capsys.readouterr().err
    assert read_board(initialized_repo)["columns"][0]["task_ids"] == ["1", "2"]


def test_task_archive(initialized_repo, capsys, read_board, read_task):
    assert task_archive(_args(initialized_repo, id="1")) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["id"] == "1"
    assert data["archived_at"]
    assert read_task(initialized_repo, "1")["is_archived"] is True
    assert read_board(initialized_repo)["columns"][0]["task_ids"] == ["2"]

    task_list(_args(initialized_repo, column=None))
    assert [t["id"] for t in json.loads(capsys.readouterr().out)] == ["2"]


def test_task_archive_twice(initialized_repo, capsys):
    task_archive(_args(initialized_repo, id="1"))
    capsys.readouterr()
    with pytest.raises(SystemExit, match="1"):
        task_archive(_args(initialized_repo, id="1"))


def test_task_done(initialized_repo, capsys, read_task):
    assert task_done(_args(initialized_repo, id="2", undo=False)) == 0

    assert json.loads(capsys.readouterr().out)["completed"] is True
    assert read_task(initialized_repo, "2")["is_completed"] is True

    assert task_done(_args(initialized_repo, id="2", undo=True)) == 0
    assert json.loads(capsys.readouterr().out)["completed"] is False
    assert read_task(initialized_repo, "2")["is_completed"] is False


def test_task_done_text_reports_note(initialized_repo, capsys):
    args = Namespace(repo=str(initialized_repo), json=False, id="2", undo=False)
    assert task_done(args) == 0

    assert "Task Updated: Task marked as complete." in capsys.readouterr().err
