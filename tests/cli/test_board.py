"""Tests for 'optiban board' commands."""

import json
from argparse import Namespace

import pytest

from optiban.cli.board import board_summary


def test_board_summary(initialized_repo, capsys):
    args = Namespace(repo=str(initialized_repo), json=False)
    assert board_summary(args) == 0

    out = capsys.readouterr().out
    assert "Project" in out
    assert "owner Alice" in out
    assert "To Do  (2 tasks)" in out
    assert "First task" in out
    assert "Done  (0 tasks)" in out


def test_board_summary_json(initialized_repo, capsys):
    args = Namespace(repo=str(initialized_repo), json=True)
    assert board_summary(args) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["id"] == "1"
    assert data["owner"] == "alice@example.com"
    assert [c["name"] for c in data["columns"]] == ["To Do", "In Progress", "Done"]
    first = data["columns"][0]["tasks"][0]
    assert first["title"] == "First task"
    assert first["creator"] == "Alice"
    assert first["completed"] is False


def test_board_summary_no_board(empty_repo, capsys):
    args = Namespace(repo=str(empty_repo), json=False)
    with pytest.raises(SystemExit, match="1"):
        board_summary(args)
    assert "No board selected" in capsys.readouterr().err


def test_board_summary_unknown_board(initialized_repo, capsys):
    args = Namespace(repo=str(initialized_repo), json=True, board="99")
    with pytest.raises(SystemExit, match="1"):
        board_summary(args)

    err = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert err["error"] == "Board 99 does not exist."
