"""Tests for CLI argument parsing and dispatch."""

from optiban.cli import build_parser
from optiban.cli.board import board_summary
from optiban.cli.column import column_list, column_rename
from optiban.cli.task import task_list, task_move


def test_noun_without_verb_defaults():
    parser = build_parser()
    assert parser.parse_args(["board"]).func is board_summary
    assert parser.parse_args(["task"]).func is task_list
    assert parser.parse_args(["column"]).func is column_list


def test_common_options_after_verb():
    args = build_parser().parse_args(["task", "move", "3", "--column", "col-x", "--json", "--repo", "/r"])
    assert args.func is task_move
    assert args.id == "3"
    assert args.column == "col-x"
    assert args.before is None
    assert args.json is True
    assert args.repo == "/r"


def test_column_rename_args():
    args = build_parser().parse_args(["column", "rename", "col-x", "Active", "--board", "2"])
    assert args.func is column_rename
    assert (args.id, args.new_name, args.board) == ("col-x", "Active", "2")
