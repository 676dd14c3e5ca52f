from __future__ import annotations

from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from recipeshare.editor import INGREDIENT, INSTRUCTION, OrderedListEditor


def make_editor() -> OrderedListEditor:
    return OrderedListEditor(["a", "b", "c", "d"], ["mix", "bake"])


def test_new_editor_starts_with_one_empty_item_per_list():
    editor = OrderedListEditor()
    assert editor.ingredients == [""]
    assert editor.instructions == [""]


def test_append_and_update():
    editor = OrderedListEditor(["flour"], ["mix"])
    editor.append(INGREDIENT)
    editor.update(INGREDIENT, 1, "sugar")

    assert editor.ingredients == ["flour", "sugar"]
    assert editor.instructions == ["mix"]


def test_remove_refuses_to_empty_a_list():
    editor = OrderedListEditor(["flour", "sugar"], ["mix"])

    assert editor.remove(INGREDIENT, 0) is True
    assert editor.ingredients == ["sugar"]
    assert editor.remove(INGREDIENT, 0) is False
    assert editor.remove(INSTRUCTION, 0) is False
    assert editor.ingredients == ["sugar"]
    assert editor.instructions == ["mix"]


def test_drag_and_drop_moves_item():
    editor = make_editor()
    editor.drag_start(INGREDIENT, 0)
    editor.drag_over(INGREDIENT, 2)

    assert editor.hover_index(INGREDIENT) == 2
    assert editor.drop(INGREDIENT, 2) is True
    assert editor.ingredients == ["b", "c", "a", "d"]


def test_drop_resets_drag_state():
    editor = make_editor()
    editor.drag_start(INGREDIENT, 1)
    editor.drag_over(INGREDIENT, 3)
    editor.drop(INGREDIENT, 3)

    assert editor.drag is None
    assert editor.hover_index(INGREDIENT) is None


def test_drag_end_cancels_gesture():
    editor = make_editor()
    editor.drag_start(INGREDIENT, 1)
    editor.drag_end()

    assert editor.drop(INGREDIENT, 3) is False
    assert editor.ingredients == ["a", "b", "c", "d"]


@pytest.mark.parametrize("index", [0, 1, 2, 3])
def test_drop_on_origin_is_noop(index):
    editor = make_editor()
    assert editor.move(INGREDIENT, index, index) is False
    assert editor.ingredients == ["a", "b", "c", "d"]


def test_cross_list_drop_changes_nothing():
    editor = make_editor()
    editor.drag_start(INGREDIENT, 0)
    editor.drag_over(INSTRUCTION, 1)

    assert editor.hover_index(INSTRUCTION) is None
    assert editor.drop(INSTRUCTION, 1) is False
    assert editor.ingredients == ["a", "b", "c", "d"]
    assert editor.instructions == ["mix", "bake"]
    assert editor.drag is None


def test_drop_without_drag_is_ignored():
    editor = make_editor()
    assert editor.drop(INGREDIENT, 2) is False
    assert editor.ingredients == ["a", "b", "c", "d"]


def test_drag_start_out_of_range_is_ignored():
    editor = make_editor()
    editor.drag_start(INGREDIENT, 10)
    assert editor.drag is None


def test_move_towards_front():
    editor = make_editor()
    assert editor.move(INGREDIENT, 3, 1) is True
    assert editor.ingredients == ["a", "d", "b", "c"]


def test_instruction_reorder_is_independent():
    editor = make_editor()
    editor.move(INSTRUCTION, 1, 0)

    assert editor.instructions == ["bake", "mix"]
    assert editor.ingredients == ["a", "b", "c", "d"]


@pytest.mark.parametrize(
    "action,ingredients",
    [
        ("add:ingredient", ["a", "b", "c", "d", ""]),
        ("remove:ingredient:1", ["a", "c", "d"]),
        ("move:ingredient:0:2", ["b", "c", "a", "d"]),
    ],
)
def test_apply_action(action, ingredients):
    editor = make_editor()
    assert editor.apply_action(action) is True
    assert editor.ingredients == ingredients


@pytest.mark.parametrize(
    "action",
    ["", "save", "add:garnish", "move:ingredient:x:1", "remove:ingredient", "shuffle:ingredient"],
)
def test_malformed_actions_are_ignored(action):
    editor = make_editor()
    assert editor.apply_action(action) is False
    assert editor.ingredients == ["a", "b", "c", "d"]


def test_unknown_kind_raises():
    with pytest.raises(ValueError):
        make_editor().append("garnish")
