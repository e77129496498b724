import pytest

from warp_reliability.schedule.instruction import Other, Pull, Push, decode_instructions
from warp_reliability.schedule.program import ProgramSchedule


def test_decode_push_with_channel():
    assert decode_instructions("push(F0: A -> B, #1)") == (Push("F0", "A", "B", 1),)


def test_decode_pull_without_channel():
    assert decode_instructions("pull(F1:C->B)") == (Pull("F1", "C", "B"),)


def test_decode_numeric_names():
    assert decode_instructions("push(3: 10 -> 7, #4)") == (Push("3", "10", "7", 4),)


def test_decode_several_instructions_in_one_cell():
    text = "if has(F0) push(F0: A -> B, #1) else pull(F1: C -> B, #2)"
    assert decode_instructions(text) == (Push("F0", "A", "B", 1), Pull("F1", "C", "B", 2))


@pytest.mark.parametrize("text", ["sleep", "wait(#1)"])
def test_decode_other(text):
    assert decode_instructions(text) == (Other(text),)


@pytest.mark.parametrize("text", ["", "   ", None])
def test_decode_empty(text):
    assert decode_instructions(text) == ()


def test_schedule_from_text_rows():
    schedule = ProgramSchedule.from_text_rows(
        ["A", "B"],
        [
            ["push(F0: A -> B, #1)", None],
            [["sleep", "pull(F0: A -> B)"], ""],
        ],
    )
    assert schedule.num_rows == 2
    assert schedule.num_columns == 2
    assert schedule.cell(0, 1) == ()
    assert schedule.cell(1, 0) == (Other("sleep"), Pull("F0", "A", "B"))


def test_schedule_rejects_ragged_rows():
    with pytest.raises(ValueError):
        ProgramSchedule.from_text_rows(["A", "B"], [["sleep"]])
