"""Unit tests for assemble_polls — POLL_START/POLL_END blocks into PollQuestions."""

from __future__ import annotations

from aria_research.poll_assembler import (
    DEFAULT_CONTEXT,
    DISPLAY_PALETTE,
    MAX_POLLS,
    assemble_polls,
    parse_block_fields,
    split_poll_blocks,
)


def _block(n: int) -> str:
    return (
        "POLL_START\n"
        f"QUESTION: Question number {n}?\n"
        f"OPTIONS: Go Ahead {n}: 70%, Hold Off {n}: 30%\n"
        f"CONTEXT: Evidence {n}\n"
        "POLL_END\n"
    )


# ---------------------------------------------------------------------------
# split_poll_blocks() / parse_block_fields()
# ---------------------------------------------------------------------------


class TestSplitPollBlocks:
    def test_splits_on_start_marker_and_truncates_at_end(self):
        text = _block(1) + "trailing chatter between polls\n" + _block(2)
        blocks = split_poll_blocks(text)
        assert len(blocks) == 2
        assert blocks[0].endswith("CONTEXT: Evidence 1")
        assert "trailing chatter" not in blocks[0]

    def test_markers_case_insensitive(self):
        blocks = split_poll_blocks("poll_start\nQUESTION: Q?\nOPTIONS: A: 50%, B: 50%\npoll_end")
        assert blocks == ["QUESTION: Q?\nOPTIONS: A: 50%, B: 50%"]

    def test_tiny_fragments_ignored(self):
        assert split_poll_blocks("POLL_START\n \nPOLL_START ok\n") == []


class TestParseBlockFields:
    def test_fields_delimited_by_next_marker(self):
        fields = parse_block_fields("QUESTION: Q one?\nOPTIONS: A: 1%\nCONTEXT: C text")
        assert fields == {"QUESTION": "Q one?", "OPTIONS": "A: 1%", "CONTEXT": "C text"}

    def test_inline_marker_word_inside_question_is_text(self):
        fields = parse_block_fields(
            "QUESTION: What are your options: stay or go?\nOPTIONS: Stay: 60%, Go: 40%\nCONTEXT: c"
        )
        assert fields == {
            "QUESTION": "What are your options: stay or go?",
            "OPTIONS": "Stay: 60%, Go: 40%",
            "CONTEXT": "c",
        }

    def test_single_line_block_uses_inline_markers(self):
        fields = parse_block_fields("QUESTION: Sell? OPTIONS: Sell: 30%, Keep: 70% CONTEXT: prices flat")
        assert fields == {"QUESTION": "Sell?", "OPTIONS": "Sell: 30%, Keep: 70%", "CONTEXT": "prices flat"}

    def test_markup_before_line_marker(self):
        fields = parse_block_fields("**QUESTION:** Q?\n- OPTIONS: A: 50%, B: 50%")
        assert fields["OPTIONS"] == "A: 50%, B: 50%"

    def test_fields_in_any_order(self):
        fields = parse_block_fields("OPTIONS: A: 60%, B: 40%\nQUESTION: Later?")
        assert fields["OPTIONS"] == "A: 60%, B: 40%"
        assert fields["QUESTION"] == "Later?"
        assert "CONTEXT" not in fields


# ---------------------------------------------------------------------------
# assemble_polls()
# ---------------------------------------------------------------------------


class TestAssemblePolls:
    def test_single_block_scenario(self):
        polls = assemble_polls("QUESTION: Buy now?\nOPTIONS: Buy Now: 60%, Wait: 40%\nCONTEXT: market data")
        assert len(polls) == 1
        poll = polls[0]
        assert poll.question == "Buy now?"
        assert [o.label for o in poll.options] == ["Buy Now", "Wait"]
        assert sum(o.percentage for o in poll.options) == 100
        assert poll.context == "market data"

    def test_question_mentioning_options_keeps_poll(self):
        polls = assemble_polls(
            "QUESTION: What are your options: stay or go?\nOPTIONS: Stay: 60%, Go: 40%\nCONTEXT: c"
        )
        assert len(polls) == 1
        assert polls[0].question == "What are your options: stay or go?"
        assert [(o.label, o.percentage) for o in polls[0].options] == [("Stay", 60), ("Go", 40)]

    def test_empty_section(self):
        assert assemble_polls("") == []
        assert assemble_polls(None) == []

    def test_caps_at_nine_in_source_order(self):
        text = "".join(_block(n) for n in range(15))
        polls = assemble_polls(text, freshness="t")
        assert len(polls) == MAX_POLLS
        assert [p.question for p in polls] == [f"Question number {n}?" for n in range(9)]

    def test_block_without_options_marker_is_dropped(self):
        text = "POLL_START\nQUESTION: Missing options?\nCONTEXT: none\nPOLL_END\n" + _block(1)
        polls = assemble_polls(text)
        assert [p.question for p in polls] == ["Question number 1?"]

    def test_block_with_unparseable_options_is_dropped(self):
        text = "POLL_START\nQUESTION: Vague?\nOPTIONS: it depends on many things\nPOLL_END\n"
        assert assemble_polls(text) == []

    def test_missing_context_uses_placeholder(self):
        polls = assemble_polls("POLL_START\nQUESTION: Q?\nOPTIONS: Up: 30%, Down: 30%\nPOLL_END")
        assert polls[0].context == DEFAULT_CONTEXT
        assert [o.percentage for o in polls[0].options] == [50, 50]

    def test_question_and_context_are_stripped(self):
        polls = assemble_polls("QUESTION: **Move** [now]?\nOPTIONS: Yes: 50%, No: 50%\nCONTEXT: # Rents  rising")
        assert polls[0].question == "Move now?"
        assert polls[0].context == "Rents rising"

    def test_ids_and_display_groups(self):
        text = "".join(_block(n) for n in range(9))
        polls = assemble_polls(text, freshness="1700000000000")
        assert polls[0].id == "poll-0-1700000000000"
        assert len({p.id for p in polls}) == 9
        assert [p.display_group for p in polls] == [n % len(DISPLAY_PALETTE) for n in range(9)]
        assert polls[8].display_group == 0

    def test_display_group_follows_block_position_after_drops(self):
        text = "POLL_START\nQUESTION: Empty?\nOPTIONS: none\nPOLL_END\n" + _block(1)
        polls = assemble_polls(text, freshness="x")
        assert polls[0].id == "poll-1-x"
        assert polls[0].display_group == 1

    def test_options_capped_at_six(self):
        options = ", ".join(f"Path {chr(65 + i)}x: {10 + i}%" for i in range(8))
        polls = assemble_polls(f"QUESTION: Many?\nOPTIONS: {options}")
        assert len(polls[0].options) == 6
        assert sum(o.percentage for o in polls[0].options) == 100
