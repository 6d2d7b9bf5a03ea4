"""Tests for tslsp.edits — line/character edits to tree-sitter coordinates."""
from __future__ import annotations

import logging

from lsprotocol import types as lsp
from pygls.workspace import PositionCodec

from tslsp.edits import EditCoordinates, full_range, translate_edit


def _range(sl: int, sc: int, el: int, ec: int) -> lsp.Range:
    return lsp.Range(
        start=lsp.Position(line=sl, character=sc),
        end=lsp.Position(line=el, character=ec),
    )


class TestTranslateEdit:
    def test_single_character_insertion(self):
        coords, text = translate_edit('const x = ;', _range(0, 10, 0, 10), '2', 0)
        assert text == 'const x = 2;'
        assert coords == EditCoordinates(
            start_index=10,
            old_end_index=10,
            new_end_index=11,
            start_position=(0, 10),
            old_end_position=(0, 10),
            new_end_position=(0, 11),
        )

    def test_deletion_across_lines(self):
        coords, text = translate_edit('abc\ndef', _range(0, 1, 1, 1), '', 4)
        assert text == 'aef'
        assert coords.start_index == 1
        assert coords.old_end_index == 5
        assert coords.new_end_index == 1
        assert coords.old_end_position == (1, 1)
        assert coords.new_end_position == (0, 1)

    def test_multiline_insertion_end_position(self):
        coords, text = translate_edit('ab', _range(0, 1, 0, 1), 'x\nyz', 0)
        assert text == 'ax\nyzb'
        assert coords.new_end_index == 5
        assert coords.new_end_position == (1, 2)

    def test_replacement_on_later_line(self):
        coords, text = translate_edit('let a;\nlet b;\n', _range(1, 4, 1, 5), 'bee', 1)
        assert text == 'let a;\nlet bee;\n'
        assert coords.start_index == 11
        assert coords.start_position == (1, 4)
        assert coords.new_end_position == (1, 7)

    def test_span_lengths_match_inserted_and_removed_text(self):
        inserted = 'value + 1'
        coords, _ = translate_edit('const total = x;', _range(0, 14, 0, 15), inserted, 1)
        assert coords.new_end_index - coords.start_index == len(inserted)
        assert coords.old_end_index - coords.start_index == 1

    def test_empty_edit_is_identity(self):
        coords, text = translate_edit('const x = 1;', _range(0, 5, 0, 5), '', 0)
        assert text == 'const x = 1;'
        assert coords.start_index == coords.old_end_index == coords.new_end_index

    def test_inconsistent_range_length_uses_range(self):
        coords, text = translate_edit('abcdef', _range(0, 1, 0, 3), 'X', 99)
        assert text == 'aXdef'
        assert coords.old_end_index == 3

    def test_utf8_byte_offsets(self):
        coords, text = translate_edit('é = ;', _range(0, 4, 0, 4), '1', 0)
        assert text == 'é = 1;'
        assert coords.start_index == 5
        assert coords.start_position == (0, 5)
        assert coords.new_end_position == (0, 6)


class TestMalformedRanges:
    def test_column_past_end_of_line_is_clamped(self):
        coords, text = translate_edit('ab\ncd', _range(0, 10, 0, 12), '!')
        assert text == 'ab!\ncd'
        assert coords.start_index == 2

    def test_line_past_end_of_document_is_clamped(self):
        _, text = translate_edit('ab\ncd', _range(7, 0, 9, 0), '!')
        assert text == 'ab\n!cd'

    def test_inverted_range_becomes_insertion(self):
        coords, text = translate_edit('abcdef', _range(0, 3, 0, 1), 'X')
        assert text == 'abcXdef'
        assert coords.old_end_index == coords.start_index == 3


class TestFullRange:
    def test_covers_whole_text(self):
        rng = full_range('ab\ncde')
        assert rng.start == lsp.Position(line=0, character=0)
        assert rng.end == lsp.Position(line=1, character=3)

    def test_empty_text(self):
        rng = full_range('')
        assert rng.end == lsp.Position(line=0, character=0)

    def test_replacing_full_range_yields_new_text(self):
        _, text = translate_edit('old\ntext\n', full_range('old\ntext\n'), 'new')
        assert text == 'new'


class TestRangeLengthUnits:
    def test_utf16_range_length_matches_astral_character(self, caplog):
        codec = PositionCodec(lsp.PositionEncodingKind.Utf16)
        with caplog.at_level(logging.WARNING, logger='tslsp.edits'):
            _, text = translate_edit('a\U0001F600b', _range(0, 1, 0, 2), 'x', 2,
                                     units=codec.client_num_units)
        assert text == 'axb'
        assert caplog.text == ''

    def test_mismatch_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger='tslsp.edits'):
            translate_edit('abcdef', _range(0, 1, 0, 3), 'X', 99)
        assert 'rangeLength 99' in caplog.text
