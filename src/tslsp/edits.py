"""
Translate editor-style range edits into tree-sitter edit coordinates.

An LSP content change names the replaced span by line/character positions.
``Tree.edit`` wants the same span as byte offsets plus (row, column) points
for the start, the old end and the new end.  :func:`translate_edit` computes
both from the document text *before* the edit and also returns the text as it
reads *after* the edit, so a sequence of changes can be applied one at a time.

Byte offsets and point columns are UTF-8 byte counts, which is what the
parser sees.  Line/character input is in string indices; ranges coming from
the client are converted from its position encoding before they get here.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from lsprotocol import types as lsp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EditCoordinates:
    start_index: int                     # byte offset, old and new text
    old_end_index: int                   # byte offset, old text
    new_end_index: int                   # byte offset, new text
    start_position: tuple[int, int]      # (row, byte column)
    old_end_position: tuple[int, int]
    new_end_position: tuple[int, int]

    def as_edit_kwargs(self) -> dict:
        """Keyword arguments for ``tree_sitter.Tree.edit``."""
        return dict(
            start_byte=self.start_index,
            old_end_byte=self.old_end_index,
            new_end_byte=self.new_end_index,
            start_point=self.start_position,
            old_end_point=self.old_end_position,
            new_end_point=self.new_end_position,
        )


def _utf8_len(s: str) -> int:
    return len(s.encode('utf-8'))


def _clamp(lines: list[str], pos: lsp.Position) -> tuple[int, int]:
    """Clamp *pos* into *lines*, returning a (line, character) pair."""
    line = min(max(pos.line, 0), len(lines) - 1)
    col = min(max(pos.character, 0), len(lines[line]))
    return line, col


def full_range(text: str) -> lsp.Range:
    """Return the range covering all of *text*."""
    lines = text.split('\n')
    return lsp.Range(
        start=lsp.Position(line=0, character=0),
        end=lsp.Position(line=len(lines) - 1, character=len(lines[-1])),
    )


def translate_edit(
    text: str,
    rng: lsp.Range,
    inserted: str,
    range_length: int | None = None,
    units: Callable[[str], int] = len,
) -> tuple[EditCoordinates, str]:
    """Return the edit coordinates for replacing *rng* in *text* by *inserted*.

    The second element of the result is the full text after the edit.

    Positions outside the document are clamped to it and an inverted range
    collapses to an empty range at its start, so malformed input degrades to
    an insertion instead of raising.  *range_length* is the editor's own
    count of replaced characters, measured with *units*; it is only
    cross-checked, the span actually removed is always derived from *rng*
    against *text*.
    """
    lines = text.split('\n')
    start_line, start_col = _clamp(lines, rng.start)
    end_line, end_col = _clamp(lines, rng.end)
    if (end_line, end_col) < (start_line, start_col):
        logger.warning('translate_edit: inverted range %s, treating as insertion', rng)
        end_line, end_col = start_line, start_col

    before = '\n'.join(lines[:start_line] + [lines[start_line][:start_col]])
    after = '\n'.join([lines[end_line][end_col:]] + lines[end_line + 1:])
    removed = text[len(before):len(text) - len(after)]

    if range_length is not None and range_length != units(removed):
        logger.warning(
            'translate_edit: rangeLength %d disagrees with range %s (%d units), using the range',
            range_length, rng, units(removed),
        )

    start_index = _utf8_len(before)
    start_column = _utf8_len(lines[start_line][:start_col])

    if '\n' in inserted:
        new_end_column = _utf8_len(inserted.rsplit('\n', 1)[1])
    else:
        new_end_column = start_column + _utf8_len(inserted)

    coords = EditCoordinates(
        start_index=start_index,
        old_end_index=start_index + _utf8_len(removed),
        new_end_index=start_index + _utf8_len(inserted),
        start_position=(start_line, start_column),
        old_end_position=(end_line, _utf8_len(lines[end_line][:end_col])),
        new_end_position=(start_line + inserted.count('\n'), new_end_column),
    )
    return coords, before + inserted + after
