"""Vim-style single-line editor used by the prompt input.

``LineBuffer`` holds the pure operations: every method returns a new buffer
and none of them can index out of range. ``ModalLineEditor`` adds the
Normal/Insert mode and the one-character pending prefix for ``dd``, ``dw``,
``cw`` and ``cc``.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class InputMode(Enum):
    NORMAL = "normal"
    INSERT = "insert"


@dataclass(frozen=True)
class LineBuffer:
    text: str = ""
    cursor: int = 0

    @property
    def _insert_cursor(self) -> int:
        return max(0, min(self.cursor, len(self.text)))

    @property
    def _last_index(self) -> int:
        return max(0, len(self.text) - 1)

    def clamp_insert(self) -> LineBuffer:
        """Cursor within [0, len]: between characters."""
        return replace(self, cursor=self._insert_cursor)

    def clamp_normal(self) -> LineBuffer:
        """Cursor within [0, len-1]: a block cursor on a character."""
        return replace(self, cursor=max(0, min(self.cursor, self._last_index)))

    def insert(self, chars: str) -> LineBuffer:
        pos = self._insert_cursor
        return LineBuffer(self.text[:pos] + chars + self.text[pos:], pos + len(chars))

    def backspace(self) -> LineBuffer:
        pos = self._insert_cursor
        if pos == 0:
            return self.clamp_insert()
        return LineBuffer(self.text[: pos - 1] + self.text[pos:], pos - 1)

    def delete_char(self) -> LineBuffer:
        pos = self._insert_cursor
        if pos >= len(self.text):
            return self.clamp_normal()
        text = self.text[:pos] + self.text[pos + 1:]
        return LineBuffer(text, max(0, min(pos, len(text) - 1)))

    def delete_word(self) -> LineBuffer:
        """Delete through the end of the word plus one trailing separator."""
        start = self._insert_cursor
        text = self.text
        if start >= len(text):
            return self.clamp_insert()
        end = start
        while end < len(text) and not text[end].isspace():
            end += 1
        if end < len(text) and text[end].isspace():
            end += 1
        remaining = text[:start] + text[end:]
        return LineBuffer(remaining, min(start, len(remaining)))

    def word_forward(self) -> LineBuffer:
        text = self.text
        pos = self._insert_cursor
        if pos >= len(text):
            return self.clamp_normal()
        while pos < len(text) and not text[pos].isspace():
            pos += 1
        while pos < len(text) and text[pos].isspace():
            pos += 1
        if pos >= len(text):
            pos = self._last_index
        return replace(self, cursor=pos)

    def word_backward(self) -> LineBuffer:
        text = self.text
        pos = min(self._insert_cursor, self._last_index)
        if pos <= 0:
            return replace(self, cursor=0)
        pos -= 1
        while pos > 0 and text[pos].isspace():
            pos -= 1
        while pos > 0 and not text[pos - 1].isspace():
            pos -= 1
        return replace(self, cursor=pos)

    def line_start(self) -> LineBuffer:
        return replace(self, cursor=0)

    def line_end(self) -> LineBuffer:
        return replace(self, cursor=self._last_index)

    def move_left(self) -> LineBuffer:
        return replace(self, cursor=max(0, self._insert_cursor - 1))

    def move_right(self, mode: InputMode) -> LineBuffer:
        limit = len(self.text) if mode is InputMode.INSERT else self._last_index
        return replace(self, cursor=min(self._insert_cursor + 1, limit))


class EditorAction(Enum):
    NONE = "none"
    SUBMIT = "submit"
    LEAVE = "leave"  # Escape in Normal mode: give up input focus


_PENDING_PREFIXES = frozenset({"d", "c"})


@dataclass(frozen=True)
class CursorView:
    """Read-only split of the line around the cursor for rendering."""

    mode_label: str
    before: str
    at: str
    after: str
    block: bool


class ModalLineEditor:
    def __init__(self) -> None:
        self.buffer = LineBuffer()
        self.mode = InputMode.NORMAL
        self.pending = ""

    @property
    def text(self) -> str:
        return self.buffer.text

    @property
    def cursor(self) -> int:
        return self.buffer.cursor

    def reset(self) -> None:
        self.buffer = LineBuffer()
        self.mode = InputMode.NORMAL
        self.pending = ""

    def activate(self) -> None:
        """Enter Normal mode with the cursor on the first character."""
        self.mode = InputMode.NORMAL
        self.pending = ""
        self.buffer = self.buffer.line_start()

    def enter_insert(self) -> None:
        self.mode = InputMode.INSERT
        self.pending = ""
        self.buffer = self.buffer.clamp_insert()

    def append_insert(self) -> None:
        if self.buffer.cursor < len(self.buffer.text):
            self.buffer = replace(self.buffer, cursor=self.buffer.cursor + 1)
        self.enter_insert()

    def append_end_insert(self) -> None:
        self.buffer = replace(self.buffer, cursor=len(self.buffer.text))
        self.enter_insert()

    def escape_insert(self) -> None:
        self.mode = InputMode.NORMAL
        self.pending = ""
        self.buffer = self.buffer.clamp_normal()

    def take_prompt(self) -> str:
        """Return the stripped line and clear the editor."""
        prompt = self.buffer.text.strip()
        self.reset()
        return prompt

    def handle_key(self, key: str, character: str | None = None) -> EditorAction:
        token = character if character and character.isprintable() else key
        if self.mode is InputMode.INSERT:
            return self._handle_insert(key, token)
        return self._handle_normal(key, token)

    def _handle_insert(self, key: str, token: str) -> EditorAction:
        if key == "escape":
            self.escape_insert()
        elif key == "enter":
            if self.buffer.text.strip():
                return EditorAction.SUBMIT
        elif key == "backspace":
            self.buffer = self.buffer.backspace()
        elif key == "left":
            self.buffer = self.buffer.move_left()
        elif key == "right":
            self.buffer = self.buffer.move_right(InputMode.INSERT)
        elif key == "home":
            self.buffer = self.buffer.line_start()
        elif key == "end":
            self.buffer = replace(self.buffer, cursor=len(self.buffer.text))
        elif len(token) == 1 and token.isprintable():
            self.buffer = self.buffer.insert(token)
        return EditorAction.NONE

    def _handle_normal(self, key: str, token: str) -> EditorAction:
        pending, self.pending = self.pending, ""
        if pending:
            combo = pending + token
            if combo == "dd":
                self.buffer = LineBuffer()
                return EditorAction.NONE
            if combo == "cc":
                self.buffer = LineBuffer()
                self.enter_insert()
                return EditorAction.NONE
            if combo == "dw":
                self.buffer = self.buffer.delete_word().clamp_normal()
                return EditorAction.NONE
            if combo == "cw":
                self.buffer = self.buffer.delete_word()
                self.enter_insert()
                return EditorAction.NONE
            # Unmatched prefix is dropped; the key is handled on its own.

        if key == "escape":
            return EditorAction.LEAVE
        if token in _PENDING_PREFIXES:
            self.pending = token
        elif token == "i":
            self.enter_insert()
        elif token == "a":
            self.append_insert()
        elif token == "A":
            self.append_end_insert()
        elif token == "x":
            self.buffer = self.buffer.delete_char()
        elif token == "w":
            self.buffer = self.buffer.word_forward()
        elif token == "b":
            self.buffer = self.buffer.word_backward()
        elif token == "0" or key == "home":
            self.buffer = self.buffer.line_start()
        elif token == "$" or key == "end":
            self.buffer = self.buffer.line_end()
        elif token == "h" or key == "left":
            self.buffer = self.buffer.move_left()
        elif token == "l" or key == "right":
            self.buffer = self.buffer.move_right(InputMode.NORMAL)
        return EditorAction.NONE

    def cursor_view(self) -> CursorView:
        if self.mode is InputMode.INSERT:
            pos = self.buffer._insert_cursor
            return CursorView("INSERT", self.text[:pos], "", self.text[pos:], block=False)
        pos = max(0, min(self.cursor, len(self.text) - 1))
        label = f"NORMAL:{self.pending}" if self.pending else "NORMAL"
        if not self.text:
            return CursorView(label, "", " ", "", block=True)
        return CursorView(label, self.text[:pos], self.text[pos], self.text[pos + 1:], block=True)
