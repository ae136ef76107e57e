"""
Minimal reader for PDF object syntax.

PyMuPDF hands out raw object source (``doc.xref_object``) and key values
(``doc.xref_get_key``) as strings.  The page-label number tree only needs a
small part of the grammar, so this module turns such strings into plain
Python values:

=================  ==========================
PDF                Python
=================  ==========================
``<< ... >>``      ``dict`` keyed by name
``[ ... ]``        ``list``
``/Name``          :class:`Name` (a ``str``)
``(text)``         ``str`` (decoded text string)
``<48656C6C6F>``   ``str`` (decoded text string)
``12 0 R``         :class:`Ref`
``42`` / ``4.2``   ``int`` / ``float``
``true``/``false`` ``bool``
``null``           ``None``
=================  ==========================

Streams are not supported; number-tree nodes never carry one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

_DELIMITERS = b"()<>[]{}/%"
_WHITESPACE = b"\x00\t\n\x0c\r "
_NUMBER_RE = re.compile(rb"[+-]?(?:\d+\.?\d*|\.\d+)")
_OBJ_HEADER_RE = re.compile(rb"\d+\s+\d+\s+obj\b")
_REF_TAIL_RE = re.compile(rb"\s+(\d+)\s+R(?![^\x00\t\n\x0c\r ()<>\[\]{}/%])")
_ESCAPES = {
    ord("n"): b"\n",
    ord("r"): b"\r",
    ord("t"): b"\t",
    ord("b"): b"\b",
    ord("f"): b"\f",
    ord("("): b"(",
    ord(")"): b")",
    ord("\\"): b"\\",
}


class PdfSyntaxError(ValueError):
    """Raised when object source cannot be parsed."""


class Name(str):
    """A PDF name object, stored without the leading slash."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Name({str(self)!r})"


@dataclass(frozen=True)
class Ref:
    """Indirect reference ``xref gen R``."""

    xref: int
    gen: int = 0


def decode_text_string(raw: bytes) -> str:
    """Decode a PDF text string (UTF-16BE / UTF-8 with BOM, else PDFDocEncoding)."""
    if raw.startswith(b"\xfe\xff"):
        return raw[2:].decode("utf-16-be", errors="replace")
    if raw.startswith(b"\xef\xbb\xbf"):
        return raw[3:].decode("utf-8", errors="replace")
    # PDFDocEncoding agrees with Latin-1 for everything a prefix realistically uses
    return raw.decode("latin-1")


def parse_object(source: str | bytes) -> Any:
    """Parse a single PDF object from ``source``.

    Args:
        source: Object source, e.g. ``"<</Nums[0<</S/r>>]>>"``. Leading
            ``N G obj`` / trailing ``endobj`` wrappers are tolerated.

    Returns:
        The Python value of the first object in ``source``.

    Raises:
        PdfSyntaxError: If the text is not a well-formed object.
    """
    data = source.encode("latin-1", errors="replace") if isinstance(source, str) else source
    parser = _Parser(data)
    parser.skip_indirect_header()
    value = parser.parse_value()
    return value


class _Parser:
    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    # -- low level ---------------------------------------------------------

    def _peek(self) -> int | None:
        return self.data[self.pos] if self.pos < len(self.data) else None

    def _skip_ws(self) -> None:
        data = self.data
        while self.pos < len(data):
            c = data[self.pos]
            if c in _WHITESPACE:
                self.pos += 1
            elif c == ord("%"):
                while self.pos < len(data) and data[self.pos] not in b"\r\n":
                    self.pos += 1
            else:
                break

    def _regular_token(self) -> bytes:
        start = self.pos
        data = self.data
        while (
            self.pos < len(data)
            and data[self.pos] not in _WHITESPACE
            and data[self.pos] not in _DELIMITERS
        ):
            self.pos += 1
        return data[start : self.pos]

    def skip_indirect_header(self) -> None:
        self._skip_ws()
        match = _OBJ_HEADER_RE.match(self.data, self.pos)
        if match:
            self.pos = match.end()

    def _error(self, message: str) -> PdfSyntaxError:
        return PdfSyntaxError(f"{message} at offset {self.pos}")

    # -- grammar -----------------------------------------------------------

    def parse_value(self) -> Any:
        self._skip_ws()
        c = self._peek()
        if c is None:
            raise self._error("unexpected end of object")
        if c == ord("/"):
            return self._parse_name()
        if c == ord("("):
            return decode_text_string(self._parse_literal_string())
        if c == ord("<"):
            if self.data[self.pos : self.pos + 2] == b"<<":
                return self._parse_dict()
            return decode_text_string(self._parse_hex_string())
        if c == ord("["):
            return self._parse_array()
        if c == ord("{") or c == ord(")") or c == ord("]") or c == ord(">"):
            raise self._error(f"unexpected {chr(c)!r}")

        token = self._regular_token()
        if not token:
            raise self._error(f"unexpected {chr(c)!r}")
        if token == b"true":
            return True
        if token == b"false":
            return False
        if token == b"null":
            return None
        if not _NUMBER_RE.fullmatch(token):
            raise self._error(f"unknown token {token!r}")
        if b"." in token:
            return float(token)
        number = int(token)
        return self._maybe_reference(number)

    def _maybe_reference(self, number: int) -> int | Ref:
        # "12 0 R": look ahead without consuming unless the whole triple matches
        match = _REF_TAIL_RE.match(self.data, self.pos)
        if match and number >= 0:
            self.pos = match.end()
            return Ref(number, int(match.group(1)))
        return number

    def _parse_name(self) -> Name:
        self.pos += 1  # '/'
        raw = self._regular_token()
        return Name(re.sub(rb"#([0-9A-Fa-f]{2})", lambda m: bytes([int(m.group(1), 16)]), raw).decode("latin-1"))

    def _parse_literal_string(self) -> bytes:
        self.pos += 1  # '('
        data = self.data
        out = bytearray()
        depth = 1
        while self.pos < len(data):
            c = data[self.pos]
            self.pos += 1
            if c == ord("\\"):
                if self.pos >= len(data):
                    break
                nxt = data[self.pos]
                self.pos += 1
                if nxt in _ESCAPES:
                    out += _ESCAPES[nxt]
                elif ord("0") <= nxt <= ord("7"):
                    digits = bytes([nxt])
                    while len(digits) < 3 and self.pos < len(data) and ord("0") <= data[self.pos] <= ord("7"):
                        digits += bytes([data[self.pos]])
                        self.pos += 1
                    out.append(int(digits, 8) & 0xFF)
                elif nxt == ord("\r"):
                    if self.pos < len(data) and data[self.pos] == ord("\n"):
                        self.pos += 1
                elif nxt == ord("\n"):
                    pass
                else:
                    out.append(nxt)
            elif c == ord("("):
                depth += 1
                out.append(c)
            elif c == ord(")"):
                depth -= 1
                if depth == 0:
                    return bytes(out)
                out.append(c)
            else:
                out.append(c)
        raise self._error("unterminated string")

    def _parse_hex_string(self) -> bytes:
        end = self.data.find(b">", self.pos)
        if end < 0:
            raise self._error("unterminated hex string")
        digits = re.sub(rb"\s", b"", self.data[self.pos + 1 : end])
        self.pos = end + 1
        if len(digits) % 2:
            digits += b"0"
        try:
            return bytes.fromhex(digits.decode("ascii"))
        except ValueError as exc:
            raise self._error("invalid hex string") from exc

    def _parse_array(self) -> list[Any]:
        self.pos += 1  # '['
        items: list[Any] = []
        while True:
            self._skip_ws()
            c = self._peek()
            if c is None:
                raise self._error("unterminated array")
            if c == ord("]"):
                self.pos += 1
                return items
            items.append(self.parse_value())

    def _parse_dict(self) -> dict[Name, Any]:
        self.pos += 2  # '<<'
        result: dict[Name, Any] = {}
        while True:
            self._skip_ws()
            if self.data[self.pos : self.pos + 2] == b">>":
                self.pos += 2
                return result
            if self._peek() is None:
                raise self._error("unterminated dictionary")
            key = self.parse_value()
            if not isinstance(key, Name):
                raise self._error(f"dictionary key must be a name, got {key!r}")
            result[key] = self.parse_value()
