"""Escape handling for string and binary literals.

Double-quoted strings accept the JSON escape table plus ``\\0`` and ``\\'``:

    \\0 \\b \\f \\n \\r \\t \\" \\' \\\\ \\/ \\uXXXX

Non-BMP characters are written as a UTF-16 surrogate pair (``\\uD834\\uDD1E``).

Binary literals follow byte string rules: ``\\xHH`` (two hex digits, at most
``\\x7F``), ``\\n \\r \\t \\0 \\\\ \\' \\"``. In the double-quoted form a backslash
at the end of a line skips the line break and any leading whitespace of the
next line.
"""

from __future__ import annotations

import base64
import binascii

from dyexpr.errors import InvalidBase64Error, InvalidEscapeError

_STRING_ESCAPES = {
    "0": "\0",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    '"': '"',
    "'": "'",
    "\\": "\\",
    "/": "/",
}

_BINARY_ESCAPES = {
    "0": 0x00,
    "n": 0x0A,
    "r": 0x0D,
    "t": 0x09,
    "\\": 0x5C,
    "'": 0x27,
    '"': 0x22,
}

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

# Characters that render_string escapes with a short form
_SHORT_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def _read_hex4(body: str, start: int, offset: int) -> int:
    digits = body[start:start + 4]
    if len(digits) != 4 or not all(c in _HEX_DIGITS for c in digits):
        raise InvalidEscapeError(
            f"Invalid unicode escape '\\u{digits}' at position {offset + start - 2}",
            offset + start - 2,
        )
    return int(digits, 16)


def decode_string(body: str, offset: int = 0) -> str:
    """Decode the inside of a double-quoted string literal.

    ``offset`` is the absolute position of ``body[0]`` in the source text and is
    only used for error reporting.
    """
    result: list[str] = []
    i = 0
    length = len(body)
    while i < length:
        ch = body[i]
        if ch != "\\":
            result.append(ch)
            i += 1
            continue

        escape_pos = offset + i
        if i + 1 >= length:
            raise InvalidEscapeError(
                f"Unexpected end of escape sequence at position {escape_pos}",
                escape_pos,
            )
        code = body[i + 1]
        if code in _STRING_ESCAPES:
            result.append(_STRING_ESCAPES[code])
            i += 2
            continue
        if code != "u":
            raise InvalidEscapeError(
                f"Invalid escape '\\{code}' at position {escape_pos}", escape_pos
            )

        high = _read_hex4(body, i + 2, offset)
        i += 6
        if 0xDC00 <= high <= 0xDFFF:
            raise InvalidEscapeError(
                f"Unpaired low surrogate at position {escape_pos}", escape_pos
            )
        if not 0xD800 <= high <= 0xDBFF:
            result.append(chr(high))
            continue

        # High surrogate: a low surrogate escape must follow
        if body[i:i + 2] != "\\u":
            raise InvalidEscapeError(
                f"Invalid unicode character at position {escape_pos}", escape_pos
            )
        low = _read_hex4(body, i + 2, offset)
        if not 0xDC00 <= low <= 0xDFFF:
            raise InvalidEscapeError(
                f"Invalid unicode character at position {escape_pos}", escape_pos
            )
        i += 6
        result.append(chr(0x10000 + ((high - 0xD800) << 10) + (low - 0xDC00)))
    return "".join(result)


def decode_binary(body: str, offset: int = 0, allow_continuation: bool = True) -> bytes:
    """Decode the inside of a ``b"..."`` or ``b'...'`` literal into bytes.

    Unescaped characters are encoded as UTF-8.
    """
    result = bytearray()
    i = 0
    length = len(body)
    while i < length:
        ch = body[i]
        if ch != "\\":
            result.extend(ch.encode("utf-8"))
            i += 1
            continue

        escape_pos = offset + i
        if i + 1 >= length:
            raise InvalidEscapeError(
                f"Unexpected end of escape sequence at position {escape_pos}",
                escape_pos,
            )
        code = body[i + 1]
        if code in _BINARY_ESCAPES:
            result.append(_BINARY_ESCAPES[code])
            i += 2
        elif code == "x":
            digits = body[i + 2:i + 4]
            if len(digits) != 2 or not all(c in _HEX_DIGITS for c in digits):
                raise InvalidEscapeError(
                    f"Invalid byte escape '\\x{digits}' at position {escape_pos}",
                    escape_pos,
                )
            byte = int(digits, 16)
            if byte > 0x7F:
                raise InvalidEscapeError(
                    f"Byte escape '\\x{digits}' at position {escape_pos} is above \\x7F; "
                    "use a b64 literal for arbitrary bytes",
                    escape_pos,
                )
            result.append(byte)
            i += 4
        elif code in "\r\n" and allow_continuation:
            i += 1
            while i < length and body[i] in " \t\r\n":
                i += 1
        else:
            raise InvalidEscapeError(
                f"Invalid byte escape '\\{code}' at position {escape_pos}", escape_pos
            )
    return bytes(result)


def decode_base64(body: str, offset: int = 0) -> bytes:
    """Decode a base64 payload, accepting missing padding."""
    payload = "".join(body.split())
    payload += "=" * (-len(payload) % 4)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidBase64Error(
            f"Failed to decode base64 literal at position {offset}: {e}", offset
        ) from e


def render_string(text: str) -> str:
    """Return ``text`` as a double-quoted literal that decodes back to ``text``."""
    out = ['"']
    for ch in text:
        if ch in _SHORT_ESCAPES:
            out.append(_SHORT_ESCAPES[ch])
        elif ord(ch) < 0x20 or 0x7F <= ord(ch) <= 0x9F:
            out.append(f"\\u{ord(ch):04x}")
        elif 0xD800 <= ord(ch) <= 0xDFFF:
            # Lone surrogates only come from decoded escapes; keep them escaped
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def render_base64(data: bytes) -> str:
    return 'b64"' + base64.b64encode(data).decode("ascii") + '"'
