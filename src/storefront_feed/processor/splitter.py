"""CSV text splitting.

Splitting is line-oriented: every line is tokenized on its own, so a quoted
field cannot span line breaks.
"""

import re
from typing import List

from storefront_feed.models.data_models import RawTable

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_BOM = "\ufeff"


def split_line(line: str, trim: bool = True) -> List[str]:
    """
    Tokenize one CSV line into fields.

    A ``"`` toggles quoted mode, except ``""`` inside quotes which emits one
    literal quote. A ``,`` outside quotes ends the current field and the
    end of the line always flushes the last field, even when empty.

    Args:
        line: One line of CSV text, without its line terminator
        trim: Strip surrounding whitespace from every field

    Returns:
        Field values; an empty line yields an empty list

    Examples:
        >>> split_line('a,"b,c",d')
        ['a', 'b,c', 'd']
        >>> split_line('x,"say ""hi"" now",y')
        ['x', 'say "hi" now', 'y']
    """
    if not line:
        return []

    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < length and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == ',' and not in_quotes:
            fields.append(_finish(current, trim))
            current = []
        else:
            current.append(char)
        i += 1

    fields.append(_finish(current, trim))
    return fields


def _finish(chars: List[str], trim: bool) -> str:
    value = "".join(chars)
    return value.strip() if trim else value


def split_lines(text: str) -> List[str]:
    """Split raw text into non-blank lines, treating \\r\\n, \\r and \\n alike."""
    if not text:
        return []
    if text.startswith(_BOM):
        text = text[len(_BOM):]
    return [line for line in _LINE_BREAK_RE.split(text) if line.strip()]


def parse_csv(text: str, trim: bool = True) -> RawTable:
    """Parse CSV text into rows of fields; row 0 is the header row."""
    return [split_line(line, trim=trim) for line in split_lines(text)]
