"""
Layout pass for generated Java source.

The serializer emits one logical line per declaration, statement and
brace with no indentation. :class:`JavaFormatter` turns that into the
house style: braces joined to their header, indentation by brace depth,
sorted imports, blank lines between members and long builder chains
broken at top-level ``).`` boundaries.

Input that cannot be laid out (unbalanced braces or parentheses, a
statement without terminator) raises :class:`FormatError`.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ...core.config import FormatOptions
from ...core.errors import FormatError
from ....logging_config import get_logger

logger = get_logger(__name__)

_COMMENT_PREFIXES = ("/*", "*", "//")
_TERMINATORS = (";", "{", "}")


@dataclass
class _Line:
    text: str
    level: int = 0
    depth: int = 0  # brace depth before the line


def _is_comment(text: str) -> bool:
    return text.startswith(_COMMENT_PREFIXES)


def _scan(text: str, number: int) -> Tuple[int, int, int, int]:
    """
    Count braces and parentheses outside string and char literals.

    Returns:
        (opening braces, closing braces, leading closing braces, paren balance)
    """
    opens = closes = leading = parens = 0
    quote: Optional[str] = None
    escaped = False
    seen_code = False

    for char in text:
        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            continue

        if char in ('"', "'"):
            quote = char
            seen_code = True
        elif char == "{":
            opens += 1
            seen_code = True
        elif char == "}":
            closes += 1
            if not seen_code:
                leading += 1
        elif char == "(":
            parens += 1
            seen_code = True
        elif char == ")":
            parens -= 1
            if parens < 0:
                raise FormatError(f"Unbalanced parentheses on line {number}: {text}")
            seen_code = True
        elif not char.isspace():
            seen_code = True

    if quote:
        raise FormatError(f"Unterminated literal on line {number}: {text}")
    return opens, closes, leading, parens


def _join_braces(lines: List[str]) -> List[str]:
    """Attach lone ``{`` to the previous line and collapse ``{`` ``}`` into ``{}``."""
    joined: List[str] = []
    for text in lines:
        if text == "{" and joined and not _is_comment(joined[-1]):
            joined[-1] = f"{joined[-1]} {{"
        elif (
            text == "}"
            and joined
            and joined[-1].endswith("{")
            and not _is_comment(joined[-1])
        ):
            joined[-1] = f"{joined[-1]}}}"
        else:
            joined.append(text)
    return joined


def _chain_segments(text: str) -> List[str]:
    """Split ``a.b().c(x).d()`` before each ``.`` that follows a top-level ``)``."""
    segments: List[str] = []
    depth = 0
    start = 0
    quote: Optional[str] = None
    escaped = False
    previous = ""

    for index, char in enumerate(text):
        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            previous = char
            continue

        if char in ('"', "'"):
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == "." and previous == ")" and depth == 0:
            segments.append(text[start:index])
            start = index
        previous = char

    segments.append(text[start:])
    return segments


class JavaFormatter:
    """Formats serializer output according to :class:`FormatOptions`."""

    def __init__(self, options: Optional[FormatOptions] = None):
        self.options = options or FormatOptions()

    def format(self, text: str) -> str:
        """
        Lay out raw generated source.

        Args:
            text: Serializer output, one logical line per row

        Returns:
            Formatted source ending with a newline
        """
        raw = [line.strip() for line in text.splitlines()]
        lines = _join_braces([line for line in raw if line])
        if not lines:
            return ""

        placed = self._indent(lines)
        if self.options.sort_imports:
            placed = self._sort_imports(placed)
        output = self._layout(placed)

        formatted = "\n".join(output) + "\n"
        for plugin in self.options.plugins:
            formatted = plugin(formatted)

        logger.debug("Formatted %d raw lines into %d lines", len(raw), len(output))
        return formatted

    def _indent(self, lines: List[str]) -> List[_Line]:
        placed: List[_Line] = []
        depth = 0

        for number, text in enumerate(lines, start=1):
            if _is_comment(text) or text.endswith("*/"):
                placed.append(_Line(text, depth, depth))
                continue

            if not text.endswith(_TERMINATORS) and not text.startswith("@"):
                raise FormatError(f"Unterminated statement on line {number}: {text}")

            opens, closes, leading, parens = _scan(text, number)
            if parens != 0:
                raise FormatError(f"Unbalanced parentheses on line {number}: {text}")

            level = depth - leading
            if level < 0:
                raise FormatError(f"Unbalanced braces on line {number}: {text}")

            placed.append(_Line(text, level, depth))
            depth += opens - closes
            if depth < 0:
                raise FormatError(f"Unbalanced braces on line {number}: {text}")

        if depth != 0:
            raise FormatError(f"Unbalanced braces: {depth} block(s) left open")
        return placed

    def _sort_imports(self, placed: List[_Line]) -> List[_Line]:
        imports = [line for line in placed if line.text.startswith("import ")]
        if not imports:
            return placed

        unique = {line.text: line for line in imports}
        ordered = [unique[text] for text in sorted(unique)]
        first = placed.index(imports[0])
        rest = [line for line in placed if not line.text.startswith("import ")]
        return rest[:first] + ordered + rest[first:]

    def _layout(self, placed: List[_Line]) -> List[str]:
        output: List[str] = []
        previous_special: Optional[bool] = None
        member_special = False
        continuing = False

        for index, line in enumerate(placed):
            following = placed[index + 1] if index + 1 < len(placed) else None

            if line.depth == 1 and line.level == 1:
                if not continuing:
                    special = (
                        line.text.startswith("@")
                        or _is_comment(line.text)
                        or line.text.endswith(("{", "{}"))
                    )
                    if previous_special is None or previous_special or special:
                        output.append("")
                    member_special = special
                continuing = line.text.startswith("@") or _is_comment(line.text)
                if not continuing:
                    previous_special = member_special

            output.extend(self._render(line))

            if line.text.startswith("package ") and following is not None:
                output.append("")
            elif (
                line.text.startswith("import ")
                and following is not None
                and not following.text.startswith("import ")
            ):
                output.append("")

        return output

    def _render(self, line: _Line) -> List[str]:
        indent = " " * (self.options.tab_width * line.level)
        text = line.text
        if text.startswith("*"):
            text = f" {text}"

        rendered = f"{indent}{text}"
        if len(rendered) <= self.options.print_width or _is_comment(line.text):
            return [rendered]

        segments = _chain_segments(line.text)
        if len(segments) < 2:
            return [rendered]

        continuation = " " * (self.options.tab_width * (line.level + 1))
        return [f"{indent}{segments[0]}"] + [
            f"{continuation}{segment}" for segment in segments[1:]
        ]
