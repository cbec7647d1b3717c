"""
Text wrapping and truncation for terminal display.

Widths are measured in terminal cells with Rich's cell metrics, so wide
(CJK, emoji) characters count as two columns. Lines are split between
characters, never inside one.
"""

from rich.cells import cell_len


def wrap_line(line: str, max_width: int) -> list[str]:
    """
    Hard-wrap a single line to ``max_width`` cells.

    A blank line yields one empty output line. A character wider than
    ``max_width`` is placed on a line of its own.

    Args:
        line: The line to wrap (without a line terminator).
        max_width: Maximum cells per output line; 0 or less disables wrapping.

    Returns:
        The wrapped lines.
    """
    if max_width <= 0 or cell_len(line) <= max_width:
        return [line]

    chunks: list[str] = []
    current: list[str] = []
    current_width = 0
    for ch in line:
        ch_width = cell_len(ch)
        if current and current_width + ch_width > max_width:
            chunks.append("".join(current))
            current = []
            current_width = 0
        current.append(ch)
        current_width += ch_width
    chunks.append("".join(current))
    return chunks


def truncate_line(line: str, max_width: int) -> str:
    """Cut a line to at most ``max_width`` cells."""
    if max_width <= 0 or cell_len(line) <= max_width:
        return line

    kept: list[str] = []
    width = 0
    for ch in line:
        ch_width = cell_len(ch)
        if width + ch_width > max_width:
            break
        kept.append(ch)
        width += ch_width
    return "".join(kept)


def wrap_block(lines: list[str], max_width: int, mode: str = "wrap") -> list[str]:
    """
    Wrap or truncate every line of a block.

    Args:
        lines: Input lines; blank lines are kept.
        max_width: Maximum cells per output line.
        mode: ``"wrap"`` or ``"truncate"``.

    Returns:
        The display lines.
    """
    if mode == "truncate":
        return [truncate_line(line, max_width) for line in lines]
    if mode != "wrap":
        raise ValueError(f"Unknown wrap mode: {mode}")

    result: list[str] = []
    for line in lines:
        result.extend(wrap_line(line, max_width))
    return result


def truncate_to_height(lines: list[str], max_height: int) -> list[str]:
    """
    Limit a block to ``max_height`` lines, marking the cut with an ellipsis.

    A height of 0 means unlimited.
    """
    if max_height <= 0 or len(lines) <= max_height:
        return list(lines)
    if max_height == 1:
        return ["…"]
    return list(lines[: max_height - 1]) + ["…"]
