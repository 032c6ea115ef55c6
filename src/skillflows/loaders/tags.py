"""
Scanner for the pseudo-XML blocks embedded in skill documents.

Skill bodies carry blocks such as::

    <principle name="Setup">...</principle>
    <intake>...</intake>
    <routing>| response | workflow |</routing>
    <workflows_index>| workflow | purpose |</workflows_index>

Tags are tokenized and matched with an explicit stack so that nesting is
handled predictably. A block whose open tag is never closed, or a close tag
with no matching open tag, yields nothing; no error is raised.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# Tags recognized inside skill bodies
KNOWN_TAGS = ("principle", "intake", "routing", "workflows_index")

_TAG_PATTERN = re.compile(
    r"<(?P<close>/)?(?P<name>" + "|".join(KNOWN_TAGS) + r")(?P<attrs>(?:\s+[^<>]*?)?)\s*>"
)
_ATTR_PATTERN = re.compile(r'([A-Za-z_][\w-]*)\s*=\s*"([^"]*)"')
_TABLE_ROW_PATTERN = re.compile(r"^\s*\|(.+)\|\s*$")


@dataclass
class TagBlock:
    """A matched ``<tag ...>body</tag>`` region."""

    name: str
    body: str
    attrs: dict[str, str] = field(default_factory=dict)
    start: int = 0


def scan_blocks(content: str) -> list[TagBlock]:
    """
    Return every properly closed block, ordered by where it opens.

    Blocks may be nested; both the outer and inner block are returned.
    When a close tag matches an open tag deeper in the stack, the unclosed
    tags above it are dropped as malformed.
    """
    stack: list[tuple[str, dict[str, str], int, int]] = []
    blocks: list[TagBlock] = []

    for match in _TAG_PATTERN.finditer(content):
        name = match.group("name")
        if not match.group("close"):
            attrs = dict(_ATTR_PATTERN.findall(match.group("attrs") or ""))
            stack.append((name, attrs, match.start(), match.end()))
            continue

        depth = next(
            (i for i in range(len(stack) - 1, -1, -1) if stack[i][0] == name),
            None,
        )
        if depth is None:
            continue  # stray close tag
        open_name, attrs, start, body_start = stack[depth]
        del stack[depth:]
        blocks.append(
            TagBlock(
                name=open_name,
                body=content[body_start : match.start()],
                attrs=attrs,
                start=start,
            )
        )

    blocks.sort(key=lambda b: b.start)
    return blocks


def find_blocks(content: str, name: str) -> list[TagBlock]:
    """All closed blocks with the given tag name."""
    return [block for block in scan_blocks(content) if block.name == name]


def find_first(content: str, name: str) -> TagBlock | None:
    """The first closed block with the given tag name, if any."""
    blocks = find_blocks(content, name)
    return blocks[0] if blocks else None


def parse_table_rows(body: str) -> list[tuple[str, str]]:
    """
    Split a pipe-delimited markdown table into (first, second) cell pairs.

    Lines that are not table rows, or rows with fewer than two cells, are
    skipped. Header filtering is left to the caller.
    """
    rows: list[tuple[str, str]] = []
    for line in body.splitlines():
        match = _TABLE_ROW_PATTERN.match(line)
        if not match:
            continue
        cells = [cell.strip() for cell in match.group(1).split("|")]
        if len(cells) < 2 or not cells[0] or not cells[1]:
            continue
        rows.append((cells[0], cells[1]))
    return rows


def is_header_row(first_cell: str, column_name: str) -> bool:
    """Separator rows contain ``---``; header rows repeat the column name."""
    return "---" in first_cell or first_cell.lower() == column_name
