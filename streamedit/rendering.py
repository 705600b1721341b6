"""Terminal rendering of parsed items, reconstructed edits and errors."""

from typing import Any, Dict, List, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .content import ContentItem, TextItem
from .diff_utils import (
    change_hunks,
    char_spans,
    count_changes,
    describe_block,
    format_change_summary,
    fuzzy_blocks,
    is_fuzzy,
    similar,
)
from .text_utils import remove_incomplete_tag_at_end
from .theme import ACCENT, BORDER, DIM, ERROR, INFO, MUTED, SUCCESS, TOOL_BORDER, WARN

__all__ = [
    "render_error", "render_items", "build_edit_panel", "render_edit_summary",
    "render_config",
]

PREVIEW_CHARS = 80
_ADDED_HIGHLIGHT = f"bold {SUCCESS} on rgb(0,60,0)"
_REMOVED_HIGHLIGHT = f"bold {ERROR} on rgb(90,0,0)"


def _preview(value: str, limit: int = PREVIEW_CHARS) -> str:
    value = value.replace("\n", "\\n")
    return value if len(value) <= limit else value[:limit - 1] + "…"


def _display_value(value: Any) -> str:
    if isinstance(value, list):
        return ", ".join(str(v) for v in value) or "(none)"
    if isinstance(value, dict):
        return ", ".join(f"{k}[{len(v)}]" for k, v in value.items()) or "(built-in)"
    if value == "":
        return "(unset)"
    return str(value)


def render_error(console: Console, message: str):
    panel = Panel(
        Text(message, style=ERROR),
        title=f"[bold {ERROR}]Error[/bold {ERROR}]",
        title_align="left",
        border_style=ERROR,
        padding=(0, 2),
    )
    console.print()
    console.print(panel)


def render_items(console: Console, items: List[ContentItem]):
    """Print the parser's content items as a table.

    Text that is still streaming has a half-written trailing tag hidden.
    """
    table = Table(border_style=TOOL_BORDER, header_style=f"bold {INFO}")
    table.add_column("#", style=DIM, justify="right")
    table.add_column("Kind")
    table.add_column("Name / Text")
    table.add_column("Parameters", style=MUTED)
    table.add_column("State")

    for index, item in enumerate(items, 1):
        state = Text("partial", style=WARN) if item.partial else Text("complete", style=SUCCESS)
        if isinstance(item, TextItem):
            content = remove_incomplete_tag_at_end(item.content) if item.partial else item.content
            table.add_row(str(index), "text", Text(_preview(content)), "", state)
        else:
            params = "\n".join(f"{name}={_preview(value, 40)}" for name, value in item.params.items())
            table.add_row(str(index), "tool", Text(item.name, style=f"bold {INFO}"), Text(params), state)

    console.print(table)


def _edit_header(added: int, removed: int, blocks: Sequence) -> Text:
    header = Text()
    header.append_text(Text.from_markup(format_change_summary(added, removed)))
    if blocks:
        count = len(blocks)
        header.append(f"  ·  {count} block{'s' if count != 1 else ''}", style=DIM)
        for number, block in enumerate(blocks, 1):
            style = WARN if is_fuzzy(block) else MUTED
            header.append(f"\n  {number}. {describe_block(block)}", style=style)
    header.append("\n\n")
    return header


def _row(sign: str, number: int, spans, base_style: str, highlight: str) -> Text:
    row = Text(f"{number:>5} ", style=DIM)
    row.append(sign, style=base_style)
    for text, changed in spans:
        row.append(text, style=highlight if changed else base_style)
    return row


def _hunk_rows(old_lines: List[str], new_lines: List[str], hunk) -> List[Text]:
    first, last = hunk[0], hunk[-1]
    rows = [Text(
        f"@@ -{first[1] + 1},{last[2] - first[1]} +{first[3] + 1},{last[4] - first[3]} @@",
        style=f"bold {INFO}",
    )]
    for tag, i1, i2, j1, j2 in hunk:
        old_part, new_part = old_lines[i1:i2], new_lines[j1:j2]
        if tag == "equal":
            rows.extend(_row(" ", j1 + k + 1, [(line, False)], DIM, DIM)
                        for k, line in enumerate(new_part))
            continue
        paired = tag == "replace" and len(old_part) == len(new_part) and all(
            similar(a, b) for a, b in zip(old_part, new_part)
        )
        if paired:
            for k, (old_line, new_line) in enumerate(zip(old_part, new_part)):
                old_spans, new_spans = char_spans(old_line, new_line)
                rows.append(_row("-", i1 + k + 1, old_spans, ERROR, _REMOVED_HIGHLIGHT))
                rows.append(_row("+", j1 + k + 1, new_spans, SUCCESS, _ADDED_HIGHLIGHT))
            continue
        rows.extend(_row("-", i1 + k + 1, [(line, False)], ERROR, ERROR)
                    for k, line in enumerate(old_part))
        rows.extend(_row("+", j1 + k + 1, [(line, False)], SUCCESS, SUCCESS)
                    for k, line in enumerate(new_part))
    return rows


def build_edit_panel(
    old_content: str,
    new_content: str,
    title: str = "",
    blocks: Sequence = (),
    max_lines: int = 50,
) -> Panel:
    """Panel comparing a file with its reconstruction.

    The header lists each applied SEARCH block with the line range it
    matched and the strategy that found it. ``max_lines`` of 0 or less
    shows every changed line.
    """
    old_lines = old_content.splitlines()
    new_lines = new_content.splitlines()
    added, removed = count_changes(old_content, new_content)

    rows: List[Text] = []
    for hunk in change_hunks(old_lines, new_lines):
        rows.extend(_hunk_rows(old_lines, new_lines, hunk))

    body = _edit_header(added, removed, blocks)
    shown = rows if max_lines <= 0 else rows[:max_lines]
    body.append_text(Text("\n").join(shown))
    if len(shown) < len(rows):
        body.append(f"\n\n[{len(rows) - len(shown)} more lines not shown]", style=f"italic {WARN}")

    return Panel(body, title=title or None, title_align="left",
                 border_style=BORDER, padding=(0, 1), expand=False)


def render_edit_summary(console: Console, path: str, edit_type: str, added: int, removed: int,
                        blocks: Sequence = ()):
    verb = "Create" if edit_type == "create" else "Edit"
    line = (f"  [{SUCCESS}]✓[/{SUCCESS}] {verb} [bold]{path}[/bold] "
            f"[{DIM}]([/{DIM}]{format_change_summary(added, removed)}[{DIM}])[/{DIM}]")
    fuzzy = fuzzy_blocks(blocks)
    if fuzzy:
        line += f" [{WARN}]{len(fuzzy)} of {len(blocks)} block(s) matched loosely[/{WARN}]"
    console.print(line)


def render_config(console: Console, diff: Dict[str, Dict[str, Any]], source: str = ""):
    """Table of every setting, modified ones first."""
    table = Table(border_style=BORDER, padding=(0, 1))
    table.add_column("Key", style=f"bold {ACCENT}")
    table.add_column("Value")
    table.add_column("Default", style=DIM)
    table.add_column("Status")

    for bucket, style in (("modified", WARN), ("default", DIM)):
        for key, info in diff[bucket].items():
            table.add_row(key, _display_value(info["current"]), _display_value(info["default"]),
                          Text(bucket, style=style))

    console.print(table)
    console.print(f"  [{DIM}]{len(diff['modified'])} modified · "
                  f"source: {source or 'defaults'}[/{DIM}]")
