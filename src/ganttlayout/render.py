"""Character-cell Gantt chart drawn with rich, as a reference renderer."""

from __future__ import annotations

import math

from rich.console import Console
from rich.text import Text

from ganttlayout.engine import Layout

# One 38px day column is four characters wide.
PX_PER_CHAR = 9.5

BAR_CHAR = "█"
INVALID_CHAR = "░"
TODAY_CHAR = "│"


class TerminalRenderer:
    """Draws a ``Layout`` as lines of text.

    Upper header labels that would run past the right edge of the grid are
    dropped, as every renderer must do.
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        name_width: int = 16,
        px_per_char: float = PX_PER_CHAR,
        max_width: int | None = None,
        scroll: bool = True,
    ):
        self.console = console or Console()
        self.name_width = name_width
        self.px_per_char = px_per_char
        self.max_width = max_width
        self.scroll = scroll

    def _cell(self, px: float) -> int:
        return int(math.floor(px / self.px_per_char))

    def render(self, layout: Layout) -> list[Text]:
        lines = self.build(layout)
        for line in lines:
            self.console.print(line, no_wrap=True, overflow="crop", crop=True)
        return lines

    def build(self, layout: Layout) -> list[Text]:
        if layout.is_empty:
            return [Text("No working periods to chart.", style="dim")]

        width = max(1, math.ceil(layout.grid_width / self.px_per_char))
        offset = self._cell(layout.scroll_x) if self.scroll else 0
        view_width = width - offset
        if self.max_width is not None:
            view_width = min(view_width, max(1, self.max_width - self.name_width))

        upper = [" "] * width
        lower = [" "] * width
        for label in layout.labels:
            if label.upper_text:
                start = self._cell(label.upper_x)
                if start + len(label.upper_text) <= width:
                    upper[start : start + len(label.upper_text)] = label.upper_text
            if label.lower_text:
                start = self._cell(label.lower_x)
                text = label.lower_text[: max(0, width - start)]
                lower[start : start + len(text)] = text

        pad = " " * self.name_width
        window = slice(offset, offset + view_width)
        lines = [
            Text(pad + "".join(upper[window]), style="bold"),
            Text(pad + "".join(lower[window]), style="dim"),
        ]

        today = self._cell(layout.today_x) if layout.today_x is not None else None
        row_names = {
            row.index: (row.employee_name or str(row.employee_id or ""))
            for row in layout.model.rows
        }
        seen_rows: set[int] = set()
        for bar in layout.bars:
            name = "" if bar.row_index in seen_rows else row_names.get(bar.row_index, "")
            seen_rows.add(bar.row_index)

            cells = [" "] * width
            if today is not None and 0 <= today < width:
                cells[today] = TODAY_CHAR
            start = max(0, self._cell(bar.x))
            end = max(start + 1, self._cell(bar.x + bar.width))
            fill = INVALID_CHAR if bar.invalid else BAR_CHAR
            for i in range(start, min(end, width)):
                cells[i] = fill

            line = Text(name[: self.name_width - 1].ljust(self.name_width))
            body = Text("".join(cells[window]))
            body.highlight_regex(f"[{BAR_CHAR}]+", "blue")
            body.highlight_regex(f"[{INVALID_CHAR}]+", "grey50")
            body.highlight_regex(TODAY_CHAR, "red")
            line.append_text(body)
            lines.append(line)
        return lines
