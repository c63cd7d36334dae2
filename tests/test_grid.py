from __future__ import annotations

import pytest

from ecgplot.paper.grid import GridRenderer
from ecgplot.paper.grid_state import compute_grid_layout
from ecgplot.paper.primitives import LineSegment, StrokeStyle


@pytest.fixture
def renderer() -> GridRenderer:
    return GridRenderer()


@pytest.fixture
def layout():
    layout, _ = compute_grid_layout(1200, 720)
    return layout


def split(lines):
    lines = list(lines)
    horizontal = [line for line in lines if line.is_horizontal]
    vertical = [line for line in lines if line.is_vertical]
    return horizontal, vertical


def count(lines, style):
    return sum(1 for line in lines if line.style is style)


class TestHorizontalLines:
    def test_line_counts(self, renderer, layout):
        horizontal, _ = split(renderer.build_grid(1200, 720, layout))

        assert count(horizontal, StrokeStyle.MAJOR) == 24 + 1
        assert count(horizontal, StrokeStyle.MINOR) == (5 - 1) * 24

    def test_lines_span_full_width(self, renderer, layout):
        horizontal, _ = split(renderer.build_grid(1200, 720, layout))

        assert all(line.x0 == 0 and line.x1 == 1200 for line in horizontal)

    def test_major_every_fifth_line_and_closing_major(self, renderer, layout):
        horizontal, _ = split(renderer.build_grid(1200, 720, layout))

        for k, line in enumerate(horizontal):
            assert line.y0 == pytest.approx(k * 6)
            expected = StrokeStyle.MAJOR if k % 5 == 0 else StrokeStyle.MINOR
            assert line.style is expected

        closing = horizontal[-1]
        assert closing.y0 == pytest.approx(720)
        assert closing.style is StrokeStyle.MAJOR

    def test_custom_rows_and_ticks(self, renderer, layout):
        horizontal, _ = split(
            renderer.build_grid(1200, 720, layout, rows=10, ticks_per_cell=4)
        )

        assert count(horizontal, StrokeStyle.MAJOR) == 11
        assert count(horizontal, StrokeStyle.MINOR) == 30


class TestVerticalLines:
    def test_bounded_by_column_count(self, renderer, layout):
        _, vertical = split(renderer.build_grid(1200, 720, layout))

        majors = [line.x0 for line in vertical if line.style is StrokeStyle.MAJOR]
        assert len(majors) == layout.column_count + 1
        assert majors[-1] == pytest.approx(1200)
        # 4 minor lines per column plus the trailing boundary line
        assert count(vertical, StrokeStyle.MINOR) == 4 * layout.column_count + 1

    def test_trailing_line_is_minor(self, renderer, layout):
        _, vertical = split(renderer.build_grid(1200, 720, layout))

        trailing = vertical[-1]
        assert trailing.style is StrokeStyle.MINOR
        assert trailing.x0 == pytest.approx(1206)
        assert trailing.y0 == 0 and trailing.y1 == 720

    def test_stops_at_viewport_width(self, renderer, layout):
        # layout allows 40 columns but only 100 units are available
        _, vertical = split(renderer.build_grid(100, 720, layout))

        majors = [line.x0 for line in vertical if line.style is StrokeStyle.MAJOR]
        minors = [line.x0 for line in vertical if line.style is StrokeStyle.MINOR]
        assert majors == pytest.approx([0, 30, 60, 90])
        assert minors[-2] == pytest.approx(96)
        assert minors[-1] == pytest.approx(102)
        assert len(minors) == 3 * 4 + 1 + 1


class TestGenerator:
    def test_yields_line_segments(self, renderer, layout):
        lines = list(renderer.build_grid(1200, 720, layout))

        assert lines
        assert all(isinstance(line, LineSegment) for line in lines)

    def test_is_not_restartable(self, renderer, layout):
        grid = renderer.build_grid(1200, 720, layout)

        first = list(grid)
        assert len(first) == 25 + 96 + 41 + 161
        assert list(grid) == []

    def test_each_call_regenerates(self, renderer, layout):
        assert list(renderer.build_grid(1200, 720, layout)) == list(
            renderer.build_grid(1200, 720, layout)
        )
