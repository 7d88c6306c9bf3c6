from __future__ import annotations

import unittest

from pubplot.grid import GridSpec
from pubplot.layout import layout_figure, layout_panel
from pubplot.metrics import normalize_quarter_turns
from pubplot.model import Figure, Legend, Panel, Rect, Series, TextMetric
from pubplot.placement import AxisMapping, apparent_width_offset, place_figure, place_panel


class FixedMetrics:
    def measure(self, text: str, font_name: str, font_size: float, *, rotate_deg: int = 0) -> TextMetric:
        width = 0.6 * font_size * len(text)
        height = 1.2 * font_size
        if normalize_quarter_turns(rotate_deg) % 2 == 1:
            return TextMetric(width=height, height=width)
        return TextMetric(width=width, height=height)


def _panel(**kwargs) -> Panel:
    base = dict(
        xlim=(0.0, 10.0),
        ylim=(0.0, 10.0),
        x_ticks=(0.0, 5.0, 10.0),
        y_ticks=(0.0, 5.0, 10.0),
        x_tick_labels=("0", "5", "10"),
        y_tick_labels=("0", "5", "10"),
        font_size=12.0,
        spacing=1.0,
        tick_length=(3.0, 1.5),
        axis_line_width=0.5,
    )
    base.update(kwargs)
    return Panel(**base)


CELL = Rect(0.0, 0.0, 252.0, 235.0)


def _by_role(placement, role):
    return [t for t in placement.texts if t.role == role]


class ApparentWidthTests(unittest.TestCase):
    def test_correction_cycles_with_quarter_spacing(self) -> None:
        self.assertEqual(apparent_width_offset(0.75), 0.0)
        self.assertEqual(apparent_width_offset(1.0), 0.25)
        self.assertEqual(apparent_width_offset(0.5), -0.25)
        self.assertEqual(apparent_width_offset(0.25), 0.25)
        self.assertEqual(apparent_width_offset(1.5), 0.0)

    def test_axis_mapping_is_linear(self) -> None:
        mapping = AxisMapping(vmin=-5.0, vmax=5.0, extent=200.0)
        self.assertEqual(mapping(-5.0), 0.0)
        self.assertEqual(mapping(0.0), 100.0)
        self.assertEqual(mapping(5.0), 200.0)


class TickLabelPlacerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.panel = _panel(title="T")
        self.layout = layout_panel(0, self.panel, CELL, FixedMetrics())
        self.placement = place_panel(self.panel, self.layout)

    def test_apparent_size_includes_offset(self) -> None:
        self.assertEqual(self.placement.apparent_width, 223.5)
        self.assertEqual(self.placement.apparent_height, 206.25)

    def test_x_tick_labels_centered_under_ticks(self) -> None:
        ticks = _by_role(self.placement, "x_tick")
        self.assertEqual([t.text for t in ticks], ["0", "5", "10"])
        for t, expected in zip(ticks, (20.5, 132.25, 244.0)):
            self.assertAlmostEqual(t.x, expected)
        for t in ticks:
            self.assertEqual(t.y, 2.0)
            self.assertEqual((t.halign, t.valign), ("center", "bottom"))

    def test_y_tick_labels_right_aligned_left_of_axis(self) -> None:
        ticks = _by_role(self.placement, "y_tick")
        self.assertEqual([t.y for t in ticks], [20.5, 123.625, 226.75])
        for t in ticks:
            self.assertEqual(t.x, 16.5)
            self.assertEqual((t.halign, t.valign), ("right", "middle"))

    def test_title_is_bold_and_centered_on_top_edge(self) -> None:
        (title,) = _by_role(self.placement, "title")
        self.assertTrue(title.bold)
        self.assertEqual((title.x, title.y), (132.25, 226.75))
        self.assertEqual(title.valign, "middle")

    def test_axis_labels(self) -> None:
        panel = _panel(x_label="X", y_label="Y")
        layout = layout_panel(0, panel, CELL, FixedMetrics())
        placement = place_panel(panel, layout)
        (x_label,) = _by_role(placement, "x_label")
        (y_label,) = _by_role(placement, "y_label")
        self.assertEqual(x_label.y, layout.rect.y - (layout.margins.bottom - 1.0))
        self.assertEqual(x_label.x, layout.rect.x + placement.apparent_width / 2.0)
        self.assertEqual(y_label.rotation, 90)
        self.assertEqual(y_label.x, layout.rect.x - (layout.margins.left - 1.0))
        self.assertEqual(y_label.y, layout.rect.y + placement.apparent_height / 2.0)
        self.assertEqual(y_label.valign, "top")

    def test_x_tick_row_sits_above_x_label(self) -> None:
        panel = _panel(x_label="X")
        layout = layout_panel(0, panel, CELL, FixedMetrics())
        placement = place_panel(panel, layout)
        (x_label,) = _by_role(placement, "x_label")
        tick_y = _by_role(placement, "x_tick")[0].y
        self.assertAlmostEqual(tick_y - x_label.y, 1.0 + layout.extents.x_label.height)

    def test_empty_strings_are_not_placed(self) -> None:
        panel = _panel(x_tick_labels=("0", "", "10"))
        placement = place_panel(panel, layout_panel(0, panel, CELL, FixedMetrics()))
        self.assertEqual([t.text for t in _by_role(placement, "x_tick")], ["0", "10"])
        self.assertEqual(_by_role(placement, "title"), [])
        self.assertEqual(_by_role(placement, "x_label"), [])

    def test_tick_length_ratio_uses_longer_side(self) -> None:
        figure = Figure(width=252.0, height=235.0, panels=(self.panel,))
        layout = layout_figure(figure, GridSpec(1, 1), FixedMetrics())
        (placement,) = place_figure(figure, layout)
        self.assertEqual(placement.tick_length_ratio, (3.0 / 223.5, 1.5 / 223.5))

    def test_text_inherits_panel_font(self) -> None:
        for text in self.placement.texts:
            self.assertEqual(text.font_name, "Arial")
            self.assertEqual(text.font_size, 12.0)


class LegendPlacementTests(unittest.TestCase):
    def _place(self, location: str):
        series = (Series(x=[0.0, 10.0], y=[0.0, 10.0]), Series(x=[0.0, 10.0], y=[10.0, 0.0]))
        legend = Legend(labels=("up", "down"), location=location, font_size=10.0)
        panel = _panel(series=series, legend=legend)
        layout = layout_panel(0, panel, CELL, FixedMetrics())
        return layout, place_panel(panel, layout)

    def test_legend_does_not_change_margins(self) -> None:
        layout, _ = self._place("northeast")
        plain = layout_panel(0, _panel(), CELL, FixedMetrics())
        self.assertEqual(layout.margins, plain.margins)
        self.assertEqual(layout.extents.legend, TextMetric(width=24.0, height=12.0))

    def test_northeast_legend_hugs_top_right_corner(self) -> None:
        _, placement = self._place("northeast")
        rows = _by_role(placement, "legend")
        self.assertEqual([t.text for t in rows], ["up", "down"])
        for t in rows:
            self.assertAlmostEqual(t.x, 218.0)
            self.assertEqual((t.halign, t.valign), ("left", "middle"))
            self.assertEqual(t.font_size, 10.0)
        self.assertAlmostEqual(rows[0].y, 218.75)
        self.assertAlmostEqual(rows[1].y, 206.75)
        box = placement.legend_rect
        self.assertAlmostEqual(box.x, 200.0)
        self.assertAlmostEqual(box.y, 200.75)
        self.assertAlmostEqual(box.width, 42.0)
        self.assertAlmostEqual(box.height, 24.0)

    def test_southwest_legend_hugs_bottom_left_corner(self) -> None:
        layout, placement = self._place("southwest")
        box = placement.legend_rect
        self.assertAlmostEqual(box.x, layout.rect.x + 2.0)
        self.assertAlmostEqual(box.y, layout.rect.y + 2.0)

    def test_empty_labels_leave_series_out(self) -> None:
        series = (Series(x=[0.0, 1.0], y=[0.0, 1.0]), Series(x=[0.0, 1.0], y=[1.0, 0.0]))
        panel = _panel(series=series, legend=Legend(labels=("", "down"), font_size=10.0))
        placement = place_panel(panel, layout_panel(0, panel, CELL, FixedMetrics()))
        self.assertEqual([t.text for t in _by_role(placement, "legend")], ["down"])
        self.assertAlmostEqual(placement.legend_rect.height, 12.0)

    def test_panel_without_legend_has_no_legend_rect(self) -> None:
        placement = place_panel(_panel(), layout_panel(0, _panel(), CELL, FixedMetrics()))
        self.assertIsNone(placement.legend_rect)
        self.assertEqual(_by_role(placement, "legend"), [])


if __name__ == "__main__":
    unittest.main()
