"""Tests for discrete zoom stepping on the editor canvas."""

import pytest

from workflowviz.zoom import MAX_ZOOM, MIN_ZOOM, SELECTED_BORDER_WIDTH, ZoomTool, ZoomType, step_zoom, to_percent


class TestStepZoom:

    @pytest.mark.parametrize("start,zoom_type,expected", [
        (95, ZoomType.OUT, 90),
        (90, ZoomType.OUT, 80),
        (25, ZoomType.OUT, 20),
        (20, ZoomType.OUT, 20),
        (21, ZoomType.OUT, 20),
        (100, ZoomType.IN, 110),
        (95, ZoomType.IN, 100),
        (495, ZoomType.IN, 500),
        (500, ZoomType.IN, 500),
    ])
    def test_steps(self, start, zoom_type, expected):
        assert step_zoom(start, zoom_type) == expected

    def test_rejects_non_step_types(self):
        with pytest.raises(ValueError):
            step_zoom(100, ZoomType.FIT)

    @pytest.mark.parametrize("ratio,percent", [(0.95, 95), (0.954, 95), (0.956, 96), (1.0, 100), (0.125, 13)])
    def test_to_percent_rounds_half_up(self, ratio, percent):
        assert to_percent(ratio) == percent

    def test_bounds(self):
        assert (MIN_ZOOM, MAX_ZOOM) == (20, 500)


class TestZoomTool:

    def test_step_out_from_95(self, make_canvas):
        canvas = make_canvas(zoom=0.95)
        ZoomTool(canvas).zoom(ZoomType.OUT)
        ratio, center = canvas.zoom_calls[-1]
        assert ratio == pytest.approx(0.9)
        # centered on the content box
        assert (center.x, center.y) == (110, 70)

    def test_step_in(self, make_canvas):
        canvas = make_canvas(zoom=1.0)
        tool = ZoomTool(canvas)
        tool.zoom(ZoomType.IN)
        tool.zoom(ZoomType.IN)
        assert canvas.ratio == pytest.approx(1.2)

    def test_center_caps_at_100(self, make_canvas):
        canvas = make_canvas(fit_ratio=1.5)
        ZoomTool(canvas).zoom(ZoomType.CENTER)
        assert canvas.zoom_calls[-1][0] == pytest.approx(1.0)

    def test_center_within_bounds_keeps_fit(self, make_canvas):
        canvas = make_canvas(fit_ratio=0.5)
        ZoomTool(canvas).zoom(ZoomType.CENTER)
        assert canvas.zoom_calls == []
        assert canvas.border_widths[-1] == pytest.approx(SELECTED_BORDER_WIDTH * 0.5)

    def test_center_clamps_to_min(self, make_canvas):
        canvas = make_canvas(fit_ratio=0.1)
        ZoomTool(canvas).zoom(ZoomType.CENTER)
        assert canvas.zoom_calls[-1][0] == pytest.approx(0.2)

    def test_fit_may_exceed_100(self, make_canvas):
        canvas = make_canvas(fit_ratio=1.5)
        ZoomTool(canvas).zoom(ZoomType.FIT)
        assert canvas.zoom_calls == []
        assert canvas.ratio == pytest.approx(1.5)

    def test_fit_clamps_to_max(self, make_canvas):
        canvas = make_canvas(fit_ratio=6.0)
        ZoomTool(canvas).zoom(ZoomType.FIT)
        assert canvas.zoom_calls[-1][0] == pytest.approx(5.0)

    def test_original(self, make_canvas):
        canvas = make_canvas(zoom=2.5)
        ZoomTool(canvas).zoom(ZoomType.ORIGINAL)
        assert canvas.centered == 1
        assert canvas.zoom_calls[-1][0] == pytest.approx(1.0)

    def test_selection_border_tracks_zoom(self, make_canvas):
        canvas = make_canvas(zoom=1.0)
        ZoomTool(canvas).zoom(ZoomType.IN)
        assert canvas.border_widths == [pytest.approx(SELECTED_BORDER_WIDTH * 1.1)]
