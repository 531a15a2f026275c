"""Tests for Pydantic schema models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from slide_overlay.schemas.render_config import RenderConfig
from slide_overlay.schemas.shape_schema import (
    AutoSize,
    CanvasContext,
    Hideable,
    HorizontalAlignment,
    InsertionPoint,
    Margins,
    ShapeGeometry,
    ShapeNode,
    ShapeSnapshot,
    TextStyle,
    VerticalAnchor,
)


class _Handle:
    def set_transparent(self) -> None:
        pass

    def clear_text(self) -> None:
        pass


class TestShapeSchema:
    def test_enum_values(self):
        assert VerticalAnchor.MIDDLE == "middle"
        assert HorizontalAlignment.DISTRIBUTE == "distribute"
        assert AutoSize.SHAPE_TO_FIT_TEXT == "shape_to_fit_text"

    def test_geometry_edges(self):
        geo = ShapeGeometry(left=10, top=5, width=100, height=20)
        assert geo.right == 110
        assert geo.center_x == 60

    def test_geometry_is_frozen(self):
        geo = ShapeGeometry(left=10, top=5, width=100, height=20)
        with pytest.raises(ValidationError):
            geo.left = 0

    def test_text_style_defaults(self):
        style = TextStyle()
        assert style.margins == Margins()
        assert style.word_wrap is None
        assert style.font_name == "Calibri"
        assert style.font_size == 18.0
        assert style.line_spacing_is_multiple
        assert style.color_hex == "#000000"

    def test_color_hex_uppercase(self):
        assert TextStyle(color=(171, 205, 239)).color_hex == "#ABCDEF"

    def test_snapshot_without_text_frame(self):
        snap = ShapeSnapshot(geometry=ShapeGeometry(left=0, top=0, width=1, height=1))
        assert not snap.has_text_frame
        assert snap.text == ""

    def test_handle_not_serialised(self):
        handle = _Handle()
        snap = ShapeSnapshot(
            name="box",
            geometry=ShapeGeometry(left=0, top=0, width=1, height=1),
            style=TextStyle(),
            text="{{x}}",
            handle=handle,
        )
        assert "handle" not in snap.model_dump()
        assert InsertionPoint.from_snapshot(snap).handle is handle

    def test_handle_must_be_hideable(self):
        with pytest.raises(ValidationError):
            ShapeSnapshot(
                geometry=ShapeGeometry(left=0, top=0, width=1, height=1),
                handle=object(),
            )

    def test_handle_satisfies_protocol(self):
        assert isinstance(_Handle(), Hideable)
        assert not isinstance(object(), Hideable)

    def test_shape_node_variants(self):
        snap = ShapeSnapshot(geometry=ShapeGeometry(left=0, top=0, width=1, height=1))
        assert ShapeNode.leaf(snap).kind == "leaf"
        assert ShapeNode.table([[snap]]).rows == [[snap]]
        assert ShapeNode.group([snap]).members == [snap]

    def test_canvas_scale(self):
        canvas = CanvasContext(canvas_width=640, canvas_height=360, slide_width=960, slide_height=540)
        assert canvas.scale_x == pytest.approx(2 / 3)
        assert canvas.scale_y == pytest.approx(2 / 3)


class TestRenderConfig:
    def test_defaults(self):
        config = RenderConfig()
        assert config.canvas_width == 640
        assert config.canvas_height == 360
        assert config.slide_index == 0
        assert config.template_path is None
        assert config.export_background
        assert not config.require_background
        assert not config.strip_markers
        assert config.html_filename == "HtmlPage.html"
        assert config.embedded_html_filename == "HtmlPage2.html"
        assert config.background_filename == "Background.png"

    def test_canvas_must_be_positive(self):
        with pytest.raises(ValidationError):
            RenderConfig(canvas_width=0)
        with pytest.raises(ValidationError):
            RenderConfig(canvas_height=-10)

    def test_slide_index_not_negative(self):
        with pytest.raises(ValidationError):
            RenderConfig(slide_index=-1)

    def test_yaml_roundtrip(self, tmp_path):
        config = RenderConfig(
            canvas_width=1280,
            canvas_height=720,
            slide_index=2,
            template_path="custom.html",
            strip_markers=True,
        )
        path = tmp_path / "render.yaml"
        config.to_yaml(path)
        assert RenderConfig.from_yaml(path) == config

    def test_partial_yaml(self, tmp_path):
        path = tmp_path / "render.yaml"
        path.write_text("canvas_width: 800\nexport_background: false\n")
        config = RenderConfig.from_yaml(path)
        assert config.canvas_width == 800
        assert config.canvas_height == 360
        assert not config.export_background

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "render.yaml"
        path.write_text("")
        assert RenderConfig.from_yaml(path) == RenderConfig()

    def test_missing_yaml(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RenderConfig.from_yaml(tmp_path / "nope.yaml")

    def test_example_config_loads(self):
        path = Path(__file__).parent.parent / "config" / "render.example.yaml"
        config = RenderConfig.from_yaml(path)
        assert config.canvas_width > 0
