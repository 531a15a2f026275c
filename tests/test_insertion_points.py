"""Tests for insertion point detection, collection and hiding."""

from slide_overlay.schemas.shape_schema import (
    InsertionPoint,
    ShapeGeometry,
    ShapeNode,
    ShapeSnapshot,
    TextStyle,
)


def _snap(text: str = "", name: str = "shape", has_text_frame: bool = True, handle=None) -> ShapeSnapshot:
    return ShapeSnapshot(
        name=name,
        geometry=ShapeGeometry(left=10, top=20, width=100, height=50),
        style=TextStyle() if has_text_frame else None,
        text=text,
        handle=handle,
    )


class FakeHandle:
    """In-memory stand-in for a host shape."""

    def __init__(self, text: str):
        self.text = text
        self.transparent = False
        self.calls: list[str] = []

    def set_transparent(self) -> None:
        self.transparent = True
        self.calls.append("set_transparent")

    def clear_text(self) -> None:
        self.text = ""
        self.calls.append("clear_text")


class TestContainsInsertionPoint:
    def test_marker_pair(self):
        from slide_overlay.pptx_engine.insertion_points import contains_insertion_point

        assert contains_insertion_point(_snap("hello {{name}} world"))

    def test_close_before_open(self):
        from slide_overlay.pptx_engine.insertion_points import contains_insertion_point

        assert not contains_insertion_point(_snap("}} {{"))

    def test_open_only(self):
        from slide_overlay.pptx_engine.insertion_points import contains_insertion_point

        assert not contains_insertion_point(_snap("{{name"))

    def test_close_only(self):
        from slide_overlay.pptx_engine.insertion_points import contains_insertion_point

        assert not contains_insertion_point(_snap("name}}"))

    def test_empty_text(self):
        from slide_overlay.pptx_engine.insertion_points import contains_insertion_point

        assert not contains_insertion_point(_snap(""))

    def test_no_text_frame(self):
        from slide_overlay.pptx_engine.insertion_points import contains_insertion_point

        assert not contains_insertion_point(_snap("{{x}}", has_text_frame=False))

    def test_only_first_occurrences_count(self):
        from slide_overlay.pptx_engine.insertion_points import contains_insertion_point

        # first "}}" (index 0) precedes first "{{"
        assert not contains_insertion_point(_snap("}} {{a}}"))
        assert contains_insertion_point(_snap("{{a}} }} {{"))

    def test_empty_payload(self):
        from slide_overlay.pptx_engine.insertion_points import contains_insertion_point

        assert contains_insertion_point(_snap("{{}}"))


class TestCollectInsertionPoints:
    def test_leaf_nodes_in_order(self):
        from slide_overlay.pptx_engine.insertion_points import collect_insertion_points

        nodes = [
            ShapeNode.leaf(_snap("{{first}}", name="a")),
            ShapeNode.leaf(_snap("plain text", name="b")),
            ShapeNode.leaf(_snap("{{second}}", name="c")),
        ]
        points = collect_insertion_points(nodes)
        assert [p.name for p in points] == ["a", "c"]
        assert all(isinstance(p, InsertionPoint) for p in points)

    def test_text_is_kept_verbatim(self):
        from slide_overlay.pptx_engine.insertion_points import collect_insertion_points

        points = collect_insertion_points([ShapeNode.leaf(_snap("Dear {{name}},"))])
        assert points[0].text == "Dear {{name}},"

    def test_table_cells_row_major(self):
        from slide_overlay.pptx_engine.insertion_points import collect_insertion_points

        table = ShapeNode.table([
            [_snap("{{r1c1}}", name="r1c1"), _snap("x", name="r1c2")],
            [_snap("{{r2c1}}", name="r2c1"), _snap("{{r2c2}}", name="r2c2")],
        ])
        points = collect_insertion_points([table])
        assert [p.name for p in points] == ["r1c1", "r2c1", "r2c2"]

    def test_table_without_matches(self):
        from slide_overlay.pptx_engine.insertion_points import collect_insertion_points

        table = ShapeNode.table([
            [_snap("a"), _snap("b")],
            [_snap("c"), _snap("")],
        ])
        assert collect_insertion_points([table]) == []

    def test_two_by_two_table_at_most_four(self):
        from slide_overlay.pptx_engine.insertion_points import collect_insertion_points

        table = ShapeNode.table([
            [_snap("{{a}}"), _snap("{{b}}")],
            [_snap("{{c}}"), _snap("{{d}}")],
        ])
        assert len(collect_insertion_points([table])) == 4

    def test_malformed_table_rows(self):
        from slide_overlay.pptx_engine.insertion_points import collect_insertion_points

        assert collect_insertion_points([ShapeNode.table([[], []])]) == []
        assert collect_insertion_points([ShapeNode.table([])]) == []

    def test_group_members(self):
        from slide_overlay.pptx_engine.insertion_points import collect_insertion_points

        group = ShapeNode.group([
            _snap("{{in group}}", name="g1"),
            _snap("decoration", name="g2"),
            _snap("{{x}}", name="g3", has_text_frame=False),
        ])
        points = collect_insertion_points([group])
        assert [p.name for p in points] == ["g1"]

    def test_empty_group(self):
        from slide_overlay.pptx_engine.insertion_points import collect_insertion_points

        assert collect_insertion_points([ShapeNode.group([])]) == []

    def test_mixed_nodes_preserve_host_order(self):
        from slide_overlay.pptx_engine.insertion_points import collect_insertion_points

        nodes = [
            ShapeNode.group([_snap("{{g}}", name="group")]),
            ShapeNode.leaf(_snap("{{l}}", name="leaf")),
            ShapeNode.table([[_snap("{{t}}", name="cell")]]),
        ]
        points = collect_insertion_points(nodes)
        assert [p.name for p in points] == ["group", "leaf", "cell"]


class TestHideInsertionPoints:
    def test_hides_every_point(self):
        from slide_overlay.pptx_engine.insertion_points import (
            collect_insertion_points,
            hide_insertion_points,
        )

        handles = [FakeHandle("{{a}}"), FakeHandle("{{b}}")]
        nodes = [ShapeNode.leaf(_snap(h.text, handle=h)) for h in handles]
        points = collect_insertion_points(nodes)

        hide_insertion_points(points)

        for handle in handles:
            assert handle.transparent
            assert handle.text == ""
            assert handle.calls == ["set_transparent", "clear_text"]

    def test_snapshot_text_unaffected(self):
        from slide_overlay.pptx_engine.insertion_points import hide_insertion_points

        handle = FakeHandle("{{a}}")
        point = InsertionPoint.from_snapshot(_snap("{{a}}", handle=handle))
        hide_insertion_points([point])
        assert point.text == "{{a}}"

    def test_point_without_handle_is_skipped(self):
        from slide_overlay.pptx_engine.insertion_points import hide_insertion_points

        point = InsertionPoint.from_snapshot(_snap("{{a}}"))
        hide_insertion_points([point])  # no error


class TestStripMarkers:
    def test_strip_keeps_payload(self):
        from slide_overlay.pptx_engine.insertion_points import strip_markers

        assert strip_markers("Dear {{name}},") == "Dear name,"
