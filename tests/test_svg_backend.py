"""Tests for the SVG markup backend."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from imagebench.backends.svg_backend import SvgMarkupBackend, render_svg
from imagebench.errors import UnsupportedWorkloadError
from imagebench.results import ImageResult, MetricResult
from imagebench.scene import WHITE, Circle, ImageLayer, RoundedRect, TextRun
from imagebench.workloads import Workload

SVG = "{http://www.w3.org/2000/svg}"


def parse(result: ImageResult) -> ET.Element:
    return ET.fromstring(result.payload.decode("utf-8"))


class TestDocuments:
    @pytest.mark.parametrize(
        "workload",
        [
            Workload.IMAGE_BUFFER,
            Workload.IMAGE_STREAM,
            Workload.KITCHEN_SINK,
            Workload.ENCODE_SVG,
        ],
    )
    def test_well_formed_svg(self, small_context, workload):
        result = SvgMarkupBackend().run(small_context, workload)
        assert isinstance(result, ImageResult)
        assert result.format == "svg"
        root = parse(result)
        assert root.tag == f"{SVG}svg"
        assert root.get("width") == str(small_context.width)
        assert root.get("height") == str(small_context.height)

    def test_background_embedded_as_data_uri(self, small_context):
        root = parse(SvgMarkupBackend().run(small_context, Workload.IMAGE_BUFFER))
        image = root.find(f"{SVG}image")
        assert image.get("href") == small_context.data_uris.background
        assert image.get("preserveAspectRatio") == "xMidYMid slice"

    def test_buffer_and_stream_documents_match(self, small_context):
        backend = SvgMarkupBackend()
        assert (
            backend.run(small_context, Workload.IMAGE_BUFFER).payload
            == backend.run(small_context, Workload.IMAGE_STREAM).payload
        )

    def test_kitchen_sink_contents(self, small_context):
        root = parse(SvgMarkupBackend().run(small_context, Workload.KITCHEN_SINK))
        assert len(root.findall(f"{SVG}image")) == 3
        assert len(root.findall(f"{SVG}circle")) == 2
        assert len(root.findall(f"{SVG}text")) == 5
        assert root.find(f"{SVG}defs/{SVG}linearGradient") is not None
        assert len(root.findall(f"{SVG}defs/{SVG}clipPath")) == 3

    @pytest.mark.parametrize("workload", [Workload.ENCODE_PNG, Workload.ENCODE_WEBP])
    def test_raster_formats_unsupported(self, small_context, workload):
        with pytest.raises(UnsupportedWorkloadError, match=str(workload)):
            SvgMarkupBackend().run(small_context, workload)


class TestTextLayout:
    def test_metric_is_document_length(self, small_context):
        result = SvgMarkupBackend().run(small_context, Workload.TEXT_LAYOUT)
        assert isinstance(result, MetricResult)
        assert result.value > 0
        assert result.value == float(int(result.value))

    def test_special_characters_escaped(self, small_context):
        """Samples with markup characters still yield a parseable document."""
        from imagebench.scene import text_layout_runs

        document = render_svg(
            small_context.width,
            small_context.height,
            text_layout_runs(small_context),
            {},
            small_context.font_family,
            background=None,
        )
        root = ET.fromstring(document)
        texts = [element.text for element in root.findall(f"{SVG}text")]
        assert "Symbols !@#$%^&*()[]{}<>?/~" in texts


class TestRenderSvg:
    def test_rounded_rect_and_circle(self):
        scene = (
            RoundedRect(1, 2, 30, 40, 5, (79, 145, 223, 0.5)),
            Circle(10, 20, 3, WHITE),
        )
        root = ET.fromstring(render_svg(100, 50, scene, {}, "DejaVu Sans", background=None))
        rect = root.find(f"{SVG}rect")
        assert rect.get("rx") == "5"
        assert rect.get("fill") == "#4f91df"
        assert rect.get("fill-opacity") == "0.5"
        assert root.find(f"{SVG}circle").get("r") == "3"

    def test_zero_width_rect_omitted(self):
        scene = (RoundedRect(0, 0, 0, 10, 2, WHITE),)
        root = ET.fromstring(render_svg(10, 10, scene, {}, "DejaVu Sans", background=None))
        assert root.find(f"{SVG}rect") is None

    def test_fill_layer_stretches(self):
        scene = (ImageLayer("avatar", 0, 0, 10, 10),)
        root = ET.fromstring(
            render_svg(10, 10, scene, {"avatar": "data:,"}, "DejaVu Sans")
        )
        assert root.find(f"{SVG}image").get("preserveAspectRatio") == "none"

    def test_text_weight(self):
        scene = (TextRun("hi", 0, 0, 12, "semibold", WHITE),)
        root = ET.fromstring(render_svg(10, 10, scene, {}, "DejaVu Sans"))
        text = root.find(f"{SVG}text")
        assert text.get("font-weight") == "600"
        assert text.get("dominant-baseline") == "text-before-edge"

    def test_unknown_primitive_rejected(self):
        with pytest.raises(TypeError, match="Unknown scene primitive"):
            render_svg(10, 10, ("not a primitive",), {}, "DejaVu Sans")
