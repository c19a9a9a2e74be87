"""SVG markup backend.

Builds SVG documents as strings: fixtures are embedded as base64 data URIs
and text is emitted as ``<text>`` elements for the viewer to lay out. There is
no rasterizer behind it, so raster encodings are unsupported and the
text-layout workload reports the size of the generated document instead of
measured advance widths.
"""

from __future__ import annotations

import html as html_module
from typing import TYPE_CHECKING

from imagebench.context import stream_to_bytes, to_data_uri
from imagebench.errors import UnsupportedWorkloadError
from imagebench.results import CaseResult, ImageResult, MetricResult
from imagebench.scene import (
    Circle,
    GradientLayer,
    ImageLayer,
    Primitive,
    RoundedRect,
    TextRun,
    kitchen_sink_scene,
    rgba_to_hex,
    text_layout_runs,
)
from imagebench.workloads import ENCODE_FORMATS, Workload

if TYPE_CHECKING:
    from imagebench.context import BenchContext

__all__ = ["SvgMarkupBackend", "render_svg"]

SVG_NAMESPACE = "http://www.w3.org/2000/svg"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"


def _num(value: float) -> str:
    return f"{value:g}"


def _fill(color: tuple[int, int, int, float]) -> str:
    return f'fill="{rgba_to_hex(color)}" fill-opacity="{_num(color[3])}"'


def _image_element(
    layer: ImageLayer, href: str, index: int, defs: list[str]
) -> str:
    aspect = "xMidYMid slice" if layer.fit == "cover" else "none"
    clip_id = f"clip{index}"
    defs.append(
        f'<clipPath id="{clip_id}"><rect x="{_num(layer.x)}" y="{_num(layer.y)}" '
        f'width="{_num(layer.width)}" height="{_num(layer.height)}" '
        f'rx="{_num(layer.radius)}"/></clipPath>'
    )
    return (
        f'<image x="{_num(layer.x)}" y="{_num(layer.y)}" '
        f'width="{_num(layer.width)}" height="{_num(layer.height)}" '
        f'preserveAspectRatio="{aspect}" clip-path="url(#{clip_id})" '
        f'href="{href}"/>'
    )


def _gradient_element(layer: GradientLayer, index: int, defs: list[str]) -> str:
    gradient_id = f"grad{index}"
    stops = "".join(
        f'<stop offset="{_num(offset)}" stop-color="{rgba_to_hex(color)}" '
        f'stop-opacity="{_num(color[3])}"/>'
        for offset, color in layer.stops
    )
    defs.append(
        f'<linearGradient id="{gradient_id}" gradientUnits="userSpaceOnUse" '
        f'x1="{_num(layer.x)}" y1="{_num(layer.y)}" '
        f'x2="{_num(layer.x + layer.width)}" y2="{_num(layer.y + layer.height)}">'
        f"{stops}</linearGradient>"
    )
    return (
        f'<rect x="{_num(layer.x)}" y="{_num(layer.y)}" width="{_num(layer.width)}" '
        f'height="{_num(layer.height)}" fill="url(#{gradient_id})"/>'
    )


def render_svg(
    width: int,
    height: int,
    scene: tuple[Primitive, ...],
    hrefs: dict[str, str],
    font_family: str,
    background: str | None = "#000000",
) -> str:
    """Serialize ``scene`` as a standalone SVG document.

    Parameters
    ----------
    width, height : int
        Canvas size in pixels.
    scene : tuple of Primitive
        Primitives in paint order.
    hrefs : dict of str to str
        Image URI for each fixture role referenced by an ``ImageLayer``.
    font_family : str
        CSS font family for text elements.
    background : str or None, default="#000000"
        Fill of a full-canvas backdrop rectangle; ``None`` omits it.

    Returns
    -------
    str
        The SVG document.
    """
    defs: list[str] = []
    body: list[str] = []
    if background is not None:
        body.append(f'<rect width="100%" height="100%" fill="{background}"/>')

    family = html_module.escape(font_family, quote=True)
    for index, primitive in enumerate(scene):
        if isinstance(primitive, ImageLayer):
            body.append(_image_element(primitive, hrefs[primitive.source], index, defs))
        elif isinstance(primitive, GradientLayer):
            body.append(_gradient_element(primitive, index, defs))
        elif isinstance(primitive, RoundedRect):
            if primitive.width <= 0 or primitive.height <= 0:
                continue
            body.append(
                f'<rect x="{_num(primitive.x)}" y="{_num(primitive.y)}" '
                f'width="{_num(primitive.width)}" height="{_num(primitive.height)}" '
                f'rx="{_num(primitive.radius)}" {_fill(primitive.color)}/>'
            )
        elif isinstance(primitive, Circle):
            body.append(
                f'<circle cx="{_num(primitive.cx)}" cy="{_num(primitive.cy)}" '
                f'r="{_num(primitive.radius)}" {_fill(primitive.color)}/>'
            )
        elif isinstance(primitive, TextRun):
            weight = "600" if primitive.weight == "semibold" else "400"
            body.append(
                f'<text x="{_num(primitive.x)}" y="{_num(primitive.y)}" '
                f'font-family="{family}" font-size="{_num(primitive.size)}" '
                f'font-weight="{weight}" dominant-baseline="text-before-edge" '
                f'xml:space="preserve" {_fill(primitive.color)}>'
                f"{html_module.escape(primitive.text, quote=False)}</text>"
            )
        else:
            raise TypeError(f"Unknown scene primitive: {type(primitive).__name__}")

    defs_block = f"<defs>{''.join(defs)}</defs>" if defs else ""
    return (
        f'<svg xmlns="{SVG_NAMESPACE}" xmlns:xlink="{XLINK_NAMESPACE}" '
        f'width="{width}" height="{height}" viewBox="0 0 {width} {height}">'
        f"{defs_block}{''.join(body)}</svg>"
    )


class SvgMarkupBackend:
    """Benchmark adapter that produces SVG markup without rasterizing it."""

    name = "svg (markup)"

    def run(self, context: BenchContext, workload: Workload | str) -> CaseResult:
        workload = Workload(workload)

        if workload is Workload.IMAGE_BUFFER:
            href = to_data_uri(context.buffers.background)
            return self._document(context, _background_scene(context), {"background": href})

        if workload is Workload.IMAGE_STREAM:
            data = stream_to_bytes(context.create_background_stream())
            return self._document(
                context, _background_scene(context), {"background": to_data_uri(data)}
            )

        if workload is Workload.TEXT_LAYOUT:
            document = render_svg(
                context.width,
                context.height,
                text_layout_runs(context),
                {},
                context.font_family,
                background=None,
            )
            return MetricResult(value=float(len(document)))

        image_format = ENCODE_FORMATS[workload]
        if workload is not Workload.KITCHEN_SINK and image_format != "svg":
            raise UnsupportedWorkloadError(
                workload, f"markup-only backend cannot rasterize to {image_format}"
            )

        hrefs = {
            "background": context.data_uris.background,
            "avatar": context.data_uris.avatar,
            "badge": context.data_uris.badge,
        }
        return self._document(context, kitchen_sink_scene(context), hrefs)

    def _document(
        self,
        context: BenchContext,
        scene: tuple[Primitive, ...],
        hrefs: dict[str, str],
    ) -> ImageResult:
        document = render_svg(
            context.width, context.height, scene, hrefs, context.font_family
        )
        return ImageResult(payload=document.encode("utf-8"), format="svg")


def _background_scene(context: BenchContext) -> tuple[Primitive, ...]:
    return (ImageLayer("background", 0, 0, context.width, context.height, fit="cover"),)
