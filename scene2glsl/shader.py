"""Fragment shader assembly around a compiled scene expression.

Only text is produced here; compiling, linking and drawing belong to the
host application.  The shader follows the Shadertoy convention: the scene
is evaluated in ``mainImage`` at ``center``, the pixel position mapped so
that the canvas height spans ``[-1, 1]``.
"""

from __future__ import annotations

from typing import Optional, Union

from . import config
from .atoms import ATOMS_GLSL, BINOPS_GLSL
from .compiler import CompiledExpression
from .formatting import format_fixed

__all__ = ["VERTEX_SOURCE", "main_image", "fragment_source"]

VERTEX_SOURCE = (
    "#version 300 es\n"
    "in vec4 a_position;\n"
    "void main() {\n"
    "  gl_Position = a_position;\n"
    "}\n"
)

_HEADER = (
    "#version 300 es\n"
    "precision highp float;\n\n"
    "const vec3 iResolution = vec3({width}, {height}, {ratio});\n"
)

_MAIN_IMAGE = (
    "void mainImage(out vec4 fragColor, in vec2 fragCoord) {{\n"
    "  vec2 {coord} = (2.0*fragCoord - iResolution.xy)/iResolution.y;\n"
    "  float d = {distance};\n"
    "  vec4 background = {background};\n"
    "  vec4 interior = {interior};\n"
    "  vec4 border = {border};\n"
    "  float borderWidth = {border_width};\n"
    "  float aaWidth = 2.0 / iResolution.y;\n"
    "  float borderMix = smoothstep(-borderWidth - aaWidth, -borderWidth + aaWidth, d);\n"
    "  float edgeMix = smoothstep(-aaWidth, aaWidth, d);\n"
    "  vec4 color = mix(interior, border, borderMix);\n"
    "  color = mix(color, background, edgeMix);\n"
    "  fragColor = color;\n"
    "}}\n"
)

_ENTRY = (
    "out vec4 fragColor;\n"
    "void main() {\n"
    "  mainImage(fragColor, gl_FragCoord.xy);\n"
    "}\n"
)


def main_image(
    expression: Union[str, CompiledExpression],
    coordinate: Optional[str] = None,
    border_width: float = config.BORDER_WIDTH,
) -> str:
    """``mainImage`` function shading the distance *expression*.

    A :class:`~scene2glsl.compiler.CompiledExpression` is applied to the
    coordinate name; plain text must already refer to it.
    """
    coord = coordinate or config.COORDINATE
    distance = expression(coord) if isinstance(expression, CompiledExpression) else expression
    return _MAIN_IMAGE.format(
        coord=coord,
        distance=distance,
        background=config.BACKGROUND_COLOR,
        interior=config.INTERIOR_COLOR,
        border=config.BORDER_COLOR,
        border_width=format_fixed(border_width, 3),
    )


def fragment_source(
    expression: Union[str, CompiledExpression],
    *,
    width: Optional[int] = None,
    height: Optional[int] = None,
    pixel_ratio: Optional[float] = None,
    coordinate: Optional[str] = None,
) -> str:
    """Complete GLSL ES 3.00 fragment shader rendering *expression*.

    Parameters
    ----------
    expression:
        Distance expression text or a compiled scene.
    width, height:
        Canvas size in CSS pixels (defaults from :mod:`scene2glsl.config`).
    pixel_ratio:
        Device pixel ratio; ``iResolution`` is the size times this ratio.
    coordinate:
        Name of the query-point variable (default ``config.COORDINATE``).

    Raises
    ------
    UnknownOperator
        *expression* is a compiled scene containing an unresolved operator.
    """
    width = config.DEFAULT_WIDTH if width is None else width
    height = config.DEFAULT_HEIGHT if height is None else height
    ratio = config.DEFAULT_PIXEL_RATIO if pixel_ratio is None else pixel_ratio

    # raises UnknownOperator for unresolved scenes
    body = main_image(expression, coordinate)
    header = _HEADER.format(
        width=format_fixed(width * ratio, 1),
        height=format_fixed(height * ratio, 1),
        ratio=format_fixed(ratio, 1),
    )
    return "\n".join([header, BINOPS_GLSL, ATOMS_GLSL, body, _ENTRY])
