"""SVG drawing backend for render plans.

Turns planner directives into an SVG string: black sky, white stars, labels
in an 11px sans face, and a caption strip under the viewport describing the
view.
"""
import re
from typing import Iterable
from xml.sax.saxutils import escape

from astropy.coordinates import Angle
import astropy.units as u

from starfield.planner import Directive, DrawLabel, PlotDisc, PlotPoint, RenderPlan
from starfield.projection import ViewportState

# -- Layout Constants --
CAPTION_H = 28
CAPTION_PAD_X = 8
BACKGROUND = "#000000"
STAR_COLOR = "#ffffff"

# -- Text Constants --
LABEL_FONT = "'Helvetica', 'Arial', sans-serif"
LABEL_SIZE = 11
CAPTION_SIZE = 12
CAPTION_COLOR = "#bbbbbb"

# C0 controls (tab, newline, CR excepted) and DEL are not allowed in XML text.
_XML_UNSAFE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def format_ra(ra: float) -> str:
    """RA in degrees -> '20h00m00s'."""
    return Angle(ra, u.deg).wrap_at(360 * u.deg).to_string(
        unit=u.hourangle, sep="hms", precision=0, pad=True
    )


def format_dec(dec: float) -> str:
    """Dec in degrees -> '+40d00m00s'."""
    return Angle(dec, u.deg).to_string(
        unit=u.deg, sep="dms", precision=0, pad=True, alwayssign=True
    )


def caption_text(state: ViewportState) -> str:
    return (
        f"RA {format_ra(state.center_ra)}  Dec {format_dec(state.center_dec)}  "
        f"FOV {state.field_of_view:g}°  Rot {state.rotation:g}°  "
        f"Mag ≤ {state.limiting_magnitude:g}"
    )


def _text(value: str) -> str:
    return escape(_XML_UNSAFE.sub("", value))


def _directive_svg(d: Directive) -> str:
    if isinstance(d, PlotDisc):
        return f'<circle cx="{d.x}" cy="{d.y}" r="{d.radius:.1f}" fill="{STAR_COLOR}"/>'
    if isinstance(d, PlotPoint):
        return f'<rect x="{d.x}" y="{d.y}" width="1" height="1" fill="{STAR_COLOR}"/>'
    if isinstance(d, DrawLabel):
        return (
            f'<text x="{d.x}" y="{d.y}" fill="{STAR_COLOR}" '
            f'font-family="{LABEL_FONT}" font-size="{LABEL_SIZE}">{_text(d.text)}</text>'
        )
    raise TypeError(f"Unknown directive: {d!r}")


def render_svg(
    plan: RenderPlan | Iterable[Directive],
    state: ViewportState,
    title: str | None = None,
) -> str:
    """Render a plan (or bare directives) for `state` as an SVG XML string.

    Stars are clipped to the viewport; the caption sits below it.
    """
    directives = plan.directives if isinstance(plan, RenderPlan) else list(plan)
    w, h = state.pixel_width, state.pixel_height
    canvas_h = h + CAPTION_H

    parts: list[str] = []

    # Header
    parts.append(
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'viewBox="0 0 {w} {canvas_h}" width="{w}" height="{canvas_h}">'
    )
    if title:
        parts.append(f"<title>{_text(title)}</title>")

    parts.append(f'<rect width="100%" height="100%" fill="{BACKGROUND}"/>')

    # Clip path
    parts.append("<defs>")
    parts.append('<clipPath id="viewport-clip">')
    parts.append(f'<rect x="0" y="0" width="{w}" height="{h}"/>')
    parts.append("</clipPath>")
    parts.append("</defs>")

    # Stars and labels
    parts.append('<g clip-path="url(#viewport-clip)">')
    parts.extend(_directive_svg(d) for d in directives)
    parts.append("</g>")

    # Caption
    parts.append(
        f'<line x1="0" y1="{h + 0.5}" x2="{w}" y2="{h + 0.5}" '
        f'stroke="{CAPTION_COLOR}" stroke-width="1" opacity="0.5"/>'
    )
    parts.append(
        f'<text x="{CAPTION_PAD_X}" y="{h + CAPTION_H - 9}" fill="{CAPTION_COLOR}" '
        f'font-family="{LABEL_FONT}" font-size="{CAPTION_SIZE}">'
        f"{escape(caption_text(state))}</text>"
    )

    parts.append("</svg>")
    return "\n".join(parts)
