"""Flask web application for the star field viewer.

Routes:
    GET  /              -- Form page
    POST /generate      -- Plan and render a view, return page with inline SVG preview
    POST /download/svg  -- SVG file download
    POST /download/png  -- PNG via CairoSVG (graceful fallback)
"""
import logging
import math

from flask import Flask, render_template, request, Response

from starfield import config
from starfield.errors import CatalogError
from starfield.planner import plan_render
from starfield.projection import ViewportState
from starfield.renderer import render_svg

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["CATALOG_PATH"] = config.CATALOG_PATH

MIN_PIXELS = 64
MAX_PIXELS = 4096


def _form_float(name: str, label: str, default: float) -> float:
    raw = request.form.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        value = math.nan
    if not math.isfinite(value):
        raise ValueError(f"Invalid {label}. Enter a number like {default:g}.")
    return value


def _form_pixels(name: str, label: str, default: int) -> int:
    raw = request.form.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"Invalid {label}. Enter a whole number of pixels.")
    if not MIN_PIXELS <= value <= MAX_PIXELS:
        raise ValueError(f"{label.capitalize()} must be between {MIN_PIXELS} and {MAX_PIXELS}.")
    return value


def _parse_form() -> ViewportState | str:
    """Parse and validate form data. Returns a ViewportState, or an error string.

    Validates:
        - ra: 0 <= ra < 360 (degrees)
        - dec: -90 to 90
        - fov: > 0 and <= 180
        - rot, mag: any finite number
        - width, height: MIN_PIXELS..MAX_PIXELS
    Blank fields fall back to the start-up view.
    """
    default = ViewportState.default()
    try:
        ra = _form_float("ra", "right ascension", default.center_ra)
        dec = _form_float("dec", "declination", default.center_dec)
        fov = _form_float("fov", "field of view", default.field_of_view)
        rot = _form_float("rot", "rotation", default.rotation)
        mag = _form_float("mag", "limiting magnitude", default.limiting_magnitude)
        width = _form_pixels("width", "width", default.pixel_width)
        height = _form_pixels("height", "height", default.pixel_height)
    except ValueError as e:
        return str(e)

    if not 0 <= ra < 360:
        return "Right ascension must be at least 0 and below 360 degrees."
    if not -90 <= dec <= 90:
        return "Declination must be between -90 and 90."
    if not 0 < fov <= 180:
        return "Field of view must be greater than 0 and at most 180 degrees."

    return ViewportState(
        center_ra=ra, center_dec=dec, field_of_view=fov, rotation=rot,
        limiting_magnitude=mag, pixel_width=width, pixel_height=height,
    )


def _render(state: ViewportState) -> str:
    """Plan and render `state`. Raises CatalogError if the catalog is unusable."""
    plan = plan_render(app.config["CATALOG_PATH"], state)
    return render_svg(plan, state, title="DeepSkies")


@app.route("/")
def index() -> str:
    """Render the form page with no star field."""
    return render_template("index.html", svg=None, error=None,
                           form_data=_defaults_form())


@app.route("/generate", methods=["POST"])
def generate() -> str:
    """Render the view from form data, return page with inline SVG preview."""
    form_data = request.form.to_dict()
    result = _parse_form()
    if isinstance(result, str):
        return render_template("index.html", svg=None, error=result, form_data=form_data)
    try:
        svg = _render(result)
    except CatalogError as e:
        logger.error("Render failed: %s", e)
        return render_template("index.html", svg=None, error=str(e), form_data=form_data)
    return render_template("index.html", svg=svg, error=None, form_data=form_data)


@app.route("/download/svg", methods=["POST"])
def download_svg() -> Response:
    """Render and download the view as an SVG file."""
    result = _parse_form()
    if isinstance(result, str):
        return Response(result, status=400, mimetype="text/plain")
    try:
        svg = _render(result)
    except CatalogError as e:
        return Response(str(e), status=400, mimetype="text/plain")
    return Response(svg, mimetype="image/svg+xml",
                    headers={"Content-Disposition": "attachment; filename=starfield.svg"})


@app.route("/download/png", methods=["POST"])
def download_png() -> Response:
    """Render and download the view as a PNG file via CairoSVG."""
    result = _parse_form()
    if isinstance(result, str):
        return Response(result, status=400, mimetype="text/plain")
    try:
        svg = _render(result)
    except CatalogError as e:
        return Response(str(e), status=400, mimetype="text/plain")
    try:
        import cairosvg
        png_bytes = cairosvg.svg2png(bytestring=svg.encode("utf-8"), scale=2.0)
    except ImportError:
        return Response("PNG export requires cairosvg. Install: pip install cairosvg",
                        status=500, mimetype="text/plain")
    return Response(png_bytes, mimetype="image/png",
                    headers={"Content-Disposition": "attachment; filename=starfield.png"})


def _defaults_form() -> dict[str, str]:
    v = ViewportState.default()
    return {
        "ra": f"{v.center_ra:g}", "dec": f"{v.center_dec:g}",
        "fov": f"{v.field_of_view:g}", "rot": f"{v.rotation:g}",
        "mag": f"{v.limiting_magnitude:g}",
        "width": str(v.pixel_width), "height": str(v.pixel_height),
    }


if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app.run(debug=True, port=5000)
