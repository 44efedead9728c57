"""Plan one render pass: which stars to draw, where, and how big.

The planner never draws. It turns the catalog and a ViewportState into a list
of directives (PlotPoint / PlotDisc / DrawLabel) for a drawing backend such as
starfield.renderer.
"""
from dataclasses import dataclass, field
import logging
import os
from typing import NamedTuple, Union

from starfield.catalog import StarRecord, open_catalog
from starfield.projection import ViewportState, project_star

logger = logging.getLogger(__name__)

MIN_MARKER = 1.0
MAX_MARKER = 8.0
MARKER_MAG_CAP = 15.0     # limiting magnitudes beyond this size like 15
LABEL_MARGIN = 3.0        # label stars this many magnitudes above the limit


class PlotPoint(NamedTuple):
    x: int
    y: int


class PlotDisc(NamedTuple):
    x: int
    y: int
    radius: float


class DrawLabel(NamedTuple):
    x: int
    y: int
    text: str


Directive = Union[PlotPoint, PlotDisc, DrawLabel]


@dataclass
class RenderPlan:
    """Directives for one pass plus what happened along the way."""
    directives: list[Directive] = field(default_factory=list)
    star_count: int = 0
    plotted: int = 0
    skipped: list[int] = field(default_factory=list)   # unreadable ordinals


def marker_size(mag: float, limiting_magnitude: float) -> float:
    """Star magnitude -> marker radius in pixels, clamped to [1, 8].

    Brighter (lower mag) = bigger; a star at the limit gets 1px.
    """
    base = limiting_magnitude if limiting_magnitude <= MARKER_MAG_CAP else MARKER_MAG_CAP
    return max(MIN_MARKER, min(MAX_MARKER, base - mag + 0.5))


def wants_label(mag: float, limiting_magnitude: float) -> bool:
    return mag < limiting_magnitude - LABEL_MARGIN


def plan_star(state: ViewportState, star: StarRecord) -> list[Directive]:
    """Directives for a single star already known to pass the magnitude cut."""
    x, y = project_star(state, star["ra"], star["dec"])
    size = marker_size(star["mag"], state.limiting_magnitude)

    out: list[Directive] = []
    if size == MIN_MARKER:
        out.append(PlotPoint(x, y))
    else:
        out.append(PlotDisc(x, y, size))

    if wants_label(star["mag"], state.limiting_magnitude):
        offset = int(size)
        out.append(DrawLabel(x + offset, y - offset, star["label"]))
    return out


def plan_render(catalog_path: str | os.PathLike, state: ViewportState) -> RenderPlan:
    """Run a full pass over the catalog.

    CatalogNotFound / CatalogCorrupt propagate before any directive is made.
    A record that cannot be read is skipped and noted in RenderPlan.skipped.
    The catalog is closed on every path out.
    """
    plan = RenderPlan()
    with open_catalog(catalog_path) as store:
        plan.star_count = store.record_count()
        for index, star in store.iter_stars():
            if star is None:
                plan.skipped.append(index)
                continue
            if star["mag"] > state.limiting_magnitude:
                continue
            plan.directives.extend(plan_star(state, star))
            plan.plotted += 1

    logger.info(
        "Planned %d of %d stars (limit %.1f, %d unreadable)",
        plan.plotted, plan.star_count, state.limiting_magnitude, len(plan.skipped),
    )
    return plan
