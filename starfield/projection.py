"""Celestial -> screen projection.

Pipeline: RA/Dec -> Alt/Az about the view centre -> azimuthal plane (x, y)

The view centre plays the part of the zenith: a star at the centre has
altitude 90 deg and lands in the middle of the viewport. Nothing here is tied
to a real observer or horizon.
"""
from dataclasses import dataclass
import math

import numpy as np
from numpy.typing import ArrayLike, NDArray

from starfield import config
from starfield.errors import ProjectionDomainError

HALF_PI = math.pi / 2.0
TWO_PI = 2.0 * math.pi

# Degrees of sky spanned by the viewport width at unit scale.
SCALE_SPAN_DEG = 120.0


@dataclass(frozen=True)
class ViewportState:
    """One frame's view. Angles in degrees, viewport in device pixels."""
    center_ra: float
    center_dec: float
    field_of_view: float
    rotation: float
    limiting_magnitude: float
    pixel_width: int
    pixel_height: int

    def __post_init__(self) -> None:
        if not math.isfinite(self.field_of_view) or self.field_of_view <= 0:
            raise ProjectionDomainError(
                f"Field of view must be > 0 degrees, got {self.field_of_view}"
            )
        for name in ("center_ra", "center_dec", "rotation", "limiting_magnitude"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ProjectionDomainError(f"{name} must be finite, got {value}")

    @classmethod
    def default(
        cls,
        pixel_width: int = config.DEFAULT_WIDTH,
        pixel_height: int = config.DEFAULT_HEIGHT,
    ) -> "ViewportState":
        """Start-up view: RA 300, Dec 40, 60 deg field, mag 6.5, no rotation."""
        return cls(
            center_ra=config.DEFAULT_RA,
            center_dec=config.DEFAULT_DEC,
            field_of_view=config.DEFAULT_FOV,
            rotation=config.DEFAULT_ROTATION,
            limiting_magnitude=config.DEFAULT_MAG,
            pixel_width=pixel_width,
            pixel_height=pixel_height,
        )


def normalize_zero_two_pi(angle: float) -> float:
    """Bring an angle in radians into [0, 2*pi) by whole turns.

    Raises ValueError for inf or nan.
    """
    if not math.isfinite(angle):
        raise ValueError(f"Cannot normalize non-finite angle {angle}")
    angle = math.fmod(angle, TWO_PI)
    while angle < 0.0:
        angle += TWO_PI
    while angle >= TWO_PI:
        angle -= TWO_PI
    return angle


def azimuth(p1: float, p2: float) -> float:
    """atan2(p1, p2), except (0, 0) -> 0.

    atan2 of signed zeros gives 0, pi, -0 or -pi depending on the signs;
    the degenerate case is pinned to 0.
    """
    if p1 == 0.0 and p2 == 0.0:
        return 0.0
    return math.atan2(p1, p2)


def altitude(cos_angle: float) -> float:
    """asin(cos_angle), clamped to pi/2 once rounding pushes it to >= 1.

    The antipode gets the matching clamp to -pi/2 so a single star opposite
    the centre cannot raise a math domain error mid-pass.
    """
    if cos_angle >= 1.0:
        return HALF_PI
    if cos_angle <= -1.0:
        return -HALF_PI
    return math.asin(cos_angle)


def pixel_scale(state: ViewportState) -> float:
    """Pixels per projected unit.

    Algebraically pixel_width / 120, but evaluated in two steps so the
    rounding matches existing renderings.
    """
    fov = math.radians(state.field_of_view)
    return (state.pixel_width / fov) / (SCALE_SPAN_DEG / state.field_of_view)


def project_star(state: ViewportState, ra: float, dec: float) -> tuple[int, int]:
    """Project one star (degrees) to integer viewport pixels.

    Math:
        dra      = ra0 - ra
        p1       = sin(dra)
        p2       = cos(dra) * sin(dec0) - tan(dec) * cos(dec0)
        az       = atan2(p1, p2)
        alt      = asin(sin(dec0) sin(dec) + cos(dec0) cos(dec) cos(dra))
        r_norm   = 1 - 2 * alt / pi
        az2      = az - pi/2 + rot
        x        = w/2 + r_norm * cos(az2) * pi / fov * scale
        y        = h/2 - r_norm * sin(az2) * pi / fov * scale

    Results are truncated toward zero. Off-screen points are returned as-is;
    clipping belongs to whoever draws them.
    """
    ra0 = math.radians(state.center_ra)
    dec0 = math.radians(state.center_dec)
    fov = math.radians(state.field_of_view)
    rot = math.radians(state.rotation)
    ra = math.radians(ra)
    dec = math.radians(dec)

    dra = ra0 - ra
    p1 = math.sin(dra)
    p2 = math.cos(dra) * math.sin(dec0) - math.tan(dec) * math.cos(dec0)
    az = azimuth(p1, p2)

    cos_angle = math.sin(dec0) * math.sin(dec) + math.cos(dec0) * math.cos(dec) * math.cos(dra)
    alt = altitude(cos_angle)

    r_norm = 1.0 - 2.0 * alt / math.pi
    az2 = az - HALF_PI + rot
    tx = (r_norm * math.cos(az2)) * math.pi / fov
    ty = -(r_norm * math.sin(az2)) * math.pi / fov

    scale = pixel_scale(state)
    x = state.pixel_width / 2.0 + tx * scale
    y = state.pixel_height / 2.0 + ty * scale
    return int(x), int(y)


def project_arrays(
    state: ViewportState,
    ra: ArrayLike,
    dec: ArrayLike,
) -> tuple[NDArray[np.int64], NDArray[np.int64]]:
    """Bulk version of project_star for coordinate arrays (degrees).

    Same special cases: az = 0 where p1 and p2 are both zero, alt = pi/2
    where the cosine reaches 1.
    """
    ra0 = math.radians(state.center_ra)
    dec0 = math.radians(state.center_dec)
    fov = math.radians(state.field_of_view)
    rot = math.radians(state.rotation)
    ra = np.radians(np.asarray(ra, dtype=np.float64))
    dec = np.radians(np.asarray(dec, dtype=np.float64))

    dra = ra0 - ra
    p1 = np.sin(dra)
    p2 = np.cos(dra) * math.sin(dec0) - np.tan(dec) * math.cos(dec0)
    degenerate = (p1 == 0.0) & (p2 == 0.0)
    az = np.where(degenerate, 0.0, np.arctan2(p1, p2))

    cos_angle = math.sin(dec0) * np.sin(dec) + math.cos(dec0) * np.cos(dec) * np.cos(dra)
    alt = np.where(cos_angle >= 1.0, HALF_PI, np.arcsin(np.clip(cos_angle, -1.0, 1.0)))

    r_norm = 1.0 - 2.0 * alt / math.pi
    az2 = az - HALF_PI + rot
    tx = (r_norm * np.cos(az2)) * math.pi / fov
    ty = -(r_norm * np.sin(az2)) * math.pi / fov

    scale = pixel_scale(state)
    x = state.pixel_width / 2.0 + tx * scale
    y = state.pixel_height / 2.0 + ty * scale
    return np.trunc(x).astype(np.int64), np.trunc(y).astype(np.int64)
