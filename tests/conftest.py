import pytest

from starfield.catalog import StarRecord, write_catalog
from starfield.projection import ViewportState


def star(label: str, ra: float, dec: float, mag: float, spectral_class: str = "",
         pm_ra: float = 0.0, pm_dec: float = 0.0) -> StarRecord:
    return StarRecord(label=label, ra=ra, dec=dec, mag=mag, spectral_class=spectral_class,
                      pm_ra=pm_ra, pm_dec=pm_dec)


@pytest.fixture
def make_catalog(tmp_path):
    """Factory writing a catalog of the given stars into tmp_path."""
    def _make(stars, name="STARS.DAT"):
        path = tmp_path / name
        write_catalog(path, stars)
        return path
    return _make


@pytest.fixture
def startup_view():
    """The scenario view: centre RA 300 / Dec 40, 60 deg field, 640x480."""
    return ViewportState(center_ra=300.0, center_dec=40.0, field_of_view=60.0,
                         rotation=0.0, limiting_magnitude=6.5,
                         pixel_width=640, pixel_height=480)


@pytest.fixture
def cygnus_catalog(make_catalog):
    """A few stars around the start-up view, plus one too faint to draw."""
    return make_catalog([
        star("Sadr", 305.557, 40.257, 2.23, "F8", 2.43, -0.93),
        star("Deneb", 310.358, 45.280, 1.25, "A2", 1.99, 1.95),
        star("Albireo", 292.680, 27.960, 3.05, "K3", -7.09, -5.63),
        star("HIP 99999", 300.500, 41.000, 5.90, "G0"),
        star("faint", 301.000, 39.000, 7.20, "M1"),
    ])
