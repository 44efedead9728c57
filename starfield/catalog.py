"""Random access to the fixed-width star catalog (STARS.DAT).

The file is a flat run of 61-byte text records. The first 5 records are a
reserved header; star N (1-based) is record N + 4. Nothing is cached: every
get_star() call seeks and reads one record.
"""
from contextlib import contextmanager
import logging
import os
import re
from pathlib import Path
from typing import BinaryIO, Iterable, Iterator, TypedDict

from starfield.errors import CatalogCorrupt, CatalogNotFound, RecordReadFailure

logger = logging.getLogger(__name__)

RECORD_LENGTH = 61
HEADER_RECORDS = 5
LABEL_CHARS = 16
CLASS_CHARS = 2

# (start column, width), 0-based. pm_ra starts inside the class field and
# pm_dec runs past the end of the record; both are kept as found in the
# existing catalogs.
FIELDS = {
    "label": (0, 17),
    "ra": (17, 11),
    "dec": (28, 12),
    "mag": (40, 5),
    "spectral_class": (45, 3),
    "pm_ra": (47, 9),
    "pm_dec": (56, 9),
}

_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class StarRecord(TypedDict):
    label: str
    ra: float              # Right ascension in degrees
    dec: float             # Declination in degrees
    mag: float             # Visual magnitude
    spectral_class: str
    pm_ra: float           # mas/yr, carried but not applied
    pm_dec: float          # mas/yr, carried but not applied


def parse_number(text: str) -> float:
    """Lenient text -> float: leading numeric prefix, 0.0 if there is none.

    '  12.5 ' -> 12.5, '-3.1xyz' -> -3.1, 'abc' -> 0.0. Never raises.
    """
    m = _NUMBER_PREFIX.match(text.strip())
    if m is None:
        return 0.0
    return float(m.group(0))


def _field(raw: str, name: str) -> str:
    start, width = FIELDS[name]
    return raw[start:start + width]


def decode_record(raw: bytes) -> StarRecord:
    """Decode one record into a StarRecord using the fixed column layout."""
    text = raw.decode("latin-1")
    return StarRecord(
        label=_field(text, "label")[:LABEL_CHARS].rstrip(),
        ra=parse_number(_field(text, "ra")),
        dec=parse_number(_field(text, "dec")),
        mag=parse_number(_field(text, "mag")),
        spectral_class=_field(text, "spectral_class")[:CLASS_CHARS].strip(),
        pm_ra=parse_number(_field(text, "pm_ra")),
        pm_dec=parse_number(_field(text, "pm_dec")),
    )


class CatalogStore:
    """Read-only handle on a catalog file, addressed by ordinal index.

    Use open_catalog() (or ``with CatalogStore.open(path) as store``) so the
    file is closed on every exit path.
    """

    def __init__(self, fp: BinaryIO, path: str):
        self._fp = fp
        self.path = path

    @classmethod
    def open(cls, path: str | os.PathLike) -> "CatalogStore":
        """Open the catalog for reading.

        Raises CatalogNotFound if the file cannot be opened.
        """
        path = os.fspath(path)
        try:
            fp = open(path, "rb")
        except OSError as e:
            raise CatalogNotFound(f"Unable to open data file: {path}", path) from e
        logger.debug("Opened catalog %s", path)
        return cls(fp, path)

    @property
    def closed(self) -> bool:
        return self._fp.closed

    def close(self) -> None:
        if not self._fp.closed:
            self._fp.close()
            logger.debug("Closed catalog %s", self.path)

    def __enter__(self) -> "CatalogStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __len__(self) -> int:
        return self.record_count()

    def record_count(self) -> int:
        """Number of stars: file size / record length, minus the header.

        Raises CatalogCorrupt if the size is not a multiple of RECORD_LENGTH.
        """
        size = self._fp.seek(0, os.SEEK_END)
        if size % RECORD_LENGTH != 0:
            raise CatalogCorrupt(
                f"Data file error: {self.path} is {size} bytes, "
                f"not a multiple of {RECORD_LENGTH}",
                self.path, size,
            )
        return size // RECORD_LENGTH - HEADER_RECORDS

    def get_star(self, index: int) -> StarRecord:
        """Read star `index` (1-based) straight from the file.

        Raises RecordReadFailure if the seek fails or fewer than
        RECORD_LENGTH bytes come back.
        """
        if index < 1:
            raise RecordReadFailure(
                f"Star index must be >= 1, got {index}", self.path, index
            )
        offset = (index + HEADER_RECORDS - 1) * RECORD_LENGTH
        try:
            self._fp.seek(offset)
            raw = self._fp.read(RECORD_LENGTH)
        except (OSError, ValueError) as e:
            raise RecordReadFailure(
                f"Unable to read star {index} from {self.path}: {e}", self.path, index
            ) from e
        if len(raw) != RECORD_LENGTH:
            raise RecordReadFailure(
                f"Short read for star {index} from {self.path}: "
                f"{len(raw)} of {RECORD_LENGTH} bytes",
                self.path, index,
            )
        return decode_record(raw)

    def iter_stars(self) -> Iterator[tuple[int, StarRecord | None]]:
        """Yield (index, star) for 1..record_count(); star is None when unreadable."""
        for index in range(1, self.record_count() + 1):
            try:
                yield index, self.get_star(index)
            except RecordReadFailure as e:
                logger.warning("Skipping star %d: %s", index, e)
                yield index, None


@contextmanager
def open_catalog(path: str | os.PathLike) -> Iterator[CatalogStore]:
    """Scoped catalog handle; always closed, including on early failure."""
    store = CatalogStore.open(path)
    try:
        yield store
    finally:
        store.close()


# -- Writing --

def _fit(text: str, width: int) -> str:
    return text[:width].ljust(width)


def format_record(
    label: str,
    ra: float,
    dec: float,
    mag: float,
    spectral_class: str = "",
    pm_ra: float = 0.0,
    pm_dec: float = 0.0,
) -> bytes:
    """Encode one star as a RECORD_LENGTH-byte record (newline-terminated).

    The last field only has 4 columns left before the newline, so pm_dec is
    written as whole mas/yr clamped to -999..9999.
    """
    pm_dec_whole = max(-999, min(9999, int(round(pm_dec))))
    line = (
        _fit(label[:LABEL_CHARS], 17)
        + f"{ra:11.7f}"[:11]
        + f"{dec:+12.8f}"[:12]
        + f"{mag:5.2f}"[:5]
        + _fit(spectral_class[:CLASS_CHARS], CLASS_CHARS)
        + f"{pm_ra:9.2f}"[:9]
        + f"{pm_dec_whole:4d}"
    )
    return _fit(line, RECORD_LENGTH - 1).encode("latin-1") + b"\n"


def format_header(lines: Iterable[str] = ("DEEPSKIES STAR CATALOG",)) -> bytes:
    """The HEADER_RECORDS reserved records. Extra lines are dropped."""
    lines = list(lines)[:HEADER_RECORDS]
    lines += [""] * (HEADER_RECORDS - len(lines))
    return b"".join(
        _fit(line, RECORD_LENGTH - 1).encode("latin-1") + b"\n" for line in lines
    )


def write_catalog(
    path: str | os.PathLike,
    stars: Iterable[StarRecord],
    header: Iterable[str] = ("DEEPSKIES STAR CATALOG",),
) -> int:
    """Write a complete catalog file. Returns the number of stars written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "wb") as f:
        f.write(format_header(header))
        for s in stars:
            f.write(format_record(
                s["label"], s["ra"], s["dec"], s["mag"],
                s.get("spectral_class", ""), s.get("pm_ra", 0.0), s.get("pm_dec", 0.0),
            ))
            count += 1
    logger.debug("Wrote %d stars to %s", count, path)
    return count
