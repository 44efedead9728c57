#!/usr/bin/env python3
"""One-off script: download HYG v4.1 CSV, filter by magnitude, write data/STARS.DAT.

Usage: python scripts/prepare_catalog.py [MAG_LIMIT]
"""
import csv
import sys
import urllib.request
from pathlib import Path

from starfield.catalog import StarRecord, write_catalog

HYG_URL = "https://raw.githubusercontent.com/astronexus/HYG-Database/refs/heads/main/hyg/CURRENT/hygdata_v41.csv"
RAW_CSV = Path(__file__).parent / "hygdata_v41.csv"
OUTPUT_DAT = Path(__file__).resolve().parent.parent / "data" / "STARS.DAT"
MAG_LIMIT = 8.0


def download_csv() -> Path:
    """Download HYG CSV if not already cached locally. Returns path."""
    if not RAW_CSV.exists():
        print(f"Downloading {HYG_URL}...")
        urllib.request.urlretrieve(HYG_URL, RAW_CSV)
        print(f"Saved to {RAW_CSV}")
    else:
        print(f"Using cached {RAW_CSV}")
    return RAW_CSV


def _label(row: dict) -> str:
    """Proper name, else Bayer/Flamsteed designation, else HIP number."""
    if row.get("proper"):
        return row["proper"]
    if row.get("bf"):
        return row["bf"]
    if row.get("hip"):
        return f"HIP {row['hip']}"
    return ""


def _float(value: str) -> float:
    return float(value) if value else 0.0


def parse_and_filter(csv_path: Path, mag_limit: float) -> list[StarRecord]:
    """Read CSV, keep mag <= mag_limit, map to catalog records.

    CRITICAL: HYG 'ra' column is in HOURS (0-24).
    Convert to DEGREES by multiplying by 15.
    """
    stars: list[StarRecord] = []
    with open(csv_path, newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            mag_str = row.get("mag", "")
            if not mag_str:
                continue
            mag = float(mag_str)
            if mag > mag_limit or row.get("proper") == "Sol":
                continue

            stars.append(StarRecord(
                label=_label(row),
                ra=float(row["ra"]) * 15.0,     # CRITICAL CONVERSION
                dec=float(row["dec"]),
                mag=mag,
                spectral_class=(row.get("spect") or "")[:2],
                pm_ra=_float(row.get("pmra", "")),
                pm_dec=_float(row.get("pmdec", "")),
            ))

    stars.sort(key=lambda s: s["ra"])
    return stars


def main() -> None:
    mag_limit = float(sys.argv[1]) if len(sys.argv) > 1 else MAG_LIMIT
    csv_path = download_csv()
    stars = parse_and_filter(csv_path, mag_limit)
    count = write_catalog(OUTPUT_DAT, stars, header=(
        "DEEPSKIES STAR CATALOG",
        "SOURCE HYG v4.1",
        f"MAG LIMIT {mag_limit:.1f}",
        f"STARS {len(stars)}",
    ))
    size_kb = OUTPUT_DAT.stat().st_size / 1024
    print(f"Wrote {count} stars to {OUTPUT_DAT} ({size_kb:.0f} KB)")


if __name__ == "__main__":
    main()
