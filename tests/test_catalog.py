"""Tests for the fixed-width catalog store."""
import pytest

from starfield.catalog import (
    CatalogStore, HEADER_RECORDS, RECORD_LENGTH,
    decode_record, format_header, format_record, open_catalog, parse_number,
)
from starfield.errors import CatalogCorrupt, CatalogNotFound, RecordReadFailure

from conftest import star


class TestParseNumber:

    @pytest.mark.parametrize("text, expected", [
        ("300.0000000", 300.0),
        ("  +40.00000000 ", 40.0),
        (" 1.00", 1.0),
        ("-1.46", -1.46),
        ("12.5abc", 12.5),
        (".5", 0.5),
        ("1e2", 100.0),
        ("", 0.0),
        ("   ", 0.0),
        ("abc", 0.0),
        ("--5", 0.0),
        ("  -12\n", -12.0),
    ])
    def test_lenient(self, text, expected):
        assert parse_number(text) == expected


class TestRecordLayout:

    def test_record_is_fixed_length(self):
        raw = format_record("Deneb", 310.358, 45.28, 1.25, "A2", 1.99, 1.95)
        assert len(raw) == RECORD_LENGTH
        assert raw.endswith(b"\n")

    def test_columns(self):
        raw = format_record("Vega", 279.2347, 38.7837, 0.03, "A0", 200.94, 286.23)
        text = raw.decode("latin-1")
        assert text[0:17] == "Vega".ljust(17)
        assert text[17:28] == "279.2347000"
        assert text[28:40] == "+38.78370000"
        assert text[40:45] == " 0.03"
        assert text[45:47] == "A0"
        assert text[47:56] == "   200.94"
        assert text[56:60] == " 286"

    def test_decode(self):
        rec = decode_record(format_record("Vega", 279.2347, 38.7837, 0.03, "A0", 200.94, 286.23))
        assert rec == {
            "label": "Vega", "ra": 279.2347, "dec": 38.7837, "mag": 0.03,
            "spectral_class": "A0", "pm_ra": 200.94, "pm_dec": 286.0,
        }

    def test_label_cut_to_16_chars(self):
        rec = decode_record(format_record("X" * 30, 1.0, 2.0, 3.0))
        assert rec["label"] == "X" * 16

    def test_garbage_numbers_read_as_zero(self):
        raw = ("Bad".ljust(17) + "not-a-ra".ljust(11) + "??".ljust(12) + "mag".ljust(5)
               + "B9" + "x" * 9 + "yyyy").ljust(60).encode("latin-1") + b"\n"
        rec = decode_record(raw)
        assert rec["ra"] == 0.0
        assert rec["dec"] == 0.0
        assert rec["mag"] == 0.0
        assert rec["pm_ra"] == 0.0
        assert rec["pm_dec"] == 0.0
        assert rec["spectral_class"] == "B9"

    def test_header_records(self):
        header = format_header(["DEEPSKIES STAR CATALOG", "SOURCE TEST"])
        assert len(header) == HEADER_RECORDS * RECORD_LENGTH
        assert header.startswith(b"DEEPSKIES STAR CATALOG")


class TestCatalogStore:

    def test_open_missing(self, tmp_path):
        with pytest.raises(CatalogNotFound):
            CatalogStore.open(tmp_path / "nope.dat")

    def test_record_count(self, cygnus_catalog):
        with open_catalog(cygnus_catalog) as store:
            assert store.record_count() == 5
            assert len(store) == 5

    @pytest.mark.parametrize("records", [5, 6, 12])
    def test_record_count_from_size(self, tmp_path, records):
        path = tmp_path / "blank.dat"
        path.write_bytes(b" " * (RECORD_LENGTH * records))
        with open_catalog(path) as store:
            assert store.record_count() == records - HEADER_RECORDS

    @pytest.mark.parametrize("size", [61 * 5 + 30, 61 * 6 - 1, 1])
    def test_corrupt_size(self, tmp_path, size):
        path = tmp_path / "corrupt.dat"
        path.write_bytes(b"x" * size)
        with open_catalog(path) as store:
            with pytest.raises(CatalogCorrupt) as excinfo:
                store.record_count()
        assert excinfo.value.size == size

    def test_first_star_follows_header(self, tmp_path):
        # Records are numbered by their first byte so the offset is visible.
        blob = b"".join(
            format_record(f"rec{i}", float(i), 0.0, float(i)) for i in range(8)
        )
        path = tmp_path / "numbered.dat"
        path.write_bytes(blob)
        with open_catalog(path) as store:
            assert store.get_star(1)["label"] == "rec5"
            assert store.get_star(3)["label"] == "rec7"

    def test_get_star_reads_bytes_5_to_6_records(self, cygnus_catalog):
        raw = cygnus_catalog.read_bytes()
        expected = decode_record(raw[5 * 61:6 * 61])
        with open_catalog(cygnus_catalog) as store:
            assert store.get_star(1) == expected
            assert store.get_star(1)["label"] == "Sadr"

    def test_each_call_rereads(self, cygnus_catalog):
        with open_catalog(cygnus_catalog) as store:
            first = store.get_star(2)
            assert store.get_star(2) == first
            assert store.get_star(2) is not first

    def test_past_end_is_read_failure(self, cygnus_catalog):
        with open_catalog(cygnus_catalog) as store:
            with pytest.raises(RecordReadFailure) as excinfo:
                store.get_star(6)
        assert excinfo.value.index == 6

    def test_index_zero_rejected(self, cygnus_catalog):
        with open_catalog(cygnus_catalog) as store:
            with pytest.raises(RecordReadFailure):
                store.get_star(0)

    def test_closed_store_read_failure(self, cygnus_catalog):
        store = CatalogStore.open(cygnus_catalog)
        store.close()
        with pytest.raises(RecordReadFailure):
            store.get_star(1)

    def test_open_catalog_closes_on_error(self, cygnus_catalog):
        with pytest.raises(RuntimeError):
            with open_catalog(cygnus_catalog) as store:
                raise RuntimeError("boom")
        assert store.closed

    def test_close_is_idempotent(self, cygnus_catalog):
        store = CatalogStore.open(cygnus_catalog)
        store.close()
        store.close()
        assert store.closed

    def test_iter_stars(self, cygnus_catalog):
        with open_catalog(cygnus_catalog) as store:
            labels = [(i, s["label"]) for i, s in store.iter_stars()]
        assert labels == [(1, "Sadr"), (2, "Deneb"), (3, "Albireo"),
                          (4, "HIP 99999"), (5, "faint")]

    def test_iter_stars_yields_none_for_failed_read(self, cygnus_catalog, monkeypatch):
        with open_catalog(cygnus_catalog) as store:
            real = store.get_star

            def flaky(index):
                if index == 2:
                    raise RecordReadFailure("disk hiccup", store.path, index)
                return real(index)

            monkeypatch.setattr(store, "get_star", flaky)
            got = list(store.iter_stars())
        assert [i for i, _ in got] == [1, 2, 3, 4, 5]
        assert got[1][1] is None
        assert got[2][1]["label"] == "Albireo"

    def test_round_trip_star(self, make_catalog):
        path = make_catalog([star("Polaris", 37.9529, 89.2642, 1.97, "F7", 44.48, -11.85)])
        with open_catalog(path) as store:
            s = store.get_star(1)
        assert s["label"] == "Polaris"
        assert s["ra"] == pytest.approx(37.9529)
        assert s["dec"] == pytest.approx(89.2642)
        assert s["mag"] == pytest.approx(1.97)
        assert s["spectral_class"] == "F7"
        assert s["pm_ra"] == pytest.approx(44.48)
        assert s["pm_dec"] == -12.0
