"""
Tests for display unit conversion and CSV export.

Calibrated lengths are stored in μm (pixels divided by px/μm) and can be
displayed in nm, μm or mm. Without an active calibration every length is
exported in pixels.
"""

import csv
import io
import sys
import os

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from spore_viewer.calibration import Calibration
from spore_viewer.geometry import Blob, Line
from spore_viewer.statistics import SUPPORTED_UNITS, UNIT_TO_UM, convert_length, write_blob_csv
from spore_viewer.strings import STRINGS, translate


def _blob(a, b, detected=False):
    """Axis-aligned blob: long axis of length a on the x axis, short axis b crossing it."""
    return Blob(Line(0, 0, a, 0), Line(a / 2, -b / 2, a / 2, b / 2), detected)


# ---------------------------------------------------------------------------
# Test conversion table and function
# ---------------------------------------------------------------------------

class TestUnitConversionTable:
    """Test UNIT_TO_UM table and convert_length function."""

    def test_all_supported_units_in_table(self):
        for u in SUPPORTED_UNITS:
            assert u in UNIT_TO_UM, f"Unit '{u}' missing from UNIT_TO_UM"

    def test_um_is_identity(self):
        assert UNIT_TO_UM["μm"] == 1.0

    def test_um_to_nm(self):
        assert convert_length(1, "μm", "nm") == pytest.approx(1000.0)

    def test_um_to_mm(self):
        assert convert_length(1000, "μm", "mm") == pytest.approx(1.0)

    def test_same_unit_identity(self):
        assert convert_length(42.5, "μm", "μm") == 42.5

    def test_zero_value(self):
        assert convert_length(0, "mm", "nm") == pytest.approx(0.0)

    def test_order_makes_sense(self):
        """Units should be ordered from small to large."""
        values = [UNIT_TO_UM[u] for u in SUPPORTED_UNITS]
        assert values == sorted(values)


# ---------------------------------------------------------------------------
# Test CSV export
# ---------------------------------------------------------------------------

class TestBlobCSVExport:
    """Test write_blob_csv output layout and unit handling."""

    def _rows(self, blobs, calibration=None, display_unit="μm", lang="en"):
        output = io.StringIO()
        writer = csv.writer(output)
        write_blob_csv(writer, blobs, calibration=calibration, lang=lang,
                       display_unit=display_unit)
        output.seek(0)
        return list(csv.reader(output))

    def test_header_uses_pixels_without_calibration(self):
        rows = self._rows([_blob(10, 6)])
        assert rows[0][1] == "Axis A (px)"
        assert rows[1][1] == "10.0000"

    def test_calibrated_values_in_micrometers(self):
        rows = self._rows([_blob(10, 6)], Calibration("10x", 2.0))
        header, data = rows[0], rows[1]
        assert "μm" in header[1]
        assert data[:7] == ["1", "5.0000", "3.0000", "10.0000", "6.0000", "1.6667", "manual"]

    def test_display_unit_nm(self):
        rows = self._rows([_blob(10, 6)], Calibration("10x", 2.0), display_unit="nm")
        assert float(rows[1][1]) == pytest.approx(5000.0)
        assert "nm" in rows[0][1]

    def test_detected_source_column(self):
        rows = self._rows([_blob(10, 6, detected=True)])
        assert rows[1][6] == "detected"

    def test_empty_export_is_header_only(self):
        rows = self._rows([])
        assert len(rows) == 1

    def test_statistics_rows(self):
        rows = self._rows([_blob(10, 6), _blob(20, 8)], Calibration("10x", 2.0))
        flat = {row[0]: row[1:] for row in rows if row}
        assert flat["Count"] == ["2", "2"]
        assert float(flat["Mean"][0]) == pytest.approx(7.5)
        assert float(flat["Mean"][1]) == pytest.approx(3.5)
        # population standard deviation
        assert float(flat["Std Dev"][0]) == pytest.approx(2.5)
        assert float(flat["Range"][0]) == pytest.approx(5.0)
        assert flat["Calibration (px/µm)"] == ["10x", "2.000"]

    def test_no_calibration_row_when_uncalibrated(self):
        rows = self._rows([_blob(10, 6)])
        assert not any(r and r[0] == "Calibration (px/µm)" for r in rows)

    def test_gaussian_section_needs_spread(self):
        single = self._rows([_blob(10, 6)])
        assert not any(r and r[0].startswith("Gaussian Fit") for r in single)

        pair = self._rows([_blob(10, 6), _blob(20, 8)])
        titles = [r[0] for r in pair if r and r[0].startswith("Gaussian Fit")]
        assert titles == ["Gaussian Fit: Axis A", "Gaussian Fit: Axis B"]

    def test_chinese_headers(self):
        rows = self._rows([_blob(10, 6)], lang="zh")
        assert rows[0][1] == translate("csv_axis_a", "zh", u="px")


# ---------------------------------------------------------------------------
# Test i18n strings
# ---------------------------------------------------------------------------

class TestUnitI18n:

    def test_display_unit_string_exists(self):
        assert "zh" in STRINGS["display_unit"]
        assert "en" in STRINGS["display_unit"]

    def test_every_entry_has_both_languages(self):
        for key, entry in STRINGS.items():
            assert set(entry) >= {"zh", "en"}, key

    def test_unknown_key_returns_key(self):
        assert translate("no_such_key", "en") == "no_such_key"
