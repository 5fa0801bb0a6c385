import io
from datetime import datetime

import pandas as pd
import pytest

from exceptions import FatalParseError, UnsupportedFormatError
from models import SourceFormat
from tabular_parser import clean_header, detect_source_format, parse_upload


def xlsx_bytes(df):
    """Serialize a DataFrame as an .xlsx workbook in memory."""
    buffer = io.BytesIO()
    df.to_excel(buffer, index=False)
    return buffer.getvalue()


class TestDetectSourceFormat:
    """
    Tests for the detect_source_format function.
    """

    @pytest.mark.parametrize(
        "filename, expected",
        [
            ("aereo.xlsx", SourceFormat.SPREADSHEET),
            ("AEREO.XLS", SourceFormat.SPREADSHEET),
            ("hotel.csv", SourceFormat.DELIMITED),
        ],
        ids=["xlsx", "xls-upper-case", "csv"]
    )
    def test_supported_extensions(self, filename, expected):
        assert detect_source_format(filename) == expected

    @pytest.mark.parametrize("filename", ["dados.txt", "sem_extensao", "", None], ids=["txt", "no-ext", "empty", "none"])
    def test_unsupported_extensions(self, filename):
        with pytest.raises(UnsupportedFormatError):
            detect_source_format(filename)


class TestSpreadsheet:
    """
    Tests for reading .xlsx workbooks.
    """

    def test_typed_dates_stay_dates_and_blank_cells_are_empty_strings(self, settings):
        """
        Test that date cells keep their type and every record exposes every header.

        Args:
            settings: Fixture providing isolated Settings
        """
        df = pd.DataFrame({
            " Handle ": ["AB12", "CD34"],
            "DataEmbarque": [datetime(2024, 12, 25), None],
            "DataEmissão": ["20/11/2024", "21/11/2024"],
            "TarifaTotalcomTaxas": [1500.5, None],
        })

        records = parse_upload(xlsx_bytes(df), SourceFormat.SPREADSHEET, settings)

        assert len(records) == 2
        assert set(records[1].keys()) == {"Handle", "DataEmbarque", "DataEmissão", "TarifaTotalcomTaxas"}
        assert isinstance(records[0]["DataEmbarque"], datetime)
        assert records[0]["DataEmissão"] == "20/11/2024"
        assert records[0]["TarifaTotalcomTaxas"] == 1500.5
        assert records[1]["DataEmbarque"] == ""
        assert records[1]["TarifaTotalcomTaxas"] == ""

    def test_records_are_read_only(self, settings):
        records = parse_upload(xlsx_bytes(pd.DataFrame({"Handle": ["x"]})), SourceFormat.SPREADSHEET, settings)

        with pytest.raises(TypeError):
            records[0]["Handle"] = "y"

    def test_only_first_sheet_is_read(self, settings):
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer) as writer:
            pd.DataFrame({"Handle": ["first"]}).to_excel(writer, sheet_name="Primeira", index=False)
            pd.DataFrame({"Handle": ["second"]}).to_excel(writer, sheet_name="Segunda", index=False)

        records = parse_upload(buffer.getvalue(), SourceFormat.SPREADSHEET, settings)

        assert [r["Handle"] for r in records] == ["first"]

    def test_corrupt_workbook_is_fatal(self, settings):
        with pytest.raises(FatalParseError):
            parse_upload(b"not a workbook", SourceFormat.SPREADSHEET, settings)


class TestDelimited:
    """
    Tests for reading CSV exports.
    """

    def test_legacy_encoding_and_bom(self, settings):
        """
        Test that CSV bytes are decoded as latin-1 and the BOM is removed from the first header.

        Args:
            settings: Fixture providing isolated Settings
        """
        content = b"\xef\xbb\xbf Handle ,Cidade Origem,Data Entrada\r\nB7,S\xe3o Paulo,05/02/2024\r\n"

        records = parse_upload(content, SourceFormat.DELIMITED, settings)

        assert len(records) == 1
        assert records[0]["Handle"] == "B7"
        assert records[0]["Cidade Origem"] == "São Paulo"
        assert records[0]["Data Entrada"] == "05/02/2024"

    def test_short_rows_get_empty_strings(self, settings):
        content = "Handle,DataCheck-In,DataCheck-Out\nH1,10/03/2024\n".encode("iso-8859-1")

        records = parse_upload(content, SourceFormat.DELIMITED, settings)

        assert records[0]["DataCheck-Out"] == ""

    def test_values_stay_text(self, settings):
        content = b"Handle,Valor\n00123,\"1.234,56\"\n"

        records = parse_upload(content, SourceFormat.DELIMITED, settings)

        assert records[0]["Handle"] == "00123"
        assert records[0]["Valor"] == "1.234,56"

    def test_configured_delimiter(self, tmp_path):
        from config import Settings
        settings = Settings(output_dir=tmp_path, csv_delimiter=";")

        records = parse_upload(b"Handle;Valor\nX1;12,50\n", SourceFormat.DELIMITED, settings)

        assert records[0]["Valor"] == "12,50"

    @pytest.mark.parametrize("content", [b"", b"  \n"], ids=["empty", "blank"])
    def test_empty_stream_has_no_records(self, settings, content):
        assert parse_upload(content, SourceFormat.DELIMITED, settings) == []

    def test_ragged_stream_is_fatal(self, settings):
        content = b"Handle,Valor\nA,1\nB,2,3,4\n"

        with pytest.raises(FatalParseError):
            parse_upload(content, SourceFormat.DELIMITED, settings)


def test_clean_header():
    assert clean_header("\ufeffHandle") == "Handle"
    assert clean_header(" Data Emissão ") == "Data Emissão"
