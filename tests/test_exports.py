import csv
import io
from datetime import date

from pharmastock.services.exports import EXPORT_HEADERS, UTF8_BOM, lots_to_csv, lots_to_pdf

TODAY = date(2026, 3, 15)


def _parse(text):
    assert text.startswith(UTF8_BOM)
    return list(csv.reader(io.StringIO(text[len(UTF8_BOM):])))


class TestCsvExport:

    def test_header_only_for_empty_inventory(self):
        text = lots_to_csv([], TODAY)
        assert text == UTF8_BOM + ','.join(EXPORT_HEADERS) + '\r\n'

    def test_rows_carry_statuses_and_not_applicable_expiry(self, make_lot):
        lots = [
            make_lot(designation='Saline 0.9%', lot_number=None, category=None, current_stock=3,
                     low_stock_threshold=10, expiry_date=None),
            make_lot(id=2, designation='Heparin', current_stock=4, low_stock_threshold=10,
                     expiry_date=date(2026, 4, 1)),
        ]
        rows = _parse(lots_to_csv(lots, TODAY))
        assert rows[1] == ['Saline 0.9%', '3400000000001', '', '', '3', '10', 'N/A', 'Low stock']
        assert rows[2][-2:] == ['2026-04-01', 'Nearing expiry; Low stock']

    def test_commas_quotes_and_accents_are_quoted(self, make_lot):
        lot = make_lot(designation='Sérum "physio", 500ml')
        text = lots_to_csv([lot], TODAY)
        assert '"Sérum ""physio"", 500ml"' in text
        assert _parse(text)[1][0] == 'Sérum "physio", 500ml'


class TestPdfExport:

    def test_renders_a_pdf_document(self, make_lot):
        lots = [make_lot(id=i, designation=f'Drug <{i}> & co') for i in range(1, 40)]
        pdf = lots_to_pdf(lots, TODAY, generated_at='2026-03-15 09:00')
        assert pdf.startswith(b'%PDF')
        assert len(pdf) > 1000

    def test_empty_inventory_still_renders(self):
        assert lots_to_pdf([], TODAY).startswith(b'%PDF')
