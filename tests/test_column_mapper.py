from __future__ import annotations

import unittest

from app.mappers.column_mapper import CANONICAL_FIELDS, ColumnMapper, normalize_header
from app.validators.mapping_validator import ColumnMappingError

FULL_HEADERS = (
    "UY",
    "Ext Type",
    "Broker",
    "Cedant",
    "Org.Insured/Trty Name",
    "Max Liability (FC)",
    "Gross UW Prem",
    "Gross Book Prem",
    "Gross Actual Acq.",
    "Gross paid claims",
    "Gross os loss",
    "Country Name",
    "Region",
    "Hub",
    "Inception Year",
    "Inception Quarter",
    "Inception Month",
    "Com date",
)


class TestColumnMapper(unittest.TestCase):
    def setUp(self) -> None:
        self.mapper = ColumnMapper()

    def test_maps_every_canonical_field(self) -> None:
        mapping = self.mapper.build_mapping(FULL_HEADERS)

        self.assertEqual(set(mapping.field_to_position), set(CANONICAL_FIELDS))
        self.assertEqual(mapping.field_to_position["gross_uw_prem"], 6)
        self.assertEqual(mapping.field_to_position["gross_book_prem"], 7)
        self.assertEqual(mapping.source_column("insured"), "Org.Insured/Trty Name")

    def test_matching_ignores_case_spacing_and_punctuation(self) -> None:
        mapping = self.mapper.build_mapping(
            ("uy", "GROSS_UW_PREM", " gross actual acq ", '"Gross Paid Claims"', "gross-os-loss")
        )

        self.assertEqual(
            mapping.field_to_position,
            {
                "uy": 0,
                "gross_uw_prem": 1,
                "gross_actual_acq": 2,
                "gross_paid_claims": 3,
                "gross_os_loss": 4,
            },
        )
        self.assertIsNone(mapping.source_column("broker"))

    def test_similar_headers_are_not_confused(self) -> None:
        with self.assertRaises(ColumnMappingError) as ctx:
            self.mapper.build_mapping(
                ("UY", "Gross Book Prem", "Gross Actual Acq.", "Gross paid claims", "Gross os loss")
            )

        missing = {
            error.field_name
            for error in ctx.exception.errors
            if error.code == "required_column_missing"
        }
        self.assertEqual(missing, {"gross_uw_prem"})

    def test_reports_every_missing_required_column(self) -> None:
        with self.assertRaises(ColumnMappingError) as ctx:
            self.mapper.build_mapping(("UY", "Broker"))

        missing = sorted(error.field_name for error in ctx.exception.errors)
        self.assertEqual(
            missing,
            ["gross_actual_acq", "gross_os_loss", "gross_paid_claims", "gross_uw_prem"],
        )
        self.assertIn("gross_uw_prem", str(ctx.exception))

    def test_empty_header_row(self) -> None:
        with self.assertRaises(ColumnMappingError) as ctx:
            self.mapper.build_mapping(())

        codes = {error.code for error in ctx.exception.errors}
        self.assertIn("empty_headers", codes)

    def test_repeated_column_keeps_first_position(self) -> None:
        headers = FULL_HEADERS + ("Gross UW Prem",)
        mapping = self.mapper.build_mapping(headers)

        self.assertEqual(mapping.field_to_position["gross_uw_prem"], 6)
        positions = list(mapping.field_to_position.values())
        self.assertEqual(len(positions), len(set(positions)))

    def test_conflicting_spellings_rejected(self) -> None:
        with self.assertRaises(ValueError):
            ColumnMapper({"broker": ("Name",), "cedant": ("name",)})

    def test_normalize_header(self) -> None:
        self.assertEqual(normalize_header(' "Max Liability (FC)" '), "maxliabilityfc")


if __name__ == "__main__":
    unittest.main()
