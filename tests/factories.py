"""
tests/factories.py

Test data builders: a small dataset text, a record factory and an
in-memory dataset source.
"""

from __future__ import annotations

from datetime import datetime, timezone

from app.domain.policy_record import CanonicalRecord
from app.validators.field_normalizer import normalize_dimension, normalize_optional_dimension

HEADER = (
    "UY,Ext Type,Broker,Cedant,Org.Insured/Trty Name,Max Liability (FC),Gross UW Prem,"
    "Gross Book Prem,Gross Actual Acq.,Gross paid claims,Gross os loss,Country Name,"
    "Region,Hub,Inception Year,Inception Quarter,Inception Month,Com date"
)

# Line 8 is short and line 9 has no UY; both are dropped on load.
SAMPLE_CSV = "\n".join(
    [
        HEADER,
        '2020,Facultative,Aon,ABC Re,Plant A,"1,000,000","1,000",1000,200,100,50,Egypt,MENA,Dubai,2020,Q1,,',
        "2020,Facultative,Marsh,abc  re,Plant B,500000,500,500,50,600,0,Egypt,MENA,Dubai,,,May,",
        "",
        "2020,Treaty,Aon,XYZ Ins,,0,0,0,0,10,0,Kenya,Africa,Nairobi,,,,15 Aug 2020",
        "2019,Treaty,Willis,XYZ Ins,Port C,200000,2000,2000,300,400,100,Kenya,Africa,Nairobi,2019,2,,",
        "2021,Facultative,Marsh,DEF Re,Mill D,100000,3000,3000,600,0,0,UAE,MENA,Dubai,,,,05/04/2021",
        "2021,Facultative",
        ",Treaty,Aon,XYZ Ins,Port E,100,100,100,10,0,0,Kenya,Africa,Nairobi,2021,Q3,,",
    ]
)

FIXED_NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_record(**overrides: object) -> CanonicalRecord:
    """
    Build a canonical record; dimension overrides are plain strings.
    """

    values: dict[str, object] = {
        "uy": "2020",
        "ext_type": "Facultative",
        "broker": None,
        "cedant": None,
        "insured": None,
        "country_name": "Egypt",
        "region": "MENA",
        "hub": "Dubai",
        "inception_year": None,
        "inception_quarter": None,
        "inception_month": None,
        "com_date": None,
        "max_liability": 0.0,
        "gross_uw_prem": 0.0,
        "gross_book_prem": 0.0,
        "gross_actual_acq": 0.0,
        "gross_paid_claims": 0.0,
        "gross_os_loss": 0.0,
    }
    values.update(overrides)
    for name in ("uy", "ext_type", "country_name", "region", "hub"):
        values[name] = normalize_dimension(values[name])  # type: ignore[arg-type]
    for name in ("broker", "cedant", "insured"):
        values[name] = normalize_optional_dimension(values[name])  # type: ignore[arg-type]
    return CanonicalRecord(**values)  # type: ignore[arg-type]


class FakeSource:
    """
    In-memory stand-in for the dataset file: a version token and its text.
    """

    def __init__(self, text: str, version: int = 1) -> None:
        self.text = text
        self.version = version
        self.stat_error: OSError | None = None
        self.read_error: OSError | None = None
        self.read_calls = 0

    def stat(self) -> int:
        if self.stat_error is not None:
            raise self.stat_error
        return self.version

    def read(self) -> str:
        self.read_calls += 1
        if self.read_error is not None:
            raise self.read_error
        return self.text
