import os

import pytest

from proofcalc.engine import ConversionEngine
from proofcalc.table import load_proof_table

FIXTURES = os.path.join(os.path.dirname(__file__), "fixtures")

# Subset of the sheet lookup range used across tests; 80.6 is a made-up value
TABLE = {
    "80": 0.10093,
    "80.1": 0.10106,
    "80.6": 0.62345,
    "90": 0.1148,
    "90.5": 0.11546,
    "177.7": 0.21732,
}


@pytest.fixture
def table():
    return load_proof_table(TABLE)


@pytest.fixture
def engine(table):
    return ConversionEngine(table)


@pytest.fixture
def table_csv():
    return os.path.join(FIXTURES, "proof_table.csv")
