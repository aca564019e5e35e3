from pathlib import Path

import pytest

from athletics_flow.categories import CATEGORIES

SAMPLE_PATH = Path(__file__).resolve().parent.parent / "data" / "jmu.json"


def record(name, total=0, amounts=None):
    """Raw table row with every category column present (zero unless given)."""
    row = {"name": name, **{c.label: 0 for c in CATEGORIES}, "Total": total}
    row.update(amounts or {})
    return row


@pytest.fixture
def sample_path():
    return SAMPLE_PATH


@pytest.fixture
def revenue_records():
    return [
        record("Ticket Sales", 300, {"Football": 200, "Men's Basketball": 100}),
        record("Student Fees", 500, {"Non-Program Specific": 500}),
        record("Guarantees", 50, {"Football": 50}),
        record("Contributions", 120, {"Football": 60, "Other sports": 40, "Women's Basketball": 20}),
        record("Media Rights", 10, {"Non-Program Specific": 10}),
        record("NCAA Distributions", 30, {"Men's Basketball": 30}),
        record("Conference Distributions", 25, {"Non-Program Specific": 25}),
        record("Direct Institutional Support", 80, {"Non-Program Specific": 80}),
        record("Indirect Institutional Support", 0),
        record("Royalties", 15, {"Football": 15}),
        record("Other Operating Revenue", 5, {"Other sports": 5}),
    ]


@pytest.fixture
def expense_records():
    return [
        record("Athletic Student Aid", 400, {"Football": 150, "Other sports": 250}),
        record("Coaching Salaries", 600, {"Football": 300, "Men's Basketball": 200, "Women's Basketball": 100}),
        record("Team Travel", 135, {"Football": 100, "Non-Program Specific": 35}),
    ]


@pytest.fixture
def records(revenue_records, expense_records):
    return revenue_records + expense_records
