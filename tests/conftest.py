import pandas as pd
import pytest


def _record(**overrides):
    base = {
        "year": 2000,
        "age": 30,
        "sex": "Male",
        "empstatid": "Employed",
        "lfp": "In labor force",
        "educ": "Bachelor's degree",
        "wage": 20.0,
        "wtsupp": 1.0,
        "age_group": "25-44",
    }
    base.update(overrides)
    return base


@pytest.fixture
def record():
    """Factory for a single raw CPS row with sensible defaults."""
    return _record


@pytest.fixture
def raw_frame():
    """Two survey years covering every sex, age group and skill tier."""
    rows = []
    for year, bump in ((1999, 0.0), (2000, 1.0)):
        rows += [
            _record(year=year, wage=30.0 + bump, wtsupp=2.0),
            _record(year=year, educ="Some college but no degree", wage=20.0 + bump),
            _record(year=year, educ="High school diploma or equivalent", wage=15.0),
            _record(
                year=year,
                sex="Female",
                age=50,
                age_group="45-64",
                educ="Master's degree",
                wage=25.0 + bump,
            ),
            _record(
                year=year,
                sex="Female",
                age=20,
                age_group="<25",
                empstatid="Unemployed",
                educ="Grade 11",
                wage=0.0,
                wtsupp=3.0,
            ),
            _record(
                year=year,
                age=70,
                age_group="65+",
                empstatid="NIU",
                lfp="Not in labor force",
                educ="NIU",
                wage=None,
            ),
            _record(year=year, age=12, age_group="<25", wage=None),
        ]
    return pd.DataFrame(rows)
