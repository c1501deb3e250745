"""
Tests for the recoding stage (population filter, derived flags, tier lookup).
"""
import pandas as pd
import pytest

from cps_report.aggregate import skill_summary, yearly_summary
from cps_report.errors import MalformedRecord, SchemaMismatch
from cps_report.recode import (
    education_tier,
    labor_force_flag,
    normalise_codes,
    recode,
    unemployment_flag,
)


def test_drops_respondents_aged_15_and_under(record):
    raw = pd.DataFrame(
        [record(age=10), record(age=15), record(age=16), record(age=40)]
    )
    records, n_malformed = recode(raw)
    assert sorted(records["age"]) == [16, 40]
    assert n_malformed == 0


def test_non_numeric_age_is_counted_and_excluded(record):
    raw = pd.DataFrame([record(age="abc"), record(age=None), record(age=30)])
    records, n_malformed = recode(raw)
    assert len(records) == 1
    assert n_malformed == 2


def test_missing_weight_is_malformed(record):
    raw = pd.DataFrame([record(wtsupp=None), record()])
    records, n_malformed = recode(raw)
    assert len(records) == 1
    assert n_malformed == 1


def test_raise_policy_reports_first_bad_record(record):
    raw = pd.DataFrame([record(), record(age="thirty")])
    with pytest.raises(MalformedRecord) as excinfo:
        recode(raw, errors="raise")
    assert excinfo.value.column == "age"
    assert excinfo.value.index == 1
    assert excinfo.value.value == "thirty"


def test_missing_column_raises_schema_mismatch(record):
    raw = pd.DataFrame([record()]).drop(columns=["wtsupp"])
    with pytest.raises(SchemaMismatch) as excinfo:
        recode(raw)
    assert excinfo.value.missing == ["wtsupp"]
    assert isinstance(excinfo.value, KeyError)


def test_unemployment_flag_keeps_unknown_missing():
    flags = unemployment_flag(pd.Series(["Employed", "Unemployed", "NIU", None]))
    assert flags.iloc[0] == 0
    assert flags.iloc[1] == 1
    assert flags.iloc[2:].isna().all()


def test_missing_labor_force_status_counts_as_in_labor_force():
    flags = labor_force_flag(
        pd.Series(["In labor force", "Not in labor force", None, float("nan")])
    )
    assert flags.tolist() == [1, 0, 1, 1]


def test_missing_lfp_with_any_employment_status(record):
    raw = pd.DataFrame(
        [
            record(lfp=None, empstatid="Employed"),
            record(lfp=None, empstatid="Unemployed"),
            record(lfp=None, empstatid=None),
        ]
    )
    records, _ = recode(raw)
    assert records["in_labor_force"].tolist() == [1, 1, 1]
    assert records["in_labor_force"].notna().all()


def test_education_tier_accepts_labels_and_codes():
    educ = pd.Series(
        ["Bachelor's degree", " some college but no degree ", 73.0, "111", "NIU", None]
    )
    assert education_tier(educ).tolist() == [
        "skilled",
        "semiskilled",
        "unskilled",
        "skilled",
        "unknown",
        "unknown",
    ]


def test_normalise_codes_strips_float_suffix():
    assert normalise_codes(pd.Series([2.0, "2", " Male "])).tolist() == [
        "2",
        "2",
        "male",
    ]


def test_sex_codes_are_normalised(record):
    raw = pd.DataFrame([record(sex="Male"), record(sex=2), record(sex="FEMALE")])
    records, _ = recode(raw)
    assert records["sex"].tolist() == ["male", "female", "female"]


def test_zero_wage_is_kept_as_a_value(record):
    raw = pd.DataFrame([record(wage=0.0), record(wage=12.5), record(wage=None)])
    records, _ = recode(raw)
    assert records["wage"].iloc[:2].tolist() == [0.0, 12.5]
    assert records["wage"].isna().tolist() == [False, False, True]


@pytest.mark.parametrize(
    "label, expected",
    [
        ("25\u201344", "25-44"),
        ("45 \u2014 64", "45-64"),
        (" 25-44 ", "25-44"),
        ("\u226565", "65+"),
        (">=65", "65+"),
        ("65 and over", "65+"),
        ("Under 25", "<25"),
    ],
)
def test_age_group_spellings_are_folded(record, label, expected):
    records, _ = recode(pd.DataFrame([record(age_group=label)]))
    assert records["age_group"].tolist() == [expected]


def test_unknown_age_group_is_kept_and_logged(record, caplog):
    raw = pd.DataFrame([record(age_group="30-39"), record(age_group=None)])
    with caplog.at_level("WARNING", logger="cps_report.recode"):
        records, _ = recode(raw)
    assert records["age_group"].iloc[0] == "30-39"
    assert pd.isna(records["age_group"].iloc[1])
    assert "30-39" in caplog.text


def test_folded_age_group_counts_towards_its_lfp(record):
    raw = pd.DataFrame(
        [
            record(age=70, age_group="\u226565"),
            record(age=70, age_group="65+", lfp="Not in labor force"),
        ]
    )
    records, _ = recode(raw)
    assert yearly_summary(records)["LFP_65+"].iloc[0] == pytest.approx(0.5)


def test_numeric_education_codes_map_to_tiers():
    codes = pd.Series([11, 14, 21, 22, 31, 32, 70, 1, 92, 125])
    assert education_tier(codes).tolist() == ["unskilled"] * 7 + [
        "unknown",
        "semiskilled",
        "skilled",
    ]


def test_input_frame_is_not_modified(raw_frame):
    before = raw_frame.copy()
    recode(raw_frame)
    pd.testing.assert_frame_equal(raw_frame, before)


def test_recoding_is_order_independent(raw_frame):
    shuffled = raw_frame.sample(frac=1, random_state=7)
    a, _ = recode(raw_frame)
    b, _ = recode(shuffled)

    key = ["year", "age", "sex", "educ", "wtsupp"]
    pd.testing.assert_frame_equal(
        a.sort_values(key, ignore_index=True),
        b.sort_values(key, ignore_index=True),
    )
    pd.testing.assert_frame_equal(yearly_summary(a), yearly_summary(b))
    pd.testing.assert_frame_equal(skill_summary(a), skill_summary(b))


def test_recoding_twice_gives_same_records(raw_frame):
    first, _ = recode(raw_frame)
    second, _ = recode(raw_frame)
    pd.testing.assert_frame_equal(first, second)
