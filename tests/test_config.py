"""
Tests for the constant tables (deflators, education tiers).
"""
from cps_report import config


def test_deflator_table_covers_survey_years():
    assert len(config.DEFLATORS) == 40
    assert min(config.DEFLATORS) == 1976
    assert max(config.DEFLATORS) == 2015
    assert list(config.DEFLATORS) == list(range(1976, 2016))


def test_deflator_table_has_unit_base_year():
    assert config.DEFLATORS[1997] == 1.0


def test_deflators_decline_over_time():
    factors = list(config.DEFLATORS.values())
    assert factors[0] > factors[-1]
    assert all(f > 0 for f in factors)


def test_deflator_table_is_read_only():
    try:
        config.DEFLATORS[2016] = 0.5
    except TypeError:
        pass
    else:
        raise AssertionError("DEFLATORS accepted an assignment")


def test_education_lookup_tiers():
    tiers = config.EDUCATION_TIERS
    assert tiers["bachelor's degree"] == "skilled"
    assert tiers["doctorate degree"] == "skilled"
    assert tiers["some college but no degree"] == "semiskilled"
    assert tiers["high school diploma or equivalent"] == "unskilled"
    assert tiers["111"] == "skilled"
    assert tiers["81"] == "semiskilled"
    assert tiers["73"] == "unskilled"
    for code in ("2", "10", "11", "14", "21", "22", "31", "32", "40", "60", "70"):
        assert tiers[code] == "unskilled", code
    # 1 is NIU or blank in IPUMS EDUC
    assert "1" not in tiers
    assert "niu" not in tiers


def test_skill_tier_order():
    assert config.SKILL_TIERS == ("skilled", "semiskilled", "unskilled")
