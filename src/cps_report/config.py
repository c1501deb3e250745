"""
Configuration constants for the CPS wage and labor-force report.
"""

import os
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

# ======================================================
#  DATA SOURCES / CONSTANTS
# ======================================================
REPO_ROOT: Path = Path(__file__).resolve().parents[2]

# CPS extract; override with the CPS_DATA_SOURCE environment variable
DATA_SOURCE: str = os.getenv(
    "CPS_DATA_SOURCE", str(REPO_ROOT / "data" / "cps_1976_2015.csv")
)
REPORT_DIR: Path = Path(
    os.getenv("CPS_REPORT_DIR", str(REPO_ROOT / "output"))
).expanduser()

DEFAULT_SEP: str = ","

REQUIRED_COLUMNS: List[str] = [
    "age",
    "empstatid",
    "lfp",
    "sex",
    "wtsupp",
    "educ",
    "year",
    "wage",
    "age_group",
]
WEIGHT_COL: str = "wtsupp"

# Respondents aged MIN_AGE or younger are outside the eligible population
MIN_AGE: int = 15

# Prime-age male population used for the skill-tier analysis (inclusive)
SKILL_AGE_RANGE: Tuple[int, int] = (25, 64)

# ======================================================
#  CATEGORY LABELS
# ======================================================
SEX_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "male": "male",
        "1": "male",
        "female": "female",
        "2": "female",
    }
)

EMPLOYED_LABEL: str = "Employed"
UNEMPLOYED_LABEL: str = "Unemployed"
IN_LABOR_FORCE_LABEL: str = "In labor force"

AGE_GROUPS: Tuple[str, ...] = ("<25", "25-44", "45-64", "65+")

# Alternative spellings seen in extracts, keyed after dashes become "-"
# and spaces are removed
AGE_GROUP_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "under25": "<25",
        "≤24": "<25",
        "<=24": "<25",
        "≥65": "65+",
        ">=65": "65+",
        "65andover": "65+",
        "65andolder": "65+",
    }
)

# Legend/series order for every skill-stratified output
SKILL_TIERS: Tuple[str, ...] = ("skilled", "semiskilled", "unskilled")
UNKNOWN_TIER: str = "unknown"

# ======================================================
#  EDUCATION TIERS
# ======================================================
# IPUMS CPS EDUC, both the value labels and the numeric codes. Anything not
# listed (NIU, missing, blank) resolves to UNKNOWN_TIER.
EDUCATION_TIERS_VERSION: str = "ipums-educ-2015"

_TIER_CODES: Dict[str, List[str]] = {
    "unskilled": [
        "None or preschool",
        "None",
        "Grades 1, 2, 3, or 4",
        "Grades 5 or 6",
        "Grades 7 or 8",
        "Grade 9",
        "Grade 10",
        "Grade 11",
        "12th grade, no diploma",
        "12th grade, diploma unclear",
        "High school diploma or equivalent",
        "Grade 12",
        # 0 and 1 are NIU; 2 is none/preschool
        *[str(code) for code in (2, 10, 11, 12, 13, 14, 20, 21, 22)],
        *[str(code) for code in (30, 31, 32, 40, 50, 60, 70, 71, 72, 73)],
    ],
    "semiskilled": [
        "1 year of college",
        "Some college but no degree",
        "2 years of college",
        "Associate's degree, occupational/vocational program",
        "Associate's degree, academic program",
        "3 years of college",
        *[str(code) for code in (80, 81, 90, 91, 92, 100)],
    ],
    "skilled": [
        "4 years of college",
        "Bachelor's degree",
        "5+ years of college",
        "5 years of college",
        "6+ years of college",
        "Master's degree",
        "Professional school degree",
        "Doctorate degree",
        *[str(code) for code in (110, 111, 120, 121, 122, 123, 124, 125)],
    ],
}

EDUCATION_TIERS: Mapping[str, str] = MappingProxyType(
    {code.lower(): tier for tier, codes in _TIER_CODES.items() for code in codes}
)

# ======================================================
#  DEFLATOR TABLE
# ======================================================
# CPI-U annual averages rebased to 1997 = 1.000, one entry per survey year
# starting at DEFLATOR_BASE_YEAR. Multiplying by DOLLAR_BASIS_FACTOR moves
# the 1997 basis to 2015 dollars.
DEFLATOR_VERSION: str = "cpi-u-1997-v1"
DEFLATOR_BASE_YEAR: int = 1976
DOLLAR_BASIS_FACTOR: float = 1.471

_DEFLATOR_FACTORS: Tuple[float, ...] = (
    2.821, 2.649, 2.462, 2.211, 1.948,  # 1976-1980
    1.766, 1.663, 1.611, 1.545, 1.492,  # 1981-1985
    1.464, 1.413, 1.357, 1.294, 1.228,  # 1986-1990
    1.178, 1.144, 1.111, 1.083, 1.053,  # 1991-1995
    1.023, 1.000, 0.985, 0.963, 0.932,  # 1996-2000
    0.906, 0.892, 0.872, 0.850, 0.822,  # 2001-2005
    0.796, 0.774, 0.745, 0.748, 0.736,  # 2006-2010
    0.714, 0.699, 0.689, 0.678, 0.677,  # 2011-2015
)

DEFLATORS: Mapping[int, float] = MappingProxyType(
    {
        DEFLATOR_BASE_YEAR + offset: factor
        for offset, factor in enumerate(_DEFLATOR_FACTORS)
    }
)

GLOBAL_YEAR_MIN: int = min(DEFLATORS)
GLOBAL_YEAR_MAX: int = max(DEFLATORS)

# ======================================================
#  PRESENTATION DEFAULTS
# ======================================================
AGE_GROUP_LABELS: Dict[str, str] = {
    "<25": "Under 25",
    "25-44": "25 to 44",
    "45-64": "45 to 64",
    "65+": "65 and over",
}

SKILL_LABELS: Dict[str, str] = {
    "skilled": "Skilled (BA+)",
    "semiskilled": "Semiskilled (some college)",
    "unskilled": "Unskilled (HS or less)",
}
