"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 200
DEFAULT_SALARY_SLIP_LIMIT = 12

# Yearly leave quotas (days)
ANNUAL_LEAVE_QUOTA = 15
SICK_LEAVE_QUOTA = 10
CASUAL_LEAVE_QUOTA = 5

# Annual income tax brackets (PKR): (upper bound of the slab, rate). None = no upper bound.
INCOME_TAX_BRACKETS = (
    (Decimal("600000"), Decimal("0")),
    (Decimal("1200000"), Decimal("0.025")),
    (Decimal("2400000"), Decimal("0.125")),
    (Decimal("3600000"), Decimal("0.20")),
    (Decimal("6000000"), Decimal("0.25")),
    (None, Decimal("0.325")),
)

# Admission scoring
ELIGIBILITY_BASE_SCORE = Decimal("50")
ENTRY_TEST_WEIGHT = Decimal("0.30")
INTERVIEW_WEIGHT = Decimal("0.20")
CGPA_TO_MARKS_FACTOR = Decimal("25")

CERTIFICATE_CODE_ATTEMPTS = 5
DEFAULT_TOKEN_MAX_AGE_SECONDS = 60 * 60 * 8
