# schema.py
# ----------------------------------------------------------------------
# Every admin-overridable key with its built-in default. Engine code reads
# these through SettingsResolver and never repeats the literals.
# ----------------------------------------------------------------------

LEVELS = (1, 2, 3, 4)

DEFAULT_LEVEL_THRESHOLDS = {1: 0, 2: 500, 3: 1500, 4: 3000}
DEFAULT_INTEREST_RATES = {1: "5", 2: "3", 3: "2", 4: "1"}

DEFAULT_MIN_TERM_DAYS = 7
DEFAULT_MAX_TERM_DAYS = 90
DEFAULT_TERM_DAYS = 30
DEFAULT_MAX_ACTIVE_LOANS = 3
DEFAULT_BASE_CREDIT_LIMIT = "10000"
DEFAULT_XP_REPAY_ON_TIME = 50
DEFAULT_XP_REPAY_LATE = -100

DATA_TYPES = ("string", "number", "integer", "boolean")
CATEGORIES = ("general", "lending", "xp", "levels")


def _definition(default, data_type, category, description):
    return {
        "default": None if default is None else str(default),
        "data_type": data_type,
        "category": category,
        "description": description,
    }


SETTING_DEFINITIONS = {}

for _level in LEVELS:
    SETTING_DEFINITIONS[f"level_{_level}_required_xp"] = _definition(
        DEFAULT_LEVEL_THRESHOLDS[_level],
        "integer",
        "levels",
        f"XP required to reach Level {_level}",
    )
    SETTING_DEFINITIONS[f"interest_rate_level_{_level}"] = _definition(
        DEFAULT_INTEREST_RATES[_level],
        "number",
        "lending",
        f"Interest rate for Level {_level} (%)",
    )
    # No static default: falls back to the borrower's available credit.
    SETTING_DEFINITIONS[f"max_loan_level_{_level}"] = _definition(
        None,
        "number",
        "lending",
        f"Maximum loan amount for Level {_level}",
    )

SETTING_DEFINITIONS.update(
    {
        "min_loan_term_days": _definition(
            DEFAULT_MIN_TERM_DAYS, "integer", "lending", "Shortest loan term (days)"
        ),
        "max_loan_term_days": _definition(
            DEFAULT_MAX_TERM_DAYS, "integer", "lending", "Longest loan term (days)"
        ),
        "max_active_loans": _definition(
            DEFAULT_MAX_ACTIVE_LOANS,
            "integer",
            "lending",
            "Maximum number of approved, unpaid loans per user",
        ),
        "base_credit_limit": _definition(
            DEFAULT_BASE_CREDIT_LIMIT,
            "number",
            "lending",
            "Credit limit per level; the ceiling is this times the user's level",
        ),
        "xp_loan_repay_ontime": _definition(
            DEFAULT_XP_REPAY_ON_TIME, "integer", "xp", "XP awarded for an on-time repayment"
        ),
        "xp_loan_repay_late": _definition(
            DEFAULT_XP_REPAY_LATE, "integer", "xp", "XP change for a late repayment"
        ),
        "reverse_reaction_xp": _definition(
            "false",
            "boolean",
            "xp",
            "Reverse the XP transfer when a reaction is withdrawn or switched",
        ),
    }
)

del _level
