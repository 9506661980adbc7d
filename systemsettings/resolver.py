import re
from decimal import Decimal, InvalidOperation

from systemsettings.exceptions import ConfigParseError
from systemsettings.schema import (
    LEVELS,
    SETTING_DEFINITIONS,
    DEFAULT_LEVEL_THRESHOLDS,
    DEFAULT_INTEREST_RATES,
    DEFAULT_MIN_TERM_DAYS,
    DEFAULT_MAX_TERM_DAYS,
    DEFAULT_MAX_ACTIVE_LOANS,
    DEFAULT_BASE_CREDIT_LIMIT,
    DEFAULT_XP_REPAY_ON_TIME,
    DEFAULT_XP_REPAY_LATE,
)


TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off")

# Plain decimal notation only: no underscores, exponents or special values.
INTEGER_PATTERN = re.compile(r"[+-]?\d+")
NUMBER_PATTERN = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)")

# Interest rates are stored on loans as DecimalField(max_digits=5, decimal_places=2).
MAX_INTEREST_RATE = Decimal("1000")
INTEREST_RATE_PLACES = 2


def parse_number(key, raw):
    text = str(raw).strip()
    if not NUMBER_PATTERN.fullmatch(text):
        raise ConfigParseError(key, raw, "a number")
    try:
        return Decimal(text)
    except InvalidOperation:
        raise ConfigParseError(key, raw, "a number")


def parse_int(key, raw):
    text = str(raw).strip()
    if not INTEGER_PATTERN.fullmatch(text):
        raise ConfigParseError(key, raw, "an integer")
    return int(text)


def parse_bool(key, raw):
    text = str(raw).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ConfigParseError(key, raw, "a boolean")


PARSERS = {
    "number": parse_number,
    "integer": parse_int,
    "boolean": parse_bool,
}


def validate_setting_value(key, value, data_type=None):
    """
    Parse ``value`` the way the engine will read it. Known keys use the schema
    type; unknown keys use ``data_type`` (strings always pass).
    """
    definition = SETTING_DEFINITIONS.get(key)
    data_type = definition["data_type"] if definition else (data_type or "string")
    parser = PARSERS.get(data_type)
    if parser is None:
        return value
    parsed = parser(key, value)
    if key.startswith("interest_rate_level_"):
        validate_interest_rate(key, value, parsed)
    return parsed


def check_interest_rate_range(key, raw, rate):
    if rate < 0 or rate >= MAX_INTEREST_RATE:
        raise ConfigParseError(key, raw, f"a rate from 0 up to below {MAX_INTEREST_RATE}")
    return rate


def validate_interest_rate(key, raw, rate):
    check_interest_rate_range(key, raw, rate)
    if rate != rate.quantize(Decimal(1).scaleb(-INTEREST_RATE_PLACES)):
        raise ConfigParseError(
            key, raw, f"a rate with at most {INTEREST_RATE_PLACES} decimal places"
        )


def resolve_setting(key, default=None):
    """Stored value for ``key`` when an override exists, otherwise ``default``."""
    from systemsettings.models import SystemSetting

    value = (
        SystemSetting.objects.filter(key=key).values_list("value", flat=True).first()
    )
    return default if value is None else value


class SettingsResolver:
    """
    Snapshot of the admin overrides with typed accessors.

    Engine functions take a resolver instead of reading the settings table
    themselves, so a single request sees one consistent set of values and tests
    can pass plain dictionaries.
    """

    def __init__(self, overrides=None):
        self.overrides = dict(overrides or {})

    @classmethod
    def from_db(cls):
        from systemsettings.models import SystemSetting

        return cls(SystemSetting.objects.values_list("key", "value"))

    def resolve(self, key, default=None):
        value = self.overrides.get(key)
        return default if value is None else value

    def is_overridden(self, key):
        return key in self.overrides

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------
    def get_number(self, key, default):
        raw = self.resolve(key)
        if raw is None:
            return Decimal(str(default))
        return parse_number(key, raw)

    def get_int(self, key, default):
        raw = self.resolve(key)
        if raw is None:
            return int(default)
        return parse_int(key, raw)

    def get_bool(self, key, default):
        raw = self.resolve(key)
        if raw is None:
            return bool(default)
        return parse_bool(key, raw)

    # ------------------------------------------------------------------
    # Named accessors
    # ------------------------------------------------------------------
    def level_thresholds(self):
        """(threshold, level) pairs ordered by level."""
        table = [
            (self.get_int(f"level_{level}_required_xp", DEFAULT_LEVEL_THRESHOLDS[level]), level)
            for level in LEVELS
        ]
        if table[0][0] > 0:
            raise ConfigParseError("level_1_required_xp", str(table[0][0]), "0 or lower")
        for (lower, _), (upper, level) in zip(table, table[1:]):
            if upper < lower:
                raise ConfigParseError(
                    f"level_{level}_required_xp",
                    str(upper),
                    f"a threshold of at least {lower}",
                )
        return table

    def interest_rate_for_level(self, level):
        key = f"interest_rate_level_{level}"
        default = DEFAULT_INTEREST_RATES.get(level, DEFAULT_INTEREST_RATES[1])
        rate = self.get_number(key, default)
        return check_interest_rate_range(key, self.resolve(key, default), rate)

    def max_loan_for_level(self, level, fallback):
        return self.get_number(f"max_loan_level_{level}", fallback)

    def term_bounds(self):
        min_days = self.get_int("min_loan_term_days", DEFAULT_MIN_TERM_DAYS)
        max_days = self.get_int("max_loan_term_days", DEFAULT_MAX_TERM_DAYS)
        if min_days < 1:
            raise ConfigParseError("min_loan_term_days", str(min_days), "at least 1")
        if max_days < min_days:
            raise ConfigParseError(
                "max_loan_term_days", str(max_days), f"at least {min_days}"
            )
        return min_days, max_days

    def min_term_days(self):
        return self.term_bounds()[0]

    def max_term_days(self):
        return self.term_bounds()[1]

    def max_active_loans(self):
        return self.get_int("max_active_loans", DEFAULT_MAX_ACTIVE_LOANS)

    def base_credit_limit(self):
        return self.get_number("base_credit_limit", DEFAULT_BASE_CREDIT_LIMIT)

    def repay_xp(self, on_time):
        if on_time:
            return self.get_int("xp_loan_repay_ontime", DEFAULT_XP_REPAY_ON_TIME)
        return self.get_int("xp_loan_repay_late", DEFAULT_XP_REPAY_LATE)

    def reverse_reaction_xp(self):
        return self.get_bool("reverse_reaction_xp", False)

    def check_consistency(self):
        """Raise ConfigParseError when keys that constrain each other disagree."""
        self.level_thresholds()
        self.term_bounds()

    def effective_settings(self):
        """Schema keys merged with overrides, plus any extra stored keys."""
        rows = []
        for key, definition in SETTING_DEFINITIONS.items():
            rows.append(
                {
                    "key": key,
                    "value": self.resolve(key, definition["default"]),
                    "default": definition["default"],
                    "data_type": definition["data_type"],
                    "category": definition["category"],
                    "description": definition["description"],
                    "is_overridden": self.is_overridden(key),
                }
            )
        for key in sorted(set(self.overrides) - set(SETTING_DEFINITIONS)):
            rows.append(
                {
                    "key": key,
                    "value": self.overrides[key],
                    "default": None,
                    "data_type": "string",
                    "category": "general",
                    "description": "",
                    "is_overridden": True,
                }
            )
        return rows
