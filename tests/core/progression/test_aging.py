"""노화/활력 테스트"""

from datetime import date

from src.core.progression import (
    advance_age,
    backfill_age_days_from_birth_date,
    vitality_status,
)
from src.core.progression.rules import decay_rate_for_age


class TestDecayRate:
    def test_brackets(self):
        assert decay_rate_for_age(39) == 0
        assert decay_rate_for_age(40) == 2
        assert decay_rate_for_age(55) == 5
        assert decay_rate_for_age(72) == 10


class TestAdvanceAge:
    def test_year_rollover(self):
        result = advance_age(age=20, age_days=360, days=10, vitality=100, max_vitality=100)
        assert result.age == 21
        assert result.age_days == 5
        assert result.aged
        assert result.vitality_decay == 0

    def test_no_rollover(self):
        result = advance_age(age=20, age_days=10, days=3, vitality=80, max_vitality=100)
        assert result.age == 20
        assert result.age_days == 13
        assert not result.aged

    def test_decay_at_forty(self):
        result = advance_age(age=39, age_days=364, days=1, vitality=100, max_vitality=100)
        assert result.age == 40
        assert result.max_vitality == 98
        assert result.vitality == 98

    def test_decay_per_year_crossed(self):
        result = advance_age(age=49, age_days=0, days=730, vitality=50, max_vitality=120)
        assert result.age == 51
        assert result.vitality_decay == 10
        assert result.max_vitality == 110
        assert result.vitality == 50

    def test_max_vitality_floor_zero(self):
        result = advance_age(age=65, age_days=0, days=365, vitality=3, max_vitality=3)
        assert result.max_vitality == 0
        assert result.vitality == 0

    def test_negative_days_ignored(self):
        result = advance_age(age=30, age_days=100, days=-5, vitality=10, max_vitality=10)
        assert result.age_days == 100


class TestVitalityStatus:
    def test_status(self):
        assert vitality_status(0) == "Retired"
        assert vitality_status(-1) == "Retired"
        assert vitality_status(39) == "Twilight"
        assert vitality_status(40) == "Prime"


class TestBackfill:
    def test_regular_birthday(self):
        assert backfill_age_days_from_birth_date(date(2000, 6, 15), date(2026, 6, 20)) == (26, 5)

    def test_before_birthday(self):
        age, _ = backfill_age_days_from_birth_date(date(2000, 6, 15), date(2026, 6, 1))
        assert age == 25

    def test_leap_day(self):
        assert backfill_age_days_from_birth_date(date(2004, 2, 29), date(2026, 3, 11)) == (22, 10)
