"""
Per-entity kill accumulator.

Turns a production rate and an elapsed duration into whole kills. Rates are
exact rationals and progress is held as an integer scaled by PRECISION, so
accrual never drifts no matter how many ticks or how large the kill count.
"""
import math
from fractions import Fraction
from typing import Union

# 1.0 in the fixed-point domain
PRECISION = 10 ** 18

_LARGEST_BELOW_ONE = math.nextafter(1.0, 0.0)

Number = Union[int, float, Fraction]


def to_fraction(value: Number, name: str = "value") -> Fraction:
    """
    Convert a nonnegative number to an exact Fraction.

    Floats are converted exactly (no decimal rounding). NaN, infinities and
    negative values are rejected.
    """
    if isinstance(value, bool):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value!r}")
    try:
        result = Fraction(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise ValueError(f"{name} must be a finite number, got {value!r}") from e
    if result < 0:
        raise ValueError(f"{name} must be nonnegative, got {value!r}")
    return result


class Accumulator:
    """Kill counter and fractional progress for one entity type."""

    def __init__(
        self,
        name: str,
        base_rate: Number,
        bonus_per_kill: Number = 0,
        label: str = None
    ):
        """
        Args:
            name: Entity key (e.g. "grass")
            base_rate: Kills per second at zero kills
            bonus_per_kill: Extra kills per second contributed by every kill
            label: Display name, defaults to the capitalized key
        """
        self._name = name
        self._label = label or name.capitalize()
        self._base_rate = to_fraction(base_rate, "base_rate")
        self._bonus_per_kill = to_fraction(bonus_per_kill, "bonus_per_kill")
        self.kills = 0
        self.accumulated = 0
        # Exact part of accrued progress below one fixed-point unit, in [0, 1)
        self._carry = Fraction(0)

    @property
    def name(self) -> str:
        return self._name

    @property
    def label(self) -> str:
        return self._label

    @property
    def base_rate(self) -> Fraction:
        return self._base_rate

    @property
    def bonus_per_kill(self) -> Fraction:
        return self._bonus_per_kill

    def production_rate(self) -> Fraction:
        """Kills per second before the global multiplier is applied."""
        return self._base_rate + self.kills * self._bonus_per_kill

    def advance(self, delta_time: Number, speed_multiplier: Number = 1) -> int:
        """
        Accrue progress for ``delta_time`` seconds at the current rate.

        The rate is sampled once at the start; kills gained during this call
        do not speed up the remainder of the same call.

        Returns:
            Number of kills gained
        """
        delta = to_fraction(delta_time, "delta_time")
        multiplier = to_fraction(speed_multiplier, "speed_multiplier")
        if delta == 0 or multiplier == 0:
            return 0

        exact = self.production_rate() * multiplier * delta * PRECISION + self._carry
        to_accrue = math.floor(exact)
        self._carry = exact - to_accrue
        gained, self.accumulated = divmod(self.accumulated + to_accrue, PRECISION)
        self.kills += gained
        return gained

    def progress(self, seconds: Number = 1, speed_multiplier: Number = 1) -> int:
        """Advance by a fixed number of seconds, as if that time had passed."""
        return self.advance(seconds, speed_multiplier)

    def manual_advance(self):
        """Instant kill. Progress toward the next kill is left as is."""
        self.kills += 1

    def reset(self):
        self.kills = 0
        self.accumulated = 0
        self._carry = Fraction(0)

    def restore(self, kills: int, accumulated: int):
        """Set exact counter values, e.g. from persisted state."""
        if kills < 0:
            raise ValueError(f"kills must be nonnegative, got {kills}")
        if not 0 <= accumulated < PRECISION:
            raise ValueError(f"accumulated must be in [0, {PRECISION}), got {accumulated}")
        self.kills = int(kills)
        self.accumulated = int(accumulated)
        self._carry = Fraction(0)

    def total_kills(self) -> int:
        return self.kills

    def accumulated_units(self) -> int:
        """Progress toward the next kill in fixed-point units."""
        return self.accumulated

    def progress_fraction(self) -> float:
        """Progress toward the next kill as a float in [0, 1), for display."""
        # Values within 1e-16 of a whole kill would otherwise round up to 1.0
        return min(self.accumulated / PRECISION, _LARGEST_BELOW_ONE)

    def __repr__(self):
        return f"<Accumulator(name='{self.name}', kills={self.kills}, accumulated={self.accumulated})>"
