"""Constants for flattening and scoring.

Centralizes the thresholds used by the domain flatteners so the rubric modules
read as rule tables rather than magic numbers.

Constants are organized by functional area:
- Score bounds: Clamp range for every composite score
- Ratings: 1-5 severity scale shared by soreness and stress
- Focus areas: Selection size thresholds
- Duration: Session, phase and efficiency bands
- Equipment: Weight bands per implement
"""

from __future__ import annotations

# =============================================================================
# Score Bounds
# =============================================================================

class ScoreBounds:
    """Every composite score is an integer in [MIN, MAX]."""

    MIN = 0
    MAX = 100


# =============================================================================
# Rating Scale
# =============================================================================

class RatingScale:
    """1-5 severity ratings used by category + rating domains.

    SUFFIXES[rating - 1] is the per-category level flag suffix.
    """

    MIN = 1
    MAX = 5
    SUFFIXES = ("mild", "low_moderate", "moderate", "high", "severe")
    POINTS_PER_LEVEL = 20  # mean rating x 20 -> 0-100 score

    MILD = 1
    MODERATE_RANGE = (2, 3)
    HIGH_RANGE = (4, 5)
    SEVERE = 5

    @staticmethod
    def suffix_for(rating: float) -> str | None:
        """Level flag suffix for a whole rating on the 1-5 scale, else None."""
        if isinstance(rating, bool) or rating not in range(RatingScale.MIN, RatingScale.MAX + 1):
            return None
        return RatingScale.SUFFIXES[int(rating) - 1]


# =============================================================================
# Focus Area Constants
# =============================================================================

class FocusSelection:
    """Selection size thresholds for focus areas."""

    COMPLEX_ABOVE = 6  # more than 6 selections is a complex selection
    TARGETED_MAX = 3  # 1-3 selections is a targeted selection
    TERTIARY_POINTS = 5  # technical complexity per tertiary selection


# =============================================================================
# Duration Constants
# =============================================================================

class SessionLength:
    """Session categories by total minutes (upper bounds inclusive)."""

    MICRO_MAX = 15
    SHORT_MAX = 30
    STANDARD_MAX = 60
    EXTENDED_MAX = 90


class PhaseLength:
    """Warm-up and cool-down size bands in minutes."""

    WARMUP_MINIMAL_MAX = 2
    WARMUP_STANDARD = (3, 7)
    WARMUP_EXTENDED_MIN = 8

    COOLDOWN_BRIEF_MAX = 3
    COOLDOWN_STANDARD = (4, 7)
    COOLDOWN_EXTENDED_MIN = 8


class Efficiency:
    """Efficiency bands by working-time percentage."""

    EXCELLENT_MIN = 85
    GOOD_MIN = 70
    MODERATE_MIN = 50
    TIME_EFFICIENT_MIN = 75

    MINIMAL_PREP_BELOW = 10  # structure % below this is minimal prep
    HEAVY_PREP_ABOVE = 40  # structure % above this is heavy prep
    BALANCED_PHASE_DIFF = 2  # |warm-up - cool-down| within this is balanced
    PHASE_HEAVY_MARGIN = 3  # one phase longer by more than this is "heavy"


# =============================================================================
# Equipment Constants
# =============================================================================

class WeightBands:
    """Weight bands per implement (lbs for dumbbells/barbells, kg for kettlebells)."""

    DUMBBELL_LIGHT_BELOW = 20
    DUMBBELL_HEAVY_ABOVE = 50

    BARBELL_STANDARD = 45
    BARBELL_LOADED_ABOVE = 135
    BARBELL_HEAVY_ABOVE = 225

    KETTLEBELL_LIGHT_BELOW = 16
    KETTLEBELL_HEAVY_ABOVE = 32


class Versatility:
    LOCATION_POINTS = 10
    CONTEXT_POINTS = 5
    SUBTYPE_POINTS = 2
    SUBTYPE_CAP = 40
    WEIGHT_TYPE_POINTS = 2
    WEIGHT_TYPE_CAP = 10
