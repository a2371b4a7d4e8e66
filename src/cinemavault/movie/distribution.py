"""RatingDistribution: bucketed star counts and derived average for one movie.

All arithmetic lives in ``apply_delta``, which expresses the three operations
the rest of the system needs:

    add      apply_delta(None, r)
    replace  apply_delta(previous, r)
    remove   apply_delta(r, None)

``0`` is accepted wherever ``None`` is, so "remove by passing 0" keeps working.
"""

from decimal import ROUND_HALF_UP, Decimal

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Float, Integer

from cinemavault.domain import cinemavault

BUCKETS = ("one", "two", "three", "four", "five")

_ONE_DECIMAL = Decimal("0.1")


def bucket_for(rating):
    """Map a 1-5 star rating to its bucket name, ``None``/``0`` to ``None``."""
    if rating is None or rating == 0:
        return None
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError({"rating": ["Rating must be between 1 and 5"]})
    return BUCKETS[rating - 1]


def average_of(counts: dict[str, int]) -> float:
    """Bucket-weighted mean, rounded half-up to one decimal place. ``0.0`` when empty."""
    total = sum(counts.values())
    if total == 0:
        return 0.0
    weighted = sum(stars * counts[name] for stars, name in enumerate(BUCKETS, start=1))
    mean = (Decimal(weighted) / Decimal(total)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)
    return float(mean)


@cinemavault.value_object(part_of="Movie")
class RatingDistribution:
    """Counts of one..five star ratings, their total, and their average."""

    one = Integer(default=0, min_value=0)
    two = Integer(default=0, min_value=0)
    three = Integer(default=0, min_value=0)
    four = Integer(default=0, min_value=0)
    five = Integer(default=0, min_value=0)
    count = Integer(default=0, min_value=0)
    average = Float(default=0.0, min_value=0.0, max_value=5.0)

    @invariant.post
    def count_matches_buckets(self):
        if self.count != sum(self.buckets().values()):
            raise ValidationError({"count": ["Rating count must equal the sum of all buckets"]})

    @invariant.post
    def average_matches_buckets(self):
        if self.average != average_of(self.buckets()):
            raise ValidationError({"average": ["Rating average is out of sync with the buckets"]})

    @classmethod
    def empty(cls):
        return cls.from_buckets({})

    @classmethod
    def from_buckets(cls, counts):
        """Build a distribution from ``{bucket_name: count}``; missing buckets are zero."""
        buckets = {name: counts.get(name, 0) for name in BUCKETS}
        return cls(
            **buckets,
            count=sum(buckets.values()),
            average=average_of(buckets),
        )

    def buckets(self) -> dict[str, int]:
        return {name: getattr(self, name) or 0 for name in BUCKETS}

    def apply_delta(self, old_rating=None, new_rating=None):
        """Return a new distribution with ``old_rating`` taken out and ``new_rating`` put in.

        Taking out from an empty bucket leaves it (and the count) at zero.
        """
        old_bucket = bucket_for(old_rating)
        new_bucket = bucket_for(new_rating)

        counts = self.buckets()
        if old_bucket is not None:
            counts[old_bucket] = max(0, counts[old_bucket] - 1)
        if new_bucket is not None:
            counts[new_bucket] += 1

        return RatingDistribution.from_buckets(counts)
