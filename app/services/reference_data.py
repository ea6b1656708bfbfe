"""Read-only rate tables, loaded as an immutable snapshot per request.

Nothing here is cached between calls: every quote display or update reads the
current tables again, so a rate change applies to the next computation.
"""
import logging
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.enums import PremiumType
from app.core.metrics import track_db_operation
from app.models.age import AgeBracket
from app.models.cover import Cover
from app.models.destination import Destination
from app.models.duration import DurationBracket
from app.models.excess import Excess
from app.models.premium import Premium
from app.models.trip_type import TripType
from app.utils.coercion import coerce_id

logger = logging.getLogger(__name__)

PRICED_AGE_RANGE = (1, 84)
# a two-year trip counted inclusively
PRICED_DURATION_RANGE = (1, 2 * 365 + 1)


@dataclass(frozen=True)
class Rate:
    id: int
    label: str
    multiplier: float


@dataclass(frozen=True)
class DestinationRate:
    id: int
    label: str
    zone: int
    multiplier: float
    cruise_add_on_amount: float = 0.0
    ski_per_day_amount: Optional[float] = None
    code: Optional[str] = None


@dataclass(frozen=True)
class Bracket:
    minimum: int
    maximum: int
    multiplier: float


class BracketTable:
    """Inclusive integer ranges searched by bisecting on their lower bounds."""

    def __init__(self, brackets: Iterable[Bracket]):
        self._brackets = sorted(brackets, key=lambda b: (b.minimum, b.maximum))
        self._minimums = [b.minimum for b in self._brackets]

    def __len__(self):
        return len(self._brackets)

    def __iter__(self):
        return iter(self._brackets)

    def find(self, value: int) -> Optional[Bracket]:
        idx = bisect_right(self._minimums, value) - 1
        if idx < 0:
            return None
        bracket = self._brackets[idx]
        return bracket if value <= bracket.maximum else None

    def coverage_issues(self, lower: int, upper: int) -> List[str]:
        """Gaps, overlaps and uncovered ends over [lower, upper]; empty when the table is sound."""
        if not self._brackets:
            return [f"no brackets cover {lower}-{upper}"]

        issues = []
        first, last = self._brackets[0], self._brackets[-1]
        if first.minimum > lower:
            issues.append(f"gap: {lower}-{first.minimum - 1} not covered")

        covered_to = first.maximum
        for bracket in self._brackets[1:]:
            if bracket.minimum <= covered_to:
                issues.append(f"overlap: {bracket.minimum}-{min(bracket.maximum, covered_to)} matched twice")
            elif bracket.minimum > covered_to + 1:
                issues.append(f"gap: {covered_to + 1}-{bracket.minimum - 1} not covered")
            covered_to = max(covered_to, bracket.maximum)

        if covered_to < upper:
            issues.append(f"gap: {covered_to + 1}-{upper} not covered")
        return issues


@dataclass(frozen=True)
class ReferenceData:
    base_multiplier: Optional[float]
    trip_types: Dict[int, Rate] = field(default_factory=dict)
    excesses: Dict[int, Rate] = field(default_factory=dict)
    destinations: Dict[int, DestinationRate] = field(default_factory=dict)
    age_brackets: BracketTable = field(default_factory=lambda: BracketTable([]))
    duration_brackets: BracketTable = field(default_factory=lambda: BracketTable([]))
    covers: List[Rate] = field(default_factory=list)

    def trip_type(self, trip_type_id: Any) -> Optional[Rate]:
        return self.trip_types.get(coerce_id(trip_type_id))

    def excess(self, excess_id: Any) -> Optional[Rate]:
        return self.excesses.get(coerce_id(excess_id))

    def cover(self, cover_id: Any) -> Optional[Rate]:
        cover_id = coerce_id(cover_id)
        return next((c for c in self.covers if c.id == cover_id), None)

    def destinations_by_zone(self, destination_ids: Iterable[Any]) -> List[DestinationRate]:
        """Known destinations among the ids, highest zone first, lowest id first within a zone."""
        wanted = {coerce_id(i) for i in destination_ids}
        found = [d for d_id, d in self.destinations.items() if d_id in wanted]
        return sorted(found, key=lambda d: (-d.zone, d.id))

    def age_bracket(self, age: int) -> Optional[Bracket]:
        return self.age_brackets.find(age)

    def duration_bracket(self, days: int) -> Optional[Bracket]:
        return self.duration_brackets.find(days)

    def form_options(self) -> Dict[str, list]:
        return {
            "trip_types": sorted(self.trip_types.values(), key=lambda r: r.id),
            "excesses": sorted(self.excesses.values(), key=lambda r: r.id),
            "destinations": sorted(self.destinations.values(), key=lambda d: (d.label, d.id)),
        }


def check_bracket_tables(reference: ReferenceData) -> List[str]:
    issues = [f"age brackets {issue}" for issue in reference.age_brackets.coverage_issues(*PRICED_AGE_RANGE)]
    issues += [
        f"duration brackets {issue}"
        for issue in reference.duration_brackets.coverage_issues(*PRICED_DURATION_RANGE)
    ]
    return issues


@track_db_operation("select", "reference_data")
async def load_reference_data(db: AsyncSession) -> ReferenceData:
    res = await db.execute(
        select(Premium).where(Premium.premium_type == PremiumType.BASE.value).order_by(Premium.id).limit(1)
    )
    base = res.scalars().first()

    trip_types = (await db.execute(select(TripType))).scalars().all()
    excesses = (await db.execute(select(Excess))).scalars().all()
    destinations = (await db.execute(select(Destination))).scalars().all()
    ages = (await db.execute(select(AgeBracket))).scalars().all()
    durations = (await db.execute(select(DurationBracket))).scalars().all()
    covers = (await db.execute(select(Cover).order_by(Cover.id))).scalars().all()

    reference = ReferenceData(
        base_multiplier=float(base.multiplier) if base else None,
        trip_types={t.id: Rate(t.id, t.label, float(t.multiplier)) for t in trip_types},
        excesses={e.id: Rate(e.id, e.label, float(e.multiplier)) for e in excesses},
        destinations={
            d.id: DestinationRate(
                id=d.id,
                label=d.label,
                zone=d.zone,
                multiplier=float(d.multiplier),
                cruise_add_on_amount=float(d.cruise_add_on_amount or 0.0),
                ski_per_day_amount=float(d.ski_per_day_amount) if d.ski_per_day_amount is not None else None,
                code=d.code,
            )
            for d in destinations
        },
        age_brackets=BracketTable(Bracket(a.age_minimum, a.age_maximum, float(a.multiplier)) for a in ages),
        duration_brackets=BracketTable(
            Bracket(d.minimum_days, d.maximum_days, float(d.multiplier)) for d in durations
        ),
        covers=[Rate(c.id, c.label, float(c.multiplier)) for c in covers],
    )

    if base is None:
        logger.warning("No base premium row found; premiums cannot be computed")
    for issue in check_bracket_tables(reference):
        logger.warning(f"Reference data: {issue}")

    return reference
