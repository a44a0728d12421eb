"""
Domain models for training periodization.

A training plan is a three-level tree of date ranges: macrocycles hold
mesocycles, which hold microcycles. All three share one shape (``Period``)
and differ only by level and by the classification tags they accept.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from .errors import InvalidRangeError, InvalidTagError


class PeriodLevel(Enum):
    """Position of a period in the plan tree, coarsest first."""
    MACROCYCLE = "macrocycle"
    MESOCYCLE = "mesocycle"
    MICROCYCLE = "microcycle"

    @property
    def parent_level(self) -> Optional["PeriodLevel"]:
        return _PARENT_LEVEL[self]

    @property
    def child_level(self) -> Optional["PeriodLevel"]:
        return _CHILD_LEVEL[self]


_PARENT_LEVEL = {
    PeriodLevel.MACROCYCLE: None,
    PeriodLevel.MESOCYCLE: PeriodLevel.MACROCYCLE,
    PeriodLevel.MICROCYCLE: PeriodLevel.MESOCYCLE,
}

_CHILD_LEVEL = {
    PeriodLevel.MACROCYCLE: PeriodLevel.MESOCYCLE,
    PeriodLevel.MESOCYCLE: PeriodLevel.MICROCYCLE,
    PeriodLevel.MICROCYCLE: None,
}


class MacrocycleTag(Enum):
    """Season-level classification."""
    ANUAL = "anual"
    SEMESTRAL = "semestral"
    TRIMESTRAL = "trimestral"
    PREPARATORIO = "preparatorio"
    COMPETITIVO = "competitivo"
    TRANSICAO = "transicao"
    RECUPERATIVO = "recuperativo"


class MesocycleTag(Enum):
    """
    Block-level classification.

    These are the block types a coach picks when labelling the weeks of a
    macrocycle.
    """
    BASE = "base"
    DESENVOLVIMENTO = "desenvolvimento"
    ESTABILIZADOR = "estabilizador"
    ESPECIFICO = "especifico"
    PRE_COMPETITIVO = "pre_competitivo"
    POLIMENTO = "polimento"
    COMPETITIVO = "competitivo"
    TRANSICAO = "transicao"
    RECUPERATIVO = "recuperativo"


class MicrocycleTag(Enum):
    """Week-level classification."""
    INCORPORACAO = "incorporacao"
    ORDINARIO = "ordinario"
    CHOQUE = "choque"
    ESTABILIZADOR = "estabilizador"
    PRE_COMPETITIVO = "pre_competitivo"
    COMPETITIVO = "competitivo"
    RECUPERATIVO = "recuperativo"
    TRANSICAO = "transicao"


TAGS_BY_LEVEL: dict[PeriodLevel, type[Enum]] = {
    PeriodLevel.MACROCYCLE: MacrocycleTag,
    PeriodLevel.MESOCYCLE: MesocycleTag,
    PeriodLevel.MICROCYCLE: MicrocycleTag,
}


def allowed_tags(level: PeriodLevel) -> list[str]:
    return [tag.value for tag in TAGS_BY_LEVEL[level]]


def normalize_tag(level: PeriodLevel, tag) -> Optional[str]:
    """
    Return the tag as its string value, or None for a blank tag.

    Accepts the enum member or its value. Anything outside the level's set
    raises InvalidTagError.
    """
    if tag is None:
        return None
    if isinstance(tag, Enum):
        tag = tag.value
    tag = str(tag).strip()
    if not tag:
        return None
    if tag not in allowed_tags(level):
        raise InvalidTagError(
            f"Tag {tag!r} is not valid for a {level.value}; "
            f"expected one of: {', '.join(allowed_tags(level))}"
        )
    return tag


@dataclass
class Period:
    """
    A named, inclusive date range in an athlete's plan.

    Periods are treated as values by the hierarchy service: updates produce
    a new instance via ``dataclasses.replace`` rather than mutating the one
    held by the repository.
    """
    owner_id: str
    level: PeriodLevel
    name: str
    start_date: date
    end_date: date
    id: UUID = field(default_factory=uuid4)
    parent_id: Optional[UUID] = None
    tag: Optional[str] = None
    description: str = ""
    goal: str = ""
    notes: str = ""
    week_number: Optional[int] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        if self.start_date >= self.end_date:
            raise InvalidRangeError(
                f"Start date {self.start_date.isoformat()} must be before "
                f"end date {self.end_date.isoformat()}"
            )

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def overlaps(self, start: date, end: date) -> bool:
        """Inclusive range intersection test."""
        return start <= self.end_date and end >= self.start_date

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def encloses(self, start: date, end: date) -> bool:
        return self.start_date <= start and end <= self.end_date


@dataclass(frozen=True)
class CurrentCycle:
    """The periods at each level whose range contains a given day."""
    on: date
    macrocycle: Optional[Period] = None
    mesocycle: Optional[Period] = None
    microcycle: Optional[Period] = None
