"""FDI tooth chart assembled from a patient's treatment history.

Quadrants are listed in chart order (upper right, upper left, lower left,
lower right) and teeth within a quadrant in the order they are drawn,
midline last for the right-hand side and first for the left-hand side.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable

from clinic.models import Treatment

PERMANENT_TEETH: dict[str, tuple[int, ...]] = {
    "upper_right": (18, 17, 16, 15, 14, 13, 12, 11),
    "upper_left": (21, 22, 23, 24, 25, 26, 27, 28),
    "lower_left": (31, 32, 33, 34, 35, 36, 37, 38),
    "lower_right": (48, 47, 46, 45, 44, 43, 42, 41),
}

PRIMARY_TEETH: dict[str, tuple[int, ...]] = {
    "upper_right": (55, 54, 53, 52, 51),
    "upper_left": (61, 62, 63, 64, 65),
    "lower_left": (71, 72, 73, 74, 75),
    "lower_right": (85, 84, 83, 82, 81),
}

QUADRANT_TITLES: dict[str, str] = {
    "upper_right": "Upper Right",
    "upper_left": "Upper Left",
    "lower_left": "Lower Left",
    "lower_right": "Lower Right",
}


@dataclass
class ToothEntry:
    number: int
    procedures: list[str] = field(default_factory=list)

    @property
    def treated(self) -> bool:
        return bool(self.procedures)


@dataclass
class Quadrant:
    key: str
    title: str
    teeth: list[ToothEntry]


@dataclass
class Chart:
    dentition: str
    quadrants: list[Quadrant]
    uncharted: list[Treatment]
    treated_teeth: list[int]


def teeth_for(dentition: str) -> dict[str, tuple[int, ...]]:
    """Return the tooth numbers shown per quadrant for a dentition type."""

    if dentition == "permanent":
        return PERMANENT_TEETH
    if dentition == "primary":
        return PRIMARY_TEETH
    if dentition == "mixed":
        return {
            key: PERMANENT_TEETH[key] + PRIMARY_TEETH[key] for key in QUADRANT_TITLES
        }
    raise ValueError(f"Unknown dentition: {dentition}")


def build_chart(treatments: Iterable[Treatment], dentition: str = "permanent") -> Chart:
    """Group procedures by tooth.

    Treatments off the displayed chart, including general procedures with no
    tooth number, are kept aside as uncharted.
    """

    layout = teeth_for(dentition)
    charted = {number for numbers in layout.values() for number in numbers}

    procedures: dict[int, list[str]] = defaultdict(list)
    uncharted: list[Treatment] = []
    for treatment in treatments:
        if treatment.tooth_number in charted:
            procedures[treatment.tooth_number].append(treatment.procedure_name)
        else:
            uncharted.append(treatment)

    quadrants = [
        Quadrant(
            key=key,
            title=QUADRANT_TITLES[key],
            teeth=[ToothEntry(number, list(procedures.get(number, ()))) for number in numbers],
        )
        for key, numbers in layout.items()
    ]
    return Chart(
        dentition=dentition,
        quadrants=quadrants,
        uncharted=uncharted,
        treated_teeth=sorted(procedures),
    )
