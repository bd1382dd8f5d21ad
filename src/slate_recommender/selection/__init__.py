"""Diversity-constrained selection of the final slate."""

from .diversity import (
    DiversityOptions,
    DiversitySelector,
    NearDuplicatePredicate,
    select_diverse,
)

__all__ = [
    "DiversityOptions",
    "DiversitySelector",
    "NearDuplicatePredicate",
    "select_diverse",
]
