from __future__ import annotations

"""
View Taxon Filters and Sorting.

Named predicates and a single ordering applied to each sample's view taxa
after cross-sample statistics have been computed.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List

from taxabars.domain.constants import (
    FILTER_OPERATORS,
    PREVALENCE_ABSOLUTE,
    PREVALENCE_PROPORTION,
    SORT_MEAN_REL_ABUN,
    SORT_PREVALENCE,
)
from taxabars.domain.sample_models import Sample, ViewTaxon

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeatureFilter:
    name: str
    func: Callable[[ViewTaxon], bool]


@dataclass(frozen=True)
class FeatureSort:
    name: str
    key: Callable[[ViewTaxon], float]
    ascending: bool


def _threshold(value: float, operator: str) -> Callable[[float], bool]:
    """Return a predicate keeping values at or beyond `value` in the `operator` direction."""
    if operator not in FILTER_OPERATORS:
        raise ValueError(f"Unsupported filter operator {operator!r}; expected one of {FILTER_OPERATORS}.")
    if operator == ">":
        return lambda x: x >= value
    return lambda x: x <= value


class FeatureControls:
    """
    Filter and sort settings for the view taxa of every sample.

    The default ordering is decreasing mean relative abundance.
    """

    def __init__(self) -> None:
        self.filters: List[FeatureFilter] = []
        self.sort: FeatureSort = self.set_sort(SORT_MEAN_REL_ABUN, ascending=False)

    def add_abundance_filter(self, value: float, operator: str = ">") -> FeatureFilter:
        keep = _threshold(value, operator)
        feature_filter = FeatureFilter(
            name=f"abundance {operator} {value}",
            func=lambda vt: keep(vt.relative_abundance),
        )
        self.filters.append(feature_filter)
        return feature_filter

    def add_prevalence_filter(
            self,
            value: float,
            kind: str = PREVALENCE_PROPORTION,
            operator: str = ">",
    ) -> FeatureFilter:
        if kind == PREVALENCE_ABSOLUTE:
            attr = "prevalence"
        elif kind == PREVALENCE_PROPORTION:
            attr = "prevalence_proportion"
        else:
            raise ValueError(f"Unsupported prevalence kind {kind!r}.")

        keep = _threshold(value, operator)
        feature_filter = FeatureFilter(
            name=f"{kind}-prevalence {operator} {value}",
            func=lambda vt: keep(getattr(vt, attr)),
        )
        self.filters.append(feature_filter)
        return feature_filter

    def remove_filter(self, name: str) -> bool:
        """Drop the filter called `name`; returns False if there was none."""
        for i, feature_filter in enumerate(self.filters):
            if feature_filter.name == name:
                del self.filters[i]
                return True
        return False

    def set_sort(self, kind: str, ascending: bool = False) -> FeatureSort:
        if kind == SORT_MEAN_REL_ABUN:
            key: Callable[[ViewTaxon], float] = lambda vt: vt.mean_relative_abundance
        elif kind == SORT_PREVALENCE:
            key = lambda vt: vt.prevalence
        else:
            raise ValueError(f"Unsupported sort {kind!r}.")

        self.sort = FeatureSort(
            name=f"{kind} {'ascending' if ascending else 'descending'}",
            key=key,
            ascending=ascending,
        )
        return self.sort

    def apply(self, sample: Sample) -> None:
        """Filter then sort `sample.view_taxa` in place."""
        view_taxa = sample.view_taxa
        for feature_filter in self.filters:
            view_taxa = [vt for vt in view_taxa if feature_filter.func(vt)]

        # sorted() is stable, so ties keep first-encounter order
        sample.view_taxa = sorted(view_taxa, key=self.sort.key, reverse=not self.sort.ascending)
