"""
Narrative "AI insight" for a dataset summary.

The real text generator lives outside this project.  All the pipeline needs
is something with an async ``enrich(summary)`` that returns a narrative and a
label, so that is the whole interface.  The class used at runtime comes from
the ``INSIGHT_COLLABORATOR`` setting.
"""
from __future__ import annotations

import abc
import asyncio
from dataclasses import dataclass
from typing import Optional

from django.utils.module_loading import import_string

from .conf import get_setting
from .records import DatasetSummary


@dataclass(frozen=True)
class Insight:
    narrative: str
    classification: str


class InsightCollaborator(abc.ABC):
    """Anything that can turn a summary into an ``Insight``, possibly slowly."""

    @abc.abstractmethod
    async def enrich(self, summary: DatasetSummary) -> Insight:
        raise NotImplementedError


class PlaceholderInsightCollaborator(InsightCollaborator):
    """
    Stand-in until a real text generator is wired up.

    It waits a little to behave like a remote call and then returns fixed
    text.  Nothing downstream should read meaning into the wording.
    """

    NARRATIVE = (
        "Operating parameters for this batch sit mostly inside their usual "
        "ranges. Readings flagged as temperature outliers are worth a manual "
        "look for sensor drift or local hot spots.\n\n"
        "No batch-wide pressure excursion was detected. Routine maintenance "
        "checks are suggested for units close to the warning thresholds."
    )
    CLASSIFICATION = "Standard Processing Batch"

    def __init__(self, latency: Optional[float] = None):
        if latency is None:
            latency = get_setting("INSIGHT_LATENCY_SECONDS")
        self.latency = latency

    async def enrich(self, summary: DatasetSummary) -> Insight:
        if self.latency:
            await asyncio.sleep(self.latency)
        return Insight(narrative=self.NARRATIVE, classification=self.CLASSIFICATION)


def get_insight_collaborator() -> InsightCollaborator:
    """Instantiate the collaborator named in settings."""
    collaborator_class = import_string(get_setting("INSIGHT_COLLABORATOR"))
    return collaborator_class()
