"""
Session state and the user-facing operations built on top of it.

``SessionStateService`` is the only code that knows the storage keys.  It is
handed a ``KeyValueStore`` instead of reaching for a global, and
``DashboardService`` is handed a ``SessionStateService`` plus an insight
collaborator.  Views build both per request.

Enrichment and stale responses
------------------------------
Every ingest (and every "clear session") bumps a generation counter kept in
the store.  The client gets the generation back with the base summary and
sends it along when asking for enrichment.  When the insight arrives it is
always merged into the matching history entry, but only written to the
current session if the generation is still the current one and the session
still shows that summary.  Anything else is a stale response.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from asgiref.sync import async_to_sync

from .analysis import analyze_dataset
from .conf import (
    GENERATION_KEY,
    HISTORY_KEY,
    SESSION_DATA_KEY,
    SESSION_SUMMARY_KEY,
    USER_KEY,
    dataset_key,
    get_setting,
)
from .exceptions import ArchivedDatasetMissing, StorageQuotaExceeded, SummaryNotFound
from .insights import Insight, InsightCollaborator, get_insight_collaborator
from .parsing import parse_csv
from .records import DatasetSummary, EquipmentRecord
from .sample_data import generate_sample_csv
from .storage import KeyValueStore

logger = logging.getLogger(__name__)


def _dump_records(records: Sequence[EquipmentRecord]) -> list[dict[str, Any]]:
    return [record.to_dict() for record in records]


def _load_records(raw: list[dict[str, Any]]) -> list[EquipmentRecord]:
    return [EquipmentRecord.from_dict(item) for item in raw]


class SessionStateService:
    """Typed load/save/clear access to everything the dashboard persists."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    # Current session -----------------------------------------------------

    def load(self) -> Optional[tuple[list[EquipmentRecord], DatasetSummary]]:
        raw_records = self.store.get_json(SESSION_DATA_KEY)
        raw_summary = self.store.get_json(SESSION_SUMMARY_KEY)
        if raw_records is None or raw_summary is None:
            return None
        return _load_records(raw_records), DatasetSummary.from_dict(raw_summary)

    def current_summary(self) -> Optional[DatasetSummary]:
        raw_summary = self.store.get_json(SESSION_SUMMARY_KEY)
        return DatasetSummary.from_dict(raw_summary) if raw_summary else None

    def save(self, records: Sequence[EquipmentRecord], summary: DatasetSummary) -> None:
        """Replace the current session; on failure the previous one is left intact."""
        with self.store.atomic():
            self.store.set_json(SESSION_DATA_KEY, _dump_records(records))
            self.save_summary(summary)

    def save_summary(self, summary: DatasetSummary) -> None:
        self.store.set_json(SESSION_SUMMARY_KEY, summary.to_dict())

    def clear(self) -> None:
        self.store.remove(SESSION_DATA_KEY)
        self.store.remove(SESSION_SUMMARY_KEY)

    # History -------------------------------------------------------------

    def history(self) -> list[DatasetSummary]:
        return [DatasetSummary.from_dict(item) for item in self.store.get_json(HISTORY_KEY, [])]

    def history_entry(self, summary_id: str) -> Optional[DatasetSummary]:
        for entry in self.history():
            if entry.id == summary_id:
                return entry
        return None

    def push_history(
        self, summary: DatasetSummary, records: Sequence[EquipmentRecord]
    ) -> list[DatasetSummary]:
        """
        Archive ``records`` and put ``summary`` at the top of the history.

        Entries pushed past the limit are dropped together with their archived
        batch.  Returns the evicted summaries.
        """
        self.store.set_json(dataset_key(summary.id), _dump_records(records))

        limit = get_setting("HISTORY_LIMIT")
        entries = [summary] + [h for h in self.history() if h.id != summary.id]
        kept, evicted = entries[:limit], entries[limit:]
        try:
            self.store.set_json(HISTORY_KEY, [entry.to_dict() for entry in kept])
        except StorageQuotaExceeded:
            # Without a history entry nobody could ever open this batch again.
            self.store.remove(dataset_key(summary.id))
            raise

        for entry in evicted:
            self.store.remove(dataset_key(entry.id))
        return evicted

    def replace_history_entry(self, summary: DatasetSummary) -> bool:
        entries = self.history()
        if not any(entry.id == summary.id for entry in entries):
            return False
        updated = [summary if entry.id == summary.id else entry for entry in entries]
        self.store.set_json(HISTORY_KEY, [entry.to_dict() for entry in updated])
        return True

    def archived_records(self, summary_id: str) -> list[EquipmentRecord]:
        raw_records = self.store.get_json(dataset_key(summary_id))
        if raw_records is None:
            raise ArchivedDatasetMissing(
                "The source data for this file is no longer in storage."
            )
        return _load_records(raw_records)

    # Enrichment generation -------------------------------------------------

    def generation(self) -> int:
        return int(self.store.get_json(GENERATION_KEY, 0))

    def next_generation(self) -> int:
        generation = self.generation() + 1
        self.store.set_json(GENERATION_KEY, generation)
        return generation

    # Signed-in user flag ---------------------------------------------------

    def remember_user(self, username: str) -> None:
        self.store.set_json(USER_KEY, {"username": username, "isAuthenticated": True})

    def forget_user(self) -> None:
        self.store.remove(USER_KEY)


@dataclass
class AnalysisRun:
    records: list[EquipmentRecord]
    summary: DatasetSummary
    generation: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "records": _dump_records(self.records),
            "generation": self.generation,
        }


class DashboardService:
    """The operations behind the dashboard buttons."""

    def __init__(
        self,
        state: SessionStateService,
        collaborator: Optional[InsightCollaborator] = None,
    ):
        self.state = state
        self.collaborator = collaborator or get_insight_collaborator()

    def ingest(self, text: str, file_name: str) -> AnalysisRun:
        """
        Parse and analyse ``text`` and make it the current session.

        Parse and empty-dataset errors propagate before anything is stored.
        Storage errors are logged only: the numbers are still valid, so the
        caller gets them even if they could not be saved.
        """
        records = parse_csv(text)
        summary = analyze_dataset(records, file_name)

        generation = self.state.generation() + 1
        try:
            self.state.next_generation()
            self.state.save(records, summary)
            self.state.push_history(summary, records)
        except StorageQuotaExceeded:
            logger.exception("Storage limit reached while saving %s", file_name)

        logger.info(
            "Analysed %s: %d records, %d outliers, quality %d",
            file_name,
            summary.total_count,
            summary.outlier_count,
            summary.data_quality_score,
        )
        return AnalysisRun(records=records, summary=summary, generation=generation)

    def load_demo(self) -> AnalysisRun:
        return self.ingest(generate_sample_csv(), get_setting("DEMO_FILE_NAME"))

    def current(self) -> Optional[AnalysisRun]:
        loaded = self.state.load()
        if loaded is None:
            return None
        records, summary = loaded
        return AnalysisRun(records=records, summary=summary, generation=self.state.generation())

    def history(self) -> list[DatasetSummary]:
        return self.state.history()

    def _find_summary(self, summary_id: str) -> DatasetSummary:
        current = self.state.current_summary()
        if current is not None and current.id == summary_id:
            return current
        entry = self.state.history_entry(summary_id)
        if entry is None:
            raise SummaryNotFound(f"No dataset summary with id {summary_id}.")
        return entry

    def enrich(self, summary_id: str, generation: Optional[int] = None) -> DatasetSummary:
        """
        Ask the collaborator for an insight and merge it in.

        A failing collaborator is not fatal: the summary is returned as it
        was, still pending.
        """
        summary = self._find_summary(summary_id)
        if generation is None:
            generation = self.state.generation()

        try:
            insight = async_to_sync(self.collaborator.enrich)(summary)
        except Exception:  # noqa: BLE001
            logger.exception("Insight collaborator failed for summary %s", summary_id)
            return summary

        return self.apply_insight(summary, insight, generation)

    def apply_insight(
        self, summary: DatasetSummary, insight: Insight, generation: int
    ) -> DatasetSummary:
        enriched = summary.with_insight(insight.narrative, insight.classification)
        try:
            self.state.replace_history_entry(enriched)
            current = self.state.current_summary()
            if (
                current is not None
                and current.id == summary.id
                and generation == self.state.generation()
            ):
                self.state.save_summary(enriched)
            else:
                logger.info(
                    "Discarding stale enrichment for summary %s (generation %d)",
                    summary.id,
                    generation,
                )
        except StorageQuotaExceeded:
            logger.exception("Storage limit reached while saving insights for %s", summary.id)
        return enriched

    def open_archived(self, summary_id: str) -> AnalysisRun:
        """
        Make an archived dataset the current session again.

        Raises ``ArchivedDatasetMissing`` without touching the current session
        when either the history entry or its record batch is gone.
        """
        entry = self.state.history_entry(summary_id)
        if entry is None:
            raise ArchivedDatasetMissing("This dataset is no longer in the upload history.")
        records = self.state.archived_records(summary_id)

        try:
            self.state.save(records, entry)
        except StorageQuotaExceeded:
            logger.exception("Storage limit reached while reopening %s", entry.file_name)
        return AnalysisRun(records=records, summary=entry, generation=self.state.generation())

    def clear(self) -> None:
        self.state.clear()
        try:
            self.state.next_generation()
        except StorageQuotaExceeded:
            logger.exception("Storage limit reached while clearing the session")
