"""
Candidate Archive - completed interviews keyed by candidate id.
"""

import logging
from enum import Enum

from interview_engine.models.candidate import CandidateArchiveRecord

logger = logging.getLogger(__name__)


class CandidateSortKey(str, Enum):
    SCORE = "score"
    NAME = "name"
    DATE = "date"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class CandidateArchive:
    """
    Upsert-only collection of archive records.

    A repeat interview for the same candidate id replaces the earlier record.
    """

    def __init__(self, records: list[CandidateArchiveRecord] | None = None):
        self._records: dict[str, CandidateArchiveRecord] = {}
        for record in records or []:
            self.upsert(record)

    def __len__(self) -> int:
        return len(self._records)

    def upsert(self, record: CandidateArchiveRecord) -> None:
        replaced = record.id in self._records
        self._records[record.id] = record
        logger.info(
            f"{'Replaced' if replaced else 'Archived'} candidate {record.id} "
            f"(score {record.final_score:.1f})"
        )

    def get(self, candidate_id: str) -> CandidateArchiveRecord | None:
        return self._records.get(candidate_id)

    def remove(self, candidate_id: str) -> bool:
        return self._records.pop(candidate_id, None) is not None

    def all_records(self) -> list[CandidateArchiveRecord]:
        return list(self._records.values())

    def references_resume(self, resume_id: str) -> bool:
        """True when an archived profile still points at this resume."""
        return any(
            record.profile.resume is not None and record.profile.resume.id == resume_id
            for record in self._records.values()
        )

    def list_records(
        self,
        sort_key: CandidateSortKey = CandidateSortKey.SCORE,
        direction: SortDirection = SortDirection.DESC,
        query: str = "",
    ) -> list[CandidateArchiveRecord]:
        """Filter by case-insensitive substring on name/email/summary, then sort."""
        needle = query.strip().lower()
        records = [
            record for record in self._records.values()
            if not needle or self._matches(record, needle)
        ]

        sort_keys = {
            CandidateSortKey.SCORE: lambda r: r.final_score,
            CandidateSortKey.NAME: lambda r: (r.profile.name or "").casefold(),
            CandidateSortKey.DATE: lambda r: r.completed_at,
        }
        return sorted(
            records,
            key=sort_keys[CandidateSortKey(sort_key)],
            reverse=SortDirection(direction) == SortDirection.DESC,
        )

    @staticmethod
    def _matches(record: CandidateArchiveRecord, needle: str) -> bool:
        fields = [
            record.profile.name or "",
            record.profile.email or "",
            record.summary.summary_text or "",
        ]
        return any(needle in value.lower() for value in fields)
