"""
Candidate archive API endpoints

Lists, inspects and removes archived interviews.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from interview_engine.api.dependencies import get_orchestrator
from interview_engine.core.candidate_archive import CandidateSortKey, SortDirection
from interview_engine.core.interview_orchestrator import InterviewOrchestrator
from interview_engine.models.candidate import CandidateArchiveRecord

router = APIRouter()


class CandidateListItem(BaseModel):
    """One row of the candidate table."""
    id: str
    name: str | None = None
    email: str | None = None
    final_score: float
    summary_text: str
    completed_at: str


@router.get("", response_model=list[CandidateListItem])
async def list_candidates(
    sort: CandidateSortKey = CandidateSortKey.SCORE,
    direction: SortDirection = SortDirection.DESC,
    q: str = "",
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> list[CandidateListItem]:
    """List archived candidates, sorted and filtered."""
    return [
        CandidateListItem(
            id=record.id,
            name=record.profile.name,
            email=record.profile.email,
            final_score=record.final_score,
            summary_text=record.summary.summary_text,
            completed_at=record.completed_at.isoformat(),
        )
        for record in orchestrator.list_candidates(sort, direction, q)
    ]


@router.get("/{candidate_id}", response_model=CandidateArchiveRecord)
async def get_candidate(
    candidate_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> CandidateArchiveRecord:
    """Get the full archived interview for a candidate."""
    record = orchestrator.get_candidate(candidate_id)
    if not record:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return record


@router.delete("/{candidate_id}")
async def delete_candidate(
    candidate_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> dict:
    """Remove a candidate from the archive."""
    if not orchestrator.remove_candidate(candidate_id):
        raise HTTPException(status_code=404, detail="Candidate not found")
    return {"status": "deleted", "candidate_id": candidate_id}
