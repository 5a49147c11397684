from typing import List
from fastapi import APIRouter, status

from study_server.api_service import schemas
from study_server.api_service.api_v1.deps import RepoDep
from study_server.planning.models import SemesterRecord, new_id

router = APIRouter()

@router.get("", response_model=List[schemas.Semester])
async def get_semesters(repo: RepoDep):
    return sorted(repo.state.semesters, key=lambda s: s.start_date)

@router.post("", response_model=schemas.Semester, status_code=status.HTTP_201_CREATED)
async def create_semester(semester_in: schemas.SemesterCreate, repo: RepoDep):
    return await repo.add_semester(SemesterRecord(id=new_id(), **semester_in.model_dump()))

@router.get("/{semester_id}", response_model=schemas.Semester)
async def get_semester(semester_id: str, repo: RepoDep):
    return repo.state.get_semester(semester_id)

@router.patch("/{semester_id}", response_model=schemas.SemesterUpdateResult)
async def update_semester(semester_id: str, semester_update: schemas.SemesterUpdate, repo: RepoDep):
    """
    Update a semester. Moving its start date or changing its breaks deletes events
    that now fall inside a break and renumbers week numbers typed into titles.
    """
    semester, plan = await repo.update_semester(semester_id, semester_update.model_dump(exclude_unset=True))
    return schemas.SemesterUpdateResult(
        semester=semester,
        deleted_event_ids=plan.deleted_ids,
        retitled_event_ids=[e.id for e in plan.retitled],
    )

@router.delete("/{semester_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_semester(semester_id: str, repo: RepoDep):
    await repo.delete_semester(semester_id)
    return None
