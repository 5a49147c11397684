from typing import List
from fastapi import APIRouter, status

from study_server.api_service import schemas
from study_server.api_service.api_v1.deps import RepoDep

router = APIRouter()

@router.get("", response_model=List[schemas.Course])
async def get_courses(repo: RepoDep):
    return repo.state.courses

@router.post("", response_model=schemas.Course, status_code=status.HTTP_201_CREATED)
async def create_course(course_in: schemas.CourseCreate, repo: RepoDep):
    return await repo.add_course(
        title=course_in.title,
        code=course_in.code,
        color=course_in.color,
        semester_id=course_in.semester_id,
    )

@router.put("/order", response_model=List[schemas.Course])
async def reorder_courses(order: schemas.CourseOrder, repo: RepoDep):
    """Persist the result of a drag-and-drop reorder."""
    return await repo.reorder_courses(order.course_ids)

@router.get("/{course_id}", response_model=schemas.Course)
async def get_course(course_id: str, repo: RepoDep):
    return repo.state.get_course(course_id)

@router.patch("/{course_id}", response_model=schemas.Course)
async def update_course(course_id: str, course_update: schemas.CourseUpdate, repo: RepoDep):
    return await repo.update_course(course_id, course_update.model_dump(exclude_unset=True))

@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(course_id: str, repo: RepoDep):
    """Delete a course along with all of its events."""
    await repo.delete_course(course_id)
    return None
