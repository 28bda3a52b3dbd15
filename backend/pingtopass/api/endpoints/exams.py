from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pingtopass.core.errors import NotFoundError
from pingtopass.crud.crud_exam import exam as crud_exam
from pingtopass.db.database import get_db
from pingtopass.schemas.exam import ExamDetailResponse, ExamResponse
from pingtopass.schemas.response import StandardResponse

router = APIRouter()


@router.get("", response_model=StandardResponse[List[ExamResponse]])
def list_exams(db: Session = Depends(get_db)):
    exams = crud_exam.get_active(db)
    return StandardResponse(data=[ExamResponse.model_validate(e) for e in exams])


@router.get("/{exam_id}", response_model=StandardResponse[ExamDetailResponse])
def get_exam(exam_id: int, db: Session = Depends(get_db)):
    db_exam = crud_exam.get_active_by_id(db, exam_id=exam_id)
    if db_exam is None:
        raise NotFoundError("Exam not found")
    return StandardResponse(data=ExamDetailResponse.model_validate(db_exam))
