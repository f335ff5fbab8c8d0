"""
Import jobs router

Jobs are created and advanced by the external importer; these endpoints
only report their status for polling.
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from knowledge_base.database import get_db
from knowledge_base.schemas.import_job import ImportJobResponse, ImportJobListResponse
from knowledge_base.services.auth import get_current_active_admin
from knowledge_base.models.user import User
from knowledge_base.models.import_job import ImportJob, IMPORT_JOB_STATUSES

router = APIRouter(prefix="/import", tags=["Import Jobs"])


@router.get("/jobs", response_model=ImportJobListResponse)
async def list_import_jobs(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    job_status: Optional[str] = Query(None, alias="status"),
    current_user: User = Depends(get_current_active_admin),
    db: Session = Depends(get_db)
):
    """
    List import jobs, newest first (admin only)
    """
    query = db.query(ImportJob)
    if job_status:
        if job_status not in IMPORT_JOB_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status. Must be one of: {', '.join(IMPORT_JOB_STATUSES)}"
            )
        query = query.filter(ImportJob.status == job_status)

    total = query.count()
    jobs = query.order_by(ImportJob.created_at.desc(), ImportJob.id.desc()).offset(offset).limit(limit).all()
    return ImportJobListResponse(data=[ImportJobResponse.model_validate(job) for job in jobs], count=total)


@router.get("/jobs/{job_id}", response_model=ImportJobResponse)
async def get_import_job(
    job_id: int,
    current_user: User = Depends(get_current_active_admin),
    db: Session = Depends(get_db)
):
    """
    Get a single import job (admin only)
    """
    job = db.query(ImportJob).filter(ImportJob.id == job_id).first()
    if not job:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Import job not found"
        )
    return ImportJobResponse.model_validate(job)
