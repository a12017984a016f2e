"""
Job Routes

GET /jobs - List active, unexpired jobs with filters
POST /jobs - Create job posting
GET /jobs/user/posted - Jobs posted by the current user
GET /jobs/{job_id} - Get job details (counts a view)
PUT /jobs/{job_id} - Update job (poster only)
POST /jobs/{job_id}/apply - Apply to job
PUT /jobs/{job_id}/applications/{user_id} - Review an application (poster only)
"""

from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Optional

from talentlink.api.deps import Page, pagination_params
from talentlink.core.auth import get_current_user, get_optional_user
from talentlink.services.job_service import JobService
from talentlink.services.status_rules import APPLICATION_TRANSITIONS, can_transition
from talentlink.schemas.schemas import (
    JobCreate, JobUpdate, JobListResponse, JobDetailResponse, JobMutationResponse,
    JobStatus, ApplicationCreate, ApplicationStatusUpdate, ApplicationStatusResponse,
    MessageResponse
)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def get_job_or_404(jobs: JobService, job_id: str) -> dict:
    job = jobs.get_raw(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


def is_poster(job: dict, user: Optional[dict]) -> bool:
    return user is not None and str(job["posted_by"]) == user["id"]


@router.get("", response_model=JobListResponse)
async def list_jobs(
    page: Page = Depends(pagination_params),
    job_type: Optional[str] = Query(None, alias="type"),
    location: Optional[str] = Query(None, description="Case-insensitive substring"),
    search: Optional[str] = Query(None, description="Full-text search in title, description, skills")
):
    """List active, unexpired job postings. Featured first, then newest."""
    jobs, pagination = JobService().list_active(
        page.page, page.limit, job_type=job_type, location=location, search=search
    )
    return JobListResponse(jobs=jobs, pagination=pagination)


@router.post("", response_model=JobMutationResponse, status_code=201)
async def create_job(job: JobCreate, user: dict = Depends(get_current_user)):
    """Create a new job posting. The caller becomes its poster."""
    created = JobService().create(job.model_dump(), posted_by=user["id"])
    return JobMutationResponse(job=created)


@router.get("/user/posted", response_model=JobListResponse)
async def list_posted_jobs(page: Page = Depends(pagination_params), user: dict = Depends(get_current_user)):
    """Jobs posted by the current user, newest first, with applications."""
    jobs, pagination = JobService().list_by_poster(user["id"], page.page, page.limit)
    return JobListResponse(jobs=jobs, pagination=pagination)


@router.get("/{job_id}", response_model=JobDetailResponse)
async def get_job(job_id: str, user: Optional[dict] = Depends(get_optional_user)):
    """
    Get details of a specific job.

    Applications are only visible to the poster. The reported view count
    is the stored count plus this view.
    """
    jobs = JobService()
    job = get_job_or_404(jobs, job_id)

    jobs.count_view(job_id)

    detail = jobs.populate(job, with_applications=is_poster(job, user))
    detail["views"] = job.get("views", 0) + 1
    return JobDetailResponse(job=detail)


@router.put("/{job_id}", response_model=JobMutationResponse)
async def update_job(job_id: str, update: JobUpdate, user: dict = Depends(get_current_user)):
    """Update a job posting. Only the poster can update."""
    jobs = JobService()
    job = get_job_or_404(jobs, job_id)

    if not is_poster(job, user):
        raise HTTPException(status_code=403, detail="Not authorized to update this job")

    updates = {
        field: value
        for field, value in update.model_dump(exclude_unset=True).items()
        if value is not None
    }
    updated = jobs.update(job_id, updates)
    return JobMutationResponse(job=updated)


@router.post("/{job_id}/apply", response_model=MessageResponse)
async def apply_to_job(
    job_id: str,
    application: Optional[ApplicationCreate] = None,
    user: dict = Depends(get_current_user)
):
    """Apply to a job. Cannot apply twice to same job."""
    jobs = JobService()
    job = get_job_or_404(jobs, job_id)

    if job.get("status") != JobStatus.active.value:
        raise HTTPException(status_code=400, detail="Job is no longer accepting applications")

    cover_letter = application.cover_letter if application else ""
    if jobs.find_application(job, user["id"]) or not jobs.add_application(job_id, user["id"], cover_letter):
        raise HTTPException(status_code=400, detail="You have already applied to this job")

    return MessageResponse(message="Application submitted successfully")


@router.put("/{job_id}/applications/{user_id}", response_model=ApplicationStatusResponse)
async def update_application_status(
    job_id: str,
    user_id: str,
    update: ApplicationStatusUpdate,
    user: dict = Depends(get_current_user)
):
    """Move an application along pending -> reviewed -> accepted/rejected. Poster only."""
    jobs = JobService()
    job = get_job_or_404(jobs, job_id)

    if not is_poster(job, user):
        raise HTTPException(status_code=403, detail="Not authorized to review applications for this job")

    application = jobs.find_application(job, user_id)
    if application is None:
        raise HTTPException(status_code=404, detail="Application not found")

    if not can_transition(APPLICATION_TRANSITIONS, application["status"], update.status):
        raise HTTPException(
            status_code=400,
            detail=f"Cannot change application from {application['status']} to {update.status}"
        )

    updated = jobs.set_application_status(job_id, user_id, update.status)
    return ApplicationStatusResponse(application=updated)
