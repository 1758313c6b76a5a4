from datetime import timedelta
from typing import Optional, Dict, Any

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from alumni_api.core.config import settings
from alumni_api.core.database import get_db
from alumni_api.core.exceptions import (
    ApplicationNotFoundError,
    BusinessRuleError,
    JobNotFoundError,
)
from alumni_api.core.logging_config import logger
from alumni_api.core.types import utcnow, to_naive_utc
from alumni_api.models.job import (
    Job,
    JobApplication,
    JobType,
    JobCategory,
    ExperienceLevel,
    JobStatus,
    ApplicationStatus,
)
from alumni_api.models.user import User
from alumni_api.modules.auth.dependencies import (
    get_current_user,
    get_optional_user,
    ensure_owner_or_admin,
    is_owner_or_admin,
)
from alumni_api.schemas.common import MessageResponse
from alumni_api.schemas.job import (
    JobCreate,
    JobUpdate,
    JobResponse,
    JobListResponse,
    JobMutationResponse,
    ApplicationCreate,
    ApplicationStatusUpdate,
    ApplicationResponse,
    ApplicationsResponse,
    ApplicationMutationResponse,
    ApplyResponse,
    MyApplication,
    MyApplicationsResponse,
    JOB_FIELD_MAP,
)
from alumni_api.utils.pagination import paginate
from alumni_api.utils.updates import flatten_update, apply_updates
from alumni_api.utils.validation import validate_payload

router = APIRouter()


async def get_job_or_404(db: AsyncSession, job_id: str) -> Job:
    result = await db.execute(
        select(Job)
        .where(Job.id == job_id)
        .execution_options(populate_existing=True)
    )
    job = result.scalar_one_or_none()
    if not job:
        raise JobNotFoundError(job_id)
    return job


@router.get("", response_model=JobListResponse)
async def list_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    type: Optional[JobType] = Query(None),
    category: Optional[JobCategory] = Query(None),
    experience_level: Optional[ExperienceLevel] = Query(None),
    location: Optional[str] = Query(None, max_length=100),
    remote: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Active, unexpired jobs; featured first, then newest"""
    query = select(Job).where(
        Job.status == JobStatus.ACTIVE,
        Job.expires_at >= utcnow(),
    )

    if type:
        query = query.where(Job.type == type)
    if category:
        query = query.where(Job.category == category)
    if experience_level:
        query = query.where(Job.experience_level == experience_level)
    if location:
        query = query.where(or_(
            Job.company_city.icontains(location, autoescape=True),
            Job.company_country.icontains(location, autoescape=True),
        ))
    if remote:
        query = query.where(Job.company_is_remote == True)  # noqa: E712
    if search:
        query = query.where(or_(
            Job.title.icontains(search, autoescape=True),
            Job.description.icontains(search, autoescape=True),
            Job.company_name.icontains(search, autoescape=True),
        ))

    query = query.order_by(Job.featured.desc(), Job.created_at.desc())
    jobs, pagination = await paginate(db, query, page, limit)

    return JobListResponse(items=[JobResponse.from_job(j) for j in jobs], pagination=pagination)


@router.get("/my/applications", response_model=MyApplicationsResponse)
async def my_applications(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(JobApplication)
        .where(JobApplication.applicant_id == current_user.id)
        .options(selectinload(JobApplication.job))
        .order_by(JobApplication.applied_at.desc())
    )
    applications = [MyApplication.from_application(a) for a in result.scalars().all()]
    return MyApplicationsResponse(applications=applications, total_count=len(applications))


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Counts a view; applications are only shown to the poster or an admin"""
    job = await get_job_or_404(db, job_id)

    if job.status != JobStatus.ACTIVE:
        raise JobNotFoundError(job_id, message="Job not available")

    job.views = (job.views or 0) + 1
    await db.commit()

    show_applications = viewer is not None and is_owner_or_admin(viewer, job.posted_by_id)
    return JobResponse.from_job(job, include_applications=show_applications)


@router.post("", response_model=JobMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    body: JobCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    expires_at = to_naive_utc(body.expires_at) or utcnow() + timedelta(days=settings.JOB_DEFAULT_EXPIRY_DAYS)

    job = Job(
        title=body.title,
        description=body.description,
        company_name=body.company.name,
        company_logo=body.company.logo,
        company_website=body.company.website,
        company_city=body.company.location.city,
        company_country=body.company.location.country,
        company_is_remote=body.company.location.is_remote,
        type=body.type,
        category=body.category,
        experience_level=body.experience_level,
        requirements=body.requirements,
        skills=body.skills,
        salary_min=body.salary.min,
        salary_max=body.salary.max,
        salary_currency=body.salary.currency,
        application_method=body.application_method,
        application_contact=body.application_contact,
        application_deadline=to_naive_utc(body.application_deadline),
        posted_by_id=current_user.id,
        featured=body.featured,
        status=body.status,
        expires_at=expires_at,
    )
    db.add(job)
    await db.commit()

    job = await get_job_or_404(db, job.id)
    logger.info(
        f"Job posted: {job.title} @ {job.company_name}",
        extra={"event_type": "job_created", "job_id": str(job.id)}
    )

    return JobMutationResponse(message="Job posted successfully", job=JobResponse.from_job(job))


@router.put("/{job_id}", response_model=JobMutationResponse)
async def update_job(
    job_id: str,
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    job = await get_job_or_404(db, job_id)
    ensure_owner_or_admin(current_user, job.posted_by_id, "update this job")

    body = validate_payload(JobUpdate, payload)
    values = flatten_update(body.model_dump(exclude_unset=True), JOB_FIELD_MAP)
    for column in ("application_deadline", "expires_at"):
        if column in values:
            values[column] = to_naive_utc(values[column])

    apply_updates(job, values)
    await db.commit()

    job = await get_job_or_404(db, job_id)
    return JobMutationResponse(message="Job updated successfully", job=JobResponse.from_job(job))


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(
    job_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    job = await get_job_or_404(db, job_id)
    ensure_owner_or_admin(current_user, job.posted_by_id, "delete this job")

    await db.delete(job)
    await db.commit()

    return MessageResponse(message="Job deleted successfully")


@router.post("/{job_id}/apply", response_model=ApplyResponse)
async def apply_to_job(
    job_id: str,
    body: ApplicationCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    job = await get_job_or_404(db, job_id)

    if job.status != JobStatus.ACTIVE:
        raise BusinessRuleError("Job is not accepting applications")

    if job.application_deadline and utcnow() > job.application_deadline:
        raise BusinessRuleError("Application deadline has passed")

    if any(str(a.applicant_id) == str(current_user.id) for a in job.applications):
        raise BusinessRuleError("Already applied to this job")

    application = JobApplication(
        applicant_id=current_user.id,
        cover_letter=body.cover_letter,
        resume_url=str(body.resume) if body.resume else None,
        status=ApplicationStatus.APPLIED,
    )
    job.applications.append(application)
    await db.commit()

    logger.info(
        f"Application submitted for job {job_id}",
        extra={"event_type": "job_application", "job_id": job_id, "application_id": str(application.id)}
    )
    return ApplyResponse(message="Application submitted successfully", application_id=str(application.id))


@router.get("/{job_id}/applications", response_model=ApplicationsResponse)
async def get_applications(
    job_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    job = await get_job_or_404(db, job_id)
    ensure_owner_or_admin(current_user, job.posted_by_id, "view applications for this job")

    applications = [ApplicationResponse.from_application(a) for a in job.applications]
    return ApplicationsResponse(applications=applications, total_count=len(applications))


@router.put("/{job_id}/applications/{application_id}", response_model=ApplicationMutationResponse)
async def update_application_status(
    job_id: str,
    application_id: str,
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Review an application; any status may follow any other"""
    job = await get_job_or_404(db, job_id)
    ensure_owner_or_admin(current_user, job.posted_by_id, "review applications for this job")

    body = validate_payload(ApplicationStatusUpdate, payload)

    application = next((a for a in job.applications if str(a.id) == application_id), None)
    if application is None:
        raise ApplicationNotFoundError(application_id)

    application.status = body.status
    if body.notes is not None:
        application.notes = body.notes
    await db.commit()

    return ApplicationMutationResponse(
        message="Application status updated successfully",
        application=ApplicationResponse.from_application(application),
    )
