from pydantic import BaseModel, Field, HttpUrl
from typing import Optional, List
from datetime import datetime

from alumni_api.models.job import (
    Job,
    JobApplication,
    JobType,
    JobCategory,
    ExperienceLevel,
    ApplicationMethod,
    JobStatus,
    ApplicationStatus,
)
from alumni_api.schemas.common import Pagination, UserSummary


class CompanyLocation(BaseModel):
    city: Optional[str] = None
    country: Optional[str] = None
    is_remote: bool = False


class Company(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    logo: Optional[str] = None
    website: Optional[str] = None
    location: CompanyLocation = Field(default_factory=CompanyLocation)


class Salary(BaseModel):
    min: Optional[float] = Field(None, ge=0)
    max: Optional[float] = Field(None, ge=0)
    currency: str = "USD"


class JobCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    company: Company
    type: JobType
    category: JobCategory
    experience_level: ExperienceLevel
    requirements: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    salary: Salary = Field(default_factory=Salary)
    application_method: ApplicationMethod
    application_contact: Optional[str] = None
    application_deadline: Optional[datetime] = None
    featured: bool = False
    status: JobStatus = JobStatus.ACTIVE
    expires_at: Optional[datetime] = None


class CompanyLocationUpdate(BaseModel):
    city: Optional[str] = None
    country: Optional[str] = None
    is_remote: Optional[bool] = None


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    logo: Optional[str] = None
    website: Optional[str] = None
    location: Optional[CompanyLocationUpdate] = None


class SalaryUpdate(BaseModel):
    min: Optional[float] = Field(None, ge=0)
    max: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = None


class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    company: Optional[CompanyUpdate] = None
    type: Optional[JobType] = None
    category: Optional[JobCategory] = None
    experience_level: Optional[ExperienceLevel] = None
    requirements: Optional[List[str]] = None
    skills: Optional[List[str]] = None
    salary: Optional[SalaryUpdate] = None
    application_method: Optional[ApplicationMethod] = None
    application_contact: Optional[str] = None
    application_deadline: Optional[datetime] = None
    featured: Optional[bool] = None
    status: Optional[JobStatus] = None
    expires_at: Optional[datetime] = None


JOB_FIELD_MAP = {
    "company.name": "company_name",
    "company.logo": "company_logo",
    "company.website": "company_website",
    "company.location.city": "company_city",
    "company.location.country": "company_country",
    "company.location.is_remote": "company_is_remote",
    "salary.min": "salary_min",
    "salary.max": "salary_max",
    "salary.currency": "salary_currency",
}


class ApplicationCreate(BaseModel):
    cover_letter: Optional[str] = Field(None, max_length=5000)
    resume: Optional[HttpUrl] = None


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus
    notes: Optional[str] = Field(None, max_length=2000)


class ApplicationResponse(BaseModel):
    id: str
    applicant: UserSummary
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None
    status: ApplicationStatus
    notes: Optional[str] = None
    applied_at: datetime

    @classmethod
    def from_application(cls, application: JobApplication) -> "ApplicationResponse":
        return cls(
            id=str(application.id),
            applicant=UserSummary.from_user(application.applicant, include_email=True),
            cover_letter=application.cover_letter,
            resume_url=application.resume_url,
            status=application.status,
            notes=application.notes,
            applied_at=application.applied_at,
        )


class JobResponse(BaseModel):
    id: str
    title: str
    description: str
    company: Company
    type: JobType
    category: JobCategory
    experience_level: ExperienceLevel
    requirements: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    salary: Salary
    application_method: ApplicationMethod
    application_contact: Optional[str] = None
    application_deadline: Optional[datetime] = None
    posted_by: UserSummary
    views: int
    featured: bool
    status: JobStatus
    expires_at: datetime
    application_count: int
    applications: Optional[List[ApplicationResponse]] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_job(cls, job: Job, include_applications: bool = False) -> "JobResponse":
        applications = None
        if include_applications:
            applications = [ApplicationResponse.from_application(a) for a in job.applications]

        return cls(
            id=str(job.id),
            title=job.title,
            description=job.description,
            company=Company(
                name=job.company_name,
                logo=job.company_logo,
                website=job.company_website,
                location=CompanyLocation(
                    city=job.company_city,
                    country=job.company_country,
                    is_remote=bool(job.company_is_remote),
                ),
            ),
            type=job.type,
            category=job.category,
            experience_level=job.experience_level,
            requirements=job.requirements or [],
            skills=job.skills or [],
            salary=Salary(min=job.salary_min, max=job.salary_max, currency=job.salary_currency or "USD"),
            application_method=job.application_method,
            application_contact=job.application_contact,
            application_deadline=job.application_deadline,
            posted_by=UserSummary.from_user(job.posted_by, include_email=True),
            views=job.views or 0,
            featured=bool(job.featured),
            status=job.status,
            expires_at=job.expires_at,
            application_count=len(job.applications),
            applications=applications,
            created_at=job.created_at,
            updated_at=job.updated_at,
        )


class JobListResponse(BaseModel):
    items: List[JobResponse]
    pagination: Pagination


class JobMutationResponse(BaseModel):
    message: str
    job: JobResponse


class ApplyResponse(BaseModel):
    message: str
    application_id: str


class ApplicationsResponse(BaseModel):
    applications: List[ApplicationResponse]
    total_count: int


class ApplicationMutationResponse(BaseModel):
    message: str
    application: ApplicationResponse


class JobSummary(BaseModel):
    id: str
    title: str
    company_name: str
    type: JobType
    status: JobStatus
    application_deadline: Optional[datetime] = None


class MyApplication(BaseModel):
    id: str
    job: JobSummary
    status: ApplicationStatus
    cover_letter: Optional[str] = None
    resume_url: Optional[str] = None
    applied_at: datetime

    @classmethod
    def from_application(cls, application: JobApplication) -> "MyApplication":
        job = application.job
        return cls(
            id=str(application.id),
            job=JobSummary(
                id=str(job.id),
                title=job.title,
                company_name=job.company_name,
                type=job.type,
                status=job.status,
                application_deadline=job.application_deadline,
            ),
            status=application.status,
            cover_letter=application.cover_letter,
            resume_url=application.resume_url,
            applied_at=application.applied_at,
        )


class MyApplicationsResponse(BaseModel):
    applications: List[MyApplication]
    total_count: int
