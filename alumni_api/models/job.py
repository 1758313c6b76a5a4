from sqlalchemy import (
    Column, String, Boolean, DateTime, Enum as SQLEnum, Integer, Text, JSON, Float,
    ForeignKey, UniqueConstraint,
)
from sqlalchemy.orm import relationship
import enum

from alumni_api.core.database import Base
from alumni_api.core.types import GUID, generate_uuid, utcnow


class JobType(str, enum.Enum):
    FULL_TIME = "full-time"
    PART_TIME = "part-time"
    CONTRACT = "contract"
    INTERNSHIP = "internship"
    VOLUNTEER = "volunteer"


class JobCategory(str, enum.Enum):
    TECHNOLOGY = "technology"
    HEALTHCARE = "healthcare"
    FINANCE = "finance"
    EDUCATION = "education"
    MARKETING = "marketing"
    SALES = "sales"
    OPERATIONS = "operations"
    OTHER = "other"


class ExperienceLevel(str, enum.Enum):
    ENTRY = "entry"
    MID = "mid"
    SENIOR = "senior"
    EXECUTIVE = "executive"


class ApplicationMethod(str, enum.Enum):
    EMAIL = "email"
    WEBSITE = "website"
    PHONE = "phone"
    IN_PERSON = "in_person"


class JobStatus(str, enum.Enum):
    ACTIVE = "active"
    CLOSED = "closed"
    DRAFT = "draft"


class ApplicationStatus(str, enum.Enum):
    APPLIED = "applied"
    REVIEWED = "reviewed"
    SHORTLISTED = "shortlisted"
    INTERVIEWED = "interviewed"
    OFFERED = "offered"
    REJECTED = "rejected"


class Job(Base):
    """Job board posting"""
    __tablename__ = "jobs"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)

    # Company
    company_name = Column(String(255), nullable=False)
    company_logo = Column(Text, nullable=True)
    company_website = Column(Text, nullable=True)
    company_city = Column(String(255), nullable=True)
    company_country = Column(String(255), nullable=True)
    company_is_remote = Column(Boolean, default=False, nullable=False)

    type = Column(SQLEnum(JobType), nullable=False, index=True)
    category = Column(SQLEnum(JobCategory), nullable=False, index=True)
    experience_level = Column(SQLEnum(ExperienceLevel), nullable=False)
    requirements = Column(JSON, default=list)
    skills = Column(JSON, default=list)

    # Salary
    salary_min = Column(Float, nullable=True)
    salary_max = Column(Float, nullable=True)
    salary_currency = Column(String(10), default="USD")

    application_method = Column(SQLEnum(ApplicationMethod), nullable=False)
    application_contact = Column(String(500), nullable=True)
    application_deadline = Column(DateTime, nullable=True)

    posted_by_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    views = Column(Integer, default=0, nullable=False)
    featured = Column(Boolean, default=False, nullable=False)
    status = Column(SQLEnum(JobStatus), default=JobStatus.ACTIVE, nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    posted_by = relationship("User", lazy="selectin")
    applications = relationship(
        "JobApplication",
        back_populates="job",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="JobApplication.applied_at",
    )

    def __repr__(self):
        return f"<Job {self.title} @ {self.company_name}>"


class JobApplication(Base):
    __tablename__ = "job_applications"
    __table_args__ = (
        UniqueConstraint("job_id", "applicant_id", name="uq_job_applicant"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    job_id = Column(GUID, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    applicant_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    cover_letter = Column(Text, nullable=True)
    resume_url = Column(Text, nullable=True)
    status = Column(SQLEnum(ApplicationStatus), default=ApplicationStatus.APPLIED, nullable=False)
    notes = Column(Text, nullable=True)
    applied_at = Column(DateTime, default=utcnow, nullable=False)

    job = relationship("Job", back_populates="applications")
    applicant = relationship("User", lazy="selectin")
