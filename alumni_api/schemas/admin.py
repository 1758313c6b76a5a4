from pydantic import BaseModel, Field, StrictBool, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from enum import Enum

from alumni_api.models.user import UserRole
from alumni_api.schemas.common import NotificationChannel, DeliveryResults, Pagination
from alumni_api.schemas.user import UserResponse


# ==================== Dashboard Schemas ====================

class RecentUser(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    role: UserRole
    created_at: datetime


class RecentEvent(BaseModel):
    id: str
    title: str
    type: str
    start_date: datetime
    status: str
    organizer: Optional[Dict[str, Any]] = None
    created_at: datetime


class UserStats(BaseModel):
    total: int
    new_in_period: int
    by_role: Dict[str, int]
    recent: List[RecentUser]


class EventStats(BaseModel):
    total: int
    upcoming: int
    by_type: Dict[str, int]
    recent: List[RecentEvent]


class PaymentStats(BaseModel):
    total_revenue: float
    revenue_in_period: float


class AnnouncementStats(BaseModel):
    total: int
    by_category: Dict[str, int]


class JobStats(BaseModel):
    total_active: int
    by_category: Dict[str, int]


class DashboardPeriod(BaseModel):
    start_date: datetime
    end_date: datetime


class DashboardResponse(BaseModel):
    """Aggregated admin dashboard"""
    period: DashboardPeriod
    users: UserStats
    events: EventStats
    payments: PaymentStats
    announcements: AnnouncementStats
    jobs: JobStats


# ==================== Analytics Schemas ====================

class GrowthPoint(BaseModel):
    date: str
    count: int


class YearCount(BaseModel):
    year: int
    count: int


class MonthlyRevenue(BaseModel):
    month: str  # YYYY-MM
    revenue: float
    transactions: int


class TypeRevenue(BaseModel):
    type: str
    revenue: float
    count: int


class UserAnalytics(BaseModel):
    growth_data: List[GrowthPoint]
    by_graduation_year: List[YearCount]


class PaymentAnalytics(BaseModel):
    monthly_revenue: List[MonthlyRevenue]
    by_type: List[TypeRevenue]
    average_transaction: float
    refund_rate: float  # percent of payments refunded


class EventAnalytics(BaseModel):
    by_type: Dict[str, int]


class AnalyticsResponse(BaseModel):
    days: int
    users: UserAnalytics
    payments: PaymentAnalytics
    events: EventAnalytics


# ==================== User Management Schemas ====================

class AdminUserListResponse(BaseModel):
    items: List[UserResponse]
    pagination: Pagination


class RoleUpdate(BaseModel):
    role: UserRole


class StatusUpdate(BaseModel):
    is_active: StrictBool


class AdminUserMutationResponse(BaseModel):
    message: str
    user: UserResponse


class AdminUserStatusFilter(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


# ==================== Settings ====================

class GeneralSettings(BaseModel):
    site_name: str
    site_description: str
    contact_email: str
    support_phone: str


class PaymentSettings(BaseModel):
    default_currency: str
    stripe_enabled: bool
    mobile_money_enabled: bool


class NotificationSettings(BaseModel):
    email_enabled: bool
    sms_enabled: bool
    push_enabled: bool


class FeatureSettings(BaseModel):
    job_board: bool
    events: bool
    announcements: bool
    messaging: bool


class SettingsResponse(BaseModel):
    general: GeneralSettings
    payments: PaymentSettings
    notifications: NotificationSettings
    features: FeatureSettings


# ==================== Export ====================

class ExportType(str, Enum):
    USERS = "users"
    EVENTS = "events"
    PAYMENTS = "payments"


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"


# ==================== Bulk Notifications ====================

class Audience(BaseModel):
    all: bool = True
    roles: List[UserRole] = Field(default_factory=list)
    graduation_years: List[int] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)


class BulkNotificationRequest(BaseModel):
    type: NotificationChannel
    subject: Optional[str] = Field(None, max_length=255)
    message: str = Field(..., min_length=1, max_length=10000)
    audience: Audience = Field(default_factory=Audience)

    @model_validator(mode="after")
    def subject_required_for_email(self):
        if self.type in (NotificationChannel.EMAIL, NotificationChannel.BOTH):
            if not self.subject or not self.subject.strip():
                raise ValueError("Subject is required for email notifications")
        return self


class BulkNotificationResponse(BaseModel):
    message: str
    recipients: int
    results: DeliveryResults
