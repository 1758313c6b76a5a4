from typing import Optional, Dict, Any

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from alumni_api.core.config import settings
from alumni_api.core.database import get_db
from alumni_api.core.exceptions import (
    AnnouncementNotFoundError,
    AuthorizationError,
    CommentNotFoundError,
    ReplyNotFoundError,
)
from alumni_api.core.logging_config import logger
from alumni_api.core.types import utcnow, to_naive_utc
from alumni_api.models.announcement import (
    Announcement,
    AnnouncementLike,
    AnnouncementComment,
    CommentReply,
    AnnouncementCategory,
    AnnouncementPriority,
    AnnouncementStatus,
)
from alumni_api.models.user import User, UserRole
from alumni_api.modules.auth.dependencies import (
    get_current_user,
    get_optional_user,
    require_roles,
    ensure_owner_or_admin,
)
from alumni_api.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementUpdate,
    AnnouncementResponse,
    AnnouncementListResponse,
    AnnouncementMutationResponse,
    CommentCreate,
    ReplyCreate,
    CommentResponse,
    ReplyResponse,
    CommentMutationResponse,
    ReplyMutationResponse,
    LikeResponse,
    ANNOUNCEMENT_FIELD_MAP,
)
from alumni_api.schemas.common import MessageResponse
from alumni_api.utils.pagination import paginate
from alumni_api.utils.updates import flatten_update, apply_updates
from alumni_api.utils.validation import validate_payload

router = APIRouter()

require_staff = require_roles(UserRole.ADMIN, UserRole.MODERATOR)


async def get_announcement_or_404(db: AsyncSession, announcement_id: str) -> Announcement:
    result = await db.execute(
        select(Announcement)
        .where(Announcement.id == announcement_id)
        .execution_options(populate_existing=True)
    )
    announcement = result.scalar_one_or_none()
    if not announcement:
        raise AnnouncementNotFoundError(announcement_id)
    return announcement


def find_comment(announcement: Announcement, comment_id: str) -> AnnouncementComment:
    comment = next((c for c in announcement.comments if str(c.id) == comment_id), None)
    if comment is None:
        raise CommentNotFoundError(comment_id)
    return comment


@router.get("", response_model=AnnouncementListResponse)
async def list_announcements(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    category: Optional[AnnouncementCategory] = Query(None),
    priority: Optional[AnnouncementPriority] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Published, unexpired announcements; pinned first, then newest"""
    now = utcnow()
    query = select(Announcement).where(
        Announcement.status == AnnouncementStatus.PUBLISHED,
        or_(Announcement.is_public == True, Announcement.publish_date <= now),  # noqa: E712
        or_(Announcement.expiry_date.is_(None), Announcement.expiry_date >= now),
    )

    if category:
        query = query.where(Announcement.category == category)
    if priority:
        query = query.where(Announcement.priority == priority)
    if search:
        query = query.where(or_(
            Announcement.title.icontains(search, autoescape=True),
            Announcement.content.icontains(search, autoescape=True),
        ))

    query = query.order_by(Announcement.is_pinned.desc(), Announcement.publish_date.desc())
    announcements, pagination = await paginate(db, query, page, limit)

    return AnnouncementListResponse(
        items=[AnnouncementResponse.from_announcement(a) for a in announcements],
        pagination=pagination,
    )


@router.get("/{announcement_id}", response_model=AnnouncementResponse)
async def get_announcement(
    announcement_id: str,
    viewer: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Full announcement with likes, comments and replies; counts a view"""
    announcement = await get_announcement_or_404(db, announcement_id)

    if announcement.status != AnnouncementStatus.PUBLISHED:
        if viewer is None or viewer.role != UserRole.ADMIN:
            raise AuthorizationError()

    announcement.views = (announcement.views or 0) + 1
    await db.commit()

    return AnnouncementResponse.from_announcement(announcement, detailed=True)


@router.post("", response_model=AnnouncementMutationResponse, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    body: AnnouncementCreate,
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    announcement = Announcement(
        title=body.title,
        content=body.content,
        author_id=current_user.id,
        category=body.category,
        priority=body.priority,
        status=body.status,
        publish_date=to_naive_utc(body.publish_date) or utcnow(),
        expiry_date=to_naive_utc(body.expiry_date),
        is_pinned=body.is_pinned,
        image_url=body.image_url,
        is_public=body.target_audience.is_public,
        target_graduation_years=body.target_audience.graduation_years,
        target_roles=[role.value for role in body.target_audience.roles],
    )
    db.add(announcement)
    await db.commit()

    announcement = await get_announcement_or_404(db, announcement.id)
    logger.info(
        f"Announcement created: {announcement.title}",
        extra={"event_type": "announcement_created", "announcement_id": str(announcement.id)}
    )

    return AnnouncementMutationResponse(
        message="Announcement created successfully",
        announcement=AnnouncementResponse.from_announcement(announcement),
    )


@router.put("/{announcement_id}", response_model=AnnouncementMutationResponse)
async def update_announcement(
    announcement_id: str,
    payload: Dict[str, Any] = Body(...),
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    announcement = await get_announcement_or_404(db, announcement_id)
    ensure_owner_or_admin(current_user, announcement.author_id, "update this announcement")

    body = validate_payload(AnnouncementUpdate, payload)
    values = flatten_update(body.model_dump(exclude_unset=True), ANNOUNCEMENT_FIELD_MAP)
    for column in ("publish_date", "expiry_date"):
        if column in values:
            values[column] = to_naive_utc(values[column])

    apply_updates(announcement, values)
    await db.commit()

    announcement = await get_announcement_or_404(db, announcement_id)
    return AnnouncementMutationResponse(
        message="Announcement updated successfully",
        announcement=AnnouncementResponse.from_announcement(announcement),
    )


@router.delete("/{announcement_id}", response_model=MessageResponse)
async def delete_announcement(
    announcement_id: str,
    current_user: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db)
):
    announcement = await get_announcement_or_404(db, announcement_id)
    ensure_owner_or_admin(current_user, announcement.author_id, "delete this announcement")

    await db.delete(announcement)
    await db.commit()

    return MessageResponse(message="Announcement deleted successfully")


@router.post("/{announcement_id}/like", response_model=LikeResponse)
async def toggle_like(
    announcement_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Like, or unlike when the caller already liked it"""
    announcement = await get_announcement_or_404(db, announcement_id)

    existing = next((lk for lk in announcement.likes if str(lk.user_id) == str(current_user.id)), None)
    if existing:
        announcement.likes.remove(existing)
    else:
        announcement.likes.append(AnnouncementLike(user_id=current_user.id))
    await db.commit()

    return LikeResponse(
        message="Announcement unliked" if existing else "Announcement liked",
        liked=existing is None,
        like_count=len(announcement.likes),
    )


@router.post(
    "/{announcement_id}/comments",
    response_model=CommentMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    announcement_id: str,
    body: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    announcement = await get_announcement_or_404(db, announcement_id)

    comment = AnnouncementComment(user_id=current_user.id, content=body.content)
    announcement.comments.append(comment)
    await db.commit()

    announcement = await get_announcement_or_404(db, announcement_id)
    comment = find_comment(announcement, str(comment.id))
    return CommentMutationResponse(
        message="Comment added successfully",
        comment=CommentResponse.from_comment(comment),
    )


@router.post(
    "/{announcement_id}/comments/{comment_id}/replies",
    response_model=ReplyMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_reply(
    announcement_id: str,
    comment_id: str,
    body: ReplyCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    announcement = await get_announcement_or_404(db, announcement_id)
    comment = find_comment(announcement, comment_id)

    reply = CommentReply(user_id=current_user.id, content=body.content)
    comment.replies.append(reply)
    await db.commit()

    announcement = await get_announcement_or_404(db, announcement_id)
    comment = find_comment(announcement, comment_id)
    reply = next(r for r in comment.replies if str(r.id) == str(reply.id))
    return ReplyMutationResponse(message="Reply added successfully", reply=ReplyResponse.from_reply(reply))


@router.delete("/{announcement_id}/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    announcement_id: str,
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Comment author or admin; replies go with the comment"""
    announcement = await get_announcement_or_404(db, announcement_id)
    comment = find_comment(announcement, comment_id)
    ensure_owner_or_admin(current_user, comment.user_id, "delete this comment")

    announcement.comments.remove(comment)
    await db.commit()

    return MessageResponse(message="Comment deleted successfully")


@router.delete(
    "/{announcement_id}/comments/{comment_id}/replies/{reply_id}",
    response_model=MessageResponse,
)
async def delete_reply(
    announcement_id: str,
    comment_id: str,
    reply_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    announcement = await get_announcement_or_404(db, announcement_id)
    comment = find_comment(announcement, comment_id)

    reply = next((r for r in comment.replies if str(r.id) == reply_id), None)
    if reply is None:
        raise ReplyNotFoundError(reply_id)
    ensure_owner_or_admin(current_user, reply.user_id, "delete this reply")

    comment.replies.remove(reply)
    await db.commit()

    return MessageResponse(message="Reply deleted successfully")
