"""Per-user dashboard summary."""

from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from blogai.models import Post
from blogai.schemas.auth import SubjectIdentity
from blogai.schemas.posts import DashboardItem, DashboardResponse, DashboardStats
from blogai.services.accounts import get_own_account

RECENT_LIMIT = 3


def relative_date(value: datetime | None, now: datetime | None = None) -> str:
    """Human label for how long ago value was: Today, Yesterday, N days ago, N week(s) ago."""
    if value is None:
        return ""
    now = now or datetime.now(UTC)
    if value.tzinfo is None:
        # SQLite returns naive UTC timestamps.
        value = value.replace(tzinfo=UTC)
    diff = now - value
    day = timedelta(days=1)
    if diff < day:
        return "Today"
    if diff < 2 * day:
        return "Yesterday"
    if diff < 7 * day:
        return f"{diff // day} days ago"
    weeks = diff // timedelta(weeks=1)
    return f"{weeks} week{'s' if weeks > 1 else ''} ago"


def build_dashboard(
    db: Session,
    requester: SubjectIdentity,
    now: datetime | None = None,
) -> DashboardResponse:
    user = get_own_account(db, requester)
    own = db.query(Post).filter(Post.author_id == user.id)

    recent = own.order_by(Post.created_at.desc(), Post.id.desc()).limit(RECENT_LIMIT).all()
    drafts = (
        own.filter(Post.status == "draft")
        .order_by(Post.updated_at.desc(), Post.id.desc())
        .limit(RECENT_LIMIT)
        .all()
    )
    return DashboardResponse(
        stats=DashboardStats(
            total_posts=own.count(),
            published_posts=own.filter(Post.status == "published").count(),
            draft_posts=own.filter(Post.status == "draft").count(),
            generations=f"{user.generations_left}/{user.generations_total}",
        ),
        recent_posts=[
            DashboardItem(id=p.id, title=p.title, date=relative_date(p.created_at, now))
            for p in recent
        ],
        drafts=[
            DashboardItem(
                id=d.id,
                title=d.title,
                date=relative_date(d.updated_at, now),
                status=d.writing_phase or "Needs Editing",
            )
            for d in drafts
        ],
    )
