"""
Load demo data: an admin, a premium and a free account, each with two collections,
three posts and saves of other accounts' published posts. Run from project root:
  python -m blogai.scripts.seed [--reset]

All demo accounts use the password 'password123' (stored hashed).
"""
import argparse
import logging
import sys

from sqlalchemy.orm import Session

from blogai.core.config import get_settings
from blogai.core.context import AppContext
from blogai.models import Collection, Post, SavedPost, User, post_collections
from blogai.services.posts import count_words, make_excerpt

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password123"

DEMO_ACCOUNTS = [
    # (name, email, role, subscription, generations_left, generations_total)
    ("Admin User", "admin@example.com", "admin", "premium", 999, 999),
    ("Premium User", "premium@example.com", "user", "premium", 100, 100),
    ("Free User", "free@example.com", "user", "free", 12, 20),
]


def _reset(db: Session) -> None:
    db.query(SavedPost).delete(synchronize_session=False)
    db.execute(post_collections.delete())
    db.query(Collection).delete(synchronize_session=False)
    db.query(Post).delete(synchronize_session=False)
    db.query(User).delete(synchronize_session=False)
    db.commit()


def _post(author: User, title: str, content: str, status: str) -> Post:
    return Post(
        author_id=author.id,
        title=title,
        content=content,
        excerpt=make_excerpt(content),
        word_count=count_words(content),
        status=status,
        writing_phase="Needs Editing" if status == "draft" else None,
        likes=0,
    )


def seed(db: Session, context: AppContext) -> dict[str, int]:
    users: list[User] = []
    for name, email, role, subscription, left, total in DEMO_ACCOUNTS:
        user = User(
            name=name,
            email=email,
            password_hash=context.issuer.hash_secret(DEMO_PASSWORD),
            role=role,
            subscription=subscription,
            generations_left=left,
            generations_total=total,
            avatar=f"https://api.dicebear.com/7.x/avataaars/svg?seed={email.split('@')[0]}",
        )
        db.add(user)
        users.append(user)
    db.flush()

    posts: list[Post] = []
    collections = 0
    for user in users:
        favorites = Collection(owner_id=user.id, name=f"{user.name}'s Favorites", description="My favorite posts")
        drafts = Collection(owner_id=user.id, name=f"{user.name}'s Drafts", description="Works in progress")
        first = _post(user, f"{user.name}'s First Post", "This is the content of my first post. It's a great start to my writing journey!", "published")
        draft = _post(user, f"{user.name}'s Draft", "This is a draft post that I'm still working on. I'll publish it when it's ready.", "draft")
        second = _post(user, f"{user.name}'s Second Post", "This is the content of my second post. I'm getting better at writing!", "published")
        favorites.posts = [first, second]
        drafts.posts = [draft]
        db.add_all([favorites, drafts, first, draft, second])
        posts.extend([first, draft, second])
        collections += 2
    db.flush()

    saves = 0
    for user in users:
        others = [p for p in posts if p.author_id != user.id and p.status == "published"]
        for post in others[:2]:
            db.add(SavedPost(user_id=user.id, post_id=post.id))
            saves += 1
    db.commit()
    return {"users": len(users), "collections": collections, "posts": len(posts), "saved_posts": saves}


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed BlogAI demo data.")
    parser.add_argument("--reset", action="store_true", help="Delete all existing data first")
    args = parser.parse_args()

    context = AppContext.build(get_settings())
    db = context.session_factory()
    try:
        if args.reset:
            _reset(db)
        elif db.query(User).count() > 0:
            logger.error("Database already has accounts; use --reset to replace them.")
            return 1
        counts = seed(db, context)
        logger.info("Seeding finished: %s", counts)
        return 0
    except Exception as e:
        db.rollback()
        logger.exception("Seeding failed: %s", e)
        return 1
    finally:
        db.close()
        context.close()


if __name__ == "__main__":
    sys.exit(main())
