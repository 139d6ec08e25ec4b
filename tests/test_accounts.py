"""Tests for account services: profile, admin management, cascade deletion and quota."""

import unittest
from datetime import UTC, datetime
from unittest.mock import patch

from blogai.core.errors import (
    Conflict,
    Forbidden,
    NotFound,
    QuotaExhausted,
    SelfLockout,
    ValidationError,
)
from blogai.core.security import verify_password
from blogai.models import Collection, Post, SavedPost, User, post_collections
from blogai.services import accounts
from blogai.services.posts import set_post_collections

from support import TEST_PASSWORD, add_collection, add_post, add_user, make_context, subject


class AccountsTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.context = make_context()
        self.addCleanup(self.context.close)
        self.db = self.context.session_factory()
        self.addCleanup(self.db.close)
        self.admin = add_user(self.db, self.context, "admin@x.com", role="admin")
        self.user = add_user(self.db, self.context, "user@x.com")


class TestProfile(AccountsTestCase):
    def test_get_own_account(self) -> None:
        account = accounts.get_own_account(self.db, subject(self.user))
        self.assertEqual(account.email, "user@x.com")

    def test_unknown_account_not_found(self) -> None:
        with self.assertRaises(NotFound):
            accounts.get_account(self.db, 9999)

    def test_update_profile_fields(self) -> None:
        updated = accounts.update_profile(
            self.db, subject(self.user), name="New Name", email="renamed@x.com", avatar="a.png"
        )
        self.assertEqual((updated.name, updated.email, updated.avatar), ("New Name", "renamed@x.com", "a.png"))

    def test_update_profile_email_taken(self) -> None:
        with self.assertRaises(Conflict):
            accounts.update_profile(self.db, subject(self.user), email="admin@x.com")

    def test_change_password(self) -> None:
        accounts.change_password(
            self.db,
            subject(self.user),
            self.context.issuer,
            current_password=TEST_PASSWORD,
            new_password="brand-new-secret",
        )
        self.db.refresh(self.user)
        self.assertTrue(verify_password("brand-new-secret", self.user.password_hash))
        self.assertFalse(verify_password(TEST_PASSWORD, self.user.password_hash))

    def test_change_password_wrong_current(self) -> None:
        with self.assertRaises(ValidationError):
            accounts.change_password(
                self.db,
                subject(self.user),
                self.context.issuer,
                current_password="not-it",
                new_password="brand-new-secret",
            )


class TestAdminManagement(AccountsTestCase):
    def test_list_accounts_requires_admin(self) -> None:
        with self.assertRaises(Forbidden):
            accounts.list_accounts(self.db, subject(self.user))
        emails = {u.email for u in accounts.list_accounts(self.db, subject(self.admin))}
        self.assertEqual(emails, {"admin@x.com", "user@x.com"})

    def test_stats(self) -> None:
        add_user(self.db, self.context, "p@x.com", subscription="premium")
        add_post(self.db, self.user, created_at=datetime(2026, 3, 10, 12, 0))
        add_post(self.db, self.user, created_at=datetime(2026, 2, 27, 12, 0))
        stats = accounts.account_stats(
            self.db, subject(self.admin), now=datetime(2026, 3, 15, tzinfo=UTC)
        )
        self.assertEqual(
            stats,
            {"total_users": 3, "premium_users": 1, "total_posts": 2, "posts_this_month": 1},
        )

    def test_premium_upgrade_resets_quota(self) -> None:
        self.user.generations_left = 3
        self.db.commit()
        updated = accounts.admin_update_account(
            self.db, subject(self.admin), self.user.id, subscription="premium"
        )
        self.assertEqual(updated.subscription, "premium")
        self.assertEqual((updated.generations_left, updated.generations_total), (100, 100))

    def test_downgrade_keeps_quota(self) -> None:
        self.user.subscription = "premium"
        self.user.generations_left = 42
        self.user.generations_total = 100
        self.db.commit()
        updated = accounts.admin_update_account(
            self.db, subject(self.admin), self.user.id, subscription="free"
        )
        self.assertEqual(updated.generations_left, 42)

    def test_promote_other_to_admin(self) -> None:
        updated = accounts.admin_update_account(self.db, subject(self.admin), self.user.id, role="admin")
        self.assertEqual(updated.role, "admin")

    def test_admin_cannot_demote_self(self) -> None:
        with self.assertRaises(SelfLockout):
            accounts.admin_update_account(self.db, subject(self.admin), self.admin.id, role="user")
        self.db.refresh(self.admin)
        self.assertEqual(self.admin.role, "admin")

    def test_user_cannot_update_accounts(self) -> None:
        with self.assertRaises(Forbidden):
            accounts.admin_update_account(self.db, subject(self.user), self.user.id, subscription="premium")

    def test_update_unknown_account(self) -> None:
        with self.assertRaises(NotFound):
            accounts.admin_update_account(self.db, subject(self.admin), 9999, role="user")


class TestDeleteAccount(AccountsTestCase):
    def _populate(self) -> None:
        other = add_user(self.db, self.context, "other@x.com")
        self.victim_posts = [
            add_post(self.db, self.user, "Mine 1", status="published"),
            add_post(self.db, self.user, "Mine 2"),
        ]
        self.other_post = add_post(self.db, other, "Theirs", status="published")
        mine = add_collection(self.db, self.user, "Mine")
        theirs = add_collection(self.db, other, "Theirs")
        set_post_collections(self.db, subject(self.user), self.victim_posts[0].id, [mine.id])
        set_post_collections(self.db, subject(self.user), self.other_post.id, [mine.id])
        set_post_collections(self.db, subject(other), self.victim_posts[0].id, [theirs.id])
        set_post_collections(self.db, subject(other), self.other_post.id, [theirs.id])
        self.db.add_all(
            [
                SavedPost(user_id=self.user.id, post_id=self.other_post.id),
                SavedPost(user_id=other.id, post_id=self.victim_posts[0].id),
                SavedPost(user_id=other.id, post_id=self.other_post.id),
            ]
        )
        self.db.commit()
        self.other = other
        self.theirs = theirs

    def test_cascade_leaves_no_rows(self) -> None:
        self._populate()
        victim_id = self.user.id
        victim_post_ids = [p.id for p in self.victim_posts]

        summary = accounts.delete_account(self.db, subject(self.admin), victim_id)

        self.assertEqual(summary.posts_deleted, 2)
        self.assertEqual(summary.collections_deleted, 1)
        self.assertEqual(summary.saved_posts_deleted, 2)
        self.assertIsNone(self.db.get(User, victim_id))
        self.assertEqual(self.db.query(Post).filter(Post.author_id == victim_id).count(), 0)
        self.assertEqual(self.db.query(Collection).filter(Collection.owner_id == victim_id).count(), 0)
        self.assertEqual(
            self.db.query(SavedPost)
            .filter((SavedPost.user_id == victim_id) | SavedPost.post_id.in_(victim_post_ids))
            .count(),
            0,
        )
        links = self.db.execute(post_collections.select()).all()
        self.assertEqual([(row.post_id, row.collection_id) for row in links], [(self.other_post.id, self.theirs.id)])
        # Unrelated data survives.
        self.assertIsNotNone(self.db.get(Post, self.other_post.id))
        self.assertEqual(self.db.query(SavedPost).filter(SavedPost.user_id == self.other.id).count(), 1)

    def test_admin_cannot_delete_self(self) -> None:
        with self.assertRaises(SelfLockout):
            accounts.delete_account(self.db, subject(self.admin), self.admin.id)
        self.assertIsNotNone(self.db.get(User, self.admin.id))

    def test_user_cannot_delete(self) -> None:
        with self.assertRaises(Forbidden):
            accounts.delete_account(self.db, subject(self.user), self.admin.id)

    def test_unknown_account(self) -> None:
        with self.assertRaises(NotFound):
            accounts.delete_account(self.db, subject(self.admin), 9999)

    def test_failure_rolls_back_everything(self) -> None:
        self._populate()
        victim_id = self.user.id
        with patch.object(self.db, "commit", side_effect=RuntimeError("connection lost")):
            with self.assertRaises(RuntimeError):
                accounts.delete_account(self.db, subject(self.admin), victim_id)
        self.assertIsNotNone(self.db.get(User, victim_id))
        self.assertEqual(self.db.query(Post).filter(Post.author_id == victim_id).count(), 2)
        self.assertEqual(self.db.query(SavedPost).count(), 3)


class TestGenerationQuota(AccountsTestCase):
    def test_consume_decrements(self) -> None:
        left = accounts.consume_generation(self.db, subject(self.user))
        self.assertEqual(left, 19)

    def test_exhausted_quota_raises_and_stays_zero(self) -> None:
        empty = add_user(self.db, self.context, "empty@x.com", generations_left=0)
        with self.assertRaises(QuotaExhausted):
            accounts.ensure_generation_available(self.db, subject(empty))
        with self.assertRaises(QuotaExhausted):
            accounts.consume_generation(self.db, subject(empty))
        self.db.refresh(empty)
        self.assertEqual(empty.generations_left, 0)

    def test_last_generation(self) -> None:
        one = add_user(self.db, self.context, "one@x.com", generations_left=1)
        self.assertEqual(accounts.consume_generation(self.db, subject(one)), 0)
        with self.assertRaises(QuotaExhausted):
            accounts.consume_generation(self.db, subject(one))


class TestBootstrapAdmin(unittest.TestCase):
    def setUp(self) -> None:
        self.context = make_context()
        self.addCleanup(self.context.close)
        self.db = self.context.session_factory()
        self.addCleanup(self.db.close)

    def test_creates_admin_on_empty_store(self) -> None:
        user = accounts.bootstrap_admin_if_needed(
            self.db, self.context.issuer, "root@x.com", "root-password"
        )
        self.assertEqual(user.role, "admin")

    def test_skipped_when_accounts_exist(self) -> None:
        add_user(self.db, self.context, "someone@x.com")
        self.assertIsNone(
            accounts.bootstrap_admin_if_needed(self.db, self.context.issuer, "root@x.com", "root-password")
        )

    def test_skipped_without_credentials(self) -> None:
        self.assertIsNone(accounts.bootstrap_admin_if_needed(self.db, self.context.issuer, None, None))


if __name__ == "__main__":
    unittest.main()
