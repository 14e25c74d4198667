import json
import sqlite3
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from src.domain.dates import ensure_utc
from src.domain.entities import Comment, Member, MemberStatus, Payment, Thread


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _dt(value: datetime | None) -> str | None:
    # Stored as UTC ISO-8601 so lexical order matches time order
    return ensure_utc(value).isoformat() if value else None


def _parse_dt(s: str | None) -> datetime | None:
    return ensure_utc(datetime.fromisoformat(s)) if s else None


def _uuid(s: str | None) -> UUID | None:
    return UUID(s) if s else None


class _SQLiteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn


class SQLiteMemberRepo(_SQLiteRepo):
    def save(self, member: Member) -> Member:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO members (
                    id, email, full_name, role, status, membership_level,
                    membership_expires_at, stripe_subscription_id, stripe_customer_id,
                    paypal_subscription_id, subscription_cancel_at_period_end,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email=excluded.email,
                    full_name=excluded.full_name,
                    role=excluded.role,
                    status=excluded.status,
                    membership_level=excluded.membership_level,
                    membership_expires_at=excluded.membership_expires_at,
                    stripe_subscription_id=excluded.stripe_subscription_id,
                    stripe_customer_id=excluded.stripe_customer_id,
                    paypal_subscription_id=excluded.paypal_subscription_id,
                    subscription_cancel_at_period_end=excluded.subscription_cancel_at_period_end,
                    updated_at=excluded.updated_at
            """,
                (
                    str(member.id),
                    member.email,
                    member.full_name,
                    member.role,
                    member.status,
                    member.membership_level,
                    _dt(member.membership_expires_at),
                    member.stripe_subscription_id,
                    member.stripe_customer_id,
                    member.paypal_subscription_id,
                    int(member.subscription_cancel_at_period_end),
                    _dt(member.created_at),
                    _dt(member.updated_at),
                ),
            )
            conn.commit()
            return member
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get_by_id(self, member_id: UUID) -> Member | None:
        return self._get_one("SELECT * FROM members WHERE id = ?", (str(member_id),))

    def get_by_email(self, email: str) -> Member | None:
        return self._get_one(
            "SELECT * FROM members WHERE lower(email) = lower(?)", (email,)
        )

    def list_all(self) -> list[Member]:
        conn = self._get_conn()
        try:
            rows = conn.execute("SELECT * FROM members ORDER BY created_at DESC").fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            conn.close()

    def list_approved_with_expiry_before(self, cutoff: datetime) -> list[Member]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM members "
                "WHERE status = 'approved' AND membership_expires_at IS NOT NULL "
                "AND membership_expires_at < ? "
                "ORDER BY membership_expires_at ASC",
                (_dt(cutoff),),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            conn.close()

    def set_status(self, member_ids: Iterable[UUID], status: MemberStatus) -> int:
        ids = [str(i) for i in member_ids]
        if not ids:
            return 0
        placeholders = ", ".join("?" for _ in ids)
        conn = self._get_conn()
        try:
            cursor = conn.execute(
                f"UPDATE members SET status = ?, updated_at = ? WHERE id IN ({placeholders})",
                (status, datetime.now(UTC).isoformat(), *ids),
            )
            conn.commit()
            return cursor.rowcount
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _get_one(self, query: str, params: tuple[Any, ...]) -> Member | None:
        conn = self._get_conn()
        try:
            row = conn.execute(query, params).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> Member:
        return Member(
            id=UUID(row["id"]),
            email=row["email"],
            full_name=row["full_name"],
            role=row["role"],
            status=row["status"],
            membership_level=row["membership_level"],
            membership_expires_at=_parse_dt(row["membership_expires_at"]),
            stripe_subscription_id=row["stripe_subscription_id"],
            stripe_customer_id=row["stripe_customer_id"],
            paypal_subscription_id=row["paypal_subscription_id"],
            subscription_cancel_at_period_end=bool(row["subscription_cancel_at_period_end"]),
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"]),
        )


class SQLiteThreadRepo(_SQLiteRepo):
    def save(self, thread: Thread) -> Thread:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO threads (
                    id, title, content, category, created_by, author_email,
                    image_urls_json, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    content=excluded.content,
                    category=excluded.category,
                    image_urls_json=excluded.image_urls_json,
                    updated_at=excluded.updated_at
            """,
                (
                    str(thread.id),
                    thread.title,
                    thread.content,
                    thread.category,
                    str(thread.created_by) if thread.created_by else None,
                    thread.author_email,
                    json.dumps(thread.image_urls),
                    _dt(thread.created_at),
                    _dt(thread.updated_at),
                ),
            )
            conn.commit()
            return thread
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get_by_id(self, thread_id: UUID) -> Thread | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM threads WHERE id = ?", (str(thread_id),)
            ).fetchone()
            return self._map_row(row) if row else None
        finally:
            conn.close()

    def list_all(self, category: str | None = None) -> list[Thread]:
        query = "SELECT * FROM threads"
        params: tuple[Any, ...] = ()
        if category:
            query += " WHERE category = ?"
            params = (category,)
        query += " ORDER BY created_at DESC"

        conn = self._get_conn()
        try:
            return [self._map_row(r) for r in conn.execute(query, params).fetchall()]
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> Thread:
        return Thread(
            id=UUID(row["id"]),
            title=row["title"],
            content=row["content"],
            category=row["category"],
            created_by=_uuid(row["created_by"]),
            author_email=row["author_email"],
            image_urls=json.loads(row["image_urls_json"] or "[]"),
            created_at=_parse_dt(row["created_at"]),
            updated_at=_parse_dt(row["updated_at"]),
        )


class SQLiteCommentRepo(_SQLiteRepo):
    def save(self, comment: Comment) -> Comment:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO comments (id, thread_id, content, created_by, author_email, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET content=excluded.content
            """,
                (
                    str(comment.id),
                    str(comment.thread_id),
                    comment.content,
                    str(comment.created_by) if comment.created_by else None,
                    comment.author_email,
                    _dt(comment.created_at),
                ),
            )
            conn.commit()
            return comment
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def list_for_threads(self, thread_ids: Iterable[UUID]) -> list[Comment]:
        ids = [str(i) for i in thread_ids]
        if not ids:
            return []
        placeholders = ", ".join("?" for _ in ids)
        conn = self._get_conn()
        try:
            rows = conn.execute(
                f"SELECT * FROM comments WHERE thread_id IN ({placeholders}) "
                "ORDER BY created_at ASC",
                ids,
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> Comment:
        return Comment(
            id=UUID(row["id"]),
            thread_id=UUID(row["thread_id"]),
            content=row["content"],
            created_by=_uuid(row["created_by"]),
            author_email=row["author_email"],
            created_at=_parse_dt(row["created_at"]),
        )


class SQLiteSettingsRepo(_SQLiteRepo):
    """Key/value settings table."""

    def get_value(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def set_value(self, key: str, value: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO settings (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT(key) DO UPDATE SET
                    value=excluded.value,
                    updated_at=excluded.updated_at
            """,
                (key, value, datetime.now(UTC).isoformat()),
            )
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


class SQLitePaymentRepo(_SQLiteRepo):
    def save(self, payment: Payment) -> Payment:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO payments (
                    id, user_id, payment_method, amount, currency, payment_date,
                    membership_expires_at, stripe_subscription_id, paypal_subscription_id,
                    recorded_by, notes, status, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    status=excluded.status,
                    notes=excluded.notes
            """,
                (
                    str(payment.id),
                    str(payment.user_id),
                    payment.payment_method,
                    payment.amount,
                    payment.currency,
                    _dt(payment.payment_date),
                    _dt(payment.membership_expires_at),
                    payment.stripe_subscription_id,
                    payment.paypal_subscription_id,
                    str(payment.recorded_by) if payment.recorded_by else None,
                    payment.notes,
                    payment.status,
                    _dt(payment.created_at),
                ),
            )
            conn.commit()
            return payment
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def list_for_user(self, user_id: UUID) -> list[Payment]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT * FROM payments WHERE user_id = ? ORDER BY payment_date DESC",
                (str(user_id),),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            conn.close()

    def _map_row(self, row: dict[str, Any]) -> Payment:
        return Payment(
            id=UUID(row["id"]),
            user_id=UUID(row["user_id"]),
            payment_method=row["payment_method"],
            amount=row["amount"],
            currency=row["currency"],
            payment_date=_parse_dt(row["payment_date"]),
            membership_expires_at=_parse_dt(row["membership_expires_at"]),
            stripe_subscription_id=row["stripe_subscription_id"],
            paypal_subscription_id=row["paypal_subscription_id"],
            recorded_by=_uuid(row["recorded_by"]),
            notes=row["notes"],
            status=row["status"],
            created_at=_parse_dt(row["created_at"]),
        )
