"""
Tests for /api/notifications.

Covers:
- Listing the caller's own notifications with read/type filters and the unread total
- Per-type counts
- Marking one or all notifications read
- Deleting, with other users' notifications reported as missing
- Sending to another user (role gate, unknown recipient, sender recorded)
"""

import uuid
from datetime import timedelta

import pytest

from database import utcnow
from models.notification import Notification
from models.user import UserRole


@pytest.fixture
def make_notification(session_factory):
    async def _make_notification(user, type="content_review", title="New review", read=False, age=0):
        async with session_factory() as session:
            notification = Notification(
                user_id=user.id,
                type=type,
                title=title,
                message=f"{title} message",
                data={},
                read=read,
                created_at=utcnow() - timedelta(minutes=age),
            )
            session.add(notification)
            await session.commit()
            await session.refresh(notification)
        return notification

    return _make_notification


# ============================================================================
# Inbox
# ============================================================================


class TestListNotifications:

    @pytest.mark.asyncio
    async def test_lists_only_own_newest_first(self, client, make_user, auth_headers, make_notification):
        user, other = await make_user(), await make_user()
        await make_notification(user, title="Older", age=10)
        await make_notification(user, title="Newer", age=1)
        await make_notification(other, title="Someone else's")

        response = await client.get("/api/notifications", headers=auth_headers(user))

        assert response.status_code == 200
        body = response.json()
        assert [n["title"] for n in body["data"]] == ["Newer", "Older"]
        assert body["pagination"]["total"] == 2
        assert body["unread_count"] == 2

    @pytest.mark.asyncio
    async def test_filters_by_read_and_type(self, client, make_user, auth_headers, make_notification):
        user = await make_user()
        await make_notification(user, type="comment", read=True)
        await make_notification(user, type="comment")
        await make_notification(user, type="approval")
        headers = auth_headers(user)

        unread = await client.get("/api/notifications", params={"read": "false"}, headers=headers)
        assert unread.json()["pagination"]["total"] == 2

        comments = await client.get("/api/notifications", params={"type": "comment"}, headers=headers)
        assert {n["type"] for n in comments.json()["data"]} == {"comment"}
        assert comments.json()["pagination"]["total"] == 2

        # unread_count ignores the filters
        assert comments.json()["unread_count"] == 2

    @pytest.mark.asyncio
    async def test_requires_token(self, client):
        response = await client.get("/api/notifications")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_type_counts(self, client, make_user, auth_headers, make_notification):
        user, other = await make_user(), await make_user()
        await make_notification(user, type="comment", read=True)
        await make_notification(user, type="comment")
        await make_notification(user, type="approval")
        await make_notification(other, type="system")

        response = await client.get("/api/notifications/types", headers=auth_headers(user))

        assert response.status_code == 200
        assert response.json() == {
            "comment": {"total": 2, "unread": 1},
            "approval": {"total": 1, "unread": 1},
        }


# ============================================================================
# Read state and deletion
# ============================================================================


class TestNotificationState:

    @pytest.mark.asyncio
    async def test_mark_read(self, client, make_user, auth_headers, make_notification):
        user = await make_user()
        notification = await make_notification(user)

        response = await client.put(
            f"/api/notifications/{notification.id}/read", headers=auth_headers(user)
        )

        assert response.status_code == 200
        assert response.json()["read"] is True

    @pytest.mark.asyncio
    async def test_mark_all_read_only_touches_own_unread(
        self, client, make_user, auth_headers, make_notification, db
    ):
        user, other = await make_user(), await make_user()
        await make_notification(user)
        await make_notification(user)
        await make_notification(user, read=True)
        theirs = await make_notification(other)

        response = await client.put("/api/notifications/read-all", headers=auth_headers(user))

        assert response.status_code == 200
        assert response.json() == {
            "message": "2 notifications marked as read",
            "data": {"updated_count": 2},
        }
        assert (await db.get(Notification, theirs.id)).read is False

    @pytest.mark.asyncio
    async def test_delete(self, client, make_user, auth_headers, make_notification, db):
        user = await make_user()
        notification = await make_notification(user)

        response = await client.delete(
            f"/api/notifications/{notification.id}", headers=auth_headers(user)
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Notification deleted successfully"
        assert await db.get(Notification, notification.id) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,suffix", [("put", "/read"), ("delete", "")])
    async def test_other_users_notification_is_missing(
        self, client, make_user, auth_headers, make_notification, db, method, suffix
    ):
        owner, intruder = await make_user(), await make_user(role=UserRole.AGENCY)
        notification = await make_notification(owner)

        response = await client.request(
            method.upper(),
            f"/api/notifications/{notification.id}{suffix}",
            headers=auth_headers(intruder),
        )

        assert response.status_code == 404
        assert response.json()["error"] == "Notification not found"
        stored = await db.get(Notification, notification.id)
        assert stored is not None
        assert stored.read is False

    @pytest.mark.asyncio
    async def test_unknown_notification_is_missing(self, client, make_user, auth_headers):
        user = await make_user()
        response = await client.put(
            f"/api/notifications/{uuid.uuid4()}/read", headers=auth_headers(user)
        )
        assert response.status_code == 404


# ============================================================================
# Sending
# ============================================================================


class TestSendNotification:

    @pytest.mark.asyncio
    async def test_send_records_sender(self, client, make_user, auth_headers):
        sender = await make_user(role=UserRole.AGENCY)
        recipient = await make_user(role=UserRole.CLIENT)

        response = await client.post(
            "/api/notifications/send",
            json={
                "user_id": recipient.id,
                "type": "reminder",
                "title": "Approve the draft",
                "message": "Your launch post is waiting for review",
                "data": {"content_id": "abc"},
            },
            headers=auth_headers(sender),
        )

        assert response.status_code == 201
        body = response.json()
        assert body["data"] == {"content_id": "abc", "sender_id": sender.id}
        assert body["read"] is False

        inbox = await client.get("/api/notifications", headers=auth_headers(recipient))
        assert [n["title"] for n in inbox.json()["data"]] == ["Approve the draft"]

    @pytest.mark.asyncio
    async def test_unknown_recipient(self, client, make_user, auth_headers):
        sender = await make_user()
        response = await client.post(
            "/api/notifications/send",
            json={"user_id": str(uuid.uuid4()), "type": "t", "title": "t", "message": "m"},
            headers=auth_headers(sender),
        )
        assert response.status_code == 404
        assert response.json()["error"] == "User not found"

    @pytest.mark.asyncio
    async def test_missing_fields(self, client, make_user, auth_headers):
        sender = await make_user()
        response = await client.post(
            "/api/notifications/send",
            json={"user_id": sender.id, "type": "t"},
            headers=auth_headers(sender),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_client_role_cannot_send(self, client, make_user, auth_headers):
        sender = await make_user(role=UserRole.CLIENT)
        recipient = await make_user()
        response = await client.post(
            "/api/notifications/send",
            json={"user_id": recipient.id, "type": "t", "title": "t", "message": "m"},
            headers=auth_headers(sender),
        )
        assert response.status_code == 403
