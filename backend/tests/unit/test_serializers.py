from datetime import datetime, timezone

from backend.src.models.message import (
    AttachmentRecord,
    AuthorRecord,
    MessageRecord,
    ReactionRecord,
    ReplyRecord,
    WebhookRecord,
)
from backend.src.services.serializers import MessageSerializer, aggregate_reactions


def _record(**overrides) -> MessageRecord:
    values = dict(
        id="m1",
        content="deploy done",
        channel_id="c1",
        author_id="u1",
        created_at=datetime(2026, 3, 1, 9, 30, 5, 123000, tzinfo=timezone.utc),
        author=AuthorRecord(id="u1", username="alice", display_name="Alice"),
    )
    values.update(overrides)
    return MessageRecord(**values)


def test_aggregate_reactions_groups_by_emoji_in_first_seen_order() -> None:
    summary = aggregate_reactions(
        [
            ReactionRecord(emoji="fire", user_id="a"),
            ReactionRecord(emoji="+1", user_id="b"),
            ReactionRecord(emoji="fire", user_id="c"),
        ]
    )

    assert [(r.emoji, r.count, r.user_ids) for r in summary] == [
        ("fire", 2, ["a", "c"]),
        ("+1", 1, ["b"]),
    ]


def test_serialize_uses_camel_case_and_iso_timestamps() -> None:
    payload = MessageSerializer().serialize(_record()).model_dump(by_alias=True)

    assert payload["channelId"] == "c1"
    assert payload["authorId"] == "u1"
    assert payload["createdAt"] == "2026-03-01T09:30:05.123Z"
    assert payload["editedAt"] is None
    assert payload["type"] == "default"
    assert payload["author"]["displayName"] == "Alice"
    assert payload["replyTo"] is None
    assert payload["mentions"] == []


def test_attachment_urls_use_configured_prefix() -> None:
    record = _record(
        attachments=[
            AttachmentRecord(id="a1", filename="log.txt", stored_as="x1.txt", mime_type="text/plain", size=3)
        ]
    )

    message = MessageSerializer("https://cdn.example.com/uploads/").serialize(record)

    assert message.attachments[0].url == "https://cdn.example.com/uploads/x1.txt"
    assert message.attachments[0].filename == "log.txt"


def test_reply_preview_is_nested() -> None:
    record = _record(
        reply_to_id="m0",
        reply_to=ReplyRecord(
            id="m0",
            content="when is the deploy?",
            author_id="u2",
            author_username="bob",
            author_display_name="Bob",
        ),
    )

    payload = MessageSerializer().serialize(record).model_dump(by_alias=True)

    assert payload["replyTo"] == {
        "id": "m0",
        "content": "when is the deploy?",
        "author": {"id": "u2", "username": "bob", "displayName": "Bob"},
    }


def test_thread_and_webhook_fields_default_to_null() -> None:
    payload = MessageSerializer().serialize(_record()).model_dump(by_alias=True)

    assert payload["threadId"] is None
    assert payload["webhookId"] is None
    assert payload["webhookName"] is None
    assert payload["webhookAvatarUrl"] is None


def test_webhook_identity_is_emitted() -> None:
    record = _record(
        thread_id="t1",
        webhook_id="w1",
        webhook=WebhookRecord(id="w1", name="CI Bot", avatar_url="/uploads/ci.png"),
    )

    payload = MessageSerializer().serialize(record).model_dump(by_alias=True)

    assert payload["threadId"] == "t1"
    assert payload["webhookId"] == "w1"
    assert payload["webhookName"] == "CI Bot"
    assert payload["webhookAvatarUrl"] == "/uploads/ci.png"
