import pytest

from bookswap.core.exceptions import (
    AuthorizationError,
    BusinessLogicError,
    NotFoundError,
    ValidationError,
)
from bookswap.services.message_service import MessageService


@pytest.fixture
def message_service(db):
    return MessageService(db)


class TestMessageService:
    """쪽지 서비스 테스트"""

    def test_send_and_read(self, message_service, make_user):
        alice, bob = make_user("alice"), make_user("bob")

        message = message_service.send(alice.id, bob.id, "  Still have the stats book?  ")

        assert message.content == "Still have the stats book?"
        assert message.is_read is False
        assert message_service.unread_count(bob.id) == 1

        read = message_service.mark_read(message.id, bob.id)
        assert read.is_read is True
        assert message_service.unread_count(bob.id) == 0

    def test_sender_cannot_mark_read(self, message_service, make_user):
        alice, bob = make_user(), make_user()
        message = message_service.send(alice.id, bob.id, "hi")

        with pytest.raises(AuthorizationError):
            message_service.mark_read(message.id, alice.id)

    def test_send_validation(self, message_service, make_user):
        alice = make_user()

        with pytest.raises(ValidationError):
            message_service.send(alice.id, make_user().id, "   ")
        with pytest.raises(BusinessLogicError):
            message_service.send(alice.id, alice.id, "note to self")
        with pytest.raises(NotFoundError):
            message_service.send(alice.id, 999, "hello?")

    def test_conversation_and_summaries(self, message_service, make_user):
        alice, bob, carol = make_user("alice"), make_user("bob"), make_user("carol")
        message_service.send(alice.id, bob.id, "one")
        message_service.send(bob.id, alice.id, "two")
        message_service.send(carol.id, alice.id, "three")

        messages, total = message_service.conversation(alice.id, bob.id)
        assert total == 2
        assert {m.content for m in messages} == {"one", "two"}

        summaries = message_service.conversations(alice.id).conversations
        by_partner = {s.partner_username: s for s in summaries}
        assert set(by_partner) == {"bob", "carol"}
        assert by_partner["carol"].unread_count == 1
        assert by_partner["bob"].last_message.content == "two"

        assert message_service.mark_conversation_read(alice.id, carol.id) == 1
        assert message_service.unread_count(alice.id) == 1
