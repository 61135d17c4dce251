import pytest

from bookswap.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from bookswap.services.comment_service import CommentService


@pytest.fixture
def comment_service(db):
    return CommentService(db)


def test_comment_lifecycle(comment_service, make_user, make_posting):
    author = make_user()
    posting = make_posting(make_user())

    comment = comment_service.create(author.id, posting.id, " Is the CD included? ")
    assert comment.content == "Is the CD included?"
    assert comment_service.count_for_posting(posting.id) == 1

    updated = comment_service.update(comment.id, author.id, "Is the access code unused?")
    assert updated.content == "Is the access code unused?"

    with pytest.raises(AuthorizationError):
        comment_service.delete(comment.id, make_user().id)

    comment_service.delete(comment.id, author.id)
    assert comment_service.list_for_posting(posting.id) == []


def test_comment_validation(comment_service, make_user, make_posting):
    author = make_user()

    with pytest.raises(NotFoundError):
        comment_service.create(author.id, 555, "hello")
    with pytest.raises(ValidationError):
        comment_service.create(author.id, make_posting(make_user()).id, "   ")
