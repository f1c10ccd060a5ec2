import pytest

from community.exceptions import NotFound, ValidationError
from community.repositories import CommentRepository, IssueRepository
from community.services import CommentService


@pytest.fixture
def service(test_session):
    return CommentService(CommentRepository(test_session), IssueRepository(test_session))


def test_create_trims_text(service, sample_issues, member):
    comment = service.create(sample_issues[0].id, member.id, "  Still broken  ")

    assert comment.id is not None
    assert comment.text == "Still broken"


@pytest.mark.parametrize("text", ["", "   ", None])
def test_empty_text_fails_before_issue_lookup(service, member, text):
    with pytest.raises(ValidationError) as exc_info:
        service.create(999, member.id, text)
    assert exc_info.value.errors[0]["field"] == "text"


def test_missing_issue_is_not_found(service, member):
    with pytest.raises(NotFound):
        service.create(999, member.id, "hello")


def test_list_is_newest_first_with_authors(service, sample_issues, member, admin):
    issue_id = sample_issues[0].id
    service.create(issue_id, member.id, "first")
    service.create(issue_id, admin.id, "second")

    comments = service.list(issue_id)
    assert [c.text for c in comments] == ["second", "first"]
    assert [c.author.username for c in comments] == ["admin", "member"]


def test_list_for_unknown_issue_is_empty(service):
    assert service.list(999) == []
