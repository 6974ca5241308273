"""Tests for building comment threads."""

from datetime import UTC, datetime

from tipbase.modules.comments.models import Comment
from tipbase.modules.comments.services import build_thread


def _comment(comment_id: int, parent_id: int | None = None) -> Comment:
    now = datetime(2024, 1, 1, tzinfo=UTC)
    return Comment(
        id=comment_id,
        tip_id=1,
        author_name="Jane Doe",
        content=f"comment {comment_id}",
        parent_id=parent_id,
        created_at=now,
        updated_at=now,
    )


class TestBuildThread:
    """Tests for build_thread."""

    def test_replies_nested_under_parents(self):
        comments = [_comment(1), _comment(2, parent_id=1), _comment(3), _comment(4, parent_id=2)]

        roots = build_thread(comments)

        assert [c.id for c in roots] == [1, 3]
        assert [c.id for c in roots[0].replies] == [2]
        assert [c.id for c in roots[0].replies[0].replies] == [4]
        assert roots[1].replies == []

    def test_order_preserved(self):
        comments = [_comment(1), _comment(3, parent_id=1), _comment(2, parent_id=1)]

        roots = build_thread(comments)

        assert [c.id for c in roots[0].replies] == [3, 2]

    def test_orphaned_reply_dropped(self):
        """Verify a reply whose parent is not listed is left out."""
        roots = build_thread([_comment(1), _comment(5, parent_id=99)])

        assert [c.id for c in roots] == [1]
        assert roots[0].replies == []

    def test_empty(self):
        assert build_thread([]) == []
