"""Review session models and persistence."""

from diffreview.review.models import (
    Comment,
    CommentType,
    FileReview,
    LineSide,
    ReviewSession,
)
from diffreview.review.persistence import (
    SessionError,
    find_session_for_repo,
    load_or_create_session,
    load_session,
    save_session,
    session_path_for_repo,
)

__all__ = [
    "Comment",
    "CommentType",
    "FileReview",
    "LineSide",
    "ReviewSession",
    "SessionError",
    "find_session_for_repo",
    "load_or_create_session",
    "load_session",
    "save_session",
    "session_path_for_repo",
]
