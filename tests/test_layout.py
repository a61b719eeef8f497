"""Tests for the virtual line index — heights, offsets and location lookup."""

import pytest

from diffreview.engine.layout import (
    DiffLineEntry,
    FileComment,
    FileHeader,
    HunkHeader,
    LineComment,
    Placeholder,
    Spacing,
    VirtualLineIndex,
)
from diffreview.review.models import Comment, LineSide


def _index(files, session):
    for f in files:
        session.add_file(f.display_path, f.status)
    return VirtualLineIndex(files, session)


class TestHeights:
    def test_two_file_scenario(self, two_files, session):
        index = _index(two_files, session)
        # a.py: header + hunk header + 3 lines + spacing
        assert index.file_render_height(two_files[0]) == 1 + 1 + 3 + 1
        # b.png: header + placeholder + spacing
        assert index.file_render_height(two_files[1]) == 1 + 1 + 1
        assert index.total_lines() == 9

    def test_total_is_sum_of_heights(self, make_file, session):
        files = [make_file("a.py", (2, 5)), make_file("b.py", (1,)), make_file("c.py", ())]
        index = _index(files, session)
        assert index.total_lines() == sum(index.file_render_height(f) for f in files)

    def test_no_hunks_counts_placeholder(self, make_file, session):
        f = make_file("script.sh", ())
        index = _index([f], session)
        assert index.file_render_height(f) == 3

    def test_height_counts_hunk_headers_and_lines(self, make_file, session):
        f = make_file("multi.py", (2, 5, 1))
        index = _index([f], session)
        assert f.line_count == 8
        # header + 3 hunk headers + 8 lines + spacing
        assert index.approximate_file_height(f) == 1 + 3 + 8 + 1

    def test_reviewed_file_is_one_line(self, two_files, session):
        index = _index(two_files, session)
        session.files["a.py"].reviewed = True
        assert index.file_render_height(two_files[0]) == 1
        assert index.approximate_file_height(two_files[0]) == 1
        assert index.total_lines() == 1 + 3

    def test_collapsing_one_file_changes_only_that_file(self, make_file, session):
        files = [make_file("a.py", (4,)), make_file("b.py", (2, 2)), make_file("c.py", (1,))]
        index = _index(files, session)
        session.files["b.py"].add_file_comment(Comment("heads up"))
        before = [index.file_render_height(f) for f in files]
        total_before = index.total_lines()

        session.files["b.py"].reviewed = True

        assert index.total_lines() == total_before - (before[1] - 1)
        assert index.file_render_height(files[0]) == before[0]
        assert index.file_render_height(files[2]) == before[2]

    def test_comment_display_lines(self):
        assert VirtualLineIndex.comment_display_lines(Comment("one line")) == 3
        assert VirtualLineIndex.comment_display_lines(Comment("a\nb\nc")) == 5

    def test_line_comment_adds_its_block(self, two_files, session):
        index = _index(two_files, session)
        before = index.total_lines()
        comment = Comment("needs a docstring", side=LineSide.NEW)
        session.files["a.py"].add_line_comment(2, comment)
        assert index.comment_display_lines(comment) == 2 + 1
        assert index.total_lines() == before + 3

    def test_approximate_height_ignores_comments(self, two_files, session):
        index = _index(two_files, session)
        session.files["a.py"].add_file_comment(Comment("one\ntwo"))
        assert index.approximate_file_height(two_files[0]) == 6
        assert index.file_render_height(two_files[0]) == 6 + 4

    def test_comment_on_line_outside_hunks_is_not_counted(self, two_files, session):
        index = _index(two_files, session)
        session.files["a.py"].add_line_comment(99, Comment("stale", side=LineSide.NEW))
        assert index.file_render_height(two_files[0]) == 6


class TestOffsets:
    def test_file_scroll_offset(self, two_files, session):
        index = _index(two_files, session)
        assert index.file_scroll_offset(0) == 0
        assert index.file_scroll_offset(1) == 6

    def test_approximate_offset_ignores_comments(self, two_files, session):
        index = _index(two_files, session)
        session.files["a.py"].add_file_comment(Comment("note"))
        assert index.file_scroll_offset(1) == 9
        assert index.approximate_file_offset(1) == 6

    def test_file_index_at(self, two_files, session):
        index = _index(two_files, session)
        assert index.file_index_at(0) == 0
        assert index.file_index_at(5) == 0
        assert index.file_index_at(6) == 1
        assert index.file_index_at(100) == 1

    def test_file_index_at_empty_snapshot(self, session):
        assert VirtualLineIndex([], session).file_index_at(0) == 0


class TestLocate:
    def test_layout_of_two_files(self, two_files, session):
        index = _index(two_files, session)
        kinds = [type(index.locate(p)) for p in range(index.total_lines())]
        assert kinds == [
            FileHeader, HunkHeader, DiffLineEntry, DiffLineEntry, DiffLineEntry, Spacing,
            FileHeader, Placeholder, Spacing,
        ]
        assert index.locate(7).is_binary is True
        assert index.locate(6).path == "b.png"

    def test_out_of_range(self, two_files, session):
        index = _index(two_files, session)
        assert index.locate(index.total_lines()) is None
        assert index.locate(-1) is None

    def test_every_position_is_defined(self, make_file, session):
        files = [make_file("a.py", (3, 2)), make_file("b.py", ()), make_file("c.py", (4,))]
        index = _index(files, session)
        session.files["a.py"].add_file_comment(Comment("x\ny"))
        session.files["c.py"].add_line_comment(2, Comment("z", side=LineSide.OLD))
        for p in range(index.total_lines()):
            assert index.locate(p) is not None

    def test_line_comment_rows(self, two_files, session):
        index = _index(two_files, session)
        comment = Comment("check this", side=LineSide.NEW)
        session.files["a.py"].add_line_comment(2, comment)
        # 0 header, 1 hunk, 2 line 1, 3 line 2, 4-6 comment, 7 line 3, 8 spacing
        for row, pos in enumerate(range(4, 7)):
            loc = index.locate(pos)
            assert isinstance(loc, LineComment)
            assert loc.comment is comment
            assert loc.row == row
            assert loc.line_number == 2
            assert loc.side == LineSide.NEW
        assert index.locate(7).line.new_lineno == 3

    def test_file_comments_come_before_hunks(self, two_files, session):
        index = _index(two_files, session)
        session.files["a.py"].add_file_comment(Comment("first"))
        session.files["a.py"].add_file_comment(Comment("second"))
        assert isinstance(index.locate(1), FileComment)
        assert index.locate(1).comment_index == 0
        assert index.locate(4).comment_index == 1
        assert isinstance(index.locate(7), HunkHeader)

    def test_old_side_comments_precede_new_side(self, changed_file, session):
        index = _index([changed_file], session)
        review = session.files["src/app.py"]
        review.add_line_comment(13, Comment("new side", side=LineSide.NEW))
        review.add_line_comment(12, Comment("old side", side=LineSide.OLD))
        # Context line old 12 / new 13 is at position 6 (header, hunk, 4 lines before it)
        assert index.locate(6).line.content == "    teardown()"
        first, second = index.locate(7), index.locate(10)
        assert (first.side, first.line_number) == (LineSide.OLD, 12)
        assert (second.side, second.line_number) == (LineSide.NEW, 13)

    def test_side_relative_comment_index(self, changed_file, session):
        index = _index([changed_file], session)
        review = session.files["src/app.py"]
        review.add_line_comment(11, Comment("new a", side=LineSide.NEW))
        review.add_line_comment(11, Comment("old a", side=LineSide.OLD))
        review.add_line_comment(11, Comment("new b", side=LineSide.NEW))
        entries = [e.location for e in index.iter_entries() if isinstance(e.location, LineComment)]
        assert [(l.side, l.comment_index, l.comment.content) for l in entries] == [
            (LineSide.OLD, 0, "old a"),
            (LineSide.NEW, 0, "new a"),
            (LineSide.NEW, 1, "new b"),
        ]

    def test_legacy_comment_without_side_is_new(self, changed_file, session):
        index = _index([changed_file], session)
        session.files["src/app.py"].add_line_comment(11, Comment("legacy"))
        loc = [e.location for e in index.iter_entries() if isinstance(e.location, LineComment)][0]
        assert loc.side == LineSide.NEW
        # Rendered below the addition (new 11), not the deletion (old 11)
        assert index.locate(4).line.content == "    run(fast=True)"
        assert isinstance(index.locate(5), LineComment)

    def test_reviewed_file_hides_comments(self, two_files, session):
        index = _index(two_files, session)
        session.files["a.py"].add_file_comment(Comment("hidden"))
        session.files["a.py"].reviewed = True
        assert isinstance(index.locate(0), FileHeader)
        assert isinstance(index.locate(1), FileHeader)
        assert index.locate(1).path == "b.png"


class TestEntries:
    def test_entries_are_contiguous(self, make_file, session):
        files = [make_file("a.py", (2, 2)), make_file("b.png", is_binary=True)]
        index = _index(files, session)
        session.files["a.py"].add_line_comment(1, Comment("x\ny", side=LineSide.NEW))
        position = 0
        for entry in index.iter_entries():
            assert entry.start == position
            position = entry.end
        assert position == index.total_lines()

    def test_hunk_header_positions(self, make_file, session):
        files = [make_file("a.py", (2, 3)), make_file("b.py", (1,))]
        index = _index(files, session)
        # a.py: 0 header, 1 hunk, 2-3, 4 hunk, 5-7, 8 spacing; b.py: 9 header, 10 hunk
        assert index.hunk_header_positions() == [1, 4, 10]

    def test_hunk_positions_skip_reviewed(self, make_file, session):
        files = [make_file("a.py", (2, 3)), make_file("b.py", (1,))]
        index = _index(files, session)
        session.files["a.py"].reviewed = True
        assert index.hunk_header_positions() == [2]


class TestLineAt:
    @pytest.mark.parametrize(
        "position, expected",
        [
            (2, (10, LineSide.NEW)),  # context → new side
            (3, (11, LineSide.OLD)),  # deletion → old side
            (4, (11, LineSide.NEW)),  # addition
            (5, (12, LineSide.NEW)),
        ],
    )
    def test_diff_lines(self, changed_file, session, position, expected):
        index = _index([changed_file], session)
        assert index.line_at(position) == expected

    def test_non_diff_lines(self, changed_file, session):
        index = _index([changed_file], session)
        assert index.line_at(0) is None  # header
        assert index.line_at(1) is None  # hunk header
        assert index.line_at(7) is None  # spacing

    def test_comment_at(self, changed_file, session):
        index = _index([changed_file], session)
        session.files["src/app.py"].add_file_comment(Comment("top"))
        assert isinstance(index.comment_at(1), FileComment)
        assert isinstance(index.comment_at(3), FileComment)
        assert index.comment_at(4) is None
