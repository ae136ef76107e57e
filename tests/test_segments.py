from pathlib import Path

from pdfnav.segments import Segment, SegmentModel, segment_filename


def test_no_split_points_is_one_segment():
    assert SegmentModel(8).build_segments() == [Segment(1, 8)]


def test_split_points_carve_segments():
    model = SegmentModel(8, frozenset({3, 6}))
    assert model.build_segments() == [(1, 2), (3, 5), (6, 8)]


def test_segments_partition_every_page():
    model = SegmentModel(12)
    for page in (12, 2, 7, 5):
        model = model.toggle(page)
    pages = [p for segment in model.build_segments() for p in segment.pages()]
    assert pages == list(range(1, 13))
    assert len(model.build_segments()) == len(model.split_points) + 1


def test_toggle_twice_restores():
    model = SegmentModel(8).toggle(4)
    assert model.is_split(4)
    assert model.toggle(4) == SegmentModel(8)


def test_toggle_ignores_first_page_and_out_of_range():
    model = SegmentModel(8)
    assert model.toggle(1) is model
    assert model.toggle(0) is model
    assert model.toggle(9) is model


def test_toggle_returns_new_model():
    model = SegmentModel(8)
    toggled = model.toggle(3)
    assert model.split_points == frozenset()
    assert toggled.sorted_splits() == [3]


def test_current_segment():
    model = SegmentModel(8, frozenset({3, 6}))
    assert model.current_segment(1) == Segment(1, 2)
    assert model.current_segment(4) == Segment(3, 5)
    assert model.current_segment(8) == Segment(6, 8)


def test_segment_str():
    assert str(Segment(3, 5)) == "p.3–5"


def test_segment_filename():
    assert segment_filename("book", Segment(3, 5)) == Path("book_p3-5.pdf")
    assert segment_filename("book", Segment(1, 2), Path("out")) == Path("out/book_p1-2.pdf")
