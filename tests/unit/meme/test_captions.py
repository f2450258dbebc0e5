from src.services.meme.render.captions import assign_captions

from tests.unit.meme.factories import make_template


def test_single_zone_takes_whole_caption():
    template = make_template(1)
    assert assign_captions(template, "line one\nline two") == {"zone1": "line one\nline two"}


def test_two_zones_split_on_first_newline():
    template = make_template(2)
    assert assign_captions(template, "top text\nbottom text") == {
        "zone1": "top text",
        "zone2": "bottom text",
    }


def test_two_zones_without_newline_leaves_second_empty():
    template = make_template(2)
    assert assign_captions(template, "just one line") == {
        "zone1": "just one line",
        "zone2": "",
    }


def test_two_zones_empty_first_segment_falls_back_to_caption():
    template = make_template(2)
    captions = assign_captions(template, "\nbottom")
    assert captions["zone1"] == "\nbottom"
    assert captions["zone2"] == "bottom"


def test_windows_newlines_are_normalized():
    template = make_template(2)
    assert assign_captions(template, "top\r\nbottom") == {"zone1": "top", "zone2": "bottom"}


def test_many_zones_take_non_blank_lines_in_order():
    template = make_template(4)
    captions = assign_captions(template, "first\n\n  \nsecond\nthird")
    assert captions == {"zone1": "first", "zone2": "second", "zone3": "third", "zone4": ""}


def test_extra_lines_are_dropped():
    template = make_template(3)
    captions = assign_captions(template, "a\nb\nc\nd")
    assert list(captions.values()) == ["a", "b", "c"]
