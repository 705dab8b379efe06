from pdf_reflow.extraction import GlyphRun
from pdf_reflow.layout import needs_page_markers, page_marker, reconstruct_page_text


def run(text, x, baseline, width=20.0, height=10.0):
    return GlyphRun(text=text, origin_x=x, baseline_y=baseline, width=width, height=height)


def test_same_baseline_is_joined_without_separator():
    runs = [run("Hello ", 0, 100), run("world", 30, 100)]
    assert reconstruct_page_text(runs) == "Hello world"


def test_baseline_change_starts_new_line():
    runs = [run("line one", 0, 100), run("line two", 0, 112)]
    assert reconstruct_page_text(runs) == "line one\nline two"


def test_runs_are_not_resorted():
    runs = [run("bottom", 0, 300), run("top", 0, 100), run("again", 40, 100)]
    assert reconstruct_page_text(runs) == "bottom\ntopagain"


def test_returning_to_earlier_baseline_is_a_new_line():
    runs = [run("a", 0, 100), run("b", 0, 112), run("c", 20, 100)]
    assert reconstruct_page_text(runs) == "a\nb\nc"


def test_exact_baseline_by_default():
    runs = [run("a", 0, 100.0), run("b", 20, 100.3)]
    assert reconstruct_page_text(runs) == "a\nb"
    assert reconstruct_page_text(runs, baseline_tolerance=0.5) == "ab"


def test_paragraph_gap_emits_blank_line():
    runs = [run("first", 0, 100), run("wrapped", 0, 112), run("second", 0, 160)]
    assert reconstruct_page_text(runs, paragraph_gap=1.8) == "first\nwrapped\n\nsecond"
    assert reconstruct_page_text(runs) == "first\nwrapped\nsecond"


def test_empty_page():
    assert reconstruct_page_text([]) == ""


def test_page_markers():
    assert page_marker(3) == "## Page 3"
    assert not needs_page_markers(1)
    assert needs_page_markers(2)
