from pdf_reflow.extraction import GlyphRun, LinkAnnotation
from pdf_reflow.links import (
    apply_link_annotations,
    markdown_link,
    overlaps,
    visible_link_text,
)

URL = "https://example.com"


def run(text, x, width, baseline=100.0, height=10.0):
    return GlyphRun(text=text, origin_x=x, baseline_y=baseline, width=width, height=height)


def contact_page():
    runs = [run("Contact us", 72, 60), run(" for details", 150, 60)]
    link = LinkAnnotation(rect=(72, 90, 132, 102), url=URL)
    return "Contact us for details", runs, link


def test_hyperlink_fusion():
    text, runs, link = contact_page()
    result = apply_link_annotations(text, runs, [link])
    assert result == "[Contact us](https://example.com) for details"
    assert result.count("Contact us") == 1


def test_visible_text_is_trimmed_concatenation():
    runs = [run(" Contact ", 72, 30), run("us ", 102, 20)]
    link = LinkAnnotation(rect=(72, 90, 122, 100), url=URL)
    assert visible_link_text(runs, link) == "Contact us"


def test_tolerance_margin():
    target = run("x", 100, 10)  # bbox (100, 90, 110, 100)
    assert overlaps(target, (115, 90, 130, 100), tolerance=10)
    assert not overlaps(target, (121, 90, 130, 100), tolerance=10)
    assert not overlaps(target, (115, 90, 130, 100), tolerance=0)
    assert overlaps(target, (100, 105, 110, 120), tolerance=10)
    assert not overlaps(target, (100, 111, 110, 120), tolerance=10)


def test_only_first_occurrence_is_linked():
    runs = [run("Docs", 0, 30), run(" first. Docs second.", 80, 120)]
    link = LinkAnnotation(rect=(0, 90, 30, 100), url=URL)
    result = apply_link_annotations("Docs first. Docs second.", runs, [link])
    assert result == "[Docs](https://example.com) first. Docs second."


def test_later_link_skips_text_already_linked():
    runs = [
        run("Click ", 0, 20),
        run("here", 40, 20),
        run(" and ", 80, 20),
        run("here", 120, 20),
        run(".", 160, 5),
    ]
    links = [
        LinkAnnotation(rect=(40, 90, 60, 100), url="https://one.example"),
        LinkAnnotation(rect=(120, 90, 140, 100), url="https://two.example"),
    ]
    result = apply_link_annotations("Click here and here.", runs, links)
    assert result == "Click [here](https://one.example) and [here](https://two.example)."


def test_orphan_link_is_appended():
    text, runs, _ = contact_page()
    orphan = LinkAnnotation(rect=(400, 600, 500, 620), url="https://example.org/img")
    result = apply_link_annotations(text, runs, [orphan])
    assert result == "Contact us for details\n\n[Link](https://example.org/img)"


def test_orphan_link_on_empty_page():
    orphan = LinkAnnotation(rect=(0, 0, 10, 10), url=URL)
    assert apply_link_annotations("", [], [orphan]) == "[Link](https://example.com)"


def test_link_text_split_across_lines_is_kept_as_orphan():
    runs = [run("Read ", 0, 30, baseline=100), run("more", 0, 30, baseline=112)]
    link = LinkAnnotation(rect=(0, 90, 30, 112), url=URL)
    result = apply_link_annotations("Read \nmore", runs, [link])
    assert result == "Read \nmore\n\n[Read more](https://example.com)"


def test_reversed_rectangle_is_normalised():
    link = LinkAnnotation(rect=(132, 102, 72, 90), url=URL)
    assert link.rect == (72, 90, 132, 102)


def test_markdown_link_escaping():
    assert markdown_link("a [b]", "https://x.com/a b(c)") == (
        "[a \\[b\\]](https://x.com/a%20b%28c%29)"
    )


def test_no_annotations_leaves_text_untouched():
    text, runs, _ = contact_page()
    assert apply_link_annotations(text, runs, []) == text
