from dock.content.render import SlugRegistry, render_markdown_with_outline
from dock.models import OutlineEntry


def test_outline_contains_level_two_and_three_headings_in_order() -> None:
    content = "\n".join(
        [
            "# Title",
            "## Goals",
            "text",
            "### Near term",
            "#### Too deep",
            "## Risks",
        ]
    )
    result = render_markdown_with_outline(content)
    assert result.outline == [
        OutlineEntry(level=2, text="Goals", id="goals"),
        OutlineEntry(level=3, text="Near term", id="near-term"),
        OutlineEntry(level=2, text="Risks", id="risks"),
    ]
    assert "<h1>Title</h1>" in result.html
    assert "<h4>Too deep</h4>" in result.html
    assert '<h2 id="goals">Goals</h2>' in result.html
    assert '<h3 id="near-term">Near term</h3>' in result.html


def test_duplicate_headings_get_numeric_suffix() -> None:
    result = render_markdown_with_outline("## Setup\n\n## Setup\n\n### Setup")
    assert [entry.id for entry in result.outline] == ["setup", "setup-2", "setup-3"]


def test_suffix_skips_ids_taken_by_literal_headings() -> None:
    result = render_markdown_with_outline("## Setup 2\n\n## Setup\n\n## Setup")
    ids = [entry.id for entry in result.outline]
    assert ids == ["setup-2", "setup", "setup-3"]
    assert len(set(ids)) == len(ids)


def test_heading_text_drops_inline_markup() -> None:
    result = render_markdown_with_outline("## The *big* `idea`")
    assert result.outline == [OutlineEntry(level=2, text="The big idea", id="the-big-idea")]


def test_punctuation_only_heading_gets_fallback_id() -> None:
    result = render_markdown_with_outline("## ???\n\n## ???")
    assert [entry.id for entry in result.outline] == ["section", "section-2"]


def test_render_is_idempotent() -> None:
    content = "## A\n\n## A\n\nSome *text* with a [link](https://example.com)."
    assert render_markdown_with_outline(content) == render_markdown_with_outline(content)


def test_front_matter_is_not_rendered() -> None:
    result = render_markdown_with_outline("---\ntitle: Hidden\n---\n\n## Visible")
    assert "Hidden" not in result.html
    assert [entry.text for entry in result.outline] == ["Visible"]


def test_empty_content() -> None:
    result = render_markdown_with_outline("")
    assert result.html == ""
    assert result.outline == []


def test_tables_and_strikethrough_enabled() -> None:
    html = render_markdown_with_outline("| a | b |\n|---|---|\n| 1 | 2 |\n\n~~gone~~").html
    assert "<table>" in html
    assert "<s>gone</s>" in html


def test_slug_registry_is_per_instance() -> None:
    first, second = SlugRegistry(), SlugRegistry()
    assert first.claim("Intro") == "intro"
    assert first.claim("Intro") == "intro-2"
    assert second.claim("Intro") == "intro"
