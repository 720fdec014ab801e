"""Tests for preview image and title scraping."""

import pytest

from page_clipper.extractor.metadata import DEFAULT_TITLE, extract_preview_image, extract_title


@pytest.mark.parametrize(
    "markup",
    [
        '<head><meta property="og:image" content="https://img.example.com/a.png"></head>',
        "<head><meta content='https://img.example.com/a.png' property='og:image'/></head>",
        '<meta name="twitter:image" content="https://img.example.com/a.png">',
        '<META PROPERTY="og:image" CONTENT="https://img.example.com/a.png">',
    ],
)
def test_preview_image_patterns(markup):
    assert extract_preview_image(markup) == "https://img.example.com/a.png"


def test_open_graph_wins_over_twitter():
    markup = (
        '<meta name="twitter:image" content="https://t.example.com/t.png">'
        '<meta property="og:image" content="https://o.example.com/o.png">'
    )

    assert extract_preview_image(markup) == "https://o.example.com/o.png"


def test_missing_image_is_empty_string():
    assert extract_preview_image("<html><head><title>x</title></head></html>") == ""
    assert extract_preview_image("") == ""


def test_og_image_width_is_not_mistaken_for_image():
    markup = '<meta property="og:image:width" content="1200">'

    assert extract_preview_image(markup) == ""


def test_entities_are_unescaped_and_relative_urls_resolved():
    markup = '<meta property="og:image" content="/img/a.png?w=1&amp;h=2">'

    assert extract_preview_image(markup, "https://example.com/post/1") == "https://example.com/img/a.png?w=1&h=2"


def test_swapped_order_does_not_capture_earlier_tags():
    markup = (
        '<meta name="description" content="A page">'
        '<link rel="icon" href="/f.ico">'
        '<meta content="https://e.com/og.png" property="og:image">'
    )

    assert extract_preview_image(markup) == "https://e.com/og.png"


def test_unclosed_markup_still_matches():
    markup = '<div><meta property="og:image" content="https://e.com/i.jpg" <p>broken'

    assert extract_preview_image(markup) == "https://e.com/i.jpg"


def test_title_strips_nested_markup_and_whitespace():
    markup = "<html><title>\n  Hello <b>World</b> &amp; more\n</title></html>"

    assert extract_title(markup) == "Hello World & more"


def test_title_fallback():
    assert extract_title("<html></html>") == DEFAULT_TITLE
    assert extract_title("<title>   </title>") == DEFAULT_TITLE
