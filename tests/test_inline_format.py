from utils.inline_format import render_inline_html, split_bold_segments


def test_split_bold_segments() -> None:
    assert split_bold_segments("前 **第一点** 后") == [("前 ", False), ("第一点", True), (" 后", False)]


def test_unterminated_marker_stays_plain() -> None:
    assert split_bold_segments("**第一") == [("**第一", False)]


def test_render_escapes_html_and_keeps_bold() -> None:
    html = render_inline_html("<b>x</b> **y**\nz")
    assert html == "&lt;b&gt;x&lt;/b&gt; <strong>y</strong><br>z"
