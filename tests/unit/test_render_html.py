from chatmd.render.html_renderer import KATEX_MACROS, render_html_document, render_markdown


def test_empty_input_renders_nothing():
    assert render_markdown("") == ""


def test_links_open_in_new_tab():
    out = render_markdown("[site](https://example.com)")
    assert 'href="https://example.com"' in out
    assert 'target="_blank"' in out
    assert 'rel="noopener noreferrer"' in out


def test_gfm_table_and_strikethrough():
    out = render_markdown("| a | b |\n|---|---|\n| 1 | 2 |\n\n~~gone~~")
    assert "<table>" in out
    assert "<s>gone</s>" in out


def test_inline_math_is_emitted_for_katex():
    out = render_markdown("$x^2$")
    assert "\\(x^2\\)" in out
    assert 'class="math inline"' in out


def test_escaped_currency_stays_literal():
    out = render_markdown("Price: $5 and $10")
    assert "math" not in out
    assert "Price: $5 and $10" in out


def test_math_can_be_disabled():
    out = render_markdown("$x^2$", disable_math=True)
    assert "math" not in out
    assert "$x^2$" in out


def test_code_block_is_not_math():
    out = render_markdown("```\n$x$\n```")
    assert "<code>$x$\n</code>" in out


def test_html_document_loads_katex_only_with_math():
    doc = render_html_document("$x$ and $$y$$", title="T")
    assert "<title>T</title>" in doc
    assert "renderMathInElement" in doc
    assert "mhchem" in doc
    plain = render_html_document("hi", title="T", disable_math=True)
    assert "katex" not in plain


def test_katex_macros():
    assert KATEX_MACROS["\\RR"] == "\\mathbb{R}"
    assert KATEX_MACROS["\\dx"] == "\\,dx"


def test_raw_html_is_escaped():
    out = render_markdown("hi <img src=x onerror=alert(1)>", disable_math=True)
    assert "<img" not in out
    assert "&lt;img src=x onerror=alert(1)&gt;" in out
    out = render_markdown("<script>alert(1)</script>")
    assert "<script>" not in out


def test_exported_page_does_not_trust_tex_links():
    doc = render_html_document("$x^2$")
    assert "&quot;trust&quot;: false" in doc
