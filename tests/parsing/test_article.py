import unittest

from feedproxy.parsing.article import (
    extract_article, extract_title, select_content_region, strip_chrome, sanitize,
)

ARTICLE_URL = "https://example.com/post"

ARTICLE_PAGE = """<!DOCTYPE html>
<html><head>
<title>Fallback Title</title>
<meta property="og:title" content="OG &amp; Title">
<style>p { color: red; }</style>
<script>var x = "<p>not content</p>";</script>
</head>
<body>
<nav><a href="/home">Home</a></nav>
<header><h1>Site Name</h1></header>
<article>
  <h1>Headline</h1>
  <!-- hidden comment -->
  <p class="lead" onclick="track()">Intro <span>text</span> with <a href="/more">a link</a>.</p>
  <script>alert(1)</script>
  <img src="/img/a.png" alt="A">
  <div class="share-buttons"><p>Share me</p></div>
  <form><input type="text" name="q"></form>
  <button>Click</button>
</article>
<footer>Footer text</footer>
</body></html>
"""


class TestExtractArticle(unittest.TestCase):
    def setUp(self):
        self.result = extract_article(ARTICLE_PAGE, ARTICLE_URL)

    def test_title_prefers_open_graph(self):
        self.assertEqual(self.result.title, "OG & Title")

    def test_url_is_request_url(self):
        self.assertEqual(self.result.url, ARTICLE_URL)

    def test_whitelisted_markup_kept(self):
        content = self.result.content
        self.assertIn("<h1>Headline</h1>", content)
        self.assertIn('<p>Intro text with <a href="https://example.com/more">a link</a>.</p>', content)

    def test_relative_image_resolved(self):
        self.assertIn('src="https://example.com/img/a.png"', self.result.content)

    def test_chrome_and_boilerplate_removed(self):
        content = self.result.content
        for fragment in ("alert", "not content", "hidden comment", "Share me", "Click",
                         "Home", "Site Name", "Footer text", "onclick", "<span", "<input", "<form"):
            self.assertNotIn(fragment, content)

    def test_whitespace_collapsed(self):
        self.assertNotIn("\n", self.result.content)
        self.assertNotIn("  ", self.result.content)

    def test_to_dict_shape(self):
        self.assertEqual(set(self.result.to_dict()), {"title", "content", "url"})


class TestTitle(unittest.TestCase):
    def test_title_tag_fallback(self):
        self.assertEqual(extract_title("<head><title> A &amp; B </title></head>"), "A & B")

    def test_content_before_property(self):
        self.assertEqual(extract_title('<meta content="Reverse" property="og:title">'), "Reverse")

    def test_apostrophe_inside_double_quoted_content(self):
        self.assertEqual(extract_title('<meta property="og:title" content="Don\'t Panic">'), "Don't Panic")
        self.assertEqual(
            extract_title('<meta content=\'Say "hi"\' property="og:title">'), 'Say "hi"',
        )

    def test_default_title(self):
        self.assertEqual(extract_title("<p>No title here</p>"), "Untitled")


class TestContentRegion(unittest.TestCase):
    def test_main_used_without_article(self):
        html = "<body><div>Outside</div><main><p>Main text</p></main></body>"
        self.assertEqual(extract_article(html, ARTICLE_URL).content, "<p>Main text</p>")

    def test_content_class_div(self):
        html = '<body><p>Noise</p><div class="post-content"><p>Real</p></div></body>'
        self.assertEqual(select_content_region(html), "<p>Real</p>")

    def test_content_id_div(self):
        html = '<body><p>Noise</p><div id="story"><p>Story</p></div></body>'
        self.assertEqual(select_content_region(html), "<p>Story</p>")

    def test_concatenated_content_class(self):
        html = '<body><div class="nav-links">menu</div><div class="articleBody"><p>Real text</p></div></body>'
        self.assertEqual(select_content_region(html), "<p>Real text</p>")

    def test_unseparated_content_words(self):
        html = '<body><p>Noise</p><div id="postcontent"><p>Post</p></div></body>'
        self.assertEqual(select_content_region(html), "<p>Post</p>")

    def test_body_fallback(self):
        html = "<html><body><p>Body text</p></body></html>"
        self.assertEqual(extract_article(html, ARTICLE_URL).content, "<p>Body text</p>")

    def test_whole_document_fallback_wraps_plain_text(self):
        text = "Just some text\nwrapped here\n\nSecond para"
        self.assertEqual(
            extract_article(text, ARTICLE_URL).content,
            "<p>Just some text wrapped here</p><p>Second para</p>",
        )


class TestCleanup(unittest.TestCase):
    def test_boilerplate_div_by_id(self):
        html = '<article><p>Keep</p><div id="comments"><p>Comment text</p></div></article>'
        self.assertEqual(extract_article(html, ARTICLE_URL).content, "<p>Keep</p>")

    def test_boilerplate_requires_word_start(self):
        html = '<div class="thread-body">kept</div><div class="ad-slot">gone</div>'
        cleaned = strip_chrome(html)
        self.assertIn("kept", cleaned)
        self.assertNotIn("gone", cleaned)

    def test_javascript_links_dropped(self):
        html = '<article><p><a href="javascript:alert(1)">x</a></p></article>'
        self.assertEqual(extract_article(html, ARTICLE_URL).content, "<p><a>x</a></p>")

    def test_absolute_and_protocol_relative_urls(self):
        html = ('<p><a href="https://other.org/x">a</a><a href="//cdn.example.com/y">b</a>'
                '<a href="../up">c</a></p>')
        content = sanitize(html, "https://example.com/blog/post")
        self.assertIn('href="https://other.org/x"', content)
        self.assertIn('href="https://cdn.example.com/y"', content)
        self.assertIn('href="https://example.com/up"', content)

    def test_malformed_url_left_unchanged(self):
        content = sanitize('<p><a href="http://[broken">x</a></p>', ARTICLE_URL)
        self.assertIn('href="http://[broken"', content)

    def test_self_closing_form_controls_removed(self):
        content = sanitize('<p>Name <input type="text"/><label>Label</label> end</p>', ARTICLE_URL)
        self.assertEqual(content, "<p>Name  end</p>")

    def test_empty_document(self):
        result = extract_article("", ARTICLE_URL)
        self.assertEqual((result.title, result.content, result.url), ("Untitled", "", ARTICLE_URL))
