"""
Tests for rich text cleanup and thread numbering.
"""
from socialcal.posting.content import clean_html_content, number_thread_parts


class TestCleanHtmlContent:
    def test_empty_values(self):
        """Test empty and None content clean to an empty string."""
        assert clean_html_content(None) == ""
        assert clean_html_content("") == ""
        assert clean_html_content(42) == ""

    def test_paragraphs_become_blank_lines(self):
        """Test paragraphs are separated by a blank line."""
        assert clean_html_content("<p>Hello</p><p>World</p>") == "Hello\n\nWorld"

    def test_line_breaks_and_lists(self):
        """Test breaks become newlines and list items become bullets."""
        html = "Line one<br>Line two<br><ul><li>a</li><li>b</li></ul>"
        assert clean_html_content(html) == "Line one\nLine two\na\nb"

    def test_double_encoded_markup_is_stripped(self):
        """Test escaped markup is decoded and then stripped."""
        assert clean_html_content("&lt;p&gt;Hi &amp; bye&lt;/p&gt;") == "Hi & bye"

    def test_typographic_entities(self):
        """Test dash, quote and ellipsis entities are decoded."""
        assert clean_html_content("&ldquo;quoted&rdquo;&nbsp;text") == '"quoted" text'

    def test_excess_newlines_collapse(self):
        """Test runs of blank lines collapse to one."""
        assert clean_html_content("<p>a</p><p></p><p></p><p>b</p>") == "a\n\nb"


class TestNumberThreadParts:
    def test_numbers_multiple_parts(self):
        """Test each thread part gets a [n/total] prefix."""
        assert number_thread_parts(["one", "two", "three"]) == ["[1/3] one", "[2/3] two", "[3/3] three"]

    def test_single_part_is_not_numbered(self):
        """Test a one-part thread is left unnumbered."""
        assert number_thread_parts(["only"]) == ["only"]

    def test_empty_parts_are_dropped_before_numbering(self):
        """Test blank parts do not count toward the total."""
        assert number_thread_parts(["<p>one</p>", " ", "two"]) == ["[1/2] one", "[2/2] two"]

    def test_numbering_can_be_disabled(self):
        """Test parts pass through when numbering is off."""
        assert number_thread_parts(["a", "b"], add_numbers=False) == ["a", "b"]
