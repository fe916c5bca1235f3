import unittest

from yahoo_quotes.integrations.crumb import extract_crumb, is_valid_crumb, unescape_crumb


class CrumbExtractionTest(unittest.TestCase):
    def test_json_crumb_field(self):
        html = '<script>window.config = {"crumb":"homepageCrumb456"};</script>'

        self.assertEqual(extract_crumb(html), "homepageCrumb456")

    def test_json_crumb_field_allows_whitespace(self):
        self.assertEqual(extract_crumb('{"crumb" :  "abc123def"}'), "abc123def")

    def test_csrf_token_field(self):
        html = '<script>{"CrsrfToken":"tok.en-1"}</script>'

        self.assertEqual(extract_crumb(html), "tok.en-1")

    def test_query_style_crumb(self):
        html = '<a href="/quote?crumb=Ab_c.d~e-f&amp;x=1">q</a>'

        self.assertEqual(extract_crumb(html), "Ab_c.d~e-f")

    def test_json_field_wins_over_query_style(self):
        html = 'crumb=fromQuery {"crumb":"fromJson"}'

        self.assertEqual(extract_crumb(html), "fromJson")

    def test_unicode_escapes_are_decoded(self):
        html = '<script>{"crumb":"abc\\u002Fdef\\u002Fghi"}</script>'

        self.assertEqual(extract_crumb(html), "abc/def/ghi")

    def test_no_crumb_returns_none(self):
        self.assertIsNone(extract_crumb("<html>no crumb here</html>"))
        self.assertIsNone(extract_crumb(""))

    def test_unescape_leaves_plain_text_untouched(self):
        self.assertEqual(unescape_crumb("plainCrumb"), "plainCrumb")


class CrumbValidityTest(unittest.TestCase):
    def test_valid_crumb(self):
        self.assertTrue(is_valid_crumb("validCrumb123"))

    def test_rejects_empty_and_none(self):
        self.assertFalse(is_valid_crumb(""))
        self.assertFalse(is_valid_crumb(None))

    def test_rejects_html_and_unauthorized_bodies(self):
        self.assertFalse(is_valid_crumb("<html>Too Many Requests</html>"))
        self.assertFalse(is_valid_crumb('{"finance":{"error":"Unauthorized"}}'))


if __name__ == "__main__":
    unittest.main()
