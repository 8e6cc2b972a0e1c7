"""Tests for the default locale detector"""

import unittest

from subrouter.errors import ConfigurationError
from subrouter.i18n import LocaleDetector, parse_accept_language
from subrouter.router.decisions import PassThrough, Redirect, Rewrite, RouteRequest


class ParseAcceptLanguageTests(unittest.TestCase):
    def test_sorted_by_quality(self):
        self.assertEqual(parse_accept_language("ja;q=0.8, en-US, fr;q=0.9"), ["en-US", "fr", "ja"])

    def test_equal_quality_keeps_header_order(self):
        self.assertEqual(parse_accept_language("de, ja, en"), ["de", "ja", "en"])

    def test_dropped_entries(self):
        self.assertEqual(parse_accept_language("*, de;q=0, en;q=abc, ja;q=0.5"), ["ja"])

    def test_empty_header(self):
        self.assertEqual(parse_accept_language(""), [])
        self.assertEqual(parse_accept_language(" , "), [])


class NegotiateTests(unittest.TestCase):
    def setUp(self):
        self.detector = LocaleDetector(["en", "ja"], "en")

    def negotiate(self, **headers):
        return self.detector.negotiate(RouteRequest("/", headers=headers))

    def test_default_locale(self):
        self.assertEqual(self.negotiate(), "en")

    def test_accept_language(self):
        self.assertEqual(self.negotiate(**{"accept-language": "ja,en;q=0.5"}), "ja")

    def test_primary_subtag_and_case(self):
        self.assertEqual(self.negotiate(**{"accept-language": "ja-JP"}), "ja")
        self.assertEqual(self.negotiate(**{"accept-language": "EN-us, ja;q=0.1"}), "en")

    def test_unsupported_languages_fall_back(self):
        self.assertEqual(self.negotiate(**{"accept-language": "de, fr"}), "en")

    def test_cookie_wins(self):
        headers = {"cookie": "theme=dark; SUBROUTER_LOCALE=ja", "accept-language": "en"}
        self.assertEqual(self.negotiate(**headers), "ja")

    def test_unknown_cookie_value_is_ignored(self):
        headers = {"cookie": "SUBROUTER_LOCALE=de", "accept-language": "ja"}
        self.assertEqual(self.negotiate(**headers), "ja")

    def test_cookie_disabled(self):
        detector = LocaleDetector(["en", "ja"], cookie_name=None)
        request = RouteRequest("/", headers={"cookie": "SUBROUTER_LOCALE=ja"})
        self.assertEqual(detector.negotiate(request), "en")

    def test_custom_cookie_name(self):
        detector = LocaleDetector(["en", "ja"], cookie_name="NEXT_LOCALE")
        request = RouteRequest("/", headers={"cookie": "NEXT_LOCALE=ja"})
        self.assertEqual(detector.negotiate(request), "ja")


class LocaleDetectorTests(unittest.TestCase):
    def ja_request(self, path, query=""):
        return RouteRequest(path, headers={"accept-language": "ja"}, query_string=query)

    def test_as_needed_rewrites_default_locale(self):
        detector = LocaleDetector(["en", "ja"], "en")
        self.assertEqual(detector(RouteRequest("/about")), Rewrite("/en/about", locale="en"))

    def test_as_needed_redirects_other_locales(self):
        detector = LocaleDetector(["en", "ja"], "en")
        self.assertEqual(detector(self.ja_request("/about")), Redirect("/ja/about", 307))
        self.assertEqual(detector(self.ja_request("/")), Redirect("/ja", 307))

    def test_redirect_keeps_query_string(self):
        detector = LocaleDetector(["en", "ja"], "en")
        self.assertEqual(detector(self.ja_request("/about", "x=1")).location, "/ja/about?x=1")

    def test_always_redirects(self):
        detector = LocaleDetector(["en", "ja"], "en", locale_prefix="always")
        self.assertEqual(detector(RouteRequest("/about")), Redirect("/en/about", 307))

    def test_never_rewrites(self):
        detector = LocaleDetector(["en", "ja"], "en", locale_prefix="never")
        self.assertEqual(detector(self.ja_request("/about")), Rewrite("/ja/about", locale="ja"))

    def test_localized_path_passes_through(self):
        detector = LocaleDetector(["en", "ja"], "en", locale_prefix="always")
        self.assertEqual(detector(RouteRequest("/ja/about")), PassThrough())

    def test_redirect_status(self):
        detector = LocaleDetector(["en", "ja"], "en", redirect_status=308)
        self.assertEqual(detector(self.ja_request("/about")).status_code, 308)

    def test_default_locale_defaults_to_first(self):
        self.assertEqual(LocaleDetector(["ja", "en"]).default_locale, "ja")

    def test_invalid_configuration(self):
        with self.assertRaises(ConfigurationError):
            LocaleDetector([])
        with self.assertRaises(ConfigurationError):
            LocaleDetector(["en"], "ja")
        with self.assertRaises(ConfigurationError):
            LocaleDetector(["en"], locale_prefix="sometimes")


if __name__ == "__main__":
    unittest.main()
