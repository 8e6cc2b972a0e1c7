"""Tests for WSGI middleware."""

import unittest
from unittest.mock import Mock

from subrouter.config import SubrouterConfig
from subrouter.i18n import LocaleDetector
from subrouter.middleware.wsgi import SubrouterWSGIMiddleware, request_from_environ
from subrouter.router.core import IntlSubrouter, Subrouter
from subrouter.router.decisions import PassThrough, Rewrite
from subrouter.router.matcher import RequestMatcher
from subrouter.router.routes import Route

ROUTES = [Route("/hoge"), Route("/fuga", "fuga"), Route("/piyo", "piyo")]


def make_environ(path="/", host="example.com", query="", **headers):
    environ = {
        "REQUEST_METHOD": "GET",
        "PATH_INFO": path,
        "QUERY_STRING": query,
        "HTTP_HOST": host,
        "wsgi.url_scheme": "http",
    }
    for name, value in headers.items():
        environ[f"HTTP_{name.upper()}"] = value
    return environ


class TestSubrouterWSGIMiddleware(unittest.TestCase):
    """Test cases for SubrouterWSGIMiddleware."""

    def setUp(self):
        """Set up test fixtures."""
        self.seen = {}

        def simple_app(environ, start_response):
            self.seen = dict(environ)
            start_response("200 OK", [("Content-Type", "text/plain")])
            return [b"Hello from app"]

        self.simple_app = simple_app
        self.router = Subrouter(ROUTES)
        self.middleware = SubrouterWSGIMiddleware(self.simple_app, router=self.router, matcher=RequestMatcher())

    def test_rewrite(self):
        start_response = Mock()
        body = self.middleware(make_environ("/fugara", "fuga.example.com"), start_response)

        self.assertEqual(list(body), [b"Hello from app"])
        self.assertEqual(self.seen["PATH_INFO"], "/fuga/fugara")
        self.assertEqual(self.seen["subrouter.original_path"], "/fugara")
        self.assertEqual(self.seen["subrouter.subdomain"], "fuga")
        self.assertEqual(self.seen["subrouter.decision"], Rewrite("/fuga/fugara"))
        self.assertNotIn("HTTP_X_LOCALE", self.seen)
        start_response.assert_called_once_with("200 OK", [("Content-Type", "text/plain")])

    def test_pass_through(self):
        self.middleware(make_environ("/hoge/sub"), Mock())
        self.assertEqual(self.seen["PATH_INFO"], "/hoge/sub")
        self.assertEqual(self.seen["subrouter.decision"], PassThrough())

    def test_excluded_path(self):
        self.middleware(make_environ("/api/users", "fuga.example.com"), Mock())
        self.assertEqual(self.seen["PATH_INFO"], "/api/users")
        self.assertNotIn("subrouter.decision", self.seen)

    def test_missing_path_info(self):
        environ = make_environ(host="fuga.example.com")
        del environ["PATH_INFO"]
        self.middleware(environ, Mock())
        self.assertEqual(self.seen["PATH_INFO"], "/fuga/")

    def test_config_argument(self):
        config = SubrouterConfig(routes=[Route("/fuga", "fuga")], exclude=[])
        middleware = SubrouterWSGIMiddleware(self.simple_app, config=config)
        middleware(make_environ("/api/x", "fuga.example.com"), Mock())
        self.assertEqual(self.seen["PATH_INFO"], "/fuga/api/x")


class TestLocaleWSGIMiddleware(unittest.TestCase):
    def setUp(self):
        self.seen = {}

        def simple_app(environ, start_response):
            self.seen = dict(environ)
            start_response("200 OK", [("Content-Type", "text/plain")])
            return [b"ok"]

        self.simple_app = simple_app
        router = IntlSubrouter(ROUTES, LocaleDetector(["en", "ja"], "en"), locales=["en", "ja"])
        self.middleware = SubrouterWSGIMiddleware(simple_app, router=router, matcher=RequestMatcher())

    def test_locale_rewrite_sets_headers(self):
        start_response = Mock()
        self.middleware(make_environ("/ja/", "piyo.example.com"), start_response)

        self.assertEqual(self.seen["PATH_INFO"], "/ja/piyo/")
        self.assertEqual(self.seen["HTTP_X_LOCALE"], "ja")
        status, headers, _ = start_response.call_args.args
        self.assertEqual(status, "200 OK")
        self.assertIn(("X-Locale", "ja"), headers)

    def test_app_locale_header_is_kept(self):
        def app(environ, start_response):
            start_response("200 OK", [("x-locale", "custom")])
            return [b"ok"]

        router = IntlSubrouter(ROUTES, locales=["en", "ja"])
        middleware = SubrouterWSGIMiddleware(app, router=router, matcher=RequestMatcher())
        start_response = Mock()
        middleware(make_environ("/ja/x", "fuga.example.com"), start_response)
        _, headers, _ = start_response.call_args.args
        self.assertEqual(headers, [("x-locale", "custom")])

    def test_redirect(self):
        start_response = Mock()
        body = self.middleware(
            make_environ("/about", "fuga.example.com", query="x=1", ACCEPT_LANGUAGE="ja"), start_response
        )

        self.assertEqual(body, [b""])
        self.assertEqual(self.seen, {})
        status, headers = start_response.call_args.args
        self.assertEqual(status, "307 Temporary Redirect")
        self.assertIn(("Location", "/ja/about?x=1"), headers)
        self.assertIn(("Content-Length", "0"), headers)

    def test_async_detector_is_rejected(self):
        async def detector(request):
            return PassThrough()

        router = IntlSubrouter(ROUTES, detector, locales=["en", "ja"])
        middleware = SubrouterWSGIMiddleware(self.simple_app, router=router, matcher=RequestMatcher())
        with self.assertRaises(TypeError):
            middleware(make_environ("/about", "fuga.example.com"), Mock())


class TestRequestFromEnviron(unittest.TestCase):
    def test_headers(self):
        environ = make_environ("/x", "fuga.example.com:8000", query="a=1", ACCEPT_LANGUAGE="ja", COOKIE="a=b")
        environ["CONTENT_TYPE"] = "application/json"
        request = request_from_environ(environ)

        self.assertEqual(request.path, "/x")
        self.assertEqual(request.host, "fuga.example.com:8000")
        self.assertEqual(request.query_string, "a=1")
        self.assertEqual(request.headers["accept-language"], "ja")
        self.assertEqual(request.headers["cookie"], "a=b")
        self.assertEqual(request.headers["content-type"], "application/json")
        self.assertEqual(request.headers["host"], "fuga.example.com:8000")


if __name__ == "__main__":
    unittest.main()
