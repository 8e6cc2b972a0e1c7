"""Tests for configuration loading and validation"""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from subrouter.config import (
    SubrouterConfig,
    find_config_file,
    load_config,
    read_config_file,
    validate_config,
)
from subrouter.errors import ConfigurationError
from subrouter.i18n import LocaleDetector
from subrouter.router.core import IntlSubrouter, Subrouter
from subrouter.router.resolver import BaseDomainPolicy
from subrouter.router.routes import Route

VALID_YAML = """\
routes:
  - path: /hoge
  - path: /fuga
    subdomain: fuga
locales: [en, ja]
default_locale: ja
locale_prefix: always
redirect_status: 308
base_domain_policy: loopback
exclude: [api, assets]
"""


class ValidateConfigTests(unittest.TestCase):
    def test_valid(self):
        data = {"routes": [{"path": "/hoge"}, {"path": "/fuga", "subdomain": "fuga"}], "locales": ["en"]}
        self.assertEqual(validate_config(data), (True, []))

    def test_empty_config_is_valid(self):
        self.assertEqual(validate_config({}), (True, []))

    def test_not_a_mapping(self):
        is_valid, errors = validate_config(["/hoge"])
        self.assertFalse(is_valid)
        self.assertIn("must be a mapping", errors[0])

    def test_collects_every_error(self):
        data = {
            "routes": [{"path": "/x"}, {"path": "/x", "subdomain": "a"}],
            "locales": ["en"],
            "default_locale": "ja",
            "locale_prefix": "sometimes",
            "base_domain_policy": "everything",
            "redirect_status": 200,
            "exclude": "api",
        }
        is_valid, errors = validate_config(data)
        self.assertFalse(is_valid)
        self.assertEqual(len(errors), 6)
        self.assertIn("Duplicate path found: /x", errors[0])

    def test_routes_must_be_a_list(self):
        is_valid, errors = validate_config({"routes": {"path": "/hoge"}})
        self.assertFalse(is_valid)
        self.assertEqual(errors, ["'routes' must be a list"])

    def test_locale_errors(self):
        self.assertFalse(validate_config({"locales": ["en", "en"]})[0])
        self.assertFalse(validate_config({"locales": "en"})[0])
        self.assertFalse(validate_config({"default_locale": "en"})[0])

    def test_redirect_status_must_be_3xx_int(self):
        self.assertFalse(validate_config({"redirect_status": True})[0])
        self.assertFalse(validate_config({"redirect_status": "307"})[0])
        self.assertTrue(validate_config({"redirect_status": 301})[0])


class SubrouterConfigTests(unittest.TestCase):
    def test_defaults(self):
        config = SubrouterConfig()
        self.assertEqual(config.routes, [])
        self.assertEqual(config.locale_prefix, "as-needed")
        self.assertEqual(config.base_domain_policy, "unconfigured")
        self.assertEqual(config.redirect_status, 307)
        self.assertIn("_next", config.exclude)

    def test_from_dict(self):
        config = SubrouterConfig.from_dict(
            {"routes": [{"path": "/fuga", "subdomain": "fuga"}], "locales": ["en", "ja"], "debug": True}
        )
        self.assertEqual(config.routes, [Route("/fuga", "fuga")])
        self.assertEqual(config.locales, ["en", "ja"])
        self.assertTrue(config.debug)

    def test_from_dict_raises_with_all_errors(self):
        with self.assertRaises(ConfigurationError) as ctx:
            SubrouterConfig.from_dict({"routes": [{"path": "/a"}, {"path": "/b"}], "base_domain_policy": "x"})
        message = str(ctx.exception)
        self.assertIn("Duplicate subdomain found: default", message)
        self.assertIn("Unknown base_domain_policy", message)

    def test_build_plain_router(self):
        config = SubrouterConfig(routes=[Route("/hoge")], base_domain_policy="loopback", debug=True)
        router = config.build_router()
        self.assertIsInstance(router, Subrouter)
        self.assertEqual(router.base_domain_policy, BaseDomainPolicy.LOOPBACK)
        self.assertTrue(router.debug)

    def test_build_locale_router(self):
        config = SubrouterConfig(
            routes=[Route("/hoge")],
            locales=["en", "ja"],
            default_locale="ja",
            locale_prefix="never",
            locale_cookie="NEXT_LOCALE",
        )
        router = config.build_router()
        self.assertIsInstance(router, IntlSubrouter)
        self.assertEqual(router.default_locale, "ja")
        self.assertIsInstance(router.locale_detector, LocaleDetector)
        self.assertEqual(router.locale_detector.locale_prefix, "never")
        self.assertEqual(router.locale_detector.cookie_name, "NEXT_LOCALE")

    def test_build_matcher(self):
        matcher = SubrouterConfig(exclude=["assets"], exclude_files=False).build_matcher()
        self.assertFalse(matcher.matches("/assets/logo"))
        self.assertTrue(matcher.matches("/api/users"))
        self.assertTrue(matcher.matches("/robots.txt"))


class LoadConfigTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)
        self.env = patch.dict(os.environ)
        self.env.start()
        os.environ.pop("SUBROUTER_CONFIG", None)
        os.environ.pop("SUBROUTER_DEBUG", None)

    def tearDown(self):
        self.env.stop()
        self.tmpdir.cleanup()

    def _write(self, name: str, content: str) -> Path:
        path = self.root / name
        path.write_text(content, encoding="utf-8")
        return path

    def test_load_yaml(self):
        config = load_config(self._write("subrouter.yml", VALID_YAML))
        self.assertEqual(config.routes, [Route("/hoge"), Route("/fuga", "fuga")])
        self.assertEqual(config.locales, ["en", "ja"])
        self.assertEqual(config.default_locale, "ja")
        self.assertEqual(config.locale_prefix, "always")
        self.assertEqual(config.redirect_status, 308)
        self.assertEqual(config.base_domain_policy, "loopback")
        self.assertEqual(config.exclude, ["api", "assets"])
        self.assertEqual(config.source, self.root / "subrouter.yml")

    def test_load_json(self):
        data = {"routes": [{"path": "/fuga", "subdomain": "fuga"}]}
        config = load_config(self._write("subrouter.json", json.dumps(data)))
        self.assertEqual(config.routes, [Route("/fuga", "fuga")])

    def test_empty_file_gives_defaults(self):
        config = load_config(self._write("subrouter.yml", ""))
        self.assertEqual(config.routes, [])

    def test_invalid_yaml(self):
        with self.assertRaises(ConfigurationError):
            load_config(self._write("subrouter.yml", "routes: [\n"))

    def test_invalid_json(self):
        with self.assertRaises(ConfigurationError):
            read_config_file(self._write("subrouter.json", "{not json"))

    def test_missing_file(self):
        with self.assertRaises(ConfigurationError):
            load_config(self.root / "missing.yml")

    def test_invalid_schema(self):
        with self.assertRaises(ConfigurationError):
            load_config(self._write("subrouter.yml", "routes:\n  - path: /a\n  - path: /a\n"))

    def test_env_config_path(self):
        path = self._write("custom.yml", VALID_YAML)
        os.environ["SUBROUTER_CONFIG"] = str(path)
        self.assertEqual(find_config_file(), path)
        self.assertEqual(len(load_config().routes), 2)

    def test_search_walks_up(self):
        path = self._write("subrouter.yaml", VALID_YAML)
        nested = self.root / "a" / "b"
        nested.mkdir(parents=True)
        self.assertEqual(find_config_file(nested), path.resolve())

    def test_yml_preferred_over_json(self):
        self._write("subrouter.json", "{}")
        yml = self._write("subrouter.yml", VALID_YAML)
        self.assertEqual(find_config_file(self.root), yml.resolve())

    def test_no_config_file(self):
        with patch("subrouter.config.find_config_file", return_value=None):
            config = load_config()
        self.assertIsNone(config.source)
        self.assertEqual(config.routes, [])

    def test_debug_env_override(self):
        path = self._write("subrouter.yml", "debug: true\n")
        os.environ["SUBROUTER_DEBUG"] = "0"
        self.assertFalse(load_config(path).debug)
        os.environ["SUBROUTER_DEBUG"] = "yes"
        self.assertTrue(load_config(path).debug)


if __name__ == "__main__":
    unittest.main()
