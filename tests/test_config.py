# -*- coding: utf-8 -*-

## --------------------------------------------------------------------
## NetStorage CMS manager - Configuration tests
##
## Authors   : Michal Ludvig <michal@logix.cz> (https://www.logix.cz/michal)
##             Florent Viard <florent@sodria.com> (https://www.sodria.com)
## Copyright : TGRMN Software, Sodria SAS and contributors
## License   : GPL Version 2
## Website   : https://s3tools.org
## --------------------------------------------------------------------

import io
import logging
import os
import tempfile

from unittest import mock

from NetStorage.Config import Config, Credentials
from NetStorage.Exceptions import InvalidCredentials
from NetStorage.Params import ACTION_READ, ACTION_WRITE

from tests.fakes import ConfigTestCase


CONFIG_FILE = u"""
# NetStorage account
[default]
host = https://example-nsu.akamaihd.net/
username = user1
key = "secret1-is-long"
use_https = no
read_max_retries = 2
verbosity = DEBUG
this line is not valid
"""


class ConfigTest(ConfigTestCase):
    def write_config(self, content):
        fd, filename = tempfile.mkstemp(suffix=".nscmd")
        with io.open(fd, "w", encoding="UTF-8") as fp:
            fp.write(content)
        self.addCleanup(os.unlink, filename)
        return filename

    def test_singleton(self):
        self.assertIs(Config(), Config())

    def test_default_retry_policies(self):
        read = Config().retry_policy(ACTION_READ)
        self.assertEqual((read.max_attempts, read.delay), (6, 2))
        write = Config().retry_policy(ACTION_WRITE)
        self.assertEqual((write.max_attempts, write.delay), (4, 5))
        self.assertRaises(ValueError, Config().retry_policy, "other")

    def test_read_config_file(self):
        cfg = Config(self.write_config(CONFIG_FILE))
        self.assertEqual(cfg.host, u"example-nsu.akamaihd.net")
        self.assertEqual(cfg.username, u"user1")
        self.assertEqual(cfg.key, u"secret1-is-long")
        self.assertIs(cfg.use_https, False)
        self.assertEqual(cfg.read_max_retries, 2)
        self.assertEqual(cfg.verbosity, logging.DEBUG)
        self.assertEqual(cfg.retry_policy(ACTION_READ).max_attempts, 3)
        self.assertEqual(cfg.credentials(),
                         Credentials(u"example-nsu.akamaihd.net", u"user1", u"secret1-is-long", False))

    def test_command_line_overrides_file(self):
        cfg = Config(self.write_config(CONFIG_FILE), username=u"user2", key=u"secret2")
        self.assertEqual(cfg.username, u"user2")
        self.assertEqual(cfg.key, u"secret2")

    def test_missing_config_file(self):
        cfg = Config(u"/nonexistent/.nscmd")
        self.assertEqual(cfg.sign_version, 5)

    def test_environment_reference(self):
        with mock.patch.dict(os.environ, {"MY_NS_KEY": "from-env"}):
            Config().update_option("key", "$MY_NS_KEY")
        self.assertEqual(Config().key, u"from-env")

    def test_environment_credentials(self):
        env = {"NETSTORAGE_HOST": "env-nsu.akamaihd.net",
               "NETSTORAGE_USER": "envuser",
               "NETSTORAGE_KEY": "envkey"}
        with mock.patch.dict(os.environ, env):
            cfg = Config()
        self.assertEqual(cfg.credentials(), Credentials(u"env-nsu.akamaihd.net", u"envuser", u"envkey", True))

    def test_environment_needs_key(self):
        with mock.patch.dict(os.environ, {"NETSTORAGE_USER": "envuser"}):
            os.environ.pop("NETSTORAGE_KEY", None)
            self.assertRaises(ValueError, Config)

    def test_coercion(self):
        cfg = Config()
        cfg.update_option("connection_pooling", "off")
        self.assertIs(cfg.connection_pooling, False)
        cfg.update_option("socket_timeout", "10")
        self.assertEqual(cfg.socket_timeout, 10)
        cfg.update_option("verbosity", "info")
        self.assertEqual(cfg.verbosity, logging.INFO)

    def test_invalid_values(self):
        cfg = Config()
        self.assertRaises(ValueError, cfg.update_option, "use_https", "maybe")
        self.assertRaises(ValueError, cfg.update_option, "socket_timeout", "soon")
        self.assertRaises(ValueError, cfg.update_option, "verbosity", "LOUD")
        self.assertRaises(ValueError, cfg.update_option, "sign_version", "6")

    def test_credentials_need_host_and_user(self):
        cfg = Config()
        cfg.update_option("username", u"user1")
        self.assertRaises(InvalidCredentials, cfg.credentials)
        cfg.update_option("host", u"example-nsu.akamaihd.net")
        cfg.update_option("username", u"")
        self.assertRaises(InvalidCredentials, cfg.credentials)

    def test_dump_config(self):
        cfg = Config()
        cfg.update_option("key", u"abcdefghij")
        stream = io.StringIO()
        cfg.dump_config(stream)
        dump = stream.getvalue()
        self.assertTrue(dump.startswith(u"[default]\n"))
        self.assertIn(u"key = ab...7_chars...j\n", dump)
        self.assertNotIn(u"abcdefghij", dump)
        self.assertIn(u"verbosity = WARNING\n", dump)
        self.assertIn(u"read_max_retries = 5\n", dump)

    def test_dump_config_can_be_read_back(self):
        stream = io.StringIO()
        Config().dump_config(stream)
        cfg = Config(self.write_config(stream.getvalue()))
        self.assertEqual(cfg.write_retry_delay, 5)

# vim:et:ts=4:sts=4:ai
