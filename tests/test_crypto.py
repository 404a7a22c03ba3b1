# -*- coding: utf-8 -*-

## --------------------------------------------------------------------
## NetStorage CMS manager - Request signing tests
##
## Authors   : Michal Ludvig <michal@logix.cz> (https://www.logix.cz/michal)
##             Florent Viard <florent@sodria.com> (https://www.sodria.com)
## Copyright : TGRMN Software, Sodria SAS and contributors
## License   : GPL Version 2
## Website   : https://s3tools.org
## --------------------------------------------------------------------

import hashlib
import io
import unittest

from unittest import mock

from NetStorage.Config import Credentials
from NetStorage.Crypto import (sign_request, sign_string, format_auth_data,
                               format_sign_data, sign_type_for_version,
                               checksum_sha256_file, HMACMD5, HMACSHA1,
                               HMACSHA256, HEADER_ACTION, HEADER_AUTH_DATA,
                               HEADER_AUTH_SIGN)
from NetStorage.Exceptions import InvalidCredentials, MissingParameters


CREDENTIALS = Credentials(u"www.example.com", u"user1", u"secret1", False)
AUTH_DATA = u"5, 0.0.0.0, 0.0.0.0, 1384128000, 1234, user1"
ACTION = u"version=1&action=download"
SIGNATURE = u"jKA6Rh9lCotwbE6BRPZve1fOl67yqKnZ+Z0b048jwYo="


class SignTest(unittest.TestCase):
    def test_sign_data(self):
        self.assertEqual(format_sign_data(AUTH_DATA, u"/foobar", ACTION),
                         AUTH_DATA + u"/foobar\nx-akamai-acs-action:" + ACTION + u"\n")

    def test_known_signature(self):
        sign_data = format_sign_data(AUTH_DATA, u"/foobar", ACTION)
        self.assertEqual(sign_string(u"secret1", sign_data, HMACSHA256), SIGNATURE)

    def test_auth_data(self):
        self.assertEqual(format_auth_data(HMACSHA256, u"user1", 1384128000, 1234), AUTH_DATA)
        self.assertTrue(format_auth_data(HMACMD5, u"user1", 1, 2).startswith(u"3, "))
        self.assertTrue(format_auth_data(HMACSHA1, u"user1", 1, 2).startswith(u"4, "))

    def test_auth_data_defaults(self):
        with mock.patch("NetStorage.Crypto.time.time", return_value=1384128000.5), \
             mock.patch("NetStorage.Crypto.random.randint", return_value=42) as randint:
            self.assertEqual(format_auth_data(HMACSHA256, u"user1"),
                             u"5, 0.0.0.0, 0.0.0.0, 1384128000, 42, user1")
        randint.assert_called_once_with(0, 2 ** 31 - 1)

    def test_sign_request_headers(self):
        headers = sign_request(ACTION, u"/foobar", CREDENTIALS, HMACSHA256,
                               timestamp=1384128000, nonce=1234)
        self.assertEqual(headers, {
            HEADER_ACTION: ACTION,
            HEADER_AUTH_DATA: AUTH_DATA,
            HEADER_AUTH_SIGN: SIGNATURE,
        })

    def test_sign_request_other_hashes(self):
        for sign_type in (HMACMD5, HMACSHA1):
            headers = sign_request(ACTION, u"/foobar", CREDENTIALS, sign_type,
                                   timestamp=1384128000, nonce=1234)
            self.assertEqual(len(headers), 3)
            self.assertNotEqual(headers[HEADER_AUTH_SIGN], SIGNATURE)

    def test_empty_key(self):
        credentials = CREDENTIALS._replace(key=u"")
        self.assertRaises(InvalidCredentials, sign_request, ACTION, u"/foobar", credentials)

    def test_missing_action(self):
        self.assertRaises(MissingParameters, sign_request, None, u"/foobar", CREDENTIALS)

    def test_sign_type_for_version(self):
        self.assertIs(sign_type_for_version(5), HMACSHA256)
        self.assertIs(sign_type_for_version("3"), HMACMD5)
        self.assertRaises(ValueError, sign_type_for_version, 6)


class ChecksumTest(unittest.TestCase):
    def test_sha256_of_stream(self):
        data = b"Lorem ipsum" * 1000
        self.assertEqual(checksum_sha256_file(io.BytesIO(data)).digest(),
                         hashlib.sha256(data).digest())

    def test_sha256_of_range(self):
        data = b"0123456789"
        self.assertEqual(checksum_sha256_file(io.BytesIO(data), 2, 3).hexdigest(),
                         hashlib.sha256(b"234").hexdigest())


if __name__ == '__main__':
    unittest.main()

# vim:et:ts=4:sts=4:ai
