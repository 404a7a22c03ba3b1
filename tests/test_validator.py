# -*- coding: utf-8 -*-

## --------------------------------------------------------------------
## NetStorage CMS manager - Failed response classification tests
##
## Authors   : Michal Ludvig <michal@logix.cz> (https://www.logix.cz/michal)
##             Florent Viard <florent@sodria.com> (https://www.sodria.com)
## Copyright : TGRMN Software, Sodria SAS and contributors
## License   : GPL Version 2
## Website   : https://s3tools.org
## --------------------------------------------------------------------

import unittest

from email.utils import formatdate

from NetStorage.ExitCodes import EX_CLOCKDRIFT, EX_ACCESSDENIED
from NetStorage.Exceptions import ClockDriftError, UnexpectedServerResponse
from NetStorage.NetStorage import validate_response


NOW = 1384128000


def response(date=None, status=403, body=b"denied"):
    headers = {"content-type": "text/plain"}
    if date is not None:
        headers["date"] = date
    return {"status": status, "reason": "Forbidden", "headers": headers, "data": body}


class ValidateResponseTest(unittest.TestCase):
    def test_server_clock_behind(self):
        failure = validate_response(response(formatdate(NOW - 300, usegmt=True)), now=NOW)
        self.assertIsInstance(failure, ClockDriftError)
        self.assertIsInstance(failure, UnexpectedServerResponse)
        self.assertEqual(failure.drift, 300)
        self.assertEqual(failure.status, 403)
        self.assertIn(u"out of sync", str(failure))
        self.assertEqual(failure.get_error_code(), EX_CLOCKDRIFT)

    def test_server_clock_ahead(self):
        failure = validate_response(response(formatdate(NOW + 300, usegmt=True)), now=NOW)
        self.assertIsInstance(failure, ClockDriftError)
        self.assertEqual(failure.drift, -300)

    def test_small_drift_is_a_plain_failure(self):
        failure = validate_response(response(formatdate(NOW - 30, usegmt=True)), now=NOW)
        self.assertNotIsInstance(failure, ClockDriftError)
        self.assertEqual(failure.status, 403)
        self.assertEqual(failure.reason, "Forbidden")
        self.assertEqual(failure.data, b"denied")
        self.assertEqual(failure.headers["content-type"], "text/plain")
        self.assertEqual(failure.get_error_code(), EX_ACCESSDENIED)

    def test_without_date(self):
        failure = validate_response(response(), now=NOW)
        self.assertIs(type(failure), UnexpectedServerResponse)

    def test_unparseable_date(self):
        failure = validate_response(response(u"garbage"), now=NOW)
        self.assertIs(type(failure), UnexpectedServerResponse)

    def test_defaults_to_local_clock(self):
        failure = validate_response(response(formatdate(usegmt=True)))
        self.assertIs(type(failure), UnexpectedServerResponse)


if __name__ == '__main__':
    unittest.main()

# vim:et:ts=4:sts=4:ai
