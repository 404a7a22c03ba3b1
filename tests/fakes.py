# -*- coding: utf-8 -*-

## --------------------------------------------------------------------
## NetStorage CMS manager - test helpers
##
## Authors   : Michal Ludvig <michal@logix.cz> (https://www.logix.cz/michal)
##             Florent Viard <florent@sodria.com> (https://www.sodria.com)
## Copyright : TGRMN Software, Sodria SAS and contributors
## License   : GPL Version 2
## Website   : https://s3tools.org
## --------------------------------------------------------------------

import io
import unittest

from unittest import mock

from NetStorage.Config import Config, Credentials
from NetStorage.ConnMan import ConnMan


CREDENTIALS = Credentials(u"www.example.com", u"user1", u"secret1", False)


class FakeResponse(object):
    """Replays one HTTP response, the way http.client.HTTPResponse is read."""
    def __init__(self, status=200, reason="OK", headers=None, body=b"", content_length=None):
        self.status = status
        self.reason = reason
        self._body = io.BytesIO(body)
        headers = dict(headers or {})
        if content_length is None:
            content_length = len(body)
        if content_length is not False:
            headers["Content-Length"] = str(content_length)
        self._headers = list(headers.items())

    def getheaders(self):
        return self._headers

    def read(self, amt=None):
        if amt is None:
            return self._body.read()
        return self._body.read(amt)


class FakeHTTPConnection(object):
    """
    Stands for http.client.HTTPConnection. 'outcome' is the FakeResponse
    to return, or the exception to raise when the response is read.
    """
    def __init__(self, outcome):
        self.outcome = outcome
        self.method = None
        self.url = None
        self.body = None
        self.headers = {}
        self.sent = []
        self.encode_chunked = False
        self.closed = False

    def request(self, method, url, body=None, headers=None):
        self.method = method
        self.url = url
        self.body = body
        self.headers = dict(headers or {})

    def putrequest(self, method, url):
        self.method = method
        self.url = url

    def putheader(self, header, value):
        self.headers[header] = value

    def endheaders(self, message_body=None, encode_chunked=False):
        self.encode_chunked = encode_chunked
        if message_body is not None:
            for chunk in message_body:
                self.sent.append(chunk)

    def send(self, data):
        self.sent.append(data)

    def getresponse(self):
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome

    def close(self):
        self.closed = True

    @property
    def sent_body(self):
        return b"".join(self.sent)


class FakeConn(object):
    """Stands for ConnMan's http_connection wrapper."""
    def __init__(self, outcome):
        self.c = FakeHTTPConnection(outcome)
        self.id = "http://www.example.com"
        self.counter = 1
        self.timeouts = []

    def set_timeout(self, timeout):
        self.timeouts.append(timeout)


class FakeConnMan(object):
    """Hands out one FakeConn per attempt, in the order of 'outcomes'."""
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.connections = []

    def get(self, hostname, ssl=None, cfg=None):
        if not self.outcomes:
            raise AssertionError("Unexpected request attempt #%d" % (len(self.connections) + 1))
        conn = FakeConn(self.outcomes.pop(0))
        self.connections.append(conn)
        return conn

    @property
    def attempts(self):
        return len(self.connections)

    @property
    def last(self):
        return self.connections[-1].c

    def install(self, testcase):
        for name, patch in (("get", mock.patch.object(ConnMan, "get", side_effect=self.get)),
                            ("put", mock.patch.object(ConnMan, "put")),
                            ("close", mock.patch.object(ConnMan, "close"))):
            setattr(self, name, patch.start())
            testcase.addCleanup(patch.stop)
        return self


class ConfigTestCase(unittest.TestCase):
    """Restores the process-wide Config options after each test."""
    def setUp(self):
        snapshot = dict((option, getattr(Config, option)) for option in Config().option_list())

        def restore():
            for option, value in snapshot.items():
                setattr(Config, option, value)
        self.addCleanup(restore)

# vim:et:ts=4:sts=4:ai
