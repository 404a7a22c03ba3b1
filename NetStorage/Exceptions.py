# -*- coding: utf-8 -*-

## --------------------------------------------------------------------
## NetStorage CMS manager - Exceptions library
##
## Authors   : Michal Ludvig <michal@logix.cz> (https://www.logix.cz/michal)
##             Florent Viard <florent@sodria.com> (https://www.sodria.com)
## Copyright : TGRMN Software, Sodria SAS and contributors
## License   : GPL Version 2
## Website   : https://s3tools.org
## --------------------------------------------------------------------

from logging import debug

from . import ExitCodes
from .BaseUtils import decode_from_ns

## External exceptions

from ssl import SSLError as NetStorageSSLError
from ssl import CertificateError as NetStorageSSLCertificateError


## nscmd exceptions

class NetStorageException(Exception):
    def __init__(self, message=""):
        super(NetStorageException, self).__init__(message)
        self.message = decode_from_ns(message)

    def __str__(self):
        return self.message

    def get_error_code(self):
        return ExitCodes.EX_GENERAL


class UnexpectedServerResponse(NetStorageException):
    """Non-success HTTP status returned by NetStorage."""
    def __init__(self, response):
        self.status = response["status"]
        self.reason = response["reason"]
        self.headers = response.get("headers", {})
        self.data = response.get("data") or b""
        debug("UnexpectedServerResponse: %s (%s)" % (self.status, self.reason))
        for header in self.headers:
            debug("HttpHeader: %s: %s" % (header, self.headers[header]))
        super(UnexpectedServerResponse, self).__init__(self.describe())

    def describe(self):
        retval = u"Unexpected Response from Server: %d %s" % (self.status, self.reason)
        if self.headers:
            retval += u"\n" + u"\n".join(u"%s: %s" % (k, v) for k, v in sorted(self.headers.items()))
        return retval

    def get_error_code(self):
        if self.status in [400, 405, 411, 416, 417, 501, 504]:
            return ExitCodes.EX_SERVERERROR
        elif self.status in [401, 403]:
            return ExitCodes.EX_ACCESSDENIED
        elif self.status == 404:
            return ExitCodes.EX_NOTFOUND
        elif self.status == 409:
            return ExitCodes.EX_CONFLICT
        elif self.status == 412:
            return ExitCodes.EX_PRECONDITION
        elif self.status == 500:
            return ExitCodes.EX_SOFTWARE
        elif self.status in [429, 503]:
            return ExitCodes.EX_SERVICE
        else:
            return ExitCodes.EX_SOFTWARE


class ResourceNotFound(UnexpectedServerResponse):
    """404 on a read action. Never retried."""
    def describe(self):
        return u"Resource not found: %d %s" % (self.status, self.reason)


class ClockDriftError(UnexpectedServerResponse):
    """The server Date is too far from the local clock for signatures to be accepted."""
    def __init__(self, response, drift):
        self.drift = drift
        super(ClockDriftError, self).__init__(response)

    def describe(self):
        return (u"Local server Date is more than 30s out of sync with Remote server "
                u"(drift: %ds, response: %d %s)" % (self.drift, self.status, self.reason))

    def get_error_code(self):
        return ExitCodes.EX_CLOCKDRIFT


class TransportFailure(NetStorageException):
    """Connection level failure: reset, refused, DNS, timeout, broken response."""
    def __init__(self, uri, cause):
        self.uri = uri
        self.cause = cause
        super(TransportFailure, self).__init__(u"Request failed for: %s (%s)" % (uri, cause))

    def get_error_code(self):
        return ExitCodes.EX_TEMPFAIL


class InvalidCredentials(NetStorageException):
    def get_error_code(self):
        return ExitCodes.EX_CONFIG


class MissingParameters(NetStorageException):
    def get_error_code(self):
        return ExitCodes.EX_SOFTWARE


class LocalFileNotFound(NetStorageException):
    def __init__(self, filename, message="Src file is not accessible"):
        self.filename = filename
        super(LocalFileNotFound, self).__init__(u"%s: %s" % (message, filename))

    def get_error_code(self):
        return ExitCodes.EX_NOINPUT


class InvalidFileError(NetStorageException):
    def get_error_code(self):
        return ExitCodes.EX_DATAERR


class RequestCancelled(NetStorageException):
    def get_error_code(self):
        return ExitCodes.EX_BREAK


class ParameterError(NetStorageException):
    def get_error_code(self):
        return ExitCodes.EX_USAGE

# vim:et:ts=4:sts=4:ai
