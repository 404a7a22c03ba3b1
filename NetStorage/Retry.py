# -*- coding: utf-8 -*-

## --------------------------------------------------------------------
## NetStorage CMS manager
##
## Authors   : Michal Ludvig <michal@logix.cz> (https://www.logix.cz/michal)
##             Florent Viard <florent@sodria.com> (https://www.sodria.com)
## Copyright : TGRMN Software, Sodria SAS and contributors
## License   : GPL Version 2
## Website   : https://s3tools.org
## --------------------------------------------------------------------

from .Exceptions import (TransportFailure, UnexpectedServerResponse,
                         ResourceNotFound, ClockDriftError)

__all__ = ["RetryPolicy"]


class RetryPolicy(object):
    """
    Decides, after a failed attempt, whether the request is sent again.

    A policy is called with the number of attempts already made (1 after
    the first one) and the exception describing the last failure. It
    returns the delay in seconds to wait before the next attempt, or None
    to stop and let the failure propagate.

    Only transport failures and unexpected server responses are retried.
    A 404 on a read action and a clock drift are final, sending the same
    request again would fail the same way.
    """
    retryable = (TransportFailure, UnexpectedServerResponse)
    final = (ResourceNotFound, ClockDriftError)

    def __init__(self, max_attempts, delay, name=""):
        if max_attempts < 1:
            raise ValueError("RetryPolicy needs at least one attempt, not %r" % max_attempts)
        self.max_attempts = max_attempts
        self.delay = delay
        self.name = name

    def is_retryable(self, failure):
        return isinstance(failure, self.retryable) and not isinstance(failure, self.final)

    def exhausted(self, attempt):
        return attempt >= self.max_attempts

    def __call__(self, attempt, failure):
        if not self.is_retryable(failure) or self.exhausted(attempt):
            return None
        return self.delay

    def __repr__(self):
        return "RetryPolicy(%s: %d attempts, %ss)" % (self.name or "custom", self.max_attempts, self.delay)

# vim:et:ts=4:sts=4:ai
