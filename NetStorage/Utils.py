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

import datetime
import time

import NetStorage.Config
import NetStorage.Exceptions

from NetStorage.BaseUtils import (base_deunicodise, datetimeToUnix,
                                 dateRFC822toUnix)


__all__ = []


def formatSize(size, human_readable=False, floating_point=False):
    size = floating_point and float(size) or int(size)
    if human_readable:
        coeffs = ['K', 'M', 'G', 'T']
        coeff = ""
        while size > 2048:
            size /= 1024
            coeff = coeffs.pop(0)
        return (floating_point and float(size) or int(size), coeff)
    else:
        return (size, "")
__all__.append("formatSize")


def convertHeaderTupleListToDict(list):
    """
    Header keys are not always lowercase with http.client, make them so.
    """
    retval = {}
    for tuple in list:
        retval[tuple[0].lower()] = tuple[1]
    return retval
__all__.append("convertHeaderTupleListToDict")


def deunicodise(string, encoding=None, errors='replace', silent=False):
    if not encoding:
        encoding = NetStorage.Config.Config.encoding
    return base_deunicodise(string, encoding, errors, silent)
__all__.append("deunicodise")


def time_to_epoch(t):
    """Convert time specified in a variety of forms into UNIX epoch time.
    Accepts datetime.datetime, int, float and strings holding an epoch
    or a date parseable by dateutil (eg. '2013-11-11T00:00:00Z').
    Relative times like '+60' are counted from now.
    """
    if isinstance(t, bool):
        pass
    elif isinstance(t, int):
        return t
    elif isinstance(t, float):
        return int(t)
    elif isinstance(t, datetime.datetime):
        return datetimeToUnix(t)
    elif isinstance(t, str):
        try:
            if t.startswith('+'):
                return int(time.time()) + int(t[1:])
            return int(t)
        except ValueError:
            try:
                return dateRFC822toUnix(t)
            except (ValueError, OverflowError):
                pass
    raise NetStorage.Exceptions.ParameterError(
        "Unable to convert %r to an epoch time. Pass an epoch time or an ISO 8601 date." % (t,))
__all__.append("time_to_epoch")


# vim:et:ts=4:sts=4:ai
