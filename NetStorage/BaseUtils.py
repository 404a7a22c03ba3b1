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

import functools
import sys

from calendar import timegm
from hashlib import md5
from logging import debug
from urllib.parse import quote

from .ExitCodes import EX_OSFILE

try:
    import dateutil.parser
except ImportError:
    sys.stderr.write(u"""
!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!
ImportError trying to import dateutil.parser.
Please install the python dateutil module:
$ sudo apt-get install python3-dateutil
  or
$ sudo yum install python3-dateutil
  or
$ pip install python-dateutil
!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!!
""")
    sys.stderr.flush()
    sys.exit(EX_OSFILE)


__all__ = []

try:
    md5()
except ValueError as exc:
    # md5 is disabled for FIPS-compliant Python builds.
    # It is only used here for checksums and the legacy v3 signature,
    # so it is allowed with useforsecurity set to False.
    try:
        md5(usedforsecurity=False)
        md5 = functools.partial(md5, usedforsecurity=False)
    except Exception:
        raise exc
__all__.append("md5")


# Date and time helpers


def dateRFC822toPython(date):
    """
    Convert a string formatted like 'Mon, 11 Nov 2013 00:00:00 GMT' into a python datetime
    """
    return dateutil.parser.parse(date, fuzzy=True)
__all__.append("dateRFC822toPython")


def dateRFC822toUnix(date):
    ## NOTE: a date without timezone is taken as GMT, like HTTP dates always are
    return timegm(dateRFC822toPython(date).utctimetuple())
__all__.append("dateRFC822toUnix")


def datetimeToUnix(date):
    """
    Seconds since epoch of a datetime.
    Naive datetimes are taken as UTC.
    """
    return timegm(date.utctimetuple())
__all__.append("datetimeToUnix")


# Encoding / Decoding


def base_unicodise(string, encoding='UTF-8', errors='replace', silent=False):
    """
    Convert 'string' to Unicode or raise an exception.
    """
    if type(string) == str:
        return string

    if not silent:
        debug("Unicodising %r using %s" % (string, encoding))
    return str(string, encoding, errors)
__all__.append("base_unicodise")


def base_deunicodise(string, encoding='UTF-8', errors='replace', silent=False):
    """
    Convert unicode 'string' to bytes, by default replacing
    all invalid characters with '?' or raise an exception.
    """
    if type(string) != str:
        return string

    if not silent:
        debug("DeUnicodising %r using %s" % (string, encoding))
    return string.encode(encoding, errors)
__all__.append("base_deunicodise")


def decode_from_ns(string, errors="replace"):
    """
    Convert NetStorage UTF-8 'string' to Unicode.
    """
    return base_unicodise(string, "UTF-8", errors, True)
__all__.append("decode_from_ns")


def encode_to_ns(string, errors='replace'):
    """
    Convert Unicode to NetStorage UTF-8 'string', by default replacing
    all invalid characters with '?'.
    """
    return base_deunicodise(string, "UTF-8", errors, True)
__all__.append("encode_to_ns")


def ns_quote(param, quote_slashes=True):
    """
    URI encode every byte except the unreserved characters:
    'A'-'Z', 'a'-'z', '0'-'9', '-', '.', '_', and '~'.
    - The space character is encoded as "%20" (and not as "+").
    - Letters in the hexadecimal value are uppercase, for example "%2F".
    - Set "quote_slashes" to False to keep '/' verbatim, as in request paths.
    """
    if quote_slashes:
        safe_chars = "~"
    else:
        safe_chars = "~/"
    return decode_from_ns(quote(encode_to_ns(param), safe=safe_chars))
__all__.append("ns_quote")


# vim:et:ts=4:sts=4:ai
