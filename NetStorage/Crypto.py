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

import hmac
import random
import time

from base64 import b64encode
from collections import namedtuple
from hashlib import sha1, sha256
from logging import debug

from .BaseUtils import encode_to_ns, decode_from_ns, md5
from .Exceptions import InvalidCredentials, MissingParameters
from .Utils import deunicodise

__all__ = []

HEADER_ACTION = "X-Akamai-ACS-Action"
HEADER_AUTH_DATA = "X-Akamai-ACS-Auth-Data"
HEADER_AUTH_SIGN = "X-Akamai-ACS-Auth-Sign"
__all__.extend(["HEADER_ACTION", "HEADER_AUTH_DATA", "HEADER_AUTH_SIGN"])


SignType = namedtuple("SignType", "name version_id hash_func")

HMACMD5 = SignType("HMACMD5", 3, md5)
HMACSHA1 = SignType("HMACSHA1", 4, sha1)
HMACSHA256 = SignType("HMACSHA256", 5, sha256)

SIGN_TYPES = dict((sign_type.version_id, sign_type) for sign_type in (HMACMD5, HMACSHA1, HMACSHA256))
__all__.extend(["SignType", "HMACMD5", "HMACSHA1", "HMACSHA256", "SIGN_TYPES"])


def sign_type_for_version(version_id):
    try:
        return SIGN_TYPES[int(version_id)]
    except (KeyError, ValueError):
        raise ValueError("Unknown signature version: %r" % (version_id,))
__all__.append("sign_type_for_version")


def new_nonce():
    # Uniqueness only, not secrecy
    return random.randint(0, 2 ** 31 - 1)


def format_auth_data(sign_type, username, timestamp=None, nonce=None):
    """
    Value of the X-Akamai-ACS-Auth-Data header:
    "<version>, 0.0.0.0, 0.0.0.0, <epoch>, <nonce>, <username>"
    """
    if timestamp is None:
        timestamp = int(time.time())
    if nonce is None:
        nonce = new_nonce()
    return u"%d, 0.0.0.0, 0.0.0.0, %d, %d, %s" % (sign_type.version_id, timestamp, nonce, username)
__all__.append("format_auth_data")


def format_sign_data(auth_data, path, action):
    return u"%s%s\n%s:%s\n" % (auth_data, path, HEADER_ACTION.lower(), action)
__all__.append("format_sign_data")


def sign_string(key, string_to_sign, sign_type):
    """
    Base64 of the HMAC of 'string_to_sign' keyed with the
    UTF-8 bytes of 'key', with the hash of 'sign_type'.
    """
    digest = hmac.new(encode_to_ns(key), encode_to_ns(string_to_sign), sign_type.hash_func).digest()
    return decode_from_ns(b64encode(digest))
__all__.append("sign_string")


def sign_request(action, path, credentials, sign_type=HMACSHA256, timestamp=None, nonce=None):
    """
    Return the three authentication headers of a request to 'path'
    carrying the canonical 'action' string.
    """
    if not credentials.key:
        raise InvalidCredentials("NetStorage key is empty")
    if action is None:
        raise MissingParameters("Action parameters must be set before signing")

    auth_data = format_auth_data(sign_type, credentials.username, timestamp, nonce)
    sign_data = format_sign_data(auth_data, path, action)
    debug("SignRequest: string to sign: %r" % sign_data)

    return {
        HEADER_ACTION: action,
        HEADER_AUTH_DATA: auth_data,
        HEADER_AUTH_SIGN: sign_string(credentials.key, sign_data, sign_type),
    }
__all__.append("sign_request")


def checksum_file_descriptor(file_desc, offset=0, size=None, hash_func=sha256):
    hash = hash_func()

    if size is None:
        for chunk in iter(lambda: file_desc.read(8192), b''):
            hash.update(chunk)
    else:
        file_desc.seek(offset)
        size_left = size
        while size_left > 0:
            chunk = file_desc.read(min(8192, size_left))
            if not chunk:
                break
            size_left -= len(chunk)
            hash.update(chunk)

    return hash
__all__.append("checksum_file_descriptor")


def checksum_sha256_file(file, offset=0, size=None):
    if not isinstance(file, str):
        # file is directly a file descriptor
        return checksum_file_descriptor(file, offset, size, sha256)

    # Otherwise, we expect file to be a filename
    with open(deunicodise(file), 'rb') as fp:
        return checksum_file_descriptor(fp, offset, size, sha256)
__all__.append("checksum_sha256_file")

# vim:et:ts=4:sts=4:ai
