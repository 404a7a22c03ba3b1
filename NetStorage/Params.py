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
from collections import namedtuple

from .BaseUtils import ns_quote, datetimeToUnix
from .Exceptions import ParameterError

__all__ = []

QUICK_DELETE_CONFIRMATION = u"imreallyreallysure"
INDEX_ZIP_EXTENSION = u".zip"

ACTION_READ = "read"
ACTION_WRITE = "write"

## action -> (http method, action class)
ACTIONS = {
    "dir": ("GET", ACTION_READ),
    "download": ("GET", ACTION_READ),
    "du": ("GET", ACTION_READ),
    "list": ("GET", ACTION_READ),
    "stat": ("GET", ACTION_READ),
    "delete": ("PUT", ACTION_WRITE),
    "mkdir": ("PUT", ACTION_WRITE),
    "upload": ("PUT", ACTION_WRITE),
    "mtime": ("POST", ACTION_WRITE),
    "quick-delete": ("POST", ACTION_WRITE),
    "rename": ("POST", ACTION_WRITE),
    "rmdir": ("POST", ACTION_WRITE),
    "symlink": ("POST", ACTION_WRITE),
}
__all__.extend(["ACTIONS", "ACTION_READ", "ACTION_WRITE"])


def action_method(action):
    try:
        return ACTIONS[action][0]
    except KeyError:
        raise ParameterError("Unknown NetStorage action: %r" % (action,))
__all__.append("action_method")


def action_class(action):
    try:
        return ACTIONS[action][1]
    except KeyError:
        raise ParameterError("Unknown NetStorage action: %r" % (action,))
__all__.append("action_class")


## Value formatters, one per field kind

def format_text(value):
    return u"%s" % value


def format_epoch(value):
    if isinstance(value, datetime.datetime):
        return u"%d" % datetimeToUnix(value)
    return u"%d" % value


def format_hex(value):
    return bytes(value).hex()


def format_flag(value):
    return value and u"1" or u"0"


def is_present(value):
    return value is not None and value != u"" and value != b""


## Wire name, descriptor attribute, formatter.
## The order of this table is the order of the fields in the Action header.
FIELDS = (
    (u"version", "version", format_text),
    (u"action", "action", format_text),
    (u"format", "format", format_text),
    (u"quick-delete", "quick_delete", format_text),
    (u"destination", "destination", format_text),
    (u"target", "target", format_text),
    (u"mtime", "mtime", format_epoch),
    (u"size", "size", format_text),
    (u"md5", "md5", format_hex),
    (u"sha1", "sha1", format_hex),
    (u"sha256", "sha256", format_hex),
    (u"index-zip", "index_zip", format_flag),
)


_ApiParamsBase = namedtuple("_ApiParamsBase", [
    "action", "format", "quick_delete", "destination", "target",
    "mtime", "size", "md5", "sha1", "sha256", "index_zip"])


class ApiParams(_ApiParamsBase):
    """
    All the possible parameters of one CMS API call.

    version:      always 1
    action:       the cms action (eg: "dir", "upload", etc)
    format:       for actions that return content, the format (eg: "xml")
    quick_delete: always "imreallyreallysure"
    destination:  path of the rename destination
    target:       path of the existing file/dir for a symlink
    mtime:        modification time, datetime or epoch seconds
    size:         byte size of an uploaded file. Not with index_zip.
    md5, sha1, sha256: raw checksums of an uploaded file
    index_zip:    True to index an uploaded zip for serve-from-zip
    """
    __slots__ = ()

    version = 1

    def __new__(cls, action=None, format=None, quick_delete=None,
                destination=None, target=None, mtime=None, size=None,
                md5=None, sha1=None, sha256=None, index_zip=None):
        if quick_delete is not None and quick_delete != QUICK_DELETE_CONFIRMATION:
            raise ParameterError("quick-delete must be %r, not %r" % (QUICK_DELETE_CONFIRMATION, quick_delete))
        if size is not None and size < 0:
            raise ParameterError("size must not be negative: %r" % (size,))
        return super(ApiParams, cls).__new__(cls, action, format, quick_delete,
                                             destination, target, mtime, size,
                                             md5, sha1, sha256, index_zip)

    def for_path(self, path, extension=INDEX_ZIP_EXTENSION):
        """
        Apply the index-zip policy for an upload to 'path'.

        Only an archive can be indexed, so index_zip is dropped unless the
        path ends with 'extension'. Indexing mutates the stored file, so
        size is dropped when index_zip stays.
        """
        params = self
        if not params.index_zip:
            params = params._replace(index_zip=None)
        elif not path.endswith(extension):
            params = params._replace(index_zip=None)
        if params.index_zip and params.size is not None:
            params = params._replace(size=None)
        return params

    def items(self):
        for name, attribute, formatter in FIELDS:
            value = getattr(self, attribute)
            if is_present(value):
                yield name, formatter(value)
__all__.append("ApiParams")


def format_action(params):
    """
    Canonical 'name=value&...' form of 'params', the value of the
    X-Akamai-ACS-Action header and the input of the signature.
    """
    return u"&".join(u"%s=%s" % (name, ns_quote(value)) for name, value in params.items())
__all__.append("format_action")


## Descriptors of each action

def dir_params(format=u"xml"):
    return ApiParams(action=u"dir", format=format)


def download_params():
    return ApiParams(action=u"download")


def du_params(format=u"xml"):
    return ApiParams(action=u"du", format=format)


def list_params(format=u"xml"):
    return ApiParams(action=u"list", format=format)


def stat_params(format=u"xml"):
    return ApiParams(action=u"stat", format=format)


def delete_params():
    return ApiParams(action=u"delete")


def mkdir_params():
    return ApiParams(action=u"mkdir")


def mtime_params(mtime=None):
    if mtime is None:
        mtime = datetime.datetime.now(datetime.timezone.utc)
    return ApiParams(action=u"mtime", mtime=mtime)


def quick_delete_params():
    return ApiParams(action=u"quick-delete", quick_delete=QUICK_DELETE_CONFIRMATION)


def rename_params(destination):
    return ApiParams(action=u"rename", destination=destination)


def rmdir_params():
    return ApiParams(action=u"rmdir")


def symlink_params(target):
    return ApiParams(action=u"symlink", target=target)


def upload_params(mtime=None, size=None, md5=None, sha1=None, sha256=None, index_zip=None):
    return ApiParams(action=u"upload", mtime=mtime, size=size, md5=md5,
                     sha1=sha1, sha256=sha256,
                     index_zip=index_zip and True or None)

__all__.extend(["dir_params", "download_params", "du_params", "list_params",
                "stat_params", "delete_params", "mkdir_params", "mtime_params",
                "quick_delete_params", "rename_params", "rmdir_params",
                "symlink_params", "upload_params"])

# vim:et:ts=4:sts=4:ai
