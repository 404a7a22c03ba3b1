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

import errno
import http.client as httplib
import io
import mimetypes
import os
import pprint
import time

from logging import debug, info, warning, error
from stat import ST_SIZE, ST_MODE, ST_MTIME, S_ISREG

from .BaseUtils import ns_quote, dateRFC822toUnix
from .Utils import convertHeaderTupleListToDict, deunicodise
from .Config import Config
from .ConnMan import ConnMan
from .Crypto import (sign_request, sign_type_for_version, checksum_sha256_file,
                     HEADER_AUTH_SIGN)
from .Exceptions import (NetStorageSSLError, NetStorageSSLCertificateError,
                         InvalidCredentials, InvalidFileError, LocalFileNotFound,
                         RequestCancelled, TransportFailure,
                         UnexpectedServerResponse, ResourceNotFound,
                         ClockDriftError)
from . import Params
from .Params import ACTION_READ, action_method, action_class, format_action
from .PkgInfo import package, version

try:
    from ctypes import ArgumentError
    import magic
    try:
        ## https://github.com/ahupp/python-magic
        magic_ = magic.Magic(mime=True)
        def mime_magic_file(file):
            return magic_.from_file(file)
    except TypeError:
        try:
            ## file-5.11 built-in python bindings
            ## (has Magic class and "open()" function)
            magic_ = magic.open(magic.MAGIC_MIME)
            magic_.load()
            def mime_magic_file(file):
                try:
                    return magic_.file(file)
                except (UnicodeDecodeError, UnicodeEncodeError, ArgumentError):
                    return magic_.file(deunicodise(file))
        except AttributeError:
            ## http://pypi.python.org/pypi/filemagic
            ## (has Magic class but not "mime" argument and no "open()" function )
            magic_ = magic.Magic(flags=magic.MAGIC_MIME)
            def mime_magic_file(file):
                return magic_.id_filename(file)

except (ImportError, OSError) as e:
    error_str = str(e)
    if 'magic' in error_str:
        magic_message = "Module python-magic is not available."
    else:
        magic_message = "Module python-magic can't be used (%s)." % error_str
    magic_message += " Guessing MIME types based on file extensions."
    magic_warned = False
    def mime_magic_file(file):
        global magic_warned
        if (not magic_warned):
            warning(magic_message)
            magic_warned = True
        return mimetypes.guess_type(file)[0]


def mime_magic(file):
    result = mime_magic_file(file)
    if result is not None:
        if isinstance(result, str):
            if ';' in result:
                mimetype, charset = result.split(';', 1)
                charset = charset.strip()[len('charset='):]
                result = (mimetype, charset or None)
            else:
                result = (result, None)
    if result is None:
        result = (None, None)
    return result


NSKIT_HEADER = "X-Akamai-NSKit"
NSKIT = "%s/%s" % (package, version)

## Maximum tolerated difference between the local and the server clocks
CLOCK_DRIFT_LIMIT = 30

__all__ = []


def validate_response(response, now=None):
    """
    Return the exception describing the failed 'response'.

    NetStorage rejects signatures whose timestamp is too far from its own
    clock, and answers with a plain error status. When the server Date
    shows the local clock is more than CLOCK_DRIFT_LIMIT seconds off, in
    either direction, a ClockDriftError is returned instead of the generic
    UnexpectedServerResponse.
    """
    date = response.get("headers", {}).get("date")
    if date:
        try:
            server_time = dateRFC822toUnix(date)
        except (ValueError, OverflowError) as e:
            debug("validate_response: unparseable Date header %r: %s" % (date, e))
        else:
            if now is None:
                now = time.time()
            drift = now - server_time
            if abs(drift) > CLOCK_DRIFT_LIMIT:
                return ClockDriftError(response, drift)
    return UnexpectedServerResponse(response)
__all__.append("validate_response")


class NetStorageRequest(object):
    def __init__(self, ns, method_string, path, params, headers=None):
        self.ns = ns
        self.method_string = method_string
        if not path.startswith("/"):
            path = "/" + path
        self.path = path
        self.params = params
        self.headers = dict(headers or {})
        self.headers[NSKIT_HEADER] = NSKIT

    @property
    def action(self):
        return self.params is not None and self.params.action or None

    @property
    def action_class(self):
        return action_class(self.action)

    @property
    def resource_uri(self):
        return ns_quote(self.path, quote_slashes=False)

    @property
    def uri(self):
        return self.ns.get_uri(self.path)

    def sign(self):
        action = self.params is not None and format_action(self.params) or None
        return sign_request(action, self.resource_uri, self.ns.credentials, self.ns.sign_type)

    def get_triplet(self):
        """
        Method, uri and headers of a new attempt.
        Every call signs again, with a fresh timestamp and nonce.
        """
        headers = dict(self.headers)
        headers.update(self.sign())
        return (self.method_string, self.resource_uri, headers)


def loggable_headers(headers):
    retval = dict(headers)
    if HEADER_AUTH_SIGN in retval:
        retval[HEADER_AUTH_SIGN] = "..."
    return retval


class UploadSource(object):
    """
    Upload body being streamed: remembers where the call started
    in a seekable stream and whether anything has been consumed.
    """
    def __init__(self, stream, size=None):
        self.stream = stream
        self.start = None
        self.consumed = False
        seekable = getattr(stream, "seekable", None)
        if seekable is not None and seekable():
            self.start = stream.tell()
            if size is None:
                size = stream.seek(0, io.SEEK_END) - self.start
                stream.seek(self.start)
        self.size = size

    @property
    def seekable(self):
        return self.start is not None

    def rewind(self):
        if self.seekable:
            self.stream.seek(self.start)
            self.consumed = False

    def can_retry(self):
        return self.seekable or not self.consumed

    def read(self, size):
        data = self.stream.read(size)
        if data:
            self.consumed = True
        return data


class NetStorage(object):
    def __init__(self, credentials, config=None, sign_type=None):
        if config is None:
            config = Config()
        if not credentials.host:
            raise InvalidCredentials("NetStorage host is not configured")
        if not credentials.username:
            raise InvalidCredentials("NetStorage upload account name is not configured")
        self.credentials = credentials
        self.config = config
        if sign_type is None:
            sign_type = sign_type_for_version(config.sign_version)
        self.sign_type = sign_type

    def get_hostname(self):
        return self.credentials.host.lower()

    def get_uri(self, path):
        if not path.startswith("/"):
            path = "/" + path
        return "%s://%s%s" % (self.credentials.use_https and "https" or "http",
                              self.get_hostname(), ns_quote(path, quote_slashes=False))

    ## Commands / Actions
    def dir(self, path, format=u"xml", cancel=None):
        request = self.create_request(path, Params.dir_params(format))
        return self.send_request(request, cancel=cancel)

    def download(self, path, stream, cancel=None):
        request = self.create_request(path, Params.download_params())
        return self.recv_file(request, stream, cancel=cancel)

    def du(self, path, format=u"xml", cancel=None):
        request = self.create_request(path, Params.du_params(format))
        return self.send_request(request, cancel=cancel)

    def list(self, path, format=u"xml", cancel=None):
        request = self.create_request(path, Params.list_params(format))
        return self.send_request(request, cancel=cancel)

    def stat(self, path, format=u"xml", cancel=None):
        request = self.create_request(path, Params.stat_params(format))
        return self.send_request(request, cancel=cancel)

    def delete(self, path, cancel=None):
        request = self.create_request(path, Params.delete_params())
        self.send_request(request, cancel=cancel)
        return True

    def mkdir(self, path, cancel=None):
        request = self.create_request(path, Params.mkdir_params())
        self.send_request(request, cancel=cancel)
        return True

    def mtime(self, path, mtime=None, cancel=None):
        request = self.create_request(path, Params.mtime_params(mtime))
        self.send_request(request, cancel=cancel)
        return True

    def quick_delete(self, path, cancel=None):
        request = self.create_request(path, Params.quick_delete_params())
        self.send_request(request, cancel=cancel)
        return True

    def rename(self, path, destination, cancel=None):
        request = self.create_request(path, Params.rename_params(destination))
        self.send_request(request, cancel=cancel)
        return True

    def rmdir(self, path, cancel=None):
        request = self.create_request(path, Params.rmdir_params())
        self.send_request(request, cancel=cancel)
        return True

    def symlink(self, path, target, cancel=None):
        request = self.create_request(path, Params.symlink_params(target))
        self.send_request(request, cancel=cancel)
        return True

    def upload(self, path, stream, mtime=None, size=None, md5=None, sha1=None,
               sha256=None, index_zip=None, content_type=None, cancel=None):
        """
        Upload the content of 'stream' to 'path'.

        'stream' is read once from its current position and stays open,
        it belongs to the caller. 'size' is the number of bytes to send,
        when it is None and the stream is not seekable the body is sent
        with chunked transfer encoding.
        """
        params = Params.upload_params(mtime, size, md5, sha1, sha256, index_zip)
        params = params.for_path(path, self.config.index_zip_extension)
        headers = {}
        if content_type:
            headers["Content-Type"] = content_type
        request = self.create_request(path, params, headers)
        self.send_file(request, stream, size, cancel=cancel)
        return True

    def object_put(self, path, filename, index_zip=None, cancel=None):
        """Upload the local file 'filename' to 'path'."""
        try:
            stat = os.stat(deunicodise(filename))
        except (IOError, OSError) as e:
            raise LocalFileNotFound(filename, e.strerror or "Src file is not accessible")
        if not S_ISREG(stat[ST_MODE]):
            raise LocalFileNotFound(filename, "Not a regular file")

        size = stat[ST_SIZE]
        sha256 = checksum_sha256_file(filename).digest()
        content_type = self.content_type(filename)

        info("Sending file '%s', please wait..." % filename)
        with io.open(deunicodise(filename), mode='rb') as src_stream:
            return self.upload(path, src_stream, mtime=stat[ST_MTIME], size=size,
                               sha256=sha256, index_zip=index_zip,
                               content_type=content_type, cancel=cancel)

    def content_type(self, filename):
        content_type = None
        content_charset = None
        if self.config.guess_mime_type:
            (content_type, content_charset) = mime_magic(filename)
        if not content_type:
            return self.config.default_mime_type
        if content_charset:
            content_type = content_type + "; charset=" + content_charset
        return content_type

    def create_request(self, path, params, headers=None):
        request = NetStorageRequest(self, action_method(params.action), path, params, headers)
        debug("CreateRequest: path=%s action=%s", request.path, request.action)
        return request

    ## Low level methods
    def _fail_wait(self, delay, cancel=None):
        if cancel is None:
            time.sleep(delay)
        elif cancel.wait(delay):
            raise RequestCancelled("Request cancelled while waiting to retry")

    def _check_cancel(self, request, cancel):
        if cancel is not None and cancel.is_set():
            raise RequestCancelled("Request cancelled: %s" % request.uri)

    def _retry(self, request, attempt_fn, cancel=None, policy=None, can_retry=None):
        """
        Run 'attempt_fn(request)' until it succeeds or the retry policy
        gives up, then let the last failure propagate.
        """
        if policy is None:
            policy = self.config.retry_policy(request.action_class)
        attempt = 0
        while True:
            self._check_cancel(request, cancel)
            attempt += 1
            try:
                return attempt_fn(request)
            except (TransportFailure, UnexpectedServerResponse) as e:
                delay = policy(attempt, e)
                if delay is not None and can_retry is not None and not can_retry():
                    warning("Upload source can't be rewound, not retrying: %s" % request.uri)
                    delay = None
                if delay is None:
                    if attempt > 1:
                        warning("Too many failures. Giving up on '%s'" % request.uri)
                    raise
                warning("Retrying failed request: %s (%s)" % (request.uri, e))
                warning("Waiting %d sec..." % delay)
                self._fail_wait(delay, cancel)

    def _check_response(self, request, response):
        if 200 <= response["status"] < 300:
            return
        if response["status"] == 404 and request.action_class == ACTION_READ:
            raise ResourceNotFound(response)
        raise validate_response(response)

    def _read_response(self, http_response, read_data=True):
        response = {}
        response["status"] = http_response.status
        response["reason"] = http_response.reason
        response["headers"] = convertHeaderTupleListToDict(http_response.getheaders())
        if read_data:
            response["data"] = http_response.read()
        return response

    def send_request(self, request, cancel=None, policy=None):
        def _attempt(request):
            return self._send_request_once(request, cancel)

        return self._retry(request, _attempt, cancel, policy)

    def _send_request_once(self, request, cancel=None):
        method_string, resource_uri, headers = request.get_triplet()
        body = None
        if method_string in ("PUT", "POST"):
            # Content-Length: 0
            body = b""
        response = {}
        debug("Processing request, please wait...")

        conn = None
        try:
            conn = ConnMan.get(self.get_hostname(), self.credentials.use_https, self.config)
            debug("Sending request method_string=%r, uri=%r, headers=%r" % (method_string, resource_uri, loggable_headers(headers)))
            conn.c.request(method_string, resource_uri, body, headers)
            http_response = conn.c.getresponse()
            response = self._read_response(http_response)
            self._check_cancel(request, cancel)
            ConnMan.put(conn, self.config)
        except (NetStorageSSLError, NetStorageSSLCertificateError):
            # In case of failure to validate the certificate for a ssl
            # connection, no need to retry, abort immediately
            ConnMan.close(conn)
            raise
        except RequestCancelled:
            ConnMan.close(conn)
            raise
        except (OSError, httplib.HTTPException) as e:
            debug("Response:\n" + pprint.pformat(response))
            # close the connection and re-establish
            ConnMan.close(conn)
            raise TransportFailure(request.uri, e)

        debug("Response:\n" + pprint.pformat(response))
        self._check_response(request, response)
        return response

    def send_file(self, request, stream, size=None, cancel=None, policy=None):
        source = UploadSource(stream, size)
        if source.size is None:
            debug("SendFile: unknown size, using chunked transfer encoding")

        def _attempt(request):
            if source.consumed:
                source.rewind()
            return self._send_file_once(request, source, cancel)

        response = self._retry(request, _attempt, cancel, policy, source.can_retry)
        return response

    def _send_file_once(self, request, source, cancel=None):
        method_string, resource_uri, headers = request.get_triplet()
        size_total = source.size
        if size_total is not None:
            headers["Content-Length"] = str(size_total)
        else:
            headers["Transfer-Encoding"] = "chunked"
        response = {}

        conn = None
        try:
            conn = ConnMan.get(self.get_hostname(), self.credentials.use_https, self.config)
            debug("Sending file method_string=%r, uri=%r, headers=%r" % (method_string, resource_uri, loggable_headers(headers)))
            conn.c.putrequest(method_string, resource_uri)
            for header in headers.keys():
                conn.c.putheader(header, headers[header])
            conn.set_timeout(self.config.upload_timeout)

            try:
                if size_total is not None:
                    conn.c.endheaders()
                    self._send_body(request, conn, source, size_total, cancel)
                else:
                    # http.client writes the chunk framing
                    conn.c.endheaders(self._iter_body(request, source, cancel),
                                      encode_chunked=True)
            except OSError as e:
                if getattr(e, 'errno', None) not in (errno.EPIPE, errno.ECONNRESET):
                    raise
                # The server broke the connection early, it may have
                # answered with an error status before doing so.
                try:
                    http_response = conn.c.getresponse()
                except (OSError, httplib.HTTPException):
                    error("Cannot retrieve any response status before encountering an EPIPE or ECONNRESET exception")
                    raise e
            else:
                conn.set_timeout(self.config.socket_timeout)
                http_response = conn.c.getresponse()

            self._check_cancel(request, cancel)
            response = self._read_response(http_response)
            ConnMan.put(conn, self.config)
        except (NetStorageSSLError, NetStorageSSLCertificateError):
            ConnMan.close(conn)
            raise
        except (InvalidFileError, RequestCancelled):
            ConnMan.close(conn)
            raise
        except (OSError, httplib.HTTPException) as e:
            debug("Response:\n" + pprint.pformat(response))
            ConnMan.close(conn)
            raise TransportFailure(request.uri, e)

        debug(u"Response:\n" + pprint.pformat(response))
        self._check_response(request, response)
        return response

    def _send_body(self, request, conn, source, size_total, cancel=None):
        size_left = size_total
        while size_left > 0:
            self._check_cancel(request, cancel)
            data = source.read(min(self.config.send_chunk, size_left))
            if not data:
                raise InvalidFileError("File smaller than expected. Was the file truncated?")
            conn.c.send(data)
            size_left -= len(data)

    def _iter_body(self, request, source, cancel=None):
        while True:
            self._check_cancel(request, cancel)
            data = source.read(self.config.send_chunk)
            if not data:
                return
            yield data

    def recv_file(self, request, stream, cancel=None, policy=None):
        received = [0]

        def _attempt(request):
            return self._recv_file_once(request, stream, received, cancel)

        def _can_retry():
            return received[0] == 0

        return self._retry(request, _attempt, cancel, policy, _can_retry)

    def _recv_file_once(self, request, stream, received, cancel=None):
        method_string, resource_uri, headers = request.get_triplet()
        response = {}

        conn = None
        try:
            conn = ConnMan.get(self.get_hostname(), self.credentials.use_https, self.config)
            debug("Receiving file method_string=%r, uri=%r, headers=%r" % (method_string, resource_uri, loggable_headers(headers)))
            conn.c.putrequest(method_string, resource_uri)
            for header in headers.keys():
                conn.c.putheader(header, headers[header])
            conn.c.endheaders()
            http_response = conn.c.getresponse()
            self._check_cancel(request, cancel)
            response = self._read_response(http_response, read_data=False)
            debug("Response:\n" + pprint.pformat(response))

            if response["status"] < 200 or response["status"] > 299:
                # In case of error, we still need to flush the read buffer to be able to reuse
                # the connection
                response["data"] = http_response.read()
                ConnMan.put(conn, self.config)
        except (NetStorageSSLError, NetStorageSSLCertificateError):
            ConnMan.close(conn)
            raise
        except RequestCancelled:
            ConnMan.close(conn)
            raise
        except (OSError, httplib.HTTPException) as e:
            ConnMan.close(conn)
            raise TransportFailure(request.uri, e)

        self._check_response(request, response)

        size_total = response["headers"].get("content-length")
        if size_total is not None:
            size_total = int(size_total)
        current_position = 0

        try:
            while size_total is None or current_position < size_total:
                this_chunk = self.config.recv_chunk
                if size_total is not None:
                    this_chunk = min(this_chunk, size_total - current_position)
                try:
                    data = http_response.read(this_chunk)
                except (OSError, httplib.HTTPException) as e:
                    raise TransportFailure(request.uri, e)
                self._check_cancel(request, cancel)
                if not data:
                    if size_total is None:
                        break
                    raise TransportFailure(request.uri, "EOF from NetStorage after %d of %d bytes"
                                           % (current_position, size_total))
                stream.write(data)
                current_position += len(data)
                received[0] += len(data)

            if size_total == 0:
                # Even when content size is 0, http.client expects the response to be read.
                http_response.read()
        except Exception:
            # The rest of the body is still pending on the connection
            ConnMan.close(conn)
            raise
        ConnMan.put(conn, self.config)

        if hasattr(stream, "flush"):
            stream.flush()

        response["data"] = b""
        response["size"] = current_position
        return response
__all__.append("NetStorage")

# vim:et:ts=4:sts=4:ai
