# -*- coding: utf-8 -*-

## NetStorage CMS manager
## Author: Michal Ludvig <michal@logix.cz>
##         http://www.logix.cz/michal
## License: GPL Version 2
## Copyright: TGRMN Software and contributors

import http.client as httplib
import random
import socket
import ssl

from threading import Semaphore
from logging import debug
from urllib.parse import urlparse

from .Config import Config

__all__ = ["ConnMan"]


def round_robin_connection(address, timeout=socket._GLOBAL_DEFAULT_TIMEOUT, source_address=None):
    """
    Like socket.create_connection(), but tries the resolved addresses
    of the host in random order, so that new connections are spread
    over all the NetStorage edge servers behind one name.
    """
    host, port = address
    addresses = socket.getaddrinfo(host, port, 0, socket.SOCK_STREAM)
    random.shuffle(addresses)
    last_error = None
    for family, socktype, proto, canonname, sockaddr in addresses:
        try:
            return socket.create_connection((sockaddr[0], port), timeout, source_address)
        except OSError as e:
            debug(u"round_robin_connection: %s failed: %s", sockaddr[0], e)
            last_error = e
    if last_error is None:
        raise OSError("getaddrinfo returns an empty list for %s" % host)
    raise last_error


class http_connection(object):
    # One SSL context per distinct set of certificate options
    contexts = {}

    @staticmethod
    def _ssl_verified_context(cafile, cfg):
        context = ssl.create_default_context(cafile=cafile)
        if not cfg.check_ssl_hostname:
            context.check_hostname = False
            debug(u'Disabling SSL certificate hostname checking')
        return context

    @staticmethod
    def _ssl_unverified_context(cafile):
        debug(u'Disabling SSL certificate checking')
        return ssl._create_unverified_context(cafile=cafile, cert_reqs=ssl.CERT_NONE)

    @staticmethod
    def _ssl_context(cfg):
        cafile = cfg.ca_certs_file
        if cafile == "":
            cafile = None
        key = (cafile, cfg.check_ssl_certificate, cfg.check_ssl_hostname)
        if key in http_connection.contexts:
            return http_connection.contexts[key]
        debug(u"Using ca_certs_file %s", cafile)

        if cfg.check_ssl_certificate:
            context = http_connection._ssl_verified_context(cafile, cfg)
        else:
            context = http_connection._ssl_unverified_context(cafile)

        http_connection.contexts[key] = context
        return context

    def __init__(self, id, hostname, ssl, cfg):
        self.ssl = ssl
        self.id = id
        self.counter = 0
        # Whatever is the input, ensure to have clean hostname and port
        parsed_hostname = urlparse('https://' + hostname)
        self.hostname = parsed_hostname.hostname
        self.port = parsed_hostname.port

        if ssl:
            self.c = httplib.HTTPSConnection(self.hostname, self.port,
                                             timeout=cfg.socket_timeout,
                                             context=http_connection._ssl_context(cfg))
            debug(u'HTTPSConnection(%s, %s)', self.hostname, self.port)
        else:
            self.c = httplib.HTTPConnection(self.hostname, self.port,
                                            timeout=cfg.socket_timeout)
            debug(u'HTTPConnection(%s, %s)', self.hostname, self.port)

        if cfg.dns_round_robin:
            self.c._create_connection = round_robin_connection

    def set_timeout(self, timeout):
        """0 or None: no timeout"""
        if self.c.sock is not None:
            self.c.sock.settimeout(timeout or None)


class ConnMan(object):
    conn_pool_sem = Semaphore()
    conn_pool = {}
    conn_max_counter = 800

    @staticmethod
    def get(hostname, ssl=None, cfg=None):
        if cfg is None:
            cfg = Config()
        if ssl is None:
            ssl = cfg.use_https
        conn = None
        conn_id = "http%s://%s" % (ssl and "s" or "", hostname)
        if cfg.connection_pooling:
            ConnMan.conn_pool_sem.acquire()
            if conn_id not in ConnMan.conn_pool:
                ConnMan.conn_pool[conn_id] = []
            if len(ConnMan.conn_pool[conn_id]):
                conn = ConnMan.conn_pool[conn_id].pop()
                debug("ConnMan.get(): re-using connection: %s#%d" % (conn.id, conn.counter))
            ConnMan.conn_pool_sem.release()
        if not conn:
            debug("ConnMan.get(): creating new connection: %s" % conn_id)
            conn = http_connection(conn_id, hostname, ssl, cfg)
            conn.c.connect()
        conn.counter += 1
        return conn

    @staticmethod
    def put(conn, cfg=None):
        if cfg is None:
            cfg = Config()
        if not cfg.connection_pooling:
            ConnMan.close(conn)
            return

        if conn.counter >= ConnMan.conn_max_counter:
            conn.c.close()
            debug("ConnMan.put(): closing over-used connection")
            return

        # Restore the default timeout, an upload may have changed it
        conn.set_timeout(cfg.socket_timeout)
        ConnMan.conn_pool_sem.acquire()
        ConnMan.conn_pool.setdefault(conn.id, []).append(conn)
        ConnMan.conn_pool_sem.release()
        debug("ConnMan.put(): connection put back to pool (%s#%d)" % (conn.id, conn.counter))

    @staticmethod
    def close(conn):
        if conn:
            conn.c.close()
            debug("ConnMan.close(): connection closed (%s#%d)" % (conn.id, conn.counter))

# vim:et:ts=4:sts=4:ai
