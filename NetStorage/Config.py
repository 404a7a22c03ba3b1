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

import io
import logging
import os
import re

from collections import namedtuple
from logging import debug, warning

from .BaseUtils import base_unicodise
from .Exceptions import InvalidCredentials
from .Params import ACTION_READ, ACTION_WRITE
from .Retry import RetryPolicy


Credentials = namedtuple("Credentials", "host username key use_https")
Credentials.__doc__ = """
Host, upload account name and its shared secret, and whether to use TLS.
Shared by reference between concurrent calls, never modified.
"""


def is_bool_true(value):
    """Check to see if a string is true, yes, on, or 1

    Return True if it is
    """
    if type(value) == str:
        return value.lower() in ["true", "yes", "on", "1"]
    elif type(value) == bool and value == True:
        return True
    else:
        return False


def is_bool_false(value):
    """Check to see if a string is false, no, off, or 0

    Return True if it is
    """
    if type(value) == str:
        return value.lower() in ["false", "no", "off", "0"]
    elif type(value) == bool and value == False:
        return True
    else:
        return False


def is_bool(value):
    """Check a string value to see if it is bool"""
    return is_bool_true(value) or is_bool_false(value)


class Config(object):
    _instance = None
    _parsed_files = []
    host = u""
    username = u""
    key = u""
    use_https = True
    # 3: HMAC-MD5, 4: HMAC-SHA1, 5: HMAC-SHA256
    sign_version = 5
    verbosity = logging.WARNING
    send_chunk = 32 * 1024
    recv_chunk = 32 * 1024
    # Retries after the first attempt, by action class
    read_max_retries = 5
    read_retry_delay = 2
    write_max_retries = 3
    write_retry_delay = 5
    socket_timeout = 300
    # 0: no timeout while streaming an upload body
    upload_timeout = 0
    dns_round_robin = True
    connection_pooling = True
    ca_certs_file = u""
    check_ssl_certificate = True
    check_ssl_hostname = True
    index_zip_extension = u".zip"
    guess_mime_type = True
    default_mime_type = u"application/octet-stream"
    encoding = u"UTF-8"

    ## Creating a singleton
    def __new__(self, configfile=None, username=None, key=None):
        if self._instance is None:
            self._instance = object.__new__(self)
        return self._instance

    def __init__(self, configfile=None, username=None, key=None):
        if configfile:
            try:
                self.read_config_file(configfile)
            except IOError:
                debug("Config: unable to read '%s'" % configfile)

        # override these if passed on the command-line
        if username:
            self.update_option("username", username)
        if key:
            self.update_option("key", key)

        if len(self.username) == 0 and len(self.key) == 0:
            env_host = os.getenv("NETSTORAGE_HOST")
            env_username = os.getenv("NETSTORAGE_USER")
            env_key = os.getenv("NETSTORAGE_KEY")
            if env_username:
                if not env_key:
                    raise ValueError(
                        "NETSTORAGE_USER environment variable is used but"
                        " NETSTORAGE_KEY variable is missing"
                    )
                self.update_option("username", base_unicodise(env_username))
                self.update_option("key", base_unicodise(env_key))
                if env_host:
                    self.update_option("host", base_unicodise(env_host))

    def option_list(self):
        retval = []
        for option in dir(self):
            ## Skip attributes that start with underscore or are not string, int or bool
            option_type = type(getattr(Config, option))
            if option.startswith("_") or \
               not (option_type in (str, int, bool)):
                continue
            retval.append(option)
        return retval

    def read_config_file(self, configfile):
        cp = ConfigParser(configfile)
        for option in self.option_list():
            _option = cp.get(option)
            if _option is not None:
                _option = _option.strip()
            self.update_option(option, _option)

        self._parsed_files.append(configfile)

    def dump_config(self, stream):
        ConfigDumper(stream).dump(u"default", self)

    def update_option(self, option, value):
        if value is None:
            return

        #### Handle environment reference
        if str(value).startswith("$"):
            return self.update_option(option, os.getenv(value[1:]))

        #### Special treatment of some options
        ## verbosity must be known to "logging" module
        if option == "verbosity":
            # support integer verbosities
            try:
                value = int(value)
            except ValueError:
                try:
                    # otherwise it must be a key known to the logging module
                    value = logging._nameToLevel[value.upper()]
                except KeyError:
                    raise ValueError("Config: verbosity level '%s' is not valid" % value)

        ## allow yes/no, true/false, on/off and 1/0 for boolean options
        elif type(getattr(Config, option)) is bool:
            if is_bool_true(value):
                value = True
            elif is_bool_false(value):
                value = False
            else:
                raise ValueError("Config: value of option '%s' must be Yes or No, not '%s'" % (option, value))

        elif type(getattr(Config, option)) is int:
            try:
                value = int(value)
            except ValueError:
                raise ValueError("Config: value of option '%s' must be an integer, not '%s'" % (option, value))
            if option == "sign_version" and value not in (3, 4, 5):
                raise ValueError("Config: sign_version must be 3, 4 or 5, not '%s'" % value)

        elif option == "host":
            if value.startswith("http://"):
                value = value[7:]
            elif value.startswith("https://"):
                value = value[8:]
            value = value.rstrip("/")

        setattr(Config, option, value)

    def credentials(self):
        if not self.host:
            raise InvalidCredentials("NetStorage host is not configured")
        if not self.username:
            raise InvalidCredentials("NetStorage upload account name is not configured")
        return Credentials(self.host, self.username, self.key, self.use_https)

    def retry_policy(self, action_class):
        if action_class == ACTION_READ:
            return RetryPolicy(self.read_max_retries + 1, self.read_retry_delay, ACTION_READ)
        elif action_class == ACTION_WRITE:
            return RetryPolicy(self.write_max_retries + 1, self.write_retry_delay, ACTION_WRITE)
        raise ValueError("Config: unknown action class '%s'" % action_class)


class ConfigParser(object):
    def __init__(self, file, sections=[]):
        self.cfg = {}
        self.parse_file(file, sections)

    def parse_file(self, file, sections=[]):
        debug("ConfigParser: Reading file '%s'" % file)
        if type(sections) != type([]):
            sections = [sections]
        in_our_section = True
        r_comment = re.compile(r'^\s*[#;].*')
        r_empty = re.compile(r'^\s*$')
        r_section = re.compile(r'^\[([^\]]+)\]')
        r_data = re.compile(r'^\s*(?P<key>\w+)\s*=\s*(?P<value>.*)')
        r_quotes = re.compile(r'^"(.*)"\s*$')
        with io.open(file, "r", encoding=self.get('encoding', 'UTF-8')) as fp:
            for line in fp:
                if r_comment.match(line) or r_empty.match(line):
                    continue
                is_section = r_section.match(line)
                if is_section:
                    section = is_section.groups()[0]
                    in_our_section = (section in sections) or (len(sections) == 0)
                    continue
                is_data = r_data.match(line)
                if is_data and in_our_section:
                    data = is_data.groupdict()
                    if r_quotes.match(data["value"]):
                        data["value"] = data["value"][1:-1]
                    self.__setitem__(data["key"], data["value"])
                    if data["key"] == "key":
                        print_value = mask_secret(data["value"])
                    else:
                        print_value = data["value"]
                    debug("ConfigParser: %s->%s" % (data["key"], print_value))
                    continue
                warning("Ignoring invalid line in '%s': %s" % (file, line))

    def __getitem__(self, name):
        return self.cfg[name]

    def __setitem__(self, name, value):
        self.cfg[name] = value

    def get(self, name, default=None):
        if name in self.cfg:
            return self.cfg[name]
        return default


def mask_secret(value):
    if len(value) < 4:
        return u"..."
    return u"%s...%d_chars...%s" % (value[:2], len(value) - 3, value[-1:])


class ConfigDumper(object):
    def __init__(self, stream):
        self.stream = stream

    def dump(self, section, config):
        self.stream.write(u"[%s]\n" % section)
        for option in config.option_list():
            value = getattr(config, option)
            if option == "verbosity":
                # we turn level numbers back into strings if possible
                if isinstance(value, int):
                    value = logging._levelToName.get(value, value)
            elif option == "key" and value:
                value = mask_secret(value)
            self.stream.write(u"%s = %s\n" % (option, value))

# vim:et:ts=4:sts=4:ai
