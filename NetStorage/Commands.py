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
import sys

from optparse import OptionParser
from logging import debug, info, error

from . import PkgInfo
from .Config import Config
from .ExitCodes import (EX_OK, EX_USAGE, EX_CONFIG, EX_IOERR, EX_BREAK,
                        EX_ACCESSDENIED)
from .Exceptions import (NetStorageException, NetStorageSSLError,
                         NetStorageSSLCertificateError, ParameterError)
from .NetStorage import NetStorage
from .Utils import formatSize, time_to_epoch

__all__ = ["main"]


def output(message):
    sys.stdout.write(message + "\n")
    sys.stdout.flush()


def open_output(options):
    if options.output and options.output != "-":
        return io.open(options.output, mode='wb')
    return io.open(sys.stdout.fileno(), mode='wb', closefd=False)


def split_host_path(uri):
    """'example-nsu.akamaihd.net/1234/example.jpg' -> (host, '/1234/example.jpg')"""
    for scheme in ("https://", "http://"):
        if uri.startswith(scheme):
            uri = uri[len(scheme):]
    if "/" not in uri:
        raise ParameterError("Expecting <host/path>, got '%s'" % uri)
    host, path = uri.split("/", 1)
    if not host:
        raise ParameterError("Missing NetStorage host in '%s'" % uri)
    return host, "/" + path


def write_response(response, options):
    with open_output(options) as stream:
        stream.write(response["data"])
    return EX_OK


def cmd_dir(ns, path, options):
    return write_response(ns.dir(path, options.format), options)


def cmd_du(ns, path, options):
    return write_response(ns.du(path, options.format), options)


def cmd_list(ns, path, options):
    return write_response(ns.list(path, options.format), options)


def cmd_stat(ns, path, options):
    return write_response(ns.stat(path, options.format), options)


def cmd_download(ns, path, options):
    with open_output(options) as stream:
        response = ns.download(path, stream)
    size, size_coeff = formatSize(response["size"], human_readable=True)
    info(u"Downloaded %d%sB from '%s'" % (size, size_coeff, path))
    return EX_OK


def cmd_delete(ns, path, options):
    ns.delete(path)
    output(u"Success.")
    return EX_OK


def cmd_mkdir(ns, path, options):
    ns.mkdir(path)
    output(u"Success.")
    return EX_OK


def cmd_mtime(ns, path, options):
    mtime = None
    if options.mtime is not None:
        mtime = time_to_epoch(options.mtime)
    ns.mtime(path, mtime)
    output(u"Success.")
    return EX_OK


def cmd_quick_delete(ns, path, options):
    ns.quick_delete(path)
    output(u"Success.")
    return EX_OK


def cmd_rename(ns, path, options):
    if not options.destination:
        raise ParameterError("Action 'rename' needs -d/--destination")
    ns.rename(path, options.destination)
    output(u"Success.")
    return EX_OK


def cmd_rmdir(ns, path, options):
    ns.rmdir(path)
    output(u"Success.")
    return EX_OK


def cmd_symlink(ns, path, options):
    if not options.target:
        raise ParameterError("Action 'symlink' needs -t/--target")
    ns.symlink(path, options.target)
    output(u"Success.")
    return EX_OK


def cmd_upload(ns, path, options):
    if not options.file:
        raise ParameterError("Action 'upload' needs -f/--file")
    if options.file == "-":
        src_stream = io.open(sys.stdin.fileno(), mode='rb', closefd=False)
        ns.upload(path, src_stream, index_zip=options.index_zip,
                  content_type=ns.config.default_mime_type)
    else:
        ns.object_put(path, options.file, index_zip=options.index_zip)
    output(u"Success.")
    return EX_OK


commands = {
    "delete": ("Delete a file or a symlink", cmd_delete),
    "dir": ("List the content of a directory", cmd_dir),
    "download": ("Download a file", cmd_download),
    "du": ("Disk usage of a directory", cmd_du),
    "list": ("Recursively list the files below a directory", cmd_list),
    "mkdir": ("Create a directory", cmd_mkdir),
    "mtime": ("Change the modification time of a file", cmd_mtime),
    "quick-delete": ("Delete a directory and everything below it", cmd_quick_delete),
    "rename": ("Rename a file or a symlink", cmd_rename),
    "rmdir": ("Delete an empty directory", cmd_rmdir),
    "stat": ("Information about a file, symlink or directory", cmd_stat),
    "symlink": ("Create a symlink", cmd_symlink),
    "upload": ("Upload a file", cmd_upload),
}


def format_commands():
    retval = u"Actions:\n"
    for action in sorted(commands):
        retval += u"  %-14s %s\n" % (action, commands[action][0])
    return retval


def get_optparser():
    optparser = OptionParser(usage="%prog [options] <action> <host/path>",
                             version="%s %s" % (PkgInfo.package, PkgInfo.version),
                             description=PkgInfo.short_description,
                             epilog=format_commands())
    # Keep the actions list as written
    optparser.format_epilog = lambda formatter: "\n" + optparser.epilog

    optparser.add_option("-c", "--config", dest="config", metavar="FILE", help="Config file name. Defaults to $HOME/.nscmd")
    optparser.add_option("--dump-config", dest="dump_config", action="store_true", help="Dump current configuration after parsing config files and command line options and exit.")
    optparser.add_option("-u", "--user", dest="username", help="NetStorage upload account name")
    optparser.add_option("-k", "--key", dest="key", help="NetStorage upload account key")
    optparser.add_option("--ssl", dest="use_https", action="store_true", help="Use HTTPS connection when communicating with NetStorage. (default)")
    optparser.add_option("--no-ssl", dest="use_https", action="store_false", help="Don't use HTTPS.")
    optparser.add_option("-o", "--output", dest="output", metavar="FILE", help="Local file to write the response to, for download and the listing actions. Defaults to stdout")
    optparser.add_option("-f", "--file", dest="file", metavar="FILE", help="Local file to upload, '-' for stdin")
    optparser.add_option("-t", "--target", dest="target", metavar="PATH", help="Existing path the symlink points to")
    optparser.add_option("-d", "--destination", dest="destination", metavar="PATH", help="New path of the renamed file")
    optparser.add_option("--index-zip", dest="index_zip", action="store_true", help="Index an uploaded zip archive for serve-from-zip")
    optparser.set_defaults(format=u"xml")
    optparser.add_option("--format", dest="format", help="Response format of the listing actions. Defaults to xml")
    optparser.add_option("--mtime", dest="mtime", metavar="TIME", help="Modification time for the mtime action, as an epoch or a date. Defaults to now")
    optparser.add_option("-v", "--verbose", dest="verbosity", action="store_const", const=logging.INFO, help="Enable verbose output.")
    optparser.add_option("--debug", dest="verbosity", action="store_const", const=logging.DEBUG, help="Enable debug output.")
    return optparser


def main(argv=None):
    default_verbosity = Config.verbosity
    optparser = get_optparser()
    (options, args) = optparser.parse_args(argv)

    ## Some mucking with logging levels to enable
    ## debugging/verbose output for config file parser on request
    logging.basicConfig(level=options.verbosity or default_verbosity,
                        format='%(levelname)s: %(message)s',
                        stream=sys.stderr)

    if options.config:
        config_file = options.config
        if not os.path.isfile(config_file):
            error(u"%s: config file not found" % config_file)
            return EX_CONFIG
    else:
        config_file = os.path.join(os.path.expanduser("~"), ".nscmd")

    try:
        cfg = Config(config_file, options.username, options.key)
        ## And again some logging level adjustments
        ## according to configfile and command line parameters
        if options.verbosity is not None:
            cfg.update_option("verbosity", options.verbosity)
        if options.use_https is not None:
            cfg.update_option("use_https", options.use_https)
    except ValueError as e:
        error(u"Config: %s" % e)
        return EX_CONFIG
    logging.root.setLevel(cfg.verbosity)

    if options.dump_config:
        cfg.dump_config(sys.stdout)
        return EX_OK

    if len(args) < 1:
        error(u"Missing action. Please run with --help for more information.")
        return EX_USAGE

    action = args.pop(0)
    try:
        debug(u"Action: " + commands[action][0])
        ## We must do this lookup in extra step to
        ## avoid catching all KeyError exceptions
        ## from inner functions.
        cmd_func = commands[action][1]
    except KeyError:
        error(u"Invalid action: %s" % action)
        return EX_USAGE

    if len(args) != 1:
        error(u"Action '%s' needs exactly one <host/path> argument" % action)
        return EX_USAGE

    try:
        host, path = split_host_path(args[0])
        cfg.update_option("host", host)
        ns = NetStorage(cfg.credentials(), cfg)
        return cmd_func(ns, path, options)
    except (NetStorageSSLError, NetStorageSSLCertificateError) as e:
        error(u"SSL certificate verification failure: %s" % e)
        return EX_ACCESSDENIED
    except NetStorageException as e:
        error(u"%s" % e)
        return e.get_error_code()
    except (IOError, OSError) as e:
        error(u"%s" % e)
        return EX_IOERR
    except KeyboardInterrupt:
        error(u"Interrupted")
        return EX_BREAK

# vim:et:ts=4:sts=4:ai
