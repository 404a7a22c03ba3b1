# -*- coding: utf-8 -*-

# patterned on /usr/include/sysexits.h

EX_OK                = 0
EX_GENERAL           = 1
EX_SERVERERROR       = 11   # 400, 405, 411, 416, 417, 501: Bad request, 504: Gateway Time-out
EX_NOTFOUND          = 12   # 404: Not found
EX_CONFLICT          = 13   # 409: Conflict (ex: directory not empty)
EX_PRECONDITION      = 14   # 412: Precondition failed
EX_SERVICE           = 15   # 503: Service not available or slow down
EX_CLOCKDRIFT        = 16   # Local clock too far from the server clock, signatures rejected
EX_USAGE             = 64   # The command was used incorrectly (e.g. bad command line syntax)
EX_DATAERR           = 65   # Failed file transfer, upload or download
EX_NOINPUT           = 66   # Local source file does not exist or is not readable
EX_SOFTWARE          = 70   # internal software error (e.g. server error of unknown specificity)
EX_OSERR             = 71   # system error (e.g. out of memory)
EX_OSFILE            = 72   # OS error (e.g. missing python module)
EX_IOERR             = 74   # An error occurred while doing I/O on some file.
EX_TEMPFAIL          = 75   # temporary failure (network unreachable or similar, retry later)
EX_ACCESSDENIED      = 77   # Insufficient permissions or bad signature
EX_CONFIG            = 78   # Configuration file error
_EX_SIGNAL           = 128
_EX_SIGINT           = 2
EX_BREAK             = _EX_SIGNAL + _EX_SIGINT # Control-C (KeyboardInterrupt raised)

# vim:et:ts=4:sts=4:ai
