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

package = "nscmd"
version = "1.0.0-dev"
url = "http://s3tools.org"
license = "GNU GPL v2+"
short_description = "Command line tool and library for the Akamai NetStorage CMS API"
long_description = """
Nscmd lets you manage files stored on Akamai NetStorage
from the command line or from Python: list, stat, upload,
download, rename, symlink and delete objects through the
signed CMS HTTP API, with automatic retries on flaky
networks.
"""

# vim:et:ts=4:sts=4:ai
