#!/usr/bin/env python
# -*- coding: utf-8 -*-

import sys
import os

from setuptools import setup

import NetStorage.PkgInfo

if sys.version_info < (3, 6):
    sys.stderr.write("Your Python version %d.%d.%d is not supported.\n" % sys.version_info[:3])
    sys.stderr.write("Nscmd requires Python 3.6 or newer.\n")
    sys.exit(1)

## Remove 'MANIFEST' file to force
## distutils to recreate it.
## Only in "sdist" stage. Otherwise
## it makes life difficult to packagers.
if len(sys.argv) > 1 and sys.argv[1] == "sdist":
    try:
        os.unlink("MANIFEST")
    except OSError as e:
        pass

## Main distutils info
setup(
    ## Content description
    name=NetStorage.PkgInfo.package,
    version=NetStorage.PkgInfo.version,
    packages=['NetStorage'],
    scripts=['nscmd'],

    ## Packaging details
    author="Michal Ludvig",
    author_email="michal@logix.cz",
    maintainer="github.com/fviard, github.com/matteobar",
    maintainer_email="s3tools-bugs@lists.sourceforge.net",
    url=NetStorage.PkgInfo.url,
    license=NetStorage.PkgInfo.license,
    description=NetStorage.PkgInfo.short_description,
    long_description="""
%s

Authors:
--------
    Florent Viard <florent@sodria.com>

    Michal Ludvig  <michal@logix.cz>
""" % (NetStorage.PkgInfo.long_description),

    classifiers=[
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Intended Audience :: Developers',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: GNU General Public License v2 or later (GPLv2+)',
        'Natural Language :: English',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
        'Topic :: System :: Archiving',
        'Topic :: Utilities',
    ],

    python_requires=">=3.6",
    install_requires=["python-dateutil", "python-magic"],
    extras_require={"test": ["pytest"]},
)

# vim:et:ts=4:sts=4:ai
