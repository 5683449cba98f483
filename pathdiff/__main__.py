# Copyright Red Hat
#
# pathdiff/__main__.py - Path diff module entry point
#
# This file is part of the pathdiff project.
#
# SPDX-License-Identifier: Apache-2.0
import sys

from pathdiff.command import main

if __name__ == "__main__":
    sys.exit(main(sys.argv))
