# Copyright Red Hat
#
# tests/__init__.py - Path diff test package
#
# This file is part of the pathdiff project.
#
# SPDX-License-Identifier: Apache-2.0
import logging

log = logging.getLogger()
log.setLevel(logging.DEBUG)
formatter = logging.Formatter('%(asctime)s %(levelname)s %(name)s %(message)s')
file_handler = logging.FileHandler("test.log")
file_handler.setFormatter(formatter)
log.addHandler(file_handler)

