#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
Logging for the REST FastAPI server that controls SICP displays.
"""

from __future__ import annotations

import logging

logger = logging.getLogger('sicp_display.rest_server')
