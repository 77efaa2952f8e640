# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
A REST FastAPI server that controls SICP displays.
"""
from .app import display_api, get_displays, get_raw_config, display_configs_from_jsonable
from .api import router
