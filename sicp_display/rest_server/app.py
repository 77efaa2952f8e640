#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
A REST FastAPI server that controls one or more SICP displays.

Run with any ASGI server, e.g.:

    uvicorn sicp_display.rest_server:display_api

The configuration is read from the JSON file named by SICP_DISPLAY_CONFIG, or
from sicp_display_config.json in the current directory:

    { "displays": [ { "name": "Lobby", "host": "10.0.0.20", ... }, ... ] }
"""

from __future__ import annotations

from fastapi import FastAPI

import os
import json

from contextlib import asynccontextmanager

from .logger import logger
from ..internal_types import *
from .. import (
    SicpDisplayClient,
    SicpDisplayConfig,
    SicpDisplayError,
    sicp_display_connect,
  )

from .api import router as api_router

def load_raw_config() -> JsonableDict:
    """Loads the server's JSON configuration, or an empty configuration if there is no file."""
    config_file = os.environ.get("SICP_DISPLAY_CONFIG", None)
    if config_file is None:
        if os.path.exists("sicp_display_config.json"):
            config_file = "sicp_display_config.json"
    if config_file is None:
        return {}
    with open(config_file, "r") as f:
        raw_config: JsonableDict = json.load(f)
    return raw_config

def display_configs_from_jsonable(raw_config: JsonableDict) -> List[SicpDisplayConfig]:
    """Builds one SicpDisplayConfig per entry in raw_config["displays"].

    Entries without a host are skipped with a warning. Display names must be unique.
    """
    result: List[SicpDisplayConfig] = []
    names: set[str] = set()
    raw_displays = raw_config.get("displays")
    if not isinstance(raw_displays, list) or len(raw_displays) == 0:
        logger.warning('No "displays" configured. Please add at least one display.')
        return result
    for entry in raw_displays:
        if not isinstance(entry, dict) or not entry.get("host"):
            logger.warning(f'Skipping display without "host" field: {entry}')
            continue
        config = SicpDisplayConfig.from_jsonable(entry)
        if config.name in names:
            raise SicpDisplayError(f"Duplicate display name: {config.name!r}")
        names.add(config.name)
        result.append(config)
    return result

@asynccontextmanager
async def fastapi_lifetime(app: FastAPI) -> AsyncIterator[None]:
    """
    A context manager that initializes and cleans up for FastAPI.
    """
    displays: Dict[str, SicpDisplayClient] = {}
    app.state.displays = displays
    try:
        logger.info("Display REST server starting up--initializing...")
        raw_config = load_raw_config()
        app.state.raw_config = raw_config
        for config in display_configs_from_jsonable(raw_config):
            client = await sicp_display_connect(config=config)
            displays[config.name] = client
            logger.info(f"Serving API for display {config}...")

        logger.info("Display REST server initialization done; starting server...")
        yield
    finally:
        logger.info("Display REST server shutting down--cleaning up...")
        for client in displays.values():
            try:
                await client.aclose()
            except Exception:
                logger.exception(f"Exception while closing {client}")

display_api = FastAPI(lifespan=fastapi_lifetime)
display_api.include_router(api_router)

def get_displays() -> Dict[str, SicpDisplayClient]:
    return display_api.state.displays

def get_raw_config() -> JsonableDict:
    return display_api.state.raw_config
