# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
REST routes exposing per-display power, input, volume, mute, brightness and
backlight control.

Read routes never fail because of the display; they return the client's
best-effort current value. Write routes map display errors to HTTP status codes.
"""

from __future__ import annotations

from contextlib import contextmanager

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from .logger import logger
from ..internal_types import *
from ..exceptions import (
    SicpDisplayError,
    SicpTimeoutError,
    SicpConnectionError,
    DeviceRejectedError,
    UnknownInputError,
  )
from ..client import SicpDisplayClient, PowerState

router = APIRouter(prefix="/displays")

class ActiveBody(BaseModel):
    active: bool

class InputBody(BaseModel):
    input: int

class VolumeBody(BaseModel):
    volume: int

class MuteBody(BaseModel):
    muted: bool

class BrightnessBody(BaseModel):
    brightness: int

class BacklightBody(BaseModel):
    on: bool

def get_display(name: str, request: Request) -> SicpDisplayClient:
    displays: Dict[str, SicpDisplayClient] = request.app.state.displays
    client = displays.get(name)
    if client is None:
        raise HTTPException(status_code=404, detail=f"Unknown display: {name}")
    return client

@contextmanager
def display_errors(client: SicpDisplayClient, operation: str) -> Iterator[None]:
    """Translates display errors raised by a write operation into HTTP errors."""
    try:
        yield
    except UnknownInputError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except DeviceRejectedError as e:
        raise HTTPException(status_code=502, detail=str(e)) from e
    except (SicpTimeoutError, SicpConnectionError) as e:
        raise HTTPException(status_code=504, detail=f"Display unreachable: {e}") from e
    except SicpDisplayError as e:
        logger.warning(f"{client}: {operation} failed: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e

@router.get("")
async def list_displays(request: Request) -> List[Dict[str, Any]]:
    displays: Dict[str, SicpDisplayClient] = request.app.state.displays
    return [client.snapshot() for client in displays.values()]

@router.get("/{name}")
async def display_state(client: SicpDisplayClient = Depends(get_display)) -> Dict[str, Any]:
    return client.snapshot()

@router.get("/{name}/active")
async def get_active(client: SicpDisplayClient = Depends(get_display)) -> Dict[str, Any]:
    return dict(active=await client.get_active_state())

@router.put("/{name}/active")
async def put_active(body: ActiveBody, client: SicpDisplayClient = Depends(get_display)) -> Dict[str, Any]:
    with display_errors(client, "set_active_state"):
        await client.set_active_state(body.active)
    return dict(active=client.power == PowerState.ON)

@router.get("/{name}/input")
async def get_input(client: SicpDisplayClient = Depends(get_display)) -> Dict[str, Any]:
    return dict(input=client.get_active_input())

@router.put("/{name}/input")
async def put_input(body: InputBody, client: SicpDisplayClient = Depends(get_display)) -> Dict[str, Any]:
    with display_errors(client, "set_input"):
        await client.set_input(body.input)
    return dict(input=client.get_active_input())

@router.get("/{name}/volume")
async def get_volume(client: SicpDisplayClient = Depends(get_display)) -> Dict[str, Any]:
    return dict(volume=client.get_volume())

@router.put("/{name}/volume")
async def put_volume(body: VolumeBody, client: SicpDisplayClient = Depends(get_display)) -> Dict[str, Any]:
    with display_errors(client, "set_volume"):
        await client.set_volume(body.volume)
    return dict(volume=client.get_volume())

@router.get("/{name}/mute")
async def get_mute(client: SicpDisplayClient = Depends(get_display)) -> Dict[str, Any]:
    return dict(muted=client.get_mute())

@router.put("/{name}/mute")
async def put_mute(body: MuteBody, client: SicpDisplayClient = Depends(get_display)) -> Dict[str, Any]:
    with display_errors(client, "set_mute"):
        await client.set_mute(body.muted)
    return dict(muted=client.get_mute())

@router.get("/{name}/brightness")
async def get_brightness(client: SicpDisplayClient = Depends(get_display)) -> Dict[str, Any]:
    return dict(brightness=client.get_brightness())

@router.put("/{name}/brightness")
async def put_brightness(body: BrightnessBody, client: SicpDisplayClient = Depends(get_display)) -> Dict[str, Any]:
    with display_errors(client, "set_brightness"):
        await client.set_brightness(body.brightness)
    return dict(brightness=client.get_brightness())

@router.get("/{name}/backlight")
async def get_backlight(client: SicpDisplayClient = Depends(get_display)) -> Dict[str, Any]:
    return dict(on=client.get_backlight_on())

@router.put("/{name}/backlight")
async def put_backlight(body: BacklightBody, client: SicpDisplayClient = Depends(get_display)) -> Dict[str, Any]:
    with display_errors(client, "set_backlight_on"):
        await client.set_backlight_on(body.on)
    return dict(on=client.get_backlight_on())
