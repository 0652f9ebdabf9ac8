"""Pydantic request/response models for the REST API.

These define the HTTP request bodies.  Routes translate them into the
typed router messages from :mod:`hextactics.network.messages`.
"""

from __future__ import annotations

from pydantic import BaseModel


class CellRequest(BaseModel):
    row: int
    col: int


class MoveRequest(BaseModel):
    uid: int
    row: int
    col: int


class ActionResult(BaseModel):
    success: bool
    reason: str = ""
