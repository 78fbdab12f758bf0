"""Shared route dependencies."""

from __future__ import annotations

from fastapi import Request

from samwise.app import Samwise


def get_core(request: Request) -> Samwise:
    return request.app.state.core
