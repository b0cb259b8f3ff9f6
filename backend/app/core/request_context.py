"""
Request/run context helpers.

A small context (request_id, run_id, file_name) is kept in ContextVars.
The HTTP middleware and the extraction service set these values so every log
line emitted while a file is processed can be correlated with its run.
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Any, Dict, Optional


_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_run_id: ContextVar[Optional[str]] = ContextVar("run_id", default=None)
_file_name: ContextVar[Optional[str]] = ContextVar("file_name", default=None)


def set_context(
    *,
    request_id: Optional[str] = None,
    run_id: Optional[str] = None,
    file_name: Optional[str] = None,
) -> None:
    if request_id is not None:
        _request_id.set(request_id)
    if run_id is not None:
        _run_id.set(run_id)
    if file_name is not None:
        _file_name.set(file_name)


def clear_context() -> None:
    _request_id.set(None)
    _run_id.set(None)
    _file_name.set(None)


def get_context() -> Dict[str, Any]:
    ctx: Dict[str, Any] = {}
    rid = _request_id.get()
    run = _run_id.get()
    name = _file_name.get()

    if rid:
        ctx["request_id"] = rid
    if run:
        ctx["run_id"] = run
    if name:
        ctx["file_name"] = name
    return ctx
