"""

    Basic utility functions and classes

    Copyright (C) 2025 Miðeind ehf.

    The Creative Commons Attribution-NonCommercial 4.0
    International Public License (CC-BY-NC 4.0) applies to this software.
    For further information, see https://github.com/mideind/Netskrafl


    This module contains helpers for the Flask request/response
    cycle that are shared between the route modules.

"""

from __future__ import annotations

from typing import Any, List, Mapping, cast

from flask import Request, jsonify as flask_jsonify
from flask.wrappers import Response


def jsonify(*args: Any, **kwargs: Any) -> Response:
    """Turn a Python object into a JSON response, with an
    explicit UTF-8 charset"""
    response = flask_jsonify(*args, **kwargs)
    response.headers["Content-Type"] = "application/json; charset=UTF-8"
    return response


class RequestData:
    """Uniform access to request parameters, whether they arrive as
    a JSON object, as form-encoded POST data or (for GET requests)
    as URL arguments"""

    def __init__(self, rq: Request, *, use_args: bool = False) -> None:
        body = cast(Any, rq).get_json(silent=True)
        self.using_json = isinstance(body, dict) and bool(body)
        self.q: Mapping[str, Any]
        if self.using_json:
            self.q = cast(Mapping[str, Any], body)
        elif rq.form:
            self.q = rq.form
        elif use_args:
            self.q = rq.args
        else:
            self.q = {}

    def __repr__(self) -> str:
        return f"<RequestData {dict(self.q)!r}>"

    def get(self, key: str, default: Any = None) -> Any:
        return self.q.get(key, default)

    def get_list(self, key: str) -> List[Any]:
        """Obtain a list; form-encoded lists use the key[] convention"""
        if self.using_json:
            r = self.q.get(key, [])
        else:
            r = cast(Any, self.q).getlist(key + "[]") if self.q else []
        return cast(List[Any], r) if isinstance(r, list) else []
