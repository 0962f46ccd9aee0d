"""Success-path envelope wrapping for FastAPI routes.

``enveloped`` decorates an endpoint so that its return value is wrapped into
a success envelope carrying ``requestId`` and ``version`` in ``meta``.
``EnvelopeRoute`` applies it to every route of a router:

    router = APIRouter(route_class=EnvelopeRoute)

Values that are already envelopes, and Starlette ``Response`` objects, pass
through untouched.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Callable
from typing import Any

from fastapi import Request
from fastapi.routing import APIRoute
from starlette.responses import Response

from studenthub_api.config.settings import settings_for
from studenthub_api.models.responses import wrap

_REQUEST_PARAM = "_envelope_request"


def envelope_meta(request: Request) -> dict[str, Any]:
    """``requestId`` and ``version`` for the envelope of ``request``."""
    request_id = getattr(request.state, "request_id", None) or request.headers.get("x-request-id")
    meta = {"requestId": request_id, "version": settings_for(request).api_version}
    return {key: value for key, value in meta.items() if value is not None}


def wrap_result(result: Any, request: Request) -> Any:
    if isinstance(result, Response):
        return result
    return wrap(result, envelope_meta(request))


def _signature_with_request(endpoint: Callable[..., Any]) -> inspect.Signature:
    """Endpoint signature plus a keyword-only ``Request`` parameter.

    String annotations are resolved against the endpoint's own module, and the
    return annotation is dropped so FastAPI does not infer a response model
    for the unwrapped data.
    """
    signature = inspect.signature(endpoint, eval_str=True)
    params = list(signature.parameters.values())
    extra = inspect.Parameter(
        _REQUEST_PARAM, inspect.Parameter.KEYWORD_ONLY, annotation=Request
    )
    if params and params[-1].kind is inspect.Parameter.VAR_KEYWORD:
        params.insert(len(params) - 1, extra)
    else:
        params.append(extra)
    return signature.replace(
        parameters=params, return_annotation=inspect.Signature.empty
    )


def enveloped(endpoint: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap an endpoint's return value into the success envelope."""
    if getattr(endpoint, "__enveloped__", False):
        return endpoint

    if inspect.iscoroutinefunction(endpoint):

        @functools.wraps(endpoint)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            request: Request = kwargs.pop(_REQUEST_PARAM)
            return wrap_result(await endpoint(*args, **kwargs), request)

        wrapper: Callable[..., Any] = async_wrapper
    else:

        @functools.wraps(endpoint)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            request: Request = kwargs.pop(_REQUEST_PARAM)
            return wrap_result(endpoint(*args, **kwargs), request)

        wrapper = sync_wrapper

    wrapper.__signature__ = _signature_with_request(endpoint)  # type: ignore[attr-defined]
    wrapper.__enveloped__ = True  # type: ignore[attr-defined]
    return wrapper


class EnvelopeRoute(APIRoute):
    """APIRoute that wraps every endpoint result into the success envelope."""

    def __init__(self, path: str, endpoint: Callable[..., Any], **kwargs: Any) -> None:
        super().__init__(path, enveloped(endpoint), **kwargs)
