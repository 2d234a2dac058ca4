"""Route decorator serving a FastAPI endpoint through the response cache."""

from __future__ import annotations

import functools
import inspect
from typing import TYPE_CHECKING, Any

from starlette.requests import Request

from addrindex.cache.response import request_key

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from starlette.responses import Response

    Endpoint = Callable[..., Awaitable[Response]]


def cached(route: str) -> Callable[[Endpoint], Endpoint]:
    """Cache successful responses of the decorated endpoint.

    The TTL is looked up as ``config.cache.ttl_for(route)`` and the cache is
    the ``ResponseCache`` on ``app.state.response_cache``; without one the
    endpoint runs uncached. The endpoint must accept a ``request: Request``
    parameter and return a ``Response``.

    Usage::

        @router.get("/addr/{addr}/balance")
        @cached("address_balance")
        async def balance(addr: str, request: Request, ...) -> Response:
            ...
    """

    def decorator(endpoint: Endpoint) -> Endpoint:
        @functools.wraps(endpoint)
        async def wrapper(*args: Any, **kwargs: Any) -> Response:
            request = kwargs.get("request")
            if not isinstance(request, Request):
                msg = f"{endpoint.__name__} must take a 'request: Request' parameter"
                raise TypeError(msg)

            cache = getattr(request.app.state, "response_cache", None)
            if cache is None:
                return await endpoint(*args, **kwargs)

            ttl = request.app.state.config.cache.ttl_for(route)
            return await cache.fetch(request_key(request), ttl, lambda: endpoint(*args, **kwargs))

        # Resolve postponed annotations against the endpoint's own module;
        # FastAPI would otherwise look them up in this module's globals.
        wrapper.__signature__ = inspect.signature(endpoint, eval_str=True)  # type: ignore[attr-defined]
        return wrapper

    return decorator
