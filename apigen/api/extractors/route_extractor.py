"""Routing directive parsing (the JSON object after `# apigen:api`)."""

import json

from apigen.errors import MalformedRouteError
from apigen.lib.ir import RouteDescriptor


def parse_route_directive(text: str, lineno: int = None) -> RouteDescriptor:
    """
    Parse a routing directive such as
    {"url": "/user/create", "auth": true, "method": "POST"}.

    `url` is mandatory. `auth` defaults to false; a missing `method` leaves the
    route open to every HTTP method.
    """
    try:
        annotation = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedRouteError(f"routing directive is not valid JSON: {e.msg}", lineno=lineno) from e

    if not isinstance(annotation, dict):
        raise MalformedRouteError("routing directive must be a JSON object", lineno=lineno)

    url = annotation.get("url")
    if url is None:
        raise MalformedRouteError("routing directive has no 'url'", lineno=lineno)
    if not isinstance(url, str) or not url:
        raise MalformedRouteError(f"routing directive 'url' must be a non-empty string, got {url!r}", lineno=lineno)

    auth = annotation.get("auth", False)
    if not isinstance(auth, bool):
        raise MalformedRouteError(f"routing directive 'auth' must be true or false, got {auth!r}", lineno=lineno)

    method = annotation.get("method")
    if method is not None and (not isinstance(method, str) or not method.strip()):
        raise MalformedRouteError(f"routing directive 'method' must be a non-empty string, got {method!r}", lineno=lineno)

    return RouteDescriptor(
        url=url,
        requires_auth=auth,
        http_method=method.strip().upper() if method else None,
    )
