"""
Cross-origin policy for the public read API.

Starlette's CORSMiddleware only decorates requests that carry an Origin
header and validates preflights. This gateway instead stamps the same
headers on every response and answers every OPTIONS request itself.
"""

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Max-Age": "86400",
    "Access-Control-Allow-Methods": "GET",
    "Access-Control-Allow-Headers": "Origin, Content-Type, Content-Length, Accept-Encoding, X-CSRF-Token, Authorization",
    "Access-Control-Expose-Headers": "Content-Length",
    "Access-Control-Allow-Credentials": "true",
}


class CORSPolicyMiddleware(BaseHTTPMiddleware):
    """Adds CORS headers to all responses and short-circuits preflights."""

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            response = await call_next(request)

        response.headers.update(CORS_HEADERS)
        return response


def install_cors_policy(app: FastAPI) -> None:
    """Install the policy as the outermost application middleware.

    Must be called after every other ``add_middleware`` so preflights are
    answered before any other layer runs.
    """
    app.add_middleware(CORSPolicyMiddleware)
