"""
安全响应头中间件（CSP / HSTS / nosniff / frame deny）
"""
from typing import Callable, Dict, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware


def build_csp(rpc_url: str, oracle_url: str) -> str:
    directives = {
        "default-src": ["'self'"],
        "script-src": ["'self'", "'unsafe-inline'", rpc_url],
        "style-src": ["'self'", "'unsafe-inline'"],
        "img-src": ["'self'", "data:", "https:"],
        "connect-src": ["'self'", rpc_url, oracle_url],
        "font-src": ["'self'"],
        "object-src": ["'none'"],
        "media-src": ["'self'"],
        "frame-src": ["'none'"],
    }
    return "; ".join(f"{name} {' '.join(values)}" for name, values in directives.items())


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        csp: str,
        hsts_max_age: int = 31536000,
        extra_headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(app)
        self.headers: Dict[str, str] = {
            "Content-Security-Policy": csp,
            "Strict-Transport-Security": f"max-age={hsts_max_age}; includeSubDomains; preload",
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": "no-referrer",
        }
        if extra_headers:
            self.headers.update(extra_headers)

    async def dispatch(self, request: Request, call_next: Callable):
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response
