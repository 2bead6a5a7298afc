"""
HTTP 中间件
"""
from .rate_limit import RateLimitMiddleware
from .security import SecurityHeadersMiddleware, build_csp

__all__ = ["RateLimitMiddleware", "SecurityHeadersMiddleware", "build_csp"]
