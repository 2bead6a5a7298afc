"""
/api/ 路径限流：每个客户端 IP 固定窗口计数
"""
import time
from typing import Callable, Dict, Tuple

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


class FixedWindowCounter:
    def __init__(self, limit: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.limit = max(1, limit)
        self.window_seconds = window_seconds
        self.clock = clock
        self.windows: Dict[str, Tuple[float, int]] = {}
        self._last_sweep = clock()

    def hit(self, key: str) -> Tuple[bool, int, float]:
        """
        记录一次请求

        Returns:
            (是否放行, 剩余次数, 窗口重置前秒数)
        """
        now = self.clock()
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(now)
        started, count = self.windows.get(key, (now, 0))
        if now - started >= self.window_seconds:
            started, count = now, 0
        count += 1
        self.windows[key] = (started, count)
        reset_in = max(0.0, self.window_seconds - (now - started))
        return count <= self.limit, max(0, self.limit - count), reset_in

    def _sweep(self, now: float) -> None:
        """丢弃已过期的窗口，每个窗口周期最多清理一次"""
        expired = [key for key, (started, _) in self.windows.items() if now - started >= self.window_seconds]
        for key in expired:
            del self.windows[key]
        self._last_sweep = now


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limit: int = 100, window_seconds: float = 900, path_prefix: str = "/api/"):
        super().__init__(app)
        self.counter = FixedWindowCounter(limit, window_seconds)
        self.path_prefix = path_prefix

    async def dispatch(self, request: Request, call_next: Callable):
        if not request.url.path.startswith(self.path_prefix):
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        allowed, remaining, reset_in = self.counter.hit(client_ip)
        headers = {
            "RateLimit-Limit": str(self.counter.limit),
            "RateLimit-Remaining": str(remaining),
            "RateLimit-Reset": str(int(reset_in)),
        }
        if not allowed:
            return JSONResponse({"error": RATE_LIMIT_MESSAGE}, status_code=429, headers=headers)

        response = await call_next(request)
        for name, value in headers.items():
            response.headers[name] = value
        return response
