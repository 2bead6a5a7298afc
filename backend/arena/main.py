"""
FastAPI 应用入口
"""
import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import FileResponse, JSONResponse

from arena.config import settings, validate_config
from arena.dependencies import get_arena_service, get_oracle_feed
from arena.middleware import RateLimitMiddleware, SecurityHeadersMiddleware, build_csp
from arena.routers import arena_router, oracle_router

logger = logging.getLogger(__name__)

# 创建 FastAPI 应用
app = FastAPI(
    title="Oracle Arena API",
    description="预言机驱动的回合制对战",
    version=settings.app_version,
)

# 配置 CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 限流仅作用于 /api/
app.add_middleware(
    RateLimitMiddleware,
    limit=settings.rate_limit_max,
    window_seconds=settings.rate_limit_window_seconds,
    path_prefix=f"{settings.api_prefix}/",
)

app.add_middleware(
    SecurityHeadersMiddleware,
    csp=build_csp(settings.oracle_rpc_url, settings.oracle_base_url),
)

if settings.is_production:
    app.add_middleware(GZipMiddleware, minimum_size=1000)

# 注册路由
app.include_router(arena_router, prefix=settings.api_prefix, tags=["Arena"])
app.include_router(oracle_router, prefix=settings.api_prefix, tags=["Oracle"])

_polling_stop: Optional[asyncio.Event] = None
_polling_task: Optional[asyncio.Task] = None


@app.on_event("startup")
async def startup_event():
    """应用启动时的初始化"""
    global _polling_stop, _polling_task

    print("=" * 60)
    print("Oracle Arena 启动中...")
    print(f"环境: {settings.environment}")
    print("=" * 60)

    if validate_config():
        print("✓ 预言机配置验证通过")
    else:
        print("✗ 未配置预言机密钥，使用模拟行情")

    _polling_stop = asyncio.Event()
    _polling_task = asyncio.create_task(get_oracle_feed().run_polling(_polling_stop))

    if settings.is_production:
        print("✓ 生产模式：安全响应头 / 限流 / 压缩 已启用")
    print("✓ API 文档: http://localhost:8000/docs")
    print("=" * 60)


@app.on_event("shutdown")
async def shutdown_event():
    """应用关闭时的清理"""
    if _polling_stop is not None:
        _polling_stop.set()
    if _polling_task is not None:
        await asyncio.gather(_polling_task, return_exceptions=True)
    await get_arena_service().shutdown()


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Something went wrong!"})


@app.get(f"{settings.api_prefix}/health")
async def health_check():
    """健康检查"""
    return {
        "status": "healthy",
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version,
    }


@app.get("/{full_path:path}", include_in_schema=False)
async def serve_frontend(full_path: str):
    """静态资源；未命中的路径回退到 index.html"""
    if full_path.startswith(settings.api_prefix.strip("/") + "/"):
        return JSONResponse(status_code=404, content={"error": "Not Found"})

    static_root = Path(settings.static_dir).resolve()
    cache_control = "public, max-age=31536000" if settings.is_production else "no-cache"

    if full_path:
        candidate = (static_root / full_path).resolve()
        if candidate.is_file() and static_root in candidate.parents:
            return FileResponse(candidate, headers={"Cache-Control": cache_control})

    index_file = static_root / "index.html"
    if index_file.is_file():
        return FileResponse(index_file, headers={"Cache-Control": "no-cache"})

    return {
        "message": "Oracle Arena API",
        "version": settings.app_version,
        "docs": "/docs",
    }
