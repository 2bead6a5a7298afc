#!/usr/bin/env python3
"""
Oracle Arena HTTP 服务启动脚本

使用方法：
    python run_server.py
    python run_server.py --port 3000 --reload
"""

import os
import sys

# 确保可以导入 arena 模块
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

# 加载环境变量
from dotenv import load_dotenv
load_dotenv()


def main():
    import argparse

    parser = argparse.ArgumentParser(
        description="Oracle Arena HTTP Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  python run_server.py                    # 默认 0.0.0.0:3000
  python run_server.py --port 8000        # 指定端口
  python run_server.py --reload           # 开发模式热重载
""",
    )
    parser.add_argument("--host", default="0.0.0.0", help="监听地址 (默认: 0.0.0.0)")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("PORT", "3000")),
        help="监听端口 (默认: $PORT 或 3000)",
    )
    parser.add_argument("--reload", action="store_true", help="代码变更时自动重载")
    parser.add_argument("--log-level", default="info", help="日志级别 (默认: info)")
    args = parser.parse_args()

    import uvicorn

    print("=" * 60)
    print("Oracle Arena Server")
    print("=" * 60)
    print(f"本地地址: http://localhost:{args.port}")
    print(f"环境: {os.getenv('ENVIRONMENT', 'development')}")
    print("=" * 60)

    uvicorn.run(
        "arena.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
