"""
配置管理模块
"""
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# 加载环境变量
load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else None


class Settings(BaseModel):
    """应用配置"""

    # 运行环境
    environment: str = os.getenv("ENVIRONMENT", "development")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")

    # 预言机（Supra kline REST）配置
    oracle_api_key: str = os.getenv("ORACLE_API_KEY", "")
    oracle_base_url: str = os.getenv("ORACLE_BASE_URL", "https://prod-kline-rest.supra.com")
    oracle_poll_seconds: float = float(os.getenv("ORACLE_POLL_SECONDS", "8"))
    oracle_timeout_seconds: float = float(os.getenv("ORACLE_TIMEOUT_SECONDS", "10"))
    oracle_rpc_url: str = os.getenv("ORACLE_RPC_URL", "https://rpc-mainnet.supra.com")

    # 对战节奏（秒）；无界面运行时可全部设为 0
    turn_seconds: int = int(os.getenv("TURN_SECONDS", "30"))
    opponent_delay_seconds: float = float(os.getenv("OPPONENT_DELAY_SECONDS", "2.5"))
    settlement_delay_seconds: float = float(os.getenv("SETTLEMENT_DELAY_SECONDS", "5"))

    # 随机源：设置后使用可复现的种子
    random_seed: Optional[int] = _optional_int("RANDOM_SEED")

    # 限流（仅 /api/ 路径）
    rate_limit_max: int = int(os.getenv("RATE_LIMIT_MAX", "100"))
    rate_limit_window_seconds: int = int(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "900"))

    # 静态资源
    static_dir: str = os.getenv("STATIC_DIR", "dist")

    # API 配置
    api_prefix: str = "/api"
    cors_origins: List[str] = [
        origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()
    ]

    model_config = ConfigDict(env_file=".env", case_sensitive=False)

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


# 全局配置实例
settings = Settings()


def validate_config() -> bool:
    """
    验证配置是否完整

    Returns:
        bool: 配置是否有效（缺少预言机密钥时退回模拟行情）
    """
    if not settings.oracle_api_key:
        print("警告: 未设置 ORACLE_API_KEY，价格源将使用模拟行情")
        return False

    return True
