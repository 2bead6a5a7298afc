"""
Supra 预言机 REST 客户端

对 {base_url}/latest?pair=... 的薄封装
"""
import logging
from typing import Any, Dict, Optional

import httpx

from arena.config import settings

logger = logging.getLogger(__name__)


class OracleUnavailableError(RuntimeError):
    """Raised when the oracle REST endpoint cannot serve a price."""

    def __init__(self, pair: str, detail: str) -> None:
        self.pair = pair
        self.detail = detail
        super().__init__(f"oracle unavailable for {pair}: {detail}")


class OracleNotConfiguredError(RuntimeError):
    """Raised when no oracle API key is configured."""


class SupraOracleClient:
    """预言机客户端"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.oracle_base_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.oracle_api_key
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None else settings.oracle_timeout_seconds
        )
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def get_latest(self, pair: str) -> Dict[str, Any]:
        """
        获取某交易对的最新行情（原样返回上游 JSON）

        Args:
            pair: 交易对（如 "ETH/USD"）

        Raises:
            OracleNotConfiguredError: 未配置 API key
            OracleUnavailableError: 上游不可用或返回非 2xx
        """
        if not self.configured:
            raise OracleNotConfiguredError("Oracle API key not configured")

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        timeout = httpx.Timeout(max(0.5, float(self.timeout_seconds)))
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await client.get(
                    f"{self.base_url}/latest", params={"pair": pair}, headers=headers
                )
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as exc:
            raise OracleUnavailableError(
                pair, f"Oracle API error: {exc.response.status_code}"
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise OracleUnavailableError(pair, f"{type(exc).__name__}: {exc}") from exc
