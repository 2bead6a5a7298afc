"""
预言机相关路由（价格代理 / 当前快照 / 锦标赛倒计时）
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from arena.dependencies import get_oracle_client, get_oracle_feed
from arena.oracle.client import (
    OracleNotConfiguredError,
    OracleUnavailableError,
    SupraOracleClient,
)
from arena.oracle.feed import OracleFeed
from arena.services.tournament import time_until_next_tournament

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Oracle"])


@router.get("/oracle/price/{pair:path}")
async def get_oracle_price(pair: str, client: SupraOracleClient = Depends(get_oracle_client)):
    """代理上游最新价格（原样透传 JSON）"""
    try:
        return await client.get_latest(pair)
    except OracleNotConfiguredError:
        return JSONResponse(status_code=500, content={"error": "Oracle API key not configured"})
    except OracleUnavailableError as exc:
        logger.error("Oracle API error: %s", exc)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch oracle data"})


@router.get("/oracle/feeds")
async def get_oracle_feeds(feed: OracleFeed = Depends(get_oracle_feed)):
    """当前价格快照"""
    return {pair: snapshot.to_dict() for pair, snapshot in feed.snapshots().items()}


@router.get("/tournament/countdown")
async def get_tournament_countdown():
    """距下一场锦标赛的倒计时"""
    return time_until_next_tournament()
