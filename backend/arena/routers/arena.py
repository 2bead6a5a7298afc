"""
Oracle Arena 对战 API 路由
"""
import logging

from fastapi import APIRouter, Depends, HTTPException

from arena.combat.errors import (
    AlreadyInBattle,
    ArenaError,
    IneligibleAction,
    InsufficientBalance,
    InvalidStake,
    MatchNotFound,
    NotConnected,
    NotPlayerTurn,
)
from arena.dependencies import get_arena_service
from arena.models.arena import (
    ActionRequest,
    ActionResponse,
    JoinBattleRequest,
    MatchCreatedResponse,
    WalletResponse,
)
from arena.services.arena_service import ArenaService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/arena", tags=["Arena"])

_STATUS_BY_ERROR = {
    MatchNotFound: 404,
    NotConnected: 401,
    AlreadyInBattle: 409,
    NotPlayerTurn: 409,
    IneligibleAction: 422,
    InsufficientBalance: 402,
    InvalidStake: 400,
}


def _map_arena_error(exc: ArenaError) -> HTTPException:
    status_code = _STATUS_BY_ERROR.get(type(exc), 400)
    return HTTPException(status_code=status_code, detail=exc.to_dict())


@router.post("/matches")
async def create_match(service: ArenaService = Depends(get_arena_service)) -> MatchCreatedResponse:
    """创建对局"""
    handle = service.create_match()
    return MatchCreatedResponse(
        match_id=handle.match_id,
        state=handle.engine.get_state().to_dict(),
    )


@router.get("/matches/{match_id}")
async def get_match_state(match_id: str, service: ArenaService = Depends(get_arena_service)):
    """对局状态快照"""
    try:
        return service.get_state(match_id).to_dict()
    except ArenaError as exc:
        raise _map_arena_error(exc) from exc


@router.post("/matches/{match_id}/wallet/connect")
async def connect_wallet(
    match_id: str, service: ArenaService = Depends(get_arena_service)
) -> WalletResponse:
    """连接（模拟）钱包"""
    try:
        wallet = await service.connect_wallet(match_id)
    except ArenaError as exc:
        raise _map_arena_error(exc) from exc
    return WalletResponse(**wallet.to_dict())


@router.post("/matches/{match_id}/wallet/disconnect")
async def disconnect_wallet(
    match_id: str, service: ArenaService = Depends(get_arena_service)
) -> WalletResponse:
    """断开钱包（进行中的对局会被强制复位）"""
    try:
        wallet = await service.disconnect_wallet(match_id)
    except ArenaError as exc:
        raise _map_arena_error(exc) from exc
    return WalletResponse(**wallet.to_dict())


@router.post("/matches/{match_id}/join")
async def join_battle(
    match_id: str,
    payload: JoinBattleRequest,
    service: ArenaService = Depends(get_arena_service),
):
    """加入对局"""
    try:
        state = await service.join_battle(match_id, payload.stake)
    except ArenaError as exc:
        raise _map_arena_error(exc) from exc
    return state.to_dict()


@router.post("/matches/{match_id}/actions")
async def submit_action(
    match_id: str,
    payload: ActionRequest,
    service: ArenaService = Depends(get_arena_service),
) -> ActionResponse:
    """玩家行动；对手回合会在延迟后自动结算"""
    try:
        report = await service.submit_action(match_id, payload.kind)
        state = service.get_state(match_id)
    except ArenaError as exc:
        raise _map_arena_error(exc) from exc
    return ActionResponse(report=report.to_dict(), state=state.to_dict())


@router.post("/matches/{match_id}/tick")
async def tick_turn_timer(match_id: str, service: ArenaService = Depends(get_arena_service)):
    """回合倒计时走一秒"""
    try:
        event = await service.tick_turn_timer(match_id)
    except ArenaError as exc:
        raise _map_arena_error(exc) from exc
    return event.to_dict()


@router.post("/matches/{match_id}/loot")
async def open_loot_box(match_id: str, service: ArenaService = Depends(get_arena_service)):
    """开启战利品箱"""
    try:
        outcome = await service.open_loot_box(match_id)
        wallet = service.get_match(match_id).wallet
    except ArenaError as exc:
        raise _map_arena_error(exc) from exc
    return {"outcome": outcome.to_dict(), "wallet": wallet.to_dict()}


@router.get("/matches/{match_id}/log")
async def get_battle_log(
    match_id: str,
    limit: int = 100,
    service: ArenaService = Depends(get_arena_service),
):
    """战斗日志"""
    try:
        handle = service.get_match(match_id)
    except ArenaError as exc:
        raise _map_arena_error(exc) from exc
    entries = handle.engine.get_state().get_log(limit)
    return {"entries": [entry.to_dict() for entry in entries]}


@router.delete("/matches/{match_id}/log")
async def clear_battle_log(match_id: str, service: ArenaService = Depends(get_arena_service)):
    """清空战斗日志"""
    try:
        await service.clear_log(match_id)
    except ArenaError as exc:
        raise _map_arena_error(exc) from exc
    return {"cleared": True}


@router.delete("/matches/{match_id}")
async def delete_match(match_id: str, service: ArenaService = Depends(get_arena_service)):
    """结束并移除对局（取消待执行的调度）"""
    try:
        await service.remove_match(match_id)
    except ArenaError as exc:
        raise _map_arena_error(exc) from exc
    return {"match_id": match_id, "removed": True}
