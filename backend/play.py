#!/usr/bin/env python3
"""
Oracle Arena 终端客户端

用法:
    python play.py
    python play.py --stake 0.2 --seed 42
"""
import argparse
import asyncio
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.formatted_text import HTML
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from arena.combat.errors import ArenaError
from arena.combat.models.action import ActionKind, ActionReport
from arena.combat.models.combatant import Combatant
from arena.combat.models.match_state import MatchPhase
from arena.combat.random_source import RandomSource
from arena.oracle.feed import OracleFeed
from arena.services.arena_service import ArenaService, MatchHandle
from arena.services.tournament import time_until_next_tournament


console = Console()


class ArenaClient:
    """终端对战客户端"""

    COMMANDS = {
        "/connect": "连接钱包",
        "/disconnect": "断开钱包（进行中的对局会被复位）",
        "/join": "加入对局 - /join [押注ETH]",
        "/attack": "普通攻击",
        "/defend": "防御（受 BTC 波动加成）",
        "/special": "特殊技能（生命值低于 50 时可用）",
        "/loot": "开启战利品箱（10 SUPRA）",
        "/prices": "刷新并查看预言机价格",
        "/status": "查看当前状态",
        "/log": "查看战斗日志",
        "/help": "显示帮助",
        "/quit": "退出",
    }

    def __init__(self, stake: float = 0.1, seed: Optional[int] = None, pace: float = 0.8):
        self.stake = stake
        self.feed = OracleFeed(random_source=RandomSource(seed))
        self.service = ArenaService(
            oracle_feed=self.feed,
            opponent_delay_seconds=pace,
            settlement_delay_seconds=pace,
            random_factory=lambda: RandomSource(seed),
        )
        self.handle: Optional[MatchHandle] = None
        self.running = False
        self.prompt_session = PromptSession(
            history=InMemoryHistory(),
            auto_suggest=AutoSuggestFromHistory(),
        )

    @property
    def match_id(self) -> str:
        return self.handle.match_id

    def _print_welcome(self):
        """打印欢迎信息"""
        console.clear()
        title = Text()
        title.append("═" * 50 + "\n", style="cyan")
        title.append("  Oracle Arena - 预言机对战\n", style="bold white")
        title.append(f"  对局: {self.match_id}\n", style="dim")
        title.append("═" * 50, style="cyan")
        console.print(Panel(title, border_style="cyan", padding=(0, 2)))
        console.print()

    def _print_help(self):
        """打印帮助信息"""
        table = Table(title="命令列表", border_style="dim", show_header=True)
        table.add_column("命令", style="cyan")
        table.add_column("说明", style="white")
        for cmd, desc in self.COMMANDS.items():
            table.add_row(cmd, desc)
        console.print(table)
        console.print()

    def _print_system(self, text: str, style: str = "dim"):
        console.print(f"[{style}]▸ {text}[/{style}]")

    def _print_error(self, text: str):
        console.print(f"[red]✗ {text}[/red]")

    def _print_report(self, report: ActionReport):
        color = "green" if report.actor.value == "player" else "magenta"
        console.print(f"[{color}]{report.message}[/{color}]")

    def _health_bar(self, combatant: Combatant) -> str:
        ratio = combatant.health / combatant.max_health
        color = "red" if ratio < 0.25 else "yellow" if ratio < 0.5 else "green"
        filled = int(ratio * 20)
        return f"[{color}]{'█' * filled}{'░' * (20 - filled)}[/{color}] {combatant.health}/{combatant.max_health}"

    def _print_status(self):
        state = self.service.get_state(self.match_id)
        wallet = self.handle.wallet

        table = Table(border_style="dim", show_header=True)
        table.add_column("单位", style="cyan")
        table.add_column("生命")
        table.add_column("攻击")
        table.add_column("防御")
        table.add_column("押注")
        for combatant in (state.player, state.opponent):
            table.add_row(
                combatant.name,
                self._health_bar(combatant),
                str(combatant.attack),
                str(combatant.defense),
                f"{combatant.stake} ETH",
            )
        console.print(table)

        parts = [f"[cyan]{state.phase.value}[/cyan]"]
        if state.phase == MatchPhase.IN_PROGRESS:
            parts.append(f"[yellow]回合: {state.turn.value}[/yellow]")
            parts.append(f"[yellow]{state.turn_deadline}s[/yellow]")
        if wallet.is_connected():
            parts.append(f"[green]{wallet.eth_balance:.3f} ETH[/green]")
            parts.append(f"[green]{wallet.supra_balance:.2f} SUPRA[/green]")
        else:
            parts.append("[dim]钱包未连接[/dim]")
        parts.append(f"[dim]锦标赛 {time_until_next_tournament()['display']}[/dim]")
        console.print(" │ ".join(parts))
        console.print()

    def _print_prices(self):
        table = Table(title="预言机价格", border_style="dim")
        table.add_column("交易对", style="cyan")
        table.add_column("价格")
        table.add_column("涨跌")
        table.add_column("来源", style="dim")
        for pair, snapshot in self.feed.snapshots().items():
            color = "green" if snapshot.percent_change >= 0 else "red"
            table.add_row(
                pair,
                f"{snapshot.price:.2f}",
                f"[{color}]{snapshot.percent_change:+.2f}%[/{color}]",
                snapshot.source,
            )
        console.print(table)

    def _print_log(self, limit: int = 15):
        for entry in self.service.get_state(self.match_id).get_log(limit):
            console.print(f"[dim]{entry.to_dict()['time']}[/dim] {entry.message}")

    async def start(self):
        """启动客户端"""
        self.handle = self.service.create_match()
        self._print_welcome()
        self._print_help()
        await self.feed.refresh()

        self.running = True
        try:
            await self._loop()
        finally:
            await self.service.shutdown()

    async def _loop(self):
        """主循环"""
        while self.running:
            try:
                user_input = await asyncio.get_event_loop().run_in_executor(
                    None,
                    lambda: self.prompt_session.prompt(HTML("<ansigreen>❯ </ansigreen>")),
                )
                user_input = user_input.strip()
                if not user_input:
                    continue
                await self._handle_command(user_input)
            except ArenaError as exc:
                self._print_error(exc.message)
            except ValueError as exc:
                self._print_error(f"参数错误: {exc}")
            except (KeyboardInterrupt, EOFError):
                console.print("\n[yellow]已退出[/yellow]")
                self.running = False

    async def _handle_command(self, cmd: str):
        parts = cmd.split(maxsplit=1)
        command = parts[0].lower()
        args = parts[1] if len(parts) > 1 else ""

        if command in ("/quit", "/q", "/exit"):
            self.running = False

        elif command == "/connect":
            wallet = await self.service.connect_wallet(self.match_id)
            self._print_system(f"钱包已连接: {wallet.address[:8]}...", style="green")

        elif command == "/disconnect":
            await self.service.disconnect_wallet(self.match_id)
            self._print_system("钱包已断开")

        elif command == "/join":
            stake = float(args) if args else self.stake
            with console.status("[cyan]寻找对手...[/cyan]", spinner="dots"):
                await self.service.join_battle(self.match_id, stake)
            self._print_system(f"对局开始，押注 {stake} ETH", style="green")
            self._print_status()

        elif command in ("/attack", "/defend", "/special"):
            await self._act(ActionKind(command[1:]))

        elif command == "/loot":
            with console.status("[cyan]请求随机数...[/cyan]", spinner="dots"):
                outcome = await self.service.open_loot_box(self.match_id)
            self._print_system(
                f"获得 {outcome.name}: {outcome.description} (nonce {outcome.nonce})",
                style="yellow",
            )

        elif command == "/prices":
            await self.feed.refresh()
            self._print_prices()

        elif command == "/status":
            self._print_status()

        elif command == "/log":
            self._print_log()

        elif command == "/help":
            self._print_help()

        else:
            self._print_error(f"未知命令: {command}，输入 /help 查看帮助")

    async def _act(self, kind: ActionKind):
        await self.feed.refresh()
        report = await self.service.submit_action(self.match_id, kind)
        self._print_report(report)

        if not report.match_ended:
            with console.status("[magenta]对手思考中...[/magenta]", spinner="dots"):
                await self.service.wait_for_pending(self.match_id)
            state = self.service.get_state(self.match_id)
            if state.battle_log:
                console.print(f"[magenta]{state.battle_log[-1].message}[/magenta]")
        else:
            await self.service.wait_for_pending(self.match_id)

        state = self.service.get_state(self.match_id)
        if state.winner is not None and state.phase == MatchPhase.IDLE:
            style = "bold green" if state.winner.value == "player" else "bold red"
            self._print_system(f"对局结束，胜者: {state.winner.value}，奖池 {state.payout:.2f} ETH", style=style)
        self._print_status()


async def main():
    parser = argparse.ArgumentParser(
        description="Oracle Arena 终端客户端",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例:
  python play.py                 # 默认押注 0.1 ETH
  python play.py --stake 0.5     # 指定默认押注
  python play.py --seed 42       # 可复现的随机序列
        """,
    )
    parser.add_argument("--stake", type=float, default=0.1, help="默认押注（ETH）")
    parser.add_argument("--seed", type=int, default=None, help="随机种子")
    parser.add_argument("--pace", type=float, default=0.8, help="对手出手/结算延迟（秒）")
    args = parser.parse_args()

    client = ArenaClient(stake=args.stake, seed=args.seed, pace=args.pace)
    await client.start()


if __name__ == "__main__":
    asyncio.run(main())
