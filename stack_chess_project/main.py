#!/usr/bin/env python3
"""
叠子暗棋主入口文件

提供统一的命令行接口：交互对局、随机对局模拟和规则信息。
"""

import sys
import random
from typing import Optional, List

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from stack_chess_project import __version__, __description__
from stack_chess_project.src.stacking_banqi_engine.config import (
    ConfigManager, EngineConfig, GameConfig, SystemConfig
)
from stack_chess_project.src.stacking_banqi_engine.game_interface import GameSession, SessionStatus
from stack_chess_project.src.stacking_banqi_engine.rules_engine import (
    PieceType, PlayerAction, CaptureResolution, GameState, RuleEngine, BoardValidator,
    PIECE_RANKS, STACK_LIMITS, BOARD_ROWS, BOARD_COLS, init_game
)
from stack_chess_project.src.stacking_banqi_engine.rules_engine.pieces import INITIAL_PIECE_COUNTS
from stack_chess_project.src.stacking_banqi_engine.utils import setup_logger, BanqiEngineError
from stack_chess_project.src.stacking_banqi_engine.utils.logger import ROOT_LOGGER_NAME

console = Console()

RESOLUTION_WORDS = {
    'hand': CaptureResolution.TO_HAND,
    'stack': CaptureResolution.STACK_IF_POSSIBLE,
}

HELP_TEXT = (
    "flip r c | move r1 c1 r2 c2 [hand|stack] | deploy TYPE N r c | "
    "retrieve r c id,id | pass | hint | undo | quit"
)


def print_banner():
    """打印项目横幅"""
    banner_text = Text()
    banner_text.append("Stack Chess\n", style="bold blue")
    banner_text.append(f"版本: {__version__}\n", style="green")
    banner_text.append(__description__, style="white")

    panel = Panel(
        banner_text,
        title="叠子暗棋",
        title_align="center",
        border_style="blue",
        padding=(1, 2)
    )
    console.print(panel)


def configure_logging(system_config: SystemConfig, debug: bool = False):
    """按系统配置设置引擎日志，控制台日志只在调试模式下输出"""
    level = 'DEBUG' if debug else system_config.log_level
    for name in (ROOT_LOGGER_NAME, 'stack_chess_project'):
        setup_logger(
            name=name,
            level=level,
            log_file=system_config.log_file or None,
            log_dir=system_config.log_dir,
            max_size=system_config.log_max_size,
            backup_count=system_config.log_backup_count,
            console_output=debug
        )


def parse_command(text: str, player_id: int) -> Optional[PlayerAction]:
    """
    解析交互命令为玩家动作

    Args:
        text: 命令文本
        player_id: 当前玩家索引

    Returns:
        PlayerAction，非动作命令返回None

    Raises:
        click.BadParameter: 命令格式错误
    """
    parts = text.strip().split()
    if not parts:
        raise click.BadParameter("空命令")

    command, args = parts[0].lower(), parts[1:]

    def ints(values: List[str], n: int) -> List[int]:
        if len(values) < n:
            raise click.BadParameter(f"{command} 需要{n}个坐标参数")
        try:
            return [int(v) for v in values[:n]]
        except ValueError:
            raise click.BadParameter(f"坐标必须是整数: {values[:n]}")

    if command == 'flip':
        r, c = ints(args, 2)
        return PlayerAction.flip(player_id, (r, c))

    if command == 'move':
        r1, c1, r2, c2 = ints(args, 4)
        resolution = None
        if len(args) > 4:
            resolution = RESOLUTION_WORDS.get(args[4].lower())
            if resolution is None:
                raise click.BadParameter(f"未知的结算方式: {args[4]}")
        return PlayerAction.move(player_id, (r1, c1), (r2, c2), resolution)

    if command == 'deploy':
        if len(args) < 4:
            raise click.BadParameter("deploy 需要 TYPE N r c")
        try:
            piece_type = PieceType(args[0].upper())
        except ValueError:
            raise click.BadParameter(f"未知的棋子类型: {args[0]}")
        count, r, c = ints(args[1:], 3)
        return PlayerAction.deploy(player_id, piece_type, count, (r, c))

    if command == 'retrieve':
        r, c = ints(args, 2)
        if len(args) < 3:
            raise click.BadParameter("retrieve 需要棋子ID列表")
        piece_ids = [piece_id for piece_id in args[2].split(',') if piece_id]
        return PlayerAction.retrieve(player_id, (r, c), piece_ids)

    if command == 'pass':
        return PlayerAction.pass_turn(player_id)

    if command in ('hint', 'undo', 'quit', 'help'):
        return None

    raise click.BadParameter(f"未知命令: {command}")


def show_state(state: GameState):
    """显示棋盘和栈顶棋子ID"""
    console.print(Panel(state.to_visual_string(), title="棋盘", border_style="blue"))


def play_random_game(engine: RuleEngine, validator: BoardValidator, rng: random.Random,
                     max_turns: int) -> dict:
    """
    随机合法动作对局

    Returns:
        dict: 对局统计
    """
    state = init_game(rng=rng)
    rejected = 0
    violations: List[str] = []
    steps = 0

    while not state.is_game_over and state.turn_count < max_turns:
        actions = engine.get_legal_actions(state, state.active_player_index)
        if not actions:
            break
        action = rng.choice(actions)
        new_state = engine.apply_action(state, action)
        steps += 1
        if new_state.error is not None:
            rejected += 1
            violations.append(f"合法动作被拒绝: {action.to_notation()} {new_state.error}")
            break
        state = new_state
        is_valid, errors = validator.full_validation(state)
        if not is_valid:
            violations.extend(errors)
            break

    return {
        'turns': state.turn_count,
        'steps': steps,
        'winner': state.winner,
        'game_over': state.is_game_over,
        'rejected': rejected,
        'violations': violations,
    }


@click.group()
@click.version_option(version=__version__, prog_name="Stack Chess")
@click.option('--debug', is_flag=True, help='启用调试模式')
@click.option('--config', type=click.Path(exists=True), help='配置文件路径')
@click.pass_context
def cli(ctx: click.Context, debug: bool, config: Optional[str]):
    """叠子暗棋 - 规则引擎、交互对局与随机模拟"""
    configs = {'engine': EngineConfig(), 'game': GameConfig(), 'system': SystemConfig()}
    if config:
        configs = ConfigManager.load_combined(config)
        console.print(f"[green]使用配置文件: {config}[/green]")

    if debug:
        console.print("[yellow]调试模式已启用[/yellow]")

    configure_logging(configs['system'], debug)
    ctx.obj = configs


@cli.command()
@click.option('--seed', type=int, default=None, help='洗牌随机种子')
@click.pass_obj
def play(configs: dict, seed: Optional[int]):
    """双人交互对局"""
    game_config = configs['game']
    if seed is not None:
        game_config = GameConfig(
            seed=seed,
            first_player=game_config.first_player,
            max_turns=game_config.max_turns,
            record_history=game_config.record_history,
            allow_undo=game_config.allow_undo
        )

    session = GameSession(config=game_config, engine=RuleEngine(configs['engine']))
    print_banner()
    console.print(f"[dim]{HELP_TEXT}[/dim]")

    while session.status == SessionStatus.PLAYING:
        state = session.state
        show_state(state)
        text = console.input(f"[bold]玩家{state.active_player_index}> [/bold]")

        try:
            action = parse_command(text, state.active_player_index)
        except click.BadParameter as e:
            console.print(f"[red]{e.message}[/red]")
            continue

        command = text.strip().split()[0].lower()
        if action is None:
            if command == 'quit':
                console.print("[yellow]对局结束[/yellow]")
                return
            if command == 'hint':
                for hint in session.hints():
                    console.print(f"  {hint.to_notation()}")
            elif command == 'undo':
                if not session.undo():
                    console.print("[red]无法悔棋[/red]")
            else:
                console.print(f"[dim]{HELP_TEXT}[/dim]")
            continue

        ok, error = session.submit(action)
        if not ok:
            console.print(f"[red]动作被拒绝: {error}[/red]")

    show_state(session.state)
    console.print(Panel(f"结果: {session.result.value}", title="游戏结束", border_style="green"))


@cli.command()
@click.option('--games', type=int, default=10, help='模拟对局数')
@click.option('--seed', type=int, default=None, help='随机种子')
@click.option('--max-turns', type=int, default=500, help='每局最大回合数')
@click.pass_obj
def simulate(configs: dict, games: int, seed: Optional[int], max_turns: int):
    """随机合法动作模拟对局并检查棋局不变量"""
    engine = RuleEngine(configs['engine'])
    validator = BoardValidator()
    rng = random.Random(seed)

    table = Table(title="模拟结果")
    table.add_column("对局", justify="right")
    table.add_column("回合", justify="right")
    table.add_column("胜者")
    table.add_column("问题", justify="right")

    failures = 0
    for index in range(games):
        stats = play_random_game(engine, validator, rng, max_turns)
        winner = "-" if stats['winner'] is None else f"玩家{stats['winner']}"
        problems = len(stats['violations'])
        if problems:
            failures += 1
            for message in stats['violations']:
                console.print(f"[red]第{index + 1}局: {message}[/red]")
        table.add_row(str(index + 1), str(stats['turns']), winner, str(problems))

    console.print(table)
    if failures:
        console.print(f"[red]{failures}局出现不一致[/red]")
        sys.exit(1)
    console.print("[green]所有对局均通过棋局验证[/green]")


@cli.command()
def info():
    """显示规则信息"""
    print_banner()

    table = Table(title=f"棋子 ({BOARD_ROWS}x{BOARD_COLS}棋盘)")
    table.add_column("类型")
    table.add_column("等级", justify="right")
    table.add_column("叠子上限", justify="right")
    table.add_column("每方数量", justify="right")
    for piece_type in PieceType:
        table.add_row(
            piece_type.value,
            str(PIECE_RANKS[piece_type]),
            str(STACK_LIMITS[piece_type]),
            str(INITIAL_PIECE_COUNTS[piece_type])
        )
    console.print(table)


def main():
    """主入口函数"""
    try:
        cli()
    except KeyboardInterrupt:
        console.print("\n[yellow]程序被用户中断[/yellow]")
        sys.exit(0)
    except BanqiEngineError as e:
        console.print(f"[red]发生错误: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
