import re
import random
from typing import Optional, List, Dict, Callable

# 前向引用避免循环导入
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from .context import MessageContext

_DICE = re.compile(r"^(\d*)d(\d+)$", re.IGNORECASE)
MAX_DICE = 100


def handle_echo(ctx: 'MessageContext', args: List[str]) -> Optional[str]:
    """
    原样复述参数

    匹配: echo [内容]
    """
    if not args:
        return None
    return " ".join(args)


def handle_whoami(ctx: 'MessageContext', args: List[str]) -> Optional[str]:
    """显示调用者信息"""
    scope = "群聊" if ctx.is_group else "私聊"
    return f"{ctx.actor.name} ({ctx.actor.id}) - {scope}"


def handle_roll(ctx: 'MessageContext', args: List[str]) -> Optional[str]:
    """
    掷骰子

    匹配: roll [NdM]，默认 1d6
    """
    expr = args[0] if args else "d6"
    match = _DICE.match(expr)
    if not match:
        return f"❌ 无法识别的骰子: {expr} (例如: 2d6)"

    count = int(match.group(1) or 1)
    sides = int(match.group(2))
    if not 1 <= count <= MAX_DICE or sides < 2:
        return f"❌ 骰子数量需在 1-{MAX_DICE} 之间，面数至少为 2"

    rolls = [random.randint(1, sides) for _ in range(count)]
    if count == 1:
        return f"🎲 {expr} → {rolls[0]}"
    return f"🎲 {expr} → {rolls} = {sum(rolls)}"


def handle_choose(ctx: 'MessageContext', args: List[str]) -> Optional[str]:
    """从参数中随机选一个"""
    if not args:
        return "❌ 请提供至少一个选项"
    return random.choice(args)


BUILTIN_HANDLERS: Dict[str, Callable[['MessageContext', List[str]], Optional[str]]] = {
    "echo": handle_echo,
    "whoami": handle_whoami,
    "roll": handle_roll,
    "choose": handle_choose,
}
