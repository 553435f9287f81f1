import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .context import MessageContext
from .events import EventBus, EventType
from .node import DispatcherNode

# 获取模块级 logger
logger = logging.getLogger(__name__)


def tokenize(text: str) -> List[str]:
    """按空白切分消息"""
    return text.split()


@dataclass
class DispatchResult:
    """
    一次分发的结果，供聊天平台层决定如何回复
    """
    node: DispatcherNode              # 最终匹配到的节点
    args: List[str] = field(default_factory=list)  # 传给生成器的参数
    response: Optional[str] = None    # 回复内容，None 表示不回复
    allowed: bool = True              # 是否通过权限检查
    error: Optional[BaseException] = None  # 生成器抛出的异常

    @property
    def delete_command(self) -> bool:
        """是否需要删除用户的原消息"""
        return self.node.delete_command and self.allowed and self.error is None

    @property
    def has_response(self) -> bool:
        return bool(self.response)


class CommandRouter:
    """
    命令路由器，负责识别前缀、切分参数并交给命令树分发
    """
    def __init__(self, root: DispatcherNode, prefixes: Sequence[str] = ("!",),
                 event_bus: Optional[EventBus] = None, case_insensitive_prefix: bool = False):
        if isinstance(prefixes, str):
            prefixes = [prefixes]
        if not prefixes:
            raise ValueError("至少需要一个命令前缀")
        # 长前缀优先，避免 "!" 抢先匹配 "!!"
        self.prefixes = sorted(prefixes, key=len, reverse=True)
        self.root = root
        self.event_bus = event_bus or EventBus()
        self.case_insensitive_prefix = case_insensitive_prefix

        commands = list(root.walk())
        logger.info(f"命令路由器初始化成功，共加载 {len(commands)} 个命令，前缀: {', '.join(self.prefixes)}")
        for i, (path, node) in enumerate(commands[:10]):  # 只输出前10个
            logger.info(f"{i+1}. {path} - {node.description}")
        if len(commands) > 10:
            logger.info(f"... 共 {len(commands)} 个命令")

    def strip_prefix(self, text: str) -> Optional[str]:
        """去掉命令前缀，没有前缀时返回 None"""
        text = text.lstrip()
        for prefix in self.prefixes:
            head = text[:len(prefix)]
            if head == prefix or (self.case_insensitive_prefix and head.lower() == prefix.lower()):
                return text[len(prefix):]
        return None

    def parse(self, text: str) -> Optional[List[str]]:
        body = self.strip_prefix(text)
        if body is None:
            return None
        tokens = tokenize(body)
        return tokens or None

    def _find_denied(self, path: List[DispatcherNode], ctx: MessageContext) -> Optional[DispatcherNode]:
        for node in path:
            if not node.check_permission(ctx.actor, ctx):
                return node
        return None

    def dispatch(self, ctx: MessageContext) -> Optional[DispatchResult]:
        """
        根据消息上下文分发命令
        :param ctx: 消息上下文对象
        :return: 分发结果；消息不是命令时返回 None
        """
        tokens = self.parse(ctx.text)
        if tokens is None:
            return None

        logger.debug(f"开始路由消息: '{ctx.text}', 来自: {ctx.actor.name}, 群聊: {ctx.is_group}")

        path, remaining = self.root.resolve_path(tokens)
        node = path[-1]
        command_path = " ".join(n.label for n in path[1:]) or self.root.label
        self.event_bus.emit(EventType.COMMAND_MATCHED, {"command": command_path, "args": remaining},
                            source=ctx.actor.id)

        # 仅群聊命令在私聊中直接拒绝，不进入 process
        if node.guild_only and not ctx.is_group:
            logger.debug(f"命令 '{command_path}' 仅支持群聊，忽略私聊调用")
            return self._denied(node, remaining, command_path, ctx)

        denied = self._find_denied(path, ctx)
        if denied is not None:
            logger.info(f"用户 {ctx.actor.id} 无权调用 '{command_path}' (拒绝于 '{denied.label}')")
            return self._denied(node, remaining, command_path, ctx)

        result = DispatchResult(node=node, args=remaining)
        try:
            result.response = self.root.process(tokens, ctx.actor, ctx) or None
        except Exception as e:
            logger.error(f"执行命令 '{command_path}' 时出错: {e}", exc_info=True)
            result.error = e
            self.event_bus.emit(EventType.ERROR_OCCURRED, {"command": command_path, "error": str(e)},
                                source=ctx.actor.id)
            return result

        if result.response is None:
            logger.debug(f"命令 '{command_path}' 没有返回内容")
        else:
            logger.info(f"命令 '{command_path}' 处理成功")
        self.event_bus.emit(EventType.COMMAND_EXECUTED,
                            {"command": command_path, "args": remaining, "responded": result.has_response},
                            source=ctx.actor.id)
        return result

    def _denied(self, node: DispatcherNode, args: List[str], command_path: str,
                ctx: MessageContext) -> DispatchResult:
        self.event_bus.emit(EventType.PERMISSION_DENIED, {"command": command_path}, source=ctx.actor.id)
        return DispatchResult(node=node, args=args, allowed=False)
