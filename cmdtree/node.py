# -*- coding: utf-8 -*-

"""
命令树节点

每个节点既是一个可执行的命令，也是子命令的容器。整棵树由同一种节点
组成：父节点按标签持有子节点，并维护一张别名表（别名 -> 子命令标签）。

    用户输入: "!role add 管理员"
                  ↓
    路由器去掉前缀，按空白切分 → ["role", "add", "管理员"]
                  ↓
    root.process(...) → 命中 "role" → 命中 "add"
                  ↓
    "add" 的生成器以 ["管理员"] 为参数执行

注册/注销通过节点自身的锁串行化；分发过程只读，不加锁。
"""

import logging
import threading
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .errors import DuplicateAlias, DuplicateLabel, LabelNotFound, UnknownLabel
from .generators import ResponseGenerator, make_generator
from .models import CommandOptions, Requirements, validate_label

# 前向引用避免循环导入
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from .context import Actor, MessageContext

# 获取模块级 logger
logger = logging.getLogger(__name__)


class DispatcherNode:
    """
    命令节点，负责注册子命令、权限检查和递归分发
    """

    def __init__(self, label: str, generator: Any = None, options: Any = None, **overrides):
        opts = CommandOptions.build(options, **overrides)

        self.label = label
        self.generator: ResponseGenerator = make_generator(generator)
        self.case_insensitive = opts.case_insensitive
        self.delete_command = opts.delete_command
        self.guild_only = opts.guild_only
        self.description = opts.description
        self.full_description = opts.full_description
        self.usage = opts.usage
        self.requirements: Requirements = opts.requirements

        self._aliases: List[str] = list(opts.aliases)
        self._children: Dict[str, 'DispatcherNode'] = {}
        self._child_aliases: Dict[str, str] = {}
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return f"<DispatcherNode {self.label!r} children={len(self._children)}>"

    @property
    def aliases(self) -> List[str]:
        """本节点在父节点下的别名（副本，修改请用 register_alias/unregister_child）"""
        return list(self._aliases)

    @property
    def children(self) -> Mapping[str, 'DispatcherNode']:
        return MappingProxyType(self._children)

    @property
    def child_aliases(self) -> Mapping[str, str]:
        return MappingProxyType(self._child_aliases)

    # ------------------------------------------------------------------
    # 注册
    # ------------------------------------------------------------------

    def register_child(self, label: str, generator: Any = None, options: Any = None,
                       **overrides) -> 'DispatcherNode':
        """
        注册子命令
        :param label: 子命令标签，不能包含空白字符
        :param generator: 字符串、字符串/函数列表、函数 func(ctx, args) 或 None
        :param options: CommandOptions 或字典
        :return: 新建的子节点，可继续注册孙命令
        """
        validate_label(label)
        opts = CommandOptions.build(options, **overrides)
        generator = make_generator(generator)

        with self._lock:
            if label in self._children or label in self._child_aliases:
                raise DuplicateLabel(label)
            seen = {label}
            for alias in opts.aliases:
                if alias in seen or alias in self._children or alias in self._child_aliases:
                    raise DuplicateAlias(alias)
                seen.add(alias)

            child = DispatcherNode(label, generator, opts)
            self._children[label] = child
            for alias in child._aliases:
                self._child_aliases[alias] = label

        logger.debug(f"注册子命令 '{label}' 到 '{self.label}'，别名: {child._aliases or '无'}")
        return child

    def register_alias(self, alias: str, label: str) -> None:
        """
        为已注册的子命令添加别名
        :param alias: 别名
        :param label: 子命令的原始标签
        """
        validate_label(alias)
        with self._lock:
            child = self._children.get(label)
            if child is None:
                raise UnknownLabel(label)
            if alias in self._child_aliases or alias in self._children:
                raise DuplicateAlias(alias)
            self._child_aliases[alias] = label
            child._aliases.append(alias)

        logger.debug(f"为 '{self.label} {label}' 添加别名 '{alias}'")

    def unregister_child(self, label: str) -> 'DispatcherNode':
        """
        注销子命令或别名

        传入别名时只删除该别名，子命令保留；传入标签时删除子命令及其全部别名。
        :return: 受影响的子节点
        """
        with self._lock:
            canonical = self._child_aliases.get(label)
            if canonical is not None:
                child = self._children[canonical]
                child._aliases.remove(label)
                del self._child_aliases[label]
                logger.debug(f"注销 '{self.label} {canonical}' 的别名 '{label}'")
                return child

            child = self._children.pop(label, None)
            if child is None:
                raise LabelNotFound(label)
            for alias in child._aliases:
                self._child_aliases.pop(alias, None)

        logger.debug(f"注销子命令 '{self.label} {label}'")
        return child

    # ------------------------------------------------------------------
    # 查找
    # ------------------------------------------------------------------

    def find_child(self, token: str) -> Optional['DispatcherNode']:
        """
        按 别名 → 标签 → 大小写不敏感标签 的顺序查找子命令
        """
        label = self._child_aliases.get(token)
        if label is not None:
            return self._children.get(label)

        child = self._children.get(token)
        if child is not None:
            return child

        # 大小写不敏感匹配，只有子命令自己开启了 case_insensitive 才生效
        lowered = token.lower()
        child = self._children.get(lowered)
        if child is not None and child.case_insensitive:
            return child
        for key, candidate in list(self._children.items()):
            if candidate.case_insensitive and key.lower() == lowered:
                return candidate
        return None

    def resolve_path(self, args: Sequence[str]) -> Tuple[List['DispatcherNode'], List[str]]:
        """
        按与 process 相同的规则沿参数向下匹配，不检查权限也不执行
        :return: (经过的节点列表，首个为自身；剩余参数)
        """
        path = [self]
        remaining = list(args)
        while remaining:
            child = path[-1].find_child(remaining[0])
            if child is None:
                break
            path.append(child)
            remaining = remaining[1:]
        return path, remaining

    def resolve(self, args: Sequence[str]) -> Tuple['DispatcherNode', List[str]]:
        path, remaining = self.resolve_path(args)
        return path[-1], remaining

    def walk(self, prefix: str = "") -> Iterator[Tuple[str, 'DispatcherNode']]:
        """深度优先遍历所有子孙节点，产出 (完整路径, 节点)"""
        for label, child in list(self._children.items()):
            path = f"{prefix} {label}".strip()
            yield path, child
            yield from child.walk(path)

    # ------------------------------------------------------------------
    # 权限
    # ------------------------------------------------------------------

    def check_permission(self, actor: 'Actor', ctx: 'MessageContext') -> bool:
        """
        检查发送者能否调用本命令

        顺序不能调整：用户白名单 → 私聊限制 → 权限（全部匹配即放行）
        → 身份组ID → 身份组名称。
        """
        req = self.requirements

        if req.user_ids and actor.id not in req.user_ids:
            return False

        # 私聊中没有身份组和频道权限可查，设置了用户白名单的命令也只能在群里用
        if not ctx.is_group:
            return not self.guild_only and not req.user_ids

        if req.permissions:
            granted = ctx.permissions_of(actor)
            if all(bool(granted.get(name, False)) == required for name, required in req.permissions.items()):
                return True

        role_ids = ctx.roles_of(actor)
        if req.role_ids:
            if req.role_ids.intersection(role_ids):
                return True
            if not req.role_names:
                return False

        if req.role_names:
            names = {ctx.role_name(role_id) for role_id in role_ids}
            names.discard(None)
            return bool(req.role_names.intersection(names))

        # 配置了权限但不匹配，且没有身份组规则
        if req.permissions:
            return False

        return True

    # ------------------------------------------------------------------
    # 分发
    # ------------------------------------------------------------------

    def execute(self, ctx: 'MessageContext', args: List[str]) -> Optional[str]:
        """执行本节点的生成器，生成器抛出的异常原样向上传递"""
        return self.generator(ctx, args)

    def process(self, args: Sequence[str], actor: 'Actor', ctx: 'MessageContext') -> Optional[str]:
        """
        分发一条已切分的命令
        :param args: 去掉本节点标签后的参数
        :return: 回复内容；无权限或命令选择不回复时为 None
        """
        if not self.check_permission(actor, ctx):
            logger.debug(f"用户 {actor.id} 无权调用 '{self.label}'")
            return None

        if not args:
            return self.execute(ctx, [])

        child = self.find_child(args[0])
        if child is not None:
            return child.process(args[1:], actor, ctx)

        # 未匹配的参数交给当前命令自己处理
        return self.execute(ctx, list(args))
