# -*- coding: utf-8 -*-

"""
配置管理
"""

from typing import Dict, List, Any, Optional, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
import yaml
import logging

from .errors import ConfigurationError, UnknownHandler
from .handlers import BUILTIN_HANDLERS
from .models import CommandOptions, Requirements
from .node import DispatcherNode

logger = logging.getLogger(__name__)


@dataclass
class CommandConfig:
    """单个命令的配置"""
    label: str
    response: Optional[str] = None          # 固定回复
    responses: List[str] = field(default_factory=list)  # 随机回复
    handler: Optional[str] = None           # 处理函数名
    aliases: List[str] = field(default_factory=list)
    case_insensitive: bool = False
    delete_command: bool = False
    guild_only: bool = False
    owner_only: bool = False                # 仅机器人所有者可用
    description: str = "No description"
    full_description: str = "No full description"
    usage: str = ""
    requirements: Dict[str, Any] = field(default_factory=dict)
    subcommands: Dict[str, 'CommandConfig'] = field(default_factory=dict)

    def __post_init__(self):
        if isinstance(self.aliases, str):
            self.aliases = [self.aliases]
        if isinstance(self.responses, str):
            self.responses = [self.responses]
        sources = [name for name in ("response", "responses", "handler") if getattr(self, name)]
        if len(sources) > 1:
            raise ValueError(f"命令 {self.label} 只能设置 response/responses/handler 中的一个，而不是 {sources}")

    @classmethod
    def from_dict(cls, label: str, data: Optional[Mapping[str, Any]]) -> 'CommandConfig':
        """解析命令配置，字符串/列表可直接作为回复的简写"""
        if data is None:
            data = {}
        elif isinstance(data, str):
            data = {"response": data}
        elif isinstance(data, list):
            data = {"responses": data}
        elif not isinstance(data, Mapping):
            raise ValueError(f"命令 {label} 的配置格式无效: {data!r}")

        data = dict(data)
        subcommands = {
            str(name): cls.from_dict(str(name), sub)
            for name, sub in (data.pop("subcommands", None) or {}).items()
        }
        try:
            return cls(label=label, subcommands=subcommands, **data)
        except TypeError as e:
            raise ValueError(f"命令 {label} 的配置无效: {e}") from e

    def to_options(self, owner_ids: Iterable[str] = ()) -> CommandOptions:
        requirements = Requirements.from_dict(self.requirements)
        if self.owner_only:
            owner_ids = set(owner_ids)
            if not owner_ids:
                raise ConfigurationError(f"命令 {self.label} 设置了 owner_only，但没有配置 owner_ids")
            requirements.user_ids.update(owner_ids)
        return CommandOptions(
            aliases=list(self.aliases),
            case_insensitive=self.case_insensitive,
            delete_command=self.delete_command,
            guild_only=self.guild_only,
            description=self.description,
            full_description=self.full_description,
            usage=self.usage,
            requirements=requirements,
        )


@dataclass
class DispatcherConfig:
    """机器人命令配置"""
    bot_name: str = "智能助手"
    prefixes: List[str] = field(default_factory=lambda: ["!"])
    owner_ids: List[str] = field(default_factory=list)
    log_level: str = "INFO"
    commands: Dict[str, CommandConfig] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'DispatcherConfig':
        data = data or {}
        prefixes = data.get('prefixes', ["!"])
        if isinstance(prefixes, str):
            prefixes = [prefixes]
        commands = {
            str(label): CommandConfig.from_dict(str(label), config)
            for label, config in (data.get('commands') or {}).items()
        }
        return cls(
            bot_name=data.get('bot_name', cls.bot_name),
            prefixes=list(prefixes),
            owner_ids=[str(owner) for owner in data.get('owner_ids') or []],
            log_level=data.get('log_level', cls.log_level),
            commands=commands,
        )

    @classmethod
    def from_file(cls, config_path: str) -> 'DispatcherConfig':
        """从文件加载配置"""
        path = Path(config_path)
        if not path.exists():
            logger.warning(f"配置文件 {config_path} 不存在，使用默认配置")
            return cls()

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"加载配置文件失败: {e}")
            return cls()

        # 命令配置错误属于编程错误，直接抛出
        return cls.from_dict(data)

    def build_tree(self, handlers: Optional[Mapping[str, Callable]] = None,
                   root: Optional[DispatcherNode] = None) -> DispatcherNode:
        """根据配置构建命令树"""
        if root is None:
            root = DispatcherNode(self.bot_name)
        register_commands(root, self.commands, handlers, self.owner_ids)
        return root


def register_commands(root: DispatcherNode, commands: Mapping[str, CommandConfig],
                      handlers: Optional[Mapping[str, Callable]] = None,
                      owner_ids: Iterable[str] = ()) -> List[DispatcherNode]:
    """
    将命令配置注册到节点下（递归注册子命令）
    :param handlers: 处理函数名 -> 函数，默认使用内置处理函数
    :param owner_ids: owner_only 命令允许的用户ID
    :return: 新注册的直接子节点
    """
    handlers = dict(BUILTIN_HANDLERS) if handlers is None else handlers
    registered = []
    for label, config in commands.items():
        if config.handler:
            if config.handler not in handlers:
                raise UnknownHandler(config.handler)
            generator = handlers[config.handler]
        elif config.responses:
            generator = list(config.responses)
        else:
            generator = config.response

        child = root.register_child(label, generator, config.to_options(owner_ids))
        register_commands(child, config.subcommands, handlers, owner_ids)
        registered.append(child)

    if registered:
        logger.info(f"'{root.label}' 下注册了 {len(registered)} 个命令")
    return registered
