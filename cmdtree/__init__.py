# -*- coding: utf-8 -*-

"""
分层聊天命令分发系统

此包包含了命令树的所有组件:
- node: 命令树节点（注册、权限检查、分发）
- generators: 响应生成器
- models: 命令选项与调用限制
- context: 消息上下文
- router: 命令路由器
- config: 配置文件与声明式命令树
- events: 事件总线
- handlers: 内置处理函数
"""

from .context import Actor, MessageContext
from .errors import (
    CommandError, ConfigurationError, InvalidLabel, DuplicateLabel, DuplicateAlias,
    UnknownLabel, LabelNotFound, InvalidGenerator, UnknownHandler
)
from .generators import ResponseGenerator, FixedText, Computed, WeightedSet, make_generator
from .models import CommandOptions, Requirements
from .node import DispatcherNode
from .router import CommandRouter, DispatchResult, tokenize
from .events import EventBus, EventType, Event
from .config import DispatcherConfig, CommandConfig, register_commands

__all__ = [
    'Actor', 'MessageContext',
    'CommandError', 'ConfigurationError', 'InvalidLabel', 'DuplicateLabel', 'DuplicateAlias',
    'UnknownLabel', 'LabelNotFound', 'InvalidGenerator', 'UnknownHandler',
    'ResponseGenerator', 'FixedText', 'Computed', 'WeightedSet', 'make_generator',
    'CommandOptions', 'Requirements',
    'DispatcherNode',
    'CommandRouter', 'DispatchResult', 'tokenize',
    'EventBus', 'EventType', 'Event',
    'DispatcherConfig', 'CommandConfig', 'register_commands',
]
__version__ = "1.0.0"
