# -*- coding: utf-8 -*-

"""
事件系统
"""

from enum import Enum
from typing import Any, Dict, List, Callable, Optional
from dataclasses import dataclass, field
import logging
from datetime import datetime


class EventType(Enum):
    """事件类型"""
    # 命令事件
    COMMAND_MATCHED = "command_matched"
    COMMAND_EXECUTED = "command_executed"
    PERMISSION_DENIED = "permission_denied"

    # 系统事件
    ERROR_OCCURRED = "error_occurred"


@dataclass
class Event:
    """事件数据"""
    type: EventType
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
            "source": self.source
        }


class EventBus:
    """同步事件总线"""

    def __init__(self):
        self._listeners: Dict[EventType, List[Callable]] = {}
        self.logger = logging.getLogger(__name__)

    def subscribe(self, event_type: EventType, callback: Callable) -> None:
        """订阅事件"""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        self._listeners[event_type].append(callback)
        self.logger.debug(f"订阅事件 {event_type.value}: {getattr(callback, '__name__', callback)}")

    def unsubscribe(self, event_type: EventType, callback: Callable) -> bool:
        """取消订阅，返回是否找到该监听器"""
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)
            return True
        return False

    def emit(self, event_type: EventType, data: Dict[str, Any] = None, source: str = None) -> Event:
        """发布事件"""
        event = Event(type=event_type, data=data or {}, source=source)
        for callback in list(self._listeners.get(event.type, [])):
            try:
                callback(event)
            except Exception as e:
                # 监听器出错不影响命令分发
                self.logger.error(f"事件处理器出错 {event.type.value}: {e}", exc_info=True)
        return event

    def clear(self) -> None:
        """清空所有监听器"""
        self._listeners.clear()
