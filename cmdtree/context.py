import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Callable

logger = logging.getLogger(__name__)


@dataclass
class Actor:
    """
    消息发送者
    """
    id: str
    name: str = "未知用户"
    role_ids: List[str] = field(default_factory=list)  # 在当前群组中拥有的身份组ID


@dataclass
class MessageContext:
    """
    消息上下文，封装一次调用所需的全部信息

    权限和身份组名称由聊天平台层预先计算好，命令树只负责读取。
    需要懒加载时可以传入 permission_resolver / role_resolver。
    """
    actor: Actor
    text: str = ""                  # 原始消息文本
    is_group: bool = False          # 是否群聊（否则为私聊）
    permissions: Dict[str, bool] = field(default_factory=dict)  # 发送者在当前频道的权限
    roles: Dict[str, str] = field(default_factory=dict)         # 身份组ID -> 名称

    # 懒加载
    permission_resolver: Optional[Callable[[Actor], Dict[str, bool]]] = field(default=None, repr=False)
    role_resolver: Optional[Callable[[str], Optional[str]]] = field(default=None, repr=False)
    _resolved_permissions: Optional[Dict[str, bool]] = field(default=None, init=False, repr=False)

    def permissions_of(self, actor: Actor) -> Dict[str, bool]:
        """获取发送者在当前频道的权限"""
        if self.permission_resolver is None:
            return self.permissions
        if self._resolved_permissions is None:
            self._resolved_permissions = dict(self.permission_resolver(actor) or {})
        return self._resolved_permissions

    def roles_of(self, actor: Actor) -> List[str]:
        """获取发送者的身份组ID列表 (仅群聊有效)"""
        if not self.is_group:
            return []
        return list(actor.role_ids)

    def role_name(self, role_id: str) -> Optional[str]:
        """将身份组ID解析为名称，未知的ID返回 None"""
        if role_id in self.roles:
            return self.roles[role_id]
        if self.role_resolver is not None:
            name = self.role_resolver(role_id)
            if name is None:
                logger.debug(f"无法解析身份组 {role_id} 的名称")
            return name
        return None

