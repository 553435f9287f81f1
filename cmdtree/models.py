import re
from dataclasses import dataclass, field, fields, replace
from typing import Dict, List, Set, Iterable, Any, Mapping

from .errors import InvalidLabel

_WHITESPACE = re.compile(r"\s")


def validate_label(label: str) -> str:
    """检查标签是否合法，合法则原样返回"""
    if not isinstance(label, str) or not label or _WHITESPACE.search(label):
        raise InvalidLabel(label)
    return label


@dataclass
class Requirements:
    """
    命令的调用限制，所有字段为空时表示不限制
    """
    user_ids: Set[str] = field(default_factory=set)        # 允许调用的用户ID
    permissions: Dict[str, bool] = field(default_factory=dict)  # 权限名 -> 要求的取值
    role_ids: Set[str] = field(default_factory=set)        # 允许调用的身份组ID
    role_names: Set[str] = field(default_factory=set)      # 允许调用的身份组名称

    def __post_init__(self):
        # 允许传入列表/元组/None，统一转换为集合
        self.user_ids = _as_str_set(self.user_ids)
        self.role_ids = _as_str_set(self.role_ids)
        self.role_names = _as_str_set(self.role_names)
        if self.permissions is None:
            self.permissions = {}
        if not isinstance(self.permissions, Mapping):
            raise TypeError(f"permissions 必须是映射类型，而不是 {type(self.permissions)}")
        for name, value in self.permissions.items():
            if not isinstance(value, bool):
                raise TypeError(f"权限 {name} 的要求值必须是布尔值，而不是 {value!r}")
        self.permissions = dict(self.permissions)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Requirements':
        """从配置字典创建，兼容 userIDs/roleIDs/roleNames 写法"""
        data = dict(data or {})
        aliases = {"userIDs": "user_ids", "roleIDs": "role_ids", "roleNames": "role_names"}
        for old, new in aliases.items():
            if old in data:
                if new in data:
                    raise ValueError(f"requirements 字段 {old} 与 {new} 不能同时设置")
                data[new] = data.pop(old)
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"未知的 requirements 字段: {', '.join(sorted(unknown))}")
        return cls(**data)

    @property
    def is_empty(self) -> bool:
        return not (self.user_ids or self.permissions or self.role_ids or self.role_names)


def _as_str_set(values: Iterable[Any]) -> Set[str]:
    if values is None:
        return set()
    if isinstance(values, str):
        return {values}
    return {str(value) for value in values}


@dataclass
class CommandOptions:
    """
    注册子命令时的选项，每个节点的选项互相独立，不从父节点继承
    """
    aliases: List[str] = field(default_factory=list)
    case_insensitive: bool = False    # 标签是否大小写不敏感
    delete_command: bool = False      # 执行后是否删除用户的原消息
    guild_only: bool = False          # 是否禁止在私聊中使用
    description: str = "No description"
    full_description: str = "No full description"
    usage: str = ""
    requirements: Requirements = field(default_factory=Requirements)

    def __post_init__(self):
        if isinstance(self.aliases, str):
            self.aliases = [self.aliases]
        self.aliases = list(self.aliases or [])
        for alias in self.aliases:
            validate_label(alias)
        if self.requirements is None:
            self.requirements = Requirements()
        elif isinstance(self.requirements, Mapping):
            self.requirements = Requirements.from_dict(self.requirements)
        elif not isinstance(self.requirements, Requirements):
            raise TypeError(f"requirements 必须是 Requirements 或字典，而不是 {type(self.requirements)}")

    @classmethod
    def build(cls, options: Any = None, **overrides) -> 'CommandOptions':
        """
        从 CommandOptions、字典或关键字参数构造选项
        :param options: 已有的选项对象或字典
        :param overrides: 覆盖字段
        """
        if options is None:
            data: Dict[str, Any] = {}
        elif isinstance(options, CommandOptions):
            data = {f.name: getattr(options, f.name) for f in fields(cls)}
            # 复制一份，避免多个节点共享同一个列表
            data["aliases"] = list(options.aliases)
        elif isinstance(options, Mapping):
            data = dict(options)
        else:
            raise TypeError(f"options 必须是 CommandOptions 或字典，而不是 {type(options)}")
        data.update(overrides)
        if isinstance(data.get("requirements"), Requirements):
            data["requirements"] = replace(data["requirements"])
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise TypeError(f"未知的命令选项: {', '.join(sorted(unknown))}")
        return cls(**data)
