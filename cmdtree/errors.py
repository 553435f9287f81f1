# -*- coding: utf-8 -*-

"""
命令树配置错误
"""


class CommandError(Exception):
    """命令系统异常基类"""


class ConfigurationError(CommandError):
    """注册/配置阶段的错误，说明搭建命令树的代码有问题，应立即中止"""


class InvalidLabel(ConfigurationError, ValueError):
    """标签为空或包含空白字符"""

    def __init__(self, label: str):
        super().__init__(f"无效的命令标签: {label!r}，标签不能为空且不能包含空白字符")
        self.label = label


class DuplicateLabel(ConfigurationError, ValueError):
    """同一父节点下已存在该标签"""

    def __init__(self, label: str):
        super().__init__(f"子命令 {label!r} 已注册")
        self.label = label


class DuplicateAlias(ConfigurationError, ValueError):
    """别名已被占用"""

    def __init__(self, alias: str):
        super().__init__(f"别名 {alias!r} 已注册")
        self.alias = alias


class UnknownLabel(ConfigurationError, LookupError):
    """目标子命令不存在"""

    def __init__(self, label: str):
        super().__init__(f"没有名为 {label!r} 的子命令")
        self.label = label


class LabelNotFound(UnknownLabel):
    """注销时既不是别名也不是子命令标签"""


class InvalidGenerator(ConfigurationError, TypeError):
    """无法识别的响应生成器"""


class UnknownHandler(ConfigurationError, LookupError):
    """配置文件引用了未提供的处理函数"""

    def __init__(self, name: str):
        super().__init__(f"未知的处理函数: {name!r}")
        self.name = name
