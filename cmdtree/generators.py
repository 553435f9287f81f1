# -*- coding: utf-8 -*-

"""
响应生成器

节点命中后由生成器产生回复内容：
- FixedText: 固定文本
- Computed: 处理函数，签名为 func(ctx, args)
- WeightedSet: 每次执行时从成员中随机选取一个
"""

import random
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence, Any

from .errors import InvalidGenerator

# 前向引用避免循环导入
from typing import TYPE_CHECKING
if TYPE_CHECKING:
    from .context import MessageContext

Handler = Callable[['MessageContext', List[str]], Optional[str]]


class ResponseGenerator(ABC):
    """生成器基类"""

    @abstractmethod
    def __call__(self, ctx: 'MessageContext', args: List[str]) -> Optional[str]:
        pass


class FixedText(ResponseGenerator):
    def __init__(self, text: str):
        if not isinstance(text, str):
            raise InvalidGenerator(f"FixedText 需要字符串，而不是 {type(text)}")
        self.text = text

    def __call__(self, ctx: 'MessageContext', args: List[str]) -> Optional[str]:
        return self.text

    def __repr__(self) -> str:
        return f"FixedText({self.text!r})"


class Computed(ResponseGenerator):
    def __init__(self, func: Handler):
        if not callable(func):
            raise InvalidGenerator(f"Computed 需要可调用对象，而不是 {type(func)}")
        self.func = func

    def __call__(self, ctx: 'MessageContext', args: List[str]) -> Optional[str]:
        return self.func(ctx, args)

    def __repr__(self) -> str:
        return f"Computed({getattr(self.func, '__name__', self.func)!r})"


class WeightedSet(ResponseGenerator):
    """
    随机回复集合，在执行时（而不是注册时）等概率抽取一个成员
    """

    def __init__(self, members: Sequence[Any], rng: Optional[random.Random] = None):
        if not isinstance(members, (list, tuple)):
            raise InvalidGenerator(f"WeightedSet 需要序列，而不是 {type(members)}")
        if not members:
            raise InvalidGenerator("WeightedSet 至少需要一个成员")
        converted = []
        for index, member in enumerate(members):
            if isinstance(member, str):
                converted.append(FixedText(member))
            elif isinstance(member, ResponseGenerator):
                converted.append(member)
            elif callable(member):
                converted.append(Computed(member))
            else:
                raise InvalidGenerator(f"无效的响应生成器 (索引 {index}): {member!r}")
        self.members: List[ResponseGenerator] = converted
        self.rng = rng or random.Random()

    def choose(self) -> ResponseGenerator:
        return self.rng.choice(self.members)

    def __call__(self, ctx: 'MessageContext', args: List[str]) -> Optional[str]:
        return self.choose()(ctx, args)

    def __repr__(self) -> str:
        return f"WeightedSet({self.members!r})"


def _no_response(ctx: 'MessageContext', args: List[str]) -> None:
    return None


def make_generator(value: Any) -> ResponseGenerator:
    """
    将注册时传入的值转换为生成器，无法识别的类型在注册时直接报错
    :param value: 字符串、列表、可调用对象、生成器实例或 None
    """
    if isinstance(value, ResponseGenerator):
        return value
    if value is None:
        return Computed(_no_response)
    if isinstance(value, str):
        return FixedText(value)
    if isinstance(value, (list, tuple)):
        return WeightedSet(value)
    if callable(value):
        return Computed(value)
    raise InvalidGenerator(f"无效的响应生成器: {type(value)}")
