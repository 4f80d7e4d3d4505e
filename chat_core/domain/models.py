"""统一的会话数据模型。

本模块定义了聊天客户端内部共享的两类消息结构：

- DisplayMessage: 展示给用户的一条聊天记录（作者、文本、时间）。
- ProviderMessage: 远程回复服务所需的上下文格式（role + content 片段）。

两者是并行但不对称的：欢迎语和失败提示只出现在 DisplayMessage 序列中，
ProviderMessage 序列只记录已完成的 user/assistant 往返。
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, NamedTuple, Tuple


# 远程服务上下文中的角色（与 chat_history 字段的 role 对应）
ProviderRole = Literal["user", "assistant"]


def local_time_label() -> str:
    """当前本地时间的展示字符串（时:分:秒）。"""

    return datetime.now().strftime("%H:%M:%S")


@dataclass(frozen=True)
class DisplayMessage:
    """一条展示用消息，追加后不可修改。

    - id: 会话内单调递增的编号，由 TranscriptStore 分配。
    - author: 作者显示名（用户名或机器人名）。
    - text: 去除首尾空白后的非空文本。
    - time: 人类可读的时间字符串，格式由展示层决定。
    """

    id: int
    author: str
    text: str
    time: str


@dataclass(frozen=True)
class ContentPart:
    """ProviderMessage 中的一个文本片段。"""

    text: str


@dataclass(frozen=True)
class ProviderMessage:
    """远程回复服务的一条上下文消息。"""

    role: ProviderRole
    content: Tuple[ContentPart, ...]

    @classmethod
    def from_text(cls, role: ProviderRole, text: str) -> "ProviderMessage":
        return cls(role=role, content=(ContentPart(text=text),))

    @property
    def text(self) -> str:
        """拼接所有片段的文本，便于日志与测试断言。"""

        return "".join(part.text for part in self.content)


class TranscriptSnapshot(NamedTuple):
    """某一时刻的只读会话视图，可直接解包为 (messages, history, busy)。"""

    messages: Tuple[DisplayMessage, ...]
    history: Tuple[ProviderMessage, ...]
    busy: bool
