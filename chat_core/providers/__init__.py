"""回复来源集成层。

该包下的模块负责：
- 定义回复来源抽象接口 (base)。
- 提供本地模拟实现 (simulated_client) 与远程服务实现 (remote_client)。
"""

from typing import Literal, Optional

from chat_core.config.settings import settings
from chat_core.providers.base import ReplySource
from chat_core.providers.remote_client import RemoteReplySource
from chat_core.providers.simulated_client import SimulatedReplySource


ReplySourceName = Literal["simulated", "remote"]


def create_reply_source(name: Optional[ReplySourceName] = None) -> ReplySource:
    """根据名称创建回复来源实例，默认取配置中的 reply_source（不区分大小写）。"""

    source_name = (name or getattr(settings, "reply_source", "simulated")).lower()
    if source_name == "remote":
        return RemoteReplySource(settings)
    if source_name == "simulated":
        return SimulatedReplySource(getattr(settings, "simulated_delay", None))
    raise KeyError(f"Unknown reply source: {source_name!r}")
