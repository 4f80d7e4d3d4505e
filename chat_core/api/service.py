"""对外 API 服务模块。

为展示层提供统一的会话入口：

- 输入意图：submit / set_display_name / clear。
- 输出状态：有序的展示消息与 busy 标志（snapshot / subscribe）。
"""

import asyncio
from typing import Callable, Optional

from chat_core.config.settings import settings
from chat_core.dispatch.controller import DispatchConfig, DispatchController
from chat_core.domain.conversation import SnapshotListener, TranscriptStore
from chat_core.domain.models import TranscriptSnapshot
from chat_core.infrastructure.logging.logger import logger
from chat_core.infrastructure.storage.memory_store import InMemoryTranscriptStore
from chat_core.providers import create_reply_source
from chat_core.providers.base import ReplySource


class ChatSession:
    """一次会话的组合根：TranscriptStore + DispatchController。"""

    def __init__(
        self,
        reply_source: Optional[ReplySource] = None,
        store: Optional[TranscriptStore] = None,
        cfg=settings,
    ):
        self.store = store or InMemoryTranscriptStore(bot_name=cfg.bot_name, welcome_text=cfg.welcome_text)
        self.reply_source = reply_source or create_reply_source()
        self.controller = DispatchController(
            store=self.store,
            reply_source=self.reply_source,
            config=DispatchConfig.from_settings(cfg),
        )
        logger.info(
            "Chat session started",
            extra={"extra": {"reply_source": getattr(self.reply_source, "name", "unknown")}},
        )

    @property
    def display_name(self) -> str:
        return self.controller.display_name

    @property
    def user_name(self) -> str:
        return self.controller.user_name

    def submit(self, text: Optional[str] = None) -> Optional[asyncio.Task]:
        return self.controller.submit(text)

    async def send(self, text: str) -> bool:
        return await self.controller.send(text)

    def set_display_name(self, name: str) -> None:
        self.controller.set_display_name(name)

    def set_draft(self, text: str) -> None:
        self.controller.set_draft(text)

    def clear(self) -> None:
        self.controller.clear()

    def snapshot(self) -> TranscriptSnapshot:
        return self.store.snapshot()

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        return self.store.subscribe(listener)


_session: Optional[ChatSession] = None


def get_default_session() -> ChatSession:
    """获取默认会话实例（单例）。"""
    global _session
    if _session is None:
        _session = ChatSession()
    return _session
