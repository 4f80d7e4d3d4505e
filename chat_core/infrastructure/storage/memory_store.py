from typing import Callable, List, Optional

from chat_core.config.settings import settings
from chat_core.domain.conversation import (
    SEED_MESSAGE_ID,
    ConversationState,
    SnapshotListener,
    TranscriptStore,
)
from chat_core.domain.models import DisplayMessage, ProviderMessage, TranscriptSnapshot, local_time_label
from chat_core.infrastructure.logging.logger import logger


class InMemoryTranscriptStore(TranscriptStore):
    """进程内的会话存储，会话只存活于本次运行期间。

    每次变更后都会把最新快照推送给订阅者，展示层只做投影，不持有状态。
    """

    def __init__(
        self,
        bot_name: Optional[str] = None,
        welcome_text: Optional[str] = None,
        clock: Callable[[], str] = local_time_label,
    ):
        self._bot_name = bot_name or settings.bot_name
        self._welcome_text = welcome_text or settings.welcome_text
        self._clock = clock
        self._listeners: List[SnapshotListener] = []
        self._state = self._seeded_state()

    @property
    def bot_name(self) -> str:
        return self._bot_name

    def append(self, message: DisplayMessage) -> None:
        self._state.messages.append(message)
        self._notify()

    def append_provider_turn(self, turn: ProviderMessage) -> None:
        self._state.history.append(turn)
        self._notify()

    def next_id(self) -> int:
        mid = self._state.next_id
        self._state.next_id += 1
        return mid

    def set_busy(self, busy: bool) -> None:
        if self._state.busy == busy:
            return
        self._state.busy = busy
        self._notify()

    def reset(self) -> None:
        self._state = self._seeded_state()
        self._notify()

    def snapshot(self) -> TranscriptSnapshot:
        return TranscriptSnapshot(
            messages=tuple(self._state.messages),
            history=tuple(self._state.history),
            busy=self._state.busy,
        )

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """注册快照监听器，返回取消订阅的函数。"""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _seeded_state(self) -> ConversationState:
        seed = DisplayMessage(
            id=SEED_MESSAGE_ID,
            author=self._bot_name,
            text=self._welcome_text,
            time=self._clock(),
        )
        return ConversationState(messages=[seed])

    def _notify(self) -> None:
        # 监听器只做投影，单个监听器出错不能打断会话状态的推进
        snap = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception(
                    "Snapshot listener failed",
                    extra={"extra": {"listener": getattr(listener, "__qualname__", repr(listener))}},
                )
