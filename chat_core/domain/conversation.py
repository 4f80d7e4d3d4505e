from dataclasses import dataclass, field
from typing import Callable, List, Protocol

from .models import DisplayMessage, ProviderMessage, TranscriptSnapshot


# 种子欢迎语固定占用 1 号，首个用户消息从 2 号开始
SEED_MESSAGE_ID = 1

SnapshotListener = Callable[[TranscriptSnapshot], None]


@dataclass
class ConversationState:
    messages: List[DisplayMessage] = field(default_factory=list)
    history: List[ProviderMessage] = field(default_factory=list)
    next_id: int = SEED_MESSAGE_ID + 1
    busy: bool = False


class TranscriptStore(Protocol):
    def append(self, message: DisplayMessage) -> None:
        ...

    def append_provider_turn(self, turn: ProviderMessage) -> None:
        ...

    def next_id(self) -> int:
        ...

    def set_busy(self, busy: bool) -> None:
        ...

    def reset(self) -> None:
        ...

    def snapshot(self) -> TranscriptSnapshot:
        ...

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        ...
