"""调度控制器（Dispatch Controller）。

负责单次发送的完整生命周期：输入校验、乐观追加用户消息、调用回复来源，
以及在完成后追加恰好一条回复（成功或失败），同时对称地维护上下文历史。

状态只有两个：idle 与 sending。sending 期间的提交会被静默忽略，
保证同一会话同一时刻最多只有一个进行中的回复请求。clear() 会提升代数
（generation），之后到达的旧回复一律视为过期并丢弃。
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Literal, Optional, Sequence
from uuid import uuid4

from chat_core.config.settings import settings
from chat_core.domain.conversation import TranscriptStore
from chat_core.domain.exceptions import BusinessError
from chat_core.domain.models import DisplayMessage, ProviderMessage, local_time_label
from chat_core.infrastructure.logging.logger import logger
from chat_core.providers.base import ReplySource


DispatchState = Literal["idle", "sending"]


@dataclass
class DispatchConfig:
    bot_name: str
    default_user_name: str
    failure_text: str

    @classmethod
    def from_settings(cls, cfg=settings) -> "DispatchConfig":
        return cls(
            bot_name=cfg.bot_name,
            default_user_name=cfg.default_user_name,
            failure_text=cfg.failure_text,
        )


class DispatchController:
    def __init__(
        self,
        store: TranscriptStore,
        reply_source: ReplySource,
        config: Optional[DispatchConfig] = None,
        clock: Callable[[], str] = local_time_label,
    ):
        self._store = store
        self._reply_source = reply_source
        self._config = config or DispatchConfig.from_settings()
        self._clock = clock
        self._state: DispatchState = "idle"
        self._generation = 0
        self._display_name = self._config.default_user_name
        self._draft = ""
        self._pending: Optional[asyncio.Task] = None

    @property
    def state(self) -> DispatchState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state == "sending"

    @property
    def display_name(self) -> str:
        return self._display_name

    @property
    def user_name(self) -> str:
        """实际使用的作者名：名字栏为空时回退到默认用户名。"""

        return self._display_name.strip() or self._config.default_user_name

    @property
    def draft(self) -> str:
        return self._draft

    @property
    def pending(self) -> Optional[asyncio.Task]:
        """当前代数下进行中的回复任务（没有则为 None）。"""

        return self._pending

    def set_display_name(self, name: str) -> None:
        self._display_name = name

    def set_draft(self, text: str) -> None:
        self._draft = text

    def submit(self, text: Optional[str] = None) -> Optional[asyncio.Task]:
        """提交一条消息；text 为 None 时使用当前草稿。

        必须在运行中的事件循环内调用。输入为空白或已有请求进行中时
        不做任何改动并返回 None；否则同步追加用户消息，并返回负责
        等待回复的任务。
        """

        raw = self._draft if text is None else text
        trimmed = raw.strip()
        if not trimmed:
            return None
        if self._state == "sending":
            logger.debug("Submit ignored while a reply is pending")
            return None

        loop = asyncio.get_running_loop()
        generation = self._generation
        author = self.user_name
        # 上下文取自本轮之前的历史，本轮的 user 回合在完成后才写入
        history = self._store.snapshot().history
        user_msg = DisplayMessage(
            id=self._store.next_id(),
            author=author,
            text=trimmed,
            time=self._clock(),
        )
        log_ctx: Dict[str, Any] = {
            "trace_id": f"tr-{uuid4().hex}",
            "generation": generation,
            "reply_source": getattr(self._reply_source, "name", "unknown"),
        }

        self._state = "sending"
        self._store.set_busy(True)
        self._store.append(user_msg)
        self._draft = ""
        self._log(
            logging.INFO,
            "Stored user message",
            log_ctx,
            message_id=user_msg.id,
            history_turns=len(history),
        )

        self._pending = loop.create_task(self._dispatch(trimmed, history, author, generation, log_ctx))
        return self._pending

    async def send(self, text: Optional[str] = None) -> bool:
        """提交并等待本轮结束，返回是否真正发出了请求。"""

        task = self.submit(text)
        if task is None:
            return False
        await task
        return True

    def clear(self) -> None:
        """清空会话，回到只含欢迎语的初始状态。

        进行中的请求不会被取消，但其结果会因代数不匹配而被丢弃。
        """

        self._generation += 1
        self._state = "idle"
        self._pending = None
        self._store.reset()
        self._log(logging.INFO, "Conversation cleared", {"generation": self._generation})

    async def _dispatch(
        self,
        text: str,
        history: Sequence[ProviderMessage],
        user_name: str,
        generation: int,
        log_ctx: Dict[str, Any],
    ) -> None:
        self._log(logging.INFO, "Calling reply source", log_ctx)
        try:
            reply = await self._reply_source.produce_reply(text, history, user_name)
        except asyncio.CancelledError:
            if self._is_current(generation):
                self._finish()
            raise
        except BusinessError as e:
            if self._discard_if_stale(generation, log_ctx):
                return
            self._log(logging.WARNING, "Reply failed", log_ctx, **e.log_fields())
            self._apply_failure()
            return
        except Exception:
            if self._discard_if_stale(generation, log_ctx):
                return
            logger.exception("Unexpected reply source error", extra={"extra": log_ctx})
            self._apply_failure()
            return

        if self._discard_if_stale(generation, log_ctx):
            return
        self._apply_success(text, reply)
        self._log(logging.INFO, "Stored reply", log_ctx, reply_length=len(reply))

    def _apply_success(self, text: str, reply: str) -> None:
        self._store.append(self._bot_message(reply))
        self._store.append_provider_turn(ProviderMessage.from_text("user", text))
        self._store.append_provider_turn(ProviderMessage.from_text("assistant", reply))
        self._finish()

    def _apply_failure(self) -> None:
        # 失败的回合不写入上下文历史
        self._store.append(self._bot_message(self._config.failure_text))
        self._finish()

    def _bot_message(self, text: str) -> DisplayMessage:
        return DisplayMessage(
            id=self._store.next_id(),
            author=self._config.bot_name,
            text=text,
            time=self._clock(),
        )

    def _finish(self) -> None:
        self._state = "idle"
        self._pending = None
        self._store.set_busy(False)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _discard_if_stale(self, generation: int, log_ctx: Dict[str, Any]) -> bool:
        if self._is_current(generation):
            return False
        self._log(logging.INFO, "Discarded stale reply", log_ctx, current_generation=self._generation)
        return True

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
