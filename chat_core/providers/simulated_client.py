"""本地模拟回复来源。

固定延迟后回显用户输入，不使用上下文，也不会失败。
"""

import asyncio
from typing import Optional, Sequence

from chat_core.config.settings import settings
from chat_core.domain.models import ProviderMessage


ECHO_TEMPLATE = '受け取りました: "{text}"'


class SimulatedReplySource:
    name = "simulated"

    def __init__(self, delay: Optional[float] = None):
        self._delay = settings.simulated_delay if delay is None else delay

    async def produce_reply(
        self,
        text: str,
        history: Sequence[ProviderMessage],
        user_name: str,
    ) -> str:
        await asyncio.sleep(self._delay)
        return ECHO_TEMPLATE.format(text=text)
