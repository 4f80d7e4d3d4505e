"""回复来源（Reply Source）抽象接口。

调度控制器不直接依赖具体实现，而是依赖此协议：

- SimulatedReplySource：本地延迟后回显输入。
- RemoteReplySource：向远程推理服务发起一次 HTTP 请求。

两者可以互换，控制器代码无需修改。
"""

from typing import Protocol, Sequence

from chat_core.domain.models import ProviderMessage


class ReplySource(Protocol):
    """回复来源协议。

    实现者需要提供：
    - name: 来源名称，用于日志。
    - produce_reply(text, history, user_name): 生成一条回复文本；
      失败时抛出 domain.exceptions 中的 BusinessError 子类。
    """

    name: str

    async def produce_reply(
        self,
        text: str,
        history: Sequence[ProviderMessage],
        user_name: str,
    ) -> str:
        ...
