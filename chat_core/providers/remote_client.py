"""远程推理服务适配器。

本模块负责：

1. 把用户输入、既往上下文和用户名组装成约定的请求 JSON。
2. 调用 HTTP 接口并把网络/状态码异常包装为业务异常。
3. 校验响应体 {"response": str} 并返回回复文本。

请求格式：
    POST <endpoint>
    {"message": str, "chat_history": [ProviderMessage...], "user_name": str}
"""

import httpx
from typing import Any, Dict, Optional, Sequence

from chat_core.config.settings import settings
from chat_core.domain.exceptions import (
    API_ERROR,
    BAD_RESPONSE,
    MISSING_ENDPOINT,
    ApiError,
    NetworkError,
    RateLimitError,
    ValidationError,
)
from chat_core.domain.models import ProviderMessage


class RemoteReplySource:
    """远程回复来源实现，每次回复只发起一次请求，不做重试。"""

    name = "remote"

    def __init__(self, cfg=settings, endpoint: Optional[str] = None):
        # Settings 里包含 endpoint、超时等配置
        self._settings = cfg
        self._endpoint = endpoint or getattr(cfg, "remote_endpoint", None)

    async def produce_reply(
        self,
        text: str,
        history: Sequence[ProviderMessage],
        user_name: str,
    ) -> str:
        if not self._endpoint:
            raise ValidationError(code=MISSING_ENDPOINT, message="remote_endpoint not set")
        payload = self._build_payload(text, history, user_name)
        try:
            async with httpx.AsyncClient(timeout=self._settings.http_timeout, trust_env=False) as client:
                resp = await client.post(
                    self._endpoint,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.RequestError as e:
            # DNS 失败、连接超时、读超时等
            raise NetworkError(str(e), endpoint=self._endpoint)
        if resp.status_code == 429:
            raise RateLimitError(endpoint=self._endpoint)
        if not resp.is_success:
            raise ApiError(code=API_ERROR, message=resp.text, http_status=resp.status_code)
        return self._parse_response(resp)

    def _build_payload(
        self,
        text: str,
        history: Sequence[ProviderMessage],
        user_name: str,
    ) -> Dict[str, Any]:
        return {
            "message": text,
            "chat_history": [self._message_to_payload(m) for m in history],
            "user_name": user_name,
        }

    @staticmethod
    def _message_to_payload(message: ProviderMessage) -> Dict[str, Any]:
        return {
            "role": message.role,
            "content": [{"text": part.text} for part in message.content],
        }

    @staticmethod
    def _parse_response(resp: httpx.Response) -> str:
        """解析 {"response": str}，格式不符或回复为空白时统一视为 ApiError。"""

        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError(code=BAD_RESPONSE, message=f"invalid JSON body: {e}", http_status=resp.status_code)
        reply = data.get("response") if isinstance(data, dict) else None
        if not isinstance(reply, str):
            raise ApiError(code=BAD_RESPONSE, message="missing 'response' field", http_status=resp.status_code)
        if not reply.strip():
            raise ApiError(code=BAD_RESPONSE, message="blank 'response' field", http_status=resp.status_code)
        return reply
