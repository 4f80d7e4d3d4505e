"""Chat Core 顶层包。

该包提供单会话聊天客户端的核心实现，
包括配置加载、会话数据模型、回复来源适配、
单飞（single-flight）调度控制与进程内会话存储。
"""

from chat_core.api.service import ChatSession, get_default_session

__all__ = ["ChatSession", "get_default_session"]
