"""领域层模型与协议。

包含：
- models: DisplayMessage / ProviderMessage 等会话数据模型。
- conversation: 会话状态 ConversationState 与 TranscriptStore 抽象。
- exceptions: 业务异常类型定义。
"""
