"""领域层模型与协议。

包含：
- models: 统一的 ChatMessage / ChatRequest / ChatResult / TurnResult 模型。
- context: Canvas 助手与工作区助手的会话上下文。
- exceptions: 业务异常类型定义。
"""
