"""Canvas Agent 顶层包。

该包提供 Canvas 学习助手的工具调用编排核心，
包括配置加载、领域模型、Provider 适配、Canvas 工具目录与执行、
LangGraph 单轮状态机，以及 Canvas 助手与作业工作区助手两种对话 Agent。
"""

from canvas_agent.agents.canvas_assistant import CanvasAssistant
from canvas_agent.agents.workspace_assistant import WorkspaceAssistant

__all__ = ["CanvasAssistant", "WorkspaceAssistant"]
