"""系统提示词加载工具。

按 Agent 类型和语言(locale) 从 prompts/<locale> 目录读取对应的
system prompt 文本，用于构造 ChatMessage(role="system")。
"""

from pathlib import Path


PROMPTS_DIR = Path(__file__).resolve().parent

_PROMPT_FILES = {
    "canvas-assistant": "canvas_assistant_system.md",
    "workspace-assistant": "workspace_assistant_system.md",
}


def load_system_prompt(agent_type: str, locale: str = "en") -> str:
    """根据 Agent 类型和语言加载系统提示词文本。

    agent_type 取值为 "canvas-assistant" 或 "workspace-assistant"。
    """

    try:
        fname = _PROMPT_FILES[agent_type]
    except KeyError:
        raise ValueError(f"Unknown agent type: {agent_type!r}") from None
    return (PROMPTS_DIR / locale / fname).read_text(encoding="utf-8").strip()
