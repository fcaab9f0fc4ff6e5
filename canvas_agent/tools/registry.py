"""工具注册表。

注册表在构造时校验整个目录，之后只读：

- id 唯一；
- endpoint 中每个 {name} 占位符都对应一个 required 参数。

所有会话共享同一个默认注册表实例。
"""

from functools import lru_cache
from typing import Dict, Iterable, List, Tuple

from canvas_agent.domain.exceptions import UnknownToolError
from .catalog import CANVAS_TOOLS
from .definitions import ToolDef, ToolDefinition


class ToolRegistry:
    def __init__(self, tools: Iterable[ToolDefinition]):
        ordered: Tuple[ToolDefinition, ...] = tuple(tools)
        by_id: Dict[str, ToolDefinition] = {}
        for tool in ordered:
            if tool.id in by_id:
                raise ValueError(f"Duplicate tool id: {tool.id}")
            required = {p.name for p in tool.parameters if p.required}
            for placeholder in tool.path_params():
                if placeholder not in required:
                    raise ValueError(
                        f"Tool {tool.id}: placeholder {{{placeholder}}} has no required parameter"
                    )
            by_id[tool.id] = tool
        self._tools = ordered
        self._by_id = by_id

    def list_tools(self) -> List[ToolDefinition]:
        """按目录声明顺序返回所有工具。"""

        return list(self._tools)

    def find_by_id(self, tool_id: str) -> ToolDefinition:
        tool = self._by_id.get(tool_id)
        if tool is None:
            raise UnknownToolError(tool_id)
        return tool

    def __contains__(self, tool_id: object) -> bool:
        return tool_id in self._by_id

    def __len__(self) -> int:
        return len(self._tools)

    def tool_defs(self) -> List[ToolDef]:
        """整个目录转成发给 LLM 的函数 schema 列表。"""

        return [tool.to_tool_def() for tool in self._tools]


@lru_cache(maxsize=1)
def default_registry() -> ToolRegistry:
    return ToolRegistry(CANVAS_TOOLS)
