"""工具数据结构定义。

这些 dataclass 描述了“工具调用”的 schema，既用于：
- 将可用函数列表暴露给 LLM（ToolDef / ToolParam）。
- 描述 Canvas REST 目录中的每个接口（ToolDefinition / ParameterSpec）。
- 在编排层保存模型触发的函数调用与执行结果（ToolCall / BoundRequest / ToolResult）。
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

from canvas_agent.domain.exceptions import ExecutionError


HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]
ParamType = Literal["number", "string", "boolean", "array"]

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


@dataclass
class ToolParam:
    """单个函数参数的定义（面向 LLM 的 JSON Schema）。"""

    name: str
    description: str
    required: bool
    schema: Dict[str, Any]


@dataclass
class ToolDef:
    """一个可供 LLM 调用的函数定义。"""

    name: str
    description: str
    params: Dict[str, ToolParam]


@dataclass
class ToolCall:
    """模型发起的一次函数调用请求（arguments 已做 JSON 解码）。"""

    id: str
    name: str
    arguments: Dict[str, Any]


@dataclass(frozen=True)
class ParameterSpec:
    """Canvas 接口的一个参数。

    type 为语义类型：number / string / boolean / array（字符串数组）。
    """

    name: str
    type: ParamType
    required: bool
    description: str

    def json_schema(self) -> Dict[str, Any]:
        if self.type == "array":
            return {"type": "array", "items": {"type": "string"}}
        return {"type": self.type}


@dataclass(frozen=True)
class ToolDefinition:
    """Canvas REST 目录中的一个接口，进程启动时定义，之后不可变。"""

    id: str
    name: str
    description: str
    endpoint: str
    method: HttpMethod
    parameters: Tuple[ParameterSpec, ...] = ()
    examples: Tuple[str, ...] = ()

    def path_params(self) -> List[str]:
        """endpoint 模板中出现的 {name} 占位符，按出现顺序。"""

        path = self.endpoint.split("?", 1)[0]
        return _PLACEHOLDER_RE.findall(path)

    def parameter(self, name: str) -> Optional[ParameterSpec]:
        for spec in self.parameters:
            if spec.name == name:
                return spec
        return None

    def to_tool_def(self) -> ToolDef:
        """转成发给 LLM 的函数 schema，函数名即工具 id。"""

        description = f"{self.name}: {self.description}."
        if self.examples:
            description += f" Example use cases: {', '.join(self.examples)}"
        return ToolDef(
            name=self.id,
            description=description,
            params={
                spec.name: ToolParam(
                    name=spec.name,
                    description=spec.description,
                    required=spec.required,
                    schema=spec.json_schema(),
                )
                for spec in self.parameters
            },
        )


@dataclass
class BoundRequest:
    """参数绑定完成后的 HTTP 请求（不含认证头，可安全写日志）。"""

    method: HttpMethod
    url: str
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class ToolResult:
    """Canvas 调用结果：成功时 data 为解析后的 JSON，失败时 error 非空。"""

    ok: bool
    status: Optional[int] = None
    data: Any = None
    error: Optional[ExecutionError] = None
