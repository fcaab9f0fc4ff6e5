"""参数绑定与请求构造。

把 LLM 给出的函数参数（未经校验的 JSON）变成一个确定的 HTTP 请求：

1. decode_arguments: 按工具的 ParameterSpec 做类型解码，丢弃未声明的参数，
   必填参数缺失或非法时抛出 MissingRequiredParameterError（此时尚未发起任何网络请求）。
2. bind_request: 替换 endpoint 中的 {name} 占位符；GET 请求把剩余参数拼成查询串，
   数组参数按元素顺序输出多个 name[]=value。
"""

import math
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

from canvas_agent.domain.exceptions import MissingRequiredParameterError
from canvas_agent.infrastructure.logging.logger import logger
from .definitions import BoundRequest, ParameterSpec, ToolDefinition


# 与浏览器 encodeURIComponent 保持一致的保留字符
_URI_SAFE = "!~*'()"

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "Content-Type": "application/json",
}


class _Malformed(Exception):
    pass


def _is_absent(value: Any) -> bool:
    return value is None or value == "" or value == []


def _coerce_scalar(value: Any) -> Any:
    if isinstance(value, (str, int, float)):
        return value
    raise _Malformed()


def _coerce_number(value: Any) -> Any:
    if isinstance(value, bool):
        raise _Malformed()
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise _Malformed()
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            number = float(text)
        except ValueError:
            raise _Malformed() from None
        if not math.isfinite(number):
            raise _Malformed()
        # "42" 保持原样，避免大整数 id 经 float 丢精度
        return text
    raise _Malformed()


def _coerce(spec: ParameterSpec, value: Any) -> Any:
    if spec.type == "number":
        return _coerce_number(value)
    if spec.type == "boolean":
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        raise _Malformed()
    if spec.type == "array":
        items = value if isinstance(value, list) else [value]
        coerced: List[Any] = []
        for item in items:
            if item is None or (isinstance(item, str) and not item.strip()):
                continue
            if isinstance(item, bool):
                coerced.append(item)
            else:
                coerced.append(_coerce_scalar(item))
        return coerced
    # string
    if isinstance(value, bool):
        raise _Malformed()
    return _coerce_scalar(value)


def decode_arguments(tool: ToolDefinition, raw: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """按 ParameterSpec 解码参数，返回的字典只包含已声明且有值的参数。"""

    raw = raw or {}
    decoded: Dict[str, Any] = {}
    for spec in tool.parameters:
        value = raw.get(spec.name)
        if _is_absent(value):
            if spec.required:
                raise MissingRequiredParameterError(tool.id, spec.name, spec.description)
            continue
        try:
            coerced = _coerce(spec, value)
            if _is_absent(coerced):
                # 数组里全是空元素，等同于未提供
                if spec.required:
                    raise MissingRequiredParameterError(tool.id, spec.name, spec.description)
                continue
            decoded[spec.name] = coerced
        except _Malformed:
            if spec.required:
                raise MissingRequiredParameterError(
                    tool.id, spec.name, spec.description, reason="invalid"
                ) from None
            logger.warning(
                "Dropped malformed optional argument",
                extra={"extra": {"tool_id": tool.id, "parameter": spec.name}},
            )
    ignored = sorted(name for name in raw if tool.parameter(name) is None)
    if ignored:
        logger.info(
            "Ignored undeclared arguments",
            extra={"extra": {"tool_id": tool.id, "arguments": ignored}},
        )
    return decoded


def render_value(value: Any) -> str:
    """把标量转成 URL 编码后的字符串。"""

    if isinstance(value, bool):
        text = "true" if value else "false"
    elif isinstance(value, float) and value.is_integer():
        text = str(int(value))
    else:
        text = str(value)
    return quote(text, safe=_URI_SAFE)


def build_query(tool: ToolDefinition, arguments: Mapping[str, Any], consumed: List[str]) -> List[str]:
    pairs: List[str] = []
    for spec in tool.parameters:
        if spec.name in consumed or spec.name not in arguments:
            continue
        value = arguments[spec.name]
        if isinstance(value, list):
            pairs.extend(f"{spec.name}[]={render_value(item)}" for item in value)
        else:
            pairs.append(f"{spec.name}={render_value(value)}")
    return pairs


def bind_request(tool: ToolDefinition, arguments: Optional[Mapping[str, Any]], base_url: str) -> BoundRequest:
    """解码参数并生成 BoundRequest。

    Raises:
        MissingRequiredParameterError: 必填参数缺失或取值非法。
    """

    decoded = decode_arguments(tool, arguments)
    endpoint = tool.endpoint
    consumed = tool.path_params()
    for name in consumed:
        endpoint = endpoint.replace("{" + name + "}", render_value(decoded[name]))

    url = base_url.rstrip("/") + endpoint
    if tool.method == "GET":
        pairs = build_query(tool, decoded, consumed)
        if pairs:
            url += ("&" if "?" in endpoint else "?") + "&".join(pairs)
    return BoundRequest(method=tool.method, url=url, headers=dict(DEFAULT_HEADERS))
