"""基于关键词的工具匹配（不调用 LLM）。

用于 UI 的“工具建议”，只做粗略排序，不保证准确：

- 描述包含查询串：+2
- 名称包含查询串：+3
- 每条示例与查询互相包含：+5
- 每个命中的关键词组（查询含任一关键词且工具属于该组）：+4

只返回得分 > 0 的工具，按得分降序（同分保持目录顺序），最多 5 个。
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .definitions import ToolDefinition
from .registry import ToolRegistry, default_registry


MAX_SUGGESTIONS = 5

# (关键词, 相关工具 id)
KEYWORD_GROUPS: Tuple[Tuple[Tuple[str, ...], Tuple[str, ...]], ...] = (
    (("assignment", "homework", "due"), ("list_assignments", "get_assignment", "get_all_assignments")),
    (("course", "class"), ("list_courses", "get_course")),
    (("grade", "score"), ("get_grades", "get_assignment_grades")),
    (("submission", "submitted"), ("list_submissions", "get_submission")),
    (("syllabus",), ("get_course_syllabus",)),
    (("calendar", "planner", "upcoming", "due"), ("get_planner_items", "list_calendar_events")),
    (("file", "document"), ("list_course_files", "get_file")),
    (("announcement",), ("list_announcements",)),
    (("module", "content"), ("list_modules", "list_module_items")),
    (("discussion", "forum"), ("list_discussions", "get_discussion")),
    (("quiz", "test", "exam"), ("list_quizzes", "get_quiz")),
    (("profile", "user", "me"), ("get_user", "get_user_profile")),
)


@dataclass
class MatchResult:
    tool: ToolDefinition
    score: int


def score_tool(tool: ToolDefinition, query: str) -> int:
    """query 需已经转成小写并去掉首尾空白。"""

    score = 0
    if query in tool.description.lower():
        score += 2
    if query in tool.name.lower():
        score += 3
    for example in tool.examples:
        example = example.lower()
        if example in query or query in example:
            score += 5
    for keywords, tool_ids in KEYWORD_GROUPS:
        if tool.id in tool_ids and any(keyword in query for keyword in keywords):
            score += 4
    return score


def find_relevant_tools(query: str, registry: Optional[ToolRegistry] = None) -> List[MatchResult]:
    normalized = (query or "").strip().lower()
    if not normalized:
        return []
    registry = registry or default_registry()
    scored = [MatchResult(tool=tool, score=score_tool(tool, normalized)) for tool in registry.list_tools()]
    ranked = sorted((m for m in scored if m.score > 0), key=lambda m: m.score, reverse=True)
    return ranked[:MAX_SUGGESTIONS]
