"""会话上下文模型。

UI 每次更新上下文都会整体替换（不做 diff / merge），
编排层在每轮请求时根据当前上下文重新生成 system 消息。
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional


EditorMode = Literal["document", "code"]


def parse_due_date(value: Optional[str]) -> Optional[datetime]:
    """解析 ISO 8601 截止时间（兼容结尾的 Z），无法解析时返回 None。"""

    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class CourseSummary:
    id: int
    name: str
    course_code: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CourseSummary":
        return cls(
            id=int(data.get("id") or 0),
            name=str(data.get("name") or ""),
            course_code=str(data.get("course_code") or data.get("courseCode") or ""),
        )


@dataclass
class AssignmentInfo:
    """一份作业的概要信息（UI 从 Canvas 数据整理后传入）。"""

    name: str
    course: str
    description: str = ""
    due_date: Optional[str] = None
    points: Optional[float] = None
    submission_status: Optional[str] = None

    @property
    def due_at(self) -> Optional[datetime]:
        return parse_due_date(self.due_date)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AssignmentInfo":
        points = data.get("points")
        return cls(
            name=str(data.get("name") or ""),
            course=str(data.get("course") or ""),
            description=str(data.get("description") or ""),
            due_date=data.get("due_date") or data.get("dueDate"),
            points=points if isinstance(points, (int, float)) and not isinstance(points, bool) else None,
            submission_status=data.get("submission_status") or data.get("submissionStatus"),
        )


@dataclass
class AcademicContext:
    """Canvas 助手的会话上下文。"""

    courses: List[CourseSummary] = field(default_factory=list)
    assignments: List[AssignmentInfo] = field(default_factory=list)
    current_assignment: Optional[AssignmentInfo] = None
    work_in_progress: Optional[str] = None
    reference_document_name: Optional[str] = None
    reference_document_text: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AcademicContext":
        data = data or {}
        current = data.get("current_assignment") or data.get("currentAssignment")
        return cls(
            courses=[CourseSummary.from_dict(c) for c in data.get("courses") or []],
            assignments=[AssignmentInfo.from_dict(a) for a in data.get("assignments") or []],
            current_assignment=AssignmentInfo.from_dict(current) if current else None,
            work_in_progress=data.get("work_in_progress") or data.get("workInProgress"),
            reference_document_name=data.get("reference_document_name") or data.get("referenceDocumentName"),
            reference_document_text=data.get("reference_document_text") or data.get("referenceDocumentText"),
        )


@dataclass
class WorkspaceContext:
    """作业工作区助手的会话上下文。"""

    assignment: Optional[AssignmentInfo] = None
    work_in_progress: Optional[str] = None
    current_mode: EditorMode = "document"
    current_language: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "WorkspaceContext":
        data = data or {}
        assignment = data.get("assignment")
        mode = data.get("current_mode") or data.get("currentMode") or "document"
        return cls(
            assignment=AssignmentInfo.from_dict(assignment) if assignment else None,
            work_in_progress=data.get("work_in_progress") or data.get("workInProgress"),
            current_mode="code" if mode == "code" else "document",
            current_language=data.get("current_language") or data.get("currentLanguage"),
        )
