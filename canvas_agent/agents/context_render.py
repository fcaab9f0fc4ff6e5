"""Render session context into system messages.

All text that comes from the student (work in progress, attached documents)
is hard-capped before it is sent, with a literal truncation marker appended.
"""

from typing import List, Optional

from canvas_agent.domain.context import AcademicContext, AssignmentInfo, WorkspaceContext


TRUNCATION_MARKER = "\n[...truncated...]"


def truncate_text(text: Optional[str], limit: int) -> str:
    """Strip ``text`` and cut it to ``limit`` characters plus the marker."""

    text = (text or "").strip()
    if len(text) > limit:
        return text[:limit] + TRUNCATION_MARKER
    return text


def upcoming_assignments(assignments: List[AssignmentInfo], limit: int) -> List[AssignmentInfo]:
    """Assignments with a parseable due date, soonest first."""

    dated = [a for a in assignments if a.due_at is not None]
    dated.sort(key=lambda a: a.due_at)
    return dated[:limit]


def format_points(points: Optional[float]) -> str:
    if points is None:
        return ""
    if float(points).is_integer():
        return str(int(points))
    return str(points)


def describe_current_assignment(assignment: AssignmentInfo) -> str:
    text = f"Current assignment: {assignment.name} ({assignment.course})"
    if assignment.due_date:
        text += f", due {assignment.due_date}"
    if assignment.points is not None:
        text += f", {format_points(assignment.points)} points"
    return text + f". Description: {assignment.description or 'No description provided.'}"


def academic_context_messages(
    ctx: AcademicContext,
    upcoming_limit: int = 5,
    work_limit: int = 4000,
    document_limit: int = 8000,
) -> List[str]:
    messages: List[str] = []

    parts: List[str] = []
    if ctx.courses:
        courses = ", ".join(f"{c.name} ({c.course_code})" for c in ctx.courses)
        parts.append(f"Courses: {courses}.")
    upcoming = upcoming_assignments(ctx.assignments, upcoming_limit)
    if upcoming:
        items = "; ".join(f"{a.name} in {a.course} due {a.due_date}" for a in upcoming)
        parts.append(f"Upcoming assignments: {items}.")
    if ctx.current_assignment is not None:
        parts.append(describe_current_assignment(ctx.current_assignment))
    if parts:
        messages.append(" ".join(parts))

    work = truncate_text(ctx.work_in_progress, work_limit)
    if work:
        messages.append(f"Student current work-in-progress content/code:\n{work}")

    document = truncate_text(ctx.reference_document_text, document_limit)
    if document:
        name = ctx.reference_document_name or "reference document"
        messages.append(f"Reference document ({name}) content:\n{document}")
    return messages


def workspace_system_message(base_prompt: str, ctx: WorkspaceContext, work_limit: int = 4000) -> str:
    sections = [base_prompt]

    assignment = ctx.assignment
    if assignment is not None:
        lines = [
            "=== ASSIGNMENT INFORMATION ===",
            f"Assignment Name: {assignment.name}",
            f"Course: {assignment.course}",
        ]
        if assignment.due_date:
            lines.append(f"Due Date: {assignment.due_date}")
        if assignment.points is not None:
            lines.append(f"Points: {format_points(assignment.points)}")
        if assignment.description:
            lines.append(f"\nDescription:\n{assignment.description}")
            lines.append(
                '\nIMPORTANT: When the user asks to "do the assignment" or "complete the assignment", '
                "you MUST write the actual code or content based on this description."
            )
        else:
            lines.append("No description provided.")
        sections.append("\n".join(lines))

    work = truncate_text(ctx.work_in_progress, work_limit)
    if work:
        sections.append(f"=== STUDENT'S CURRENT WORK ===\n{work}")

    editor = ["=== CURRENT EDITOR STATE ===", f"Mode: {ctx.current_mode}"]
    if ctx.current_language:
        editor.append(f"Language: {ctx.current_language}")
    editor.append(
        "\nREMEMBER:\n"
        "- For React, TypeScript, JavaScript, or web development assignments -> use language: 'javascript'\n"
        "- For Python assignments -> use language: 'python'\n"
        "- For C++ assignments -> use language: 'cpp'\n"
        "- When user says \"do the assignment\" or asks you to write code -> you MUST call write_code with actual code"
    )
    sections.append("\n".join(editor))
    return "\n\n".join(sections)
