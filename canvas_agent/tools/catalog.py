"""Canvas API 工具目录。

每个条目描述一个 Canvas REST 接口：id、展示名、说明、endpoint 模板、
HTTP 方法、参数列表以及若干自然语言示例（供 Matcher 打分和 LLM 选择工具）。

约束：endpoint 中每个 {name} 占位符都必须有对应的 required 参数。
"""

from typing import Tuple

from .definitions import ParameterSpec, ToolDefinition


def _course_id() -> ParameterSpec:
    return ParameterSpec("course_id", "number", True, "The ID of the course")


def _assignment_id() -> ParameterSpec:
    return ParameterSpec("assignment_id", "number", True, "The ID of the assignment")


def _self_user_id() -> ParameterSpec:
    return ParameterSpec("user_id", "string", True, 'The ID of the user (use "self" for current user)')


def _context_codes() -> ParameterSpec:
    return ParameterSpec("context_codes", "array", False, "Filter by context codes (e.g., course_123)")


CANVAS_TOOLS: Tuple[ToolDefinition, ...] = (
    # ---- User & Profile ----
    ToolDefinition(
        id="get_user",
        name="Get Current User",
        description="Retrieves information about the currently authenticated user",
        endpoint="/users/self",
        method="GET",
        examples=("show me my profile", "what is my name", "get my user information", "who am I"),
    ),
    ToolDefinition(
        id="get_user_profile",
        name="Get User Profile",
        description="Retrieves profile information for a specific user",
        endpoint="/users/{user_id}/profile",
        method="GET",
        parameters=(ParameterSpec("user_id", "number", True, "The ID of the user"),),
        examples=("get profile for user 123", "show user profile", "user information"),
    ),
    # ---- Courses ----
    ToolDefinition(
        id="list_courses",
        name="List Courses",
        description="Retrieves a list of courses the user is enrolled in",
        endpoint="/courses",
        method="GET",
        parameters=(
            ParameterSpec(
                "enrollment_state",
                "string",
                False,
                "Filter by enrollment state: active, invited, creation_pending, deleted, rejected, completed, inactive",
            ),
            ParameterSpec("include", "array", False, "Additional data to include: syllabus_body, term, course_image, etc."),
        ),
        examples=("show my courses", "list all my classes", "what courses am I taking", "get my enrolled courses"),
    ),
    ToolDefinition(
        id="get_course",
        name="Get Course Details",
        description="Retrieves detailed information about a specific course",
        endpoint="/courses/{course_id}",
        method="GET",
        parameters=(
            _course_id(),
            ParameterSpec("include", "array", False, "Additional data: syllabus_body, term, course_image, etc."),
        ),
        examples=(
            "show details for course 123",
            "get information about CS 101",
            "course details",
            "what is this course about",
        ),
    ),
    ToolDefinition(
        id="get_course_syllabus",
        name="Get Course Syllabus",
        description="Retrieves the syllabus content for a course",
        endpoint="/courses/{course_id}?include[]=syllabus_body",
        method="GET",
        parameters=(_course_id(),),
        examples=(
            "show me the syllabus",
            "get course syllabus",
            "what is the syllabus for this course",
            "exam dates in syllabus",
        ),
    ),
    # ---- Assignments ----
    ToolDefinition(
        id="list_assignments",
        name="List Course Assignments",
        description="Retrieves all assignments for a specific course",
        endpoint="/courses/{course_id}/assignments",
        method="GET",
        parameters=(
            _course_id(),
            ParameterSpec("include", "array", False, "Additional data: submission, assignment_visibility, overrides"),
        ),
        examples=(
            "show assignments for course 123",
            "list all assignments",
            "what assignments do I have",
            "get course assignments",
        ),
    ),
    ToolDefinition(
        id="get_assignment",
        name="Get Assignment Details",
        description="Retrieves detailed information about a specific assignment",
        endpoint="/courses/{course_id}/assignments/{assignment_id}",
        method="GET",
        parameters=(
            _course_id(),
            _assignment_id(),
            ParameterSpec("include", "array", False, "Additional data: submission, assignment_visibility, overrides"),
        ),
        examples=(
            "show assignment 456 details",
            "get assignment information",
            "what is this assignment about",
            "assignment requirements",
        ),
    ),
    ToolDefinition(
        id="get_all_assignments",
        name="Get All Assignments",
        description="Retrieves outstanding assignments across all enrolled courses",
        endpoint="/users/self/todo",
        method="GET",
        examples=(
            "show all my assignments",
            "list assignments from all courses",
            "what assignments do I have across all classes",
            "all my homework",
        ),
    ),
    # ---- Submissions ----
    ToolDefinition(
        id="list_submissions",
        name="List Submissions",
        description="Retrieves submissions for assignments in a course",
        endpoint="/courses/{course_id}/students/submissions",
        method="GET",
        parameters=(
            _course_id(),
            ParameterSpec("student_ids", "array", False, 'Filter by student IDs (use "self" for current user)'),
            ParameterSpec("assignment_ids", "array", False, "Filter by assignment IDs"),
        ),
        examples=(
            "show my submissions",
            "get submission status",
            "what have I submitted",
            "check my assignment submissions",
        ),
    ),
    ToolDefinition(
        id="get_submission",
        name="Get Submission Details",
        description="Retrieves details about a specific submission",
        endpoint="/courses/{course_id}/assignments/{assignment_id}/submissions/{user_id}",
        method="GET",
        parameters=(
            _course_id(),
            _assignment_id(),
            _self_user_id(),
            ParameterSpec(
                "include",
                "array",
                False,
                "Additional data: submission_history, submission_comments, rubric_assessment",
            ),
        ),
        examples=(
            "show my submission for assignment 456",
            "get submission details",
            "check my grade",
            "submission status",
        ),
    ),
    # ---- Planner ----
    ToolDefinition(
        id="get_planner_items",
        name="Get Planner Items",
        description="Retrieves planner items (assignments, events) for a date range",
        endpoint="/planner/items",
        method="GET",
        parameters=(
            ParameterSpec("start_date", "string", False, "Start date in ISO 8601 format (YYYY-MM-DD)"),
            ParameterSpec("end_date", "string", False, "End date in ISO 8601 format (YYYY-MM-DD)"),
            _context_codes(),
        ),
        examples=(
            "show my calendar",
            "what is due this week",
            "get planner items",
            "show upcoming assignments",
            "what is due in the next 7 days",
        ),
    ),
    # ---- Files ----
    ToolDefinition(
        id="list_course_files",
        name="List Course Files",
        description="Retrieves files available in a course",
        endpoint="/courses/{course_id}/files",
        method="GET",
        parameters=(
            _course_id(),
            ParameterSpec("content_types", "array", False, "Filter by content types (e.g., application/pdf, image/png)"),
            ParameterSpec("search_term", "string", False, "Search for files by name"),
        ),
        examples=(
            "show course files",
            "list files in this course",
            "find syllabus file",
            "what files are available",
            "show PDF files",
        ),
    ),
    ToolDefinition(
        id="get_file",
        name="Get File Details",
        description="Retrieves information about a specific file",
        endpoint="/files/{file_id}",
        method="GET",
        parameters=(
            ParameterSpec("file_id", "number", True, "The ID of the file"),
            ParameterSpec("include", "array", False, "Additional data: user, usage_rights"),
        ),
        examples=("get file information", "show file details", "file metadata"),
    ),
    # ---- Grades ----
    ToolDefinition(
        id="get_grades",
        name="Get Course Grades",
        description="Retrieves grade information for a course from the user's enrollments",
        endpoint="/courses/{course_id}/enrollments",
        method="GET",
        parameters=(
            _course_id(),
            ParameterSpec("user_id", "string", False, 'Restrict to one user (use "self" for current user)'),
        ),
        examples=(
            "show my grades",
            "what is my grade in this course",
            "get course grades",
            "check my gradebook",
        ),
    ),
    ToolDefinition(
        id="get_assignment_grades",
        name="Get Assignment Grades",
        description="Retrieves grade information for assignments",
        endpoint="/courses/{course_id}/assignments/{assignment_id}/submissions/{user_id}",
        method="GET",
        parameters=(_course_id(), _assignment_id(), _self_user_id()),
        examples=(
            "what grade did I get on assignment 456",
            "show my assignment grade",
            "check assignment score",
        ),
    ),
    # ---- Announcements ----
    ToolDefinition(
        id="list_announcements",
        name="List Course Announcements",
        description="Retrieves announcements for a course",
        endpoint="/announcements",
        method="GET",
        parameters=(
            _context_codes(),
            ParameterSpec("start_date", "string", False, "Start date in ISO 8601 format"),
            ParameterSpec("end_date", "string", False, "End date in ISO 8601 format"),
        ),
        examples=(
            "show announcements",
            "get course announcements",
            "what are the latest announcements",
            "recent announcements",
        ),
    ),
    # ---- Modules ----
    ToolDefinition(
        id="list_modules",
        name="List Course Modules",
        description="Retrieves modules for a course",
        endpoint="/courses/{course_id}/modules",
        method="GET",
        parameters=(
            _course_id(),
            ParameterSpec("include", "array", False, "Additional data: items, content_details"),
        ),
        examples=(
            "show course modules",
            "list modules",
            "what modules are in this course",
            "get course content modules",
        ),
    ),
    ToolDefinition(
        id="list_module_items",
        name="List Module Items",
        description="Retrieves items within a module",
        endpoint="/courses/{course_id}/modules/{module_id}/items",
        method="GET",
        parameters=(
            _course_id(),
            ParameterSpec("module_id", "number", True, "The ID of the module"),
            ParameterSpec("include", "array", False, "Additional data: content_details, mastery_paths"),
        ),
        examples=("show items in module 789", "list module content", "what is in this module"),
    ),
    # ---- Calendar Events ----
    ToolDefinition(
        id="list_calendar_events",
        name="List Calendar Events",
        description="Retrieves calendar events for the user",
        endpoint="/calendar_events",
        method="GET",
        parameters=(
            _context_codes(),
            ParameterSpec("start_date", "string", False, "Start date in ISO 8601 format"),
            ParameterSpec("end_date", "string", False, "End date in ISO 8601 format"),
            ParameterSpec("type", "string", False, "Filter by event type: event, assignment"),
        ),
        examples=("show calendar events", "what events are coming up", "get my calendar", "upcoming events"),
    ),
    # ---- Discussions ----
    ToolDefinition(
        id="list_discussions",
        name="List Course Discussions",
        description="Retrieves discussions for a course",
        endpoint="/courses/{course_id}/discussion_topics",
        method="GET",
        parameters=(
            _course_id(),
            ParameterSpec("only_announcements", "boolean", False, "Filter to only announcements"),
            ParameterSpec("order_by", "string", False, "Sort order: position, recent_activity, title"),
        ),
        examples=(
            "show discussions",
            "list course discussions",
            "get discussion topics",
            "what discussions are there",
        ),
    ),
    ToolDefinition(
        id="get_discussion",
        name="Get Discussion Details",
        description="Retrieves details about a specific discussion",
        endpoint="/courses/{course_id}/discussion_topics/{topic_id}",
        method="GET",
        parameters=(
            _course_id(),
            ParameterSpec("topic_id", "number", True, "The ID of the discussion topic"),
            ParameterSpec("include", "array", False, "Additional data: all_dates, sections, overrides"),
        ),
        examples=("show discussion 123", "get discussion details", "discussion content"),
    ),
    # ---- Quizzes ----
    ToolDefinition(
        id="list_quizzes",
        name="List Course Quizzes",
        description="Retrieves quizzes for a course",
        endpoint="/courses/{course_id}/quizzes",
        method="GET",
        parameters=(
            _course_id(),
            ParameterSpec("search_term", "string", False, "Search for quizzes by title"),
        ),
        examples=("show quizzes", "list course quizzes", "what quizzes are available", "get quiz list"),
    ),
    ToolDefinition(
        id="get_quiz",
        name="Get Quiz Details",
        description="Retrieves details about a specific quiz",
        endpoint="/courses/{course_id}/quizzes/{quiz_id}",
        method="GET",
        parameters=(
            _course_id(),
            ParameterSpec("quiz_id", "number", True, "The ID of the quiz"),
        ),
        examples=("show quiz 123 details", "get quiz information", "quiz details"),
    ),
)
