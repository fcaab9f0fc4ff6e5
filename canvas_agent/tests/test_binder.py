import pytest

from canvas_agent.domain.exceptions import MissingRequiredParameterError
from canvas_agent.tools.binder import bind_request, decode_arguments
from canvas_agent.tools.definitions import ParameterSpec, ToolDefinition
from canvas_agent.tools.registry import default_registry


BASE = "https://school.instructure.com/api/v1"


def _tool(tool_id):
    return default_registry().find_by_id(tool_id)


def test_path_and_array_query_order():
    bound = bind_request(_tool("get_course"), {"course_id": 55, "include": ["term", "syllabus_body"]}, BASE)
    assert bound.method == "GET"
    assert bound.url == f"{BASE}/courses/55?include[]=term&include[]=syllabus_body"
    assert "/courses/55" in bound.url


def test_array_order_is_preserved():
    bound = bind_request(_tool("get_course"), {"course_id": 55, "include": ["syllabus_body", "term"]}, BASE)
    assert bound.url.endswith("?include[]=syllabus_body&include[]=term")


def test_missing_required_parameter():
    with pytest.raises(MissingRequiredParameterError) as exc:
        bind_request(_tool("get_assignment"), {"assignment_id": 9}, BASE)
    assert exc.value.parameter == "course_id"
    assert exc.value.tool_id == "get_assignment"
    assert exc.value.reason == "missing"


@pytest.mark.parametrize("value", [None, "", []])
def test_empty_values_count_as_missing(value):
    with pytest.raises(MissingRequiredParameterError):
        bind_request(_tool("list_assignments"), {"course_id": value}, BASE)


@pytest.mark.parametrize("value", [True, "the biology one", "nan", {"id": 1}])
def test_malformed_required_value(value):
    with pytest.raises(MissingRequiredParameterError) as exc:
        bind_request(_tool("get_course"), {"course_id": value}, BASE)
    assert exc.value.reason == "invalid"
    assert exc.value.parameter == "course_id"


def test_numeric_string_is_accepted_verbatim():
    bound = bind_request(_tool("get_course"), {"course_id": " 12345678901234567890 "}, BASE)
    assert bound.url == f"{BASE}/courses/12345678901234567890"


def test_blank_array_elements_are_dropped():
    bound = bind_request(_tool("get_course"), {"course_id": 5, "include": ["term", "", "  ", "syllabus_body"]}, BASE)
    assert bound.url == f"{BASE}/courses/5?include[]=term&include[]=syllabus_body"


def test_all_blank_array_counts_as_absent():
    bound = bind_request(_tool("list_courses"), {"include": ["", " "]}, BASE)
    assert bound.url == f"{BASE}/courses"


def test_endpoint_with_existing_query():
    bound = bind_request(_tool("get_course_syllabus"), {"course_id": 7}, BASE)
    assert bound.url == f"{BASE}/courses/7?include[]=syllabus_body"


def test_optional_parameter_on_fixed_grades_endpoint():
    bound = bind_request(_tool("get_grades"), {"course_id": 3, "user_id": "self"}, BASE)
    assert bound.url == f"{BASE}/courses/3/enrollments?user_id=self"


def test_values_are_percent_encoded():
    bound = bind_request(_tool("list_course_files"), {"course_id": 1, "search_term": "lab report & notes"}, BASE)
    assert bound.url == f"{BASE}/courses/1/files?search_term=lab%20report%20%26%20notes"


def test_path_value_is_encoded():
    bound = bind_request(
        _tool("get_submission"),
        {"course_id": 1, "assignment_id": 2, "user_id": "a/b"},
        BASE,
    )
    assert bound.url == f"{BASE}/courses/1/assignments/2/submissions/a%2Fb"


def test_booleans_and_integral_floats():
    bound = bind_request(
        _tool("list_discussions"),
        {"course_id": 12.0, "only_announcements": "false", "order_by": "recent_activity"},
        BASE,
    )
    assert bound.url == f"{BASE}/courses/12/discussion_topics?only_announcements=false&order_by=recent_activity"


def test_query_follows_parameter_order_not_argument_order():
    bound = bind_request(
        _tool("get_planner_items"),
        {"context_codes": ["course_1"], "end_date": "2024-02-01", "start_date": "2024-01-01"},
        BASE,
    )
    assert bound.url == (
        f"{BASE}/planner/items?start_date=2024-01-01&end_date=2024-02-01&context_codes[]=course_1"
    )


def test_scalar_for_array_is_wrapped():
    bound = bind_request(_tool("list_courses"), {"include": "term"}, BASE)
    assert bound.url == f"{BASE}/courses?include[]=term"


def test_unknown_and_raw_arguments_are_dropped():
    decoded = decode_arguments(_tool("list_courses"), {"_raw": "{oops", "colour": "red", "enrollment_state": "active"})
    assert decoded == {"enrollment_state": "active"}


def test_malformed_optional_argument_is_dropped():
    bound = bind_request(_tool("list_courses"), {"enrollment_state": {"bad": 1}}, BASE)
    assert bound.url == f"{BASE}/courses"


def test_no_arguments_and_trailing_slash():
    bound = bind_request(_tool("get_user"), None, BASE + "/")
    assert bound.url == f"{BASE}/users/self"
    assert bound.headers["Accept"] == "application/json"
    assert "Authorization" not in bound.headers


def test_non_get_never_appends_query():
    tool = ToolDefinition(
        id="update_page",
        name="Update Page",
        description="Update a page",
        endpoint="/courses/{course_id}/pages/{url}",
        method="PUT",
        parameters=(
            ParameterSpec("course_id", "number", True, "Course"),
            ParameterSpec("url", "string", True, "Page url"),
            ParameterSpec("title", "string", False, "New title"),
        ),
    )
    bound = bind_request(tool, {"course_id": 4, "url": "home", "title": "Welcome"}, BASE)
    assert bound.method == "PUT"
    assert bound.url == f"{BASE}/courses/4/pages/home"
