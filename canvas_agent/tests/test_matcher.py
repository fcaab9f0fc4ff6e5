from canvas_agent.tools.matcher import MAX_SUGGESTIONS, find_relevant_tools, score_tool
from canvas_agent.tools.registry import default_registry


def test_syllabus_ranks_first():
    results = find_relevant_tools("syllabus")
    assert results[0].tool.id == "get_course_syllabus"
    assert len(results) <= MAX_SUGGESTIONS
    assert all(r.score > 0 for r in results)
    assert results[0].score > results[-1].score


def test_results_are_capped_and_sorted():
    results = find_relevant_tools("course")
    assert len(results) == 5
    scores = [r.score for r in results]
    assert scores == sorted(scores, reverse=True)


def test_ties_keep_registry_order():
    order = [t.id for t in default_registry().list_tools()]
    results = find_relevant_tools("course")
    for left, right in zip(results, results[1:]):
        if left.score == right.score:
            assert order.index(left.tool.id) < order.index(right.tool.id)


def test_blank_or_unrelated_query_returns_nothing():
    assert find_relevant_tools("") == []
    assert find_relevant_tools("   ") == []
    assert find_relevant_tools("xyzzy") == []


def test_keyword_group_scores_once():
    grades = default_registry().find_by_id("get_grades")
    assert score_tool(grades, "score") == 4


def test_example_phrase_either_direction():
    user = default_registry().find_by_id("get_user")
    # query contains the example phrase
    assert score_tool(user, "please, who am i") >= 5
    # example contains the query
    assert score_tool(user, "my name") >= 5


def test_case_insensitive():
    upper = [r.tool.id for r in find_relevant_tools("SHOW MY GRADES")]
    lower = [r.tool.id for r in find_relevant_tools("show my grades")]
    assert upper == lower
    assert upper[0] == "get_grades"
