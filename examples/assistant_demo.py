"""Minimal demonstration of the Canvas assistant and the workspace assistant."""

from canvas_agent.api.service import create_canvas_assistant, create_workspace_assistant, suggest_tools

if __name__ == "__main__":
    question = "What assignments are due this week?"
    print("Suggested tools:", [tool["id"] for tool in suggest_tools(question)])

    assistant = create_canvas_assistant()
    assistant.set_context(
        {
            "courses": [{"id": 1, "name": "Intro to Programming", "course_code": "CS 101"}],
            "assignments": [
                {"name": "Lab 3", "course": "Intro to Programming", "dueDate": "2030-01-15T23:59:00Z"},
            ],
        }
    )
    reply = assistant.send_message(question)
    print("User:", question)
    print("Assistant:", reply.message)

    workspace = create_workspace_assistant()
    workspace.set_context({"assignment": {"name": "Lab 3", "course": "CS 101"}, "currentLanguage": "python"})
    result = workspace.send_message("Write a function that prints hello")
    print("Workspace:", result.to_dict())
