"""MCP prompt definitions.

Each prompt renders to a single user message that names the tool to call.
"""
from typing import Optional

from mcp.types import GetPromptResult, Prompt, PromptArgument, PromptMessage, TextContent

PROMPTS = {
    "listProjects": Prompt(
        name="listProjects",
        description="Lists all projects in the Azure DevOps organization.",
        arguments=[]
    ),
    "listTeams": Prompt(
        name="listTeams",
        description="Retrieves all teams for a given Azure DevOps project.",
        arguments=[
            PromptArgument(name="project", description="The name or ID of the Azure DevOps project.", required=True),
        ]
    ),
    "getWorkItem": Prompt(
        name="getWorkItem",
        description="Retrieves details for a specific Azure DevOps work item by ID.",
        arguments=[
            PromptArgument(name="id", description="The ID of the work item to retrieve.", required=True),
            PromptArgument(name="project", description="The name or ID of the Azure DevOps project.", required=True),
        ]
    ),
}


def get_prompts() -> list[Prompt]:
    return list(PROMPTS.values())


def _render(name: str, arguments: dict[str, str]) -> str:
    if name == "listProjects":
        return (
            "# Task\n"
            "Use the 'core_list_projects' tool to retrieve all projects in the current Azure DevOps organization.\n"
            "Present the results in a table with the following columns: Project ID, Name, and Description."
        )
    if name == "listTeams":
        return (
            "# Task\n"
            f"Use the 'core_list_project_teams' tool to retrieve all teams for the project '{arguments['project']}'.\n"
            "Present the results in a table with the following columns: Team ID, and Name"
        )
    return (
        "# Task\n"
        f"Use the 'wit_get_work_item' tool to retrieve details for the work item with ID '{arguments['id']}' "
        f"in project '{arguments['project']}'.\n"
        "Present the following fields: ID, Title, State, Assigned To, Work Item Type, "
        "Description or Repro Steps, and Created Date."
    )


def get_prompt_messages(name: str, arguments: Optional[dict[str, str]] = None) -> GetPromptResult:
    """Render a prompt.

    Raises:
        ValueError: If the prompt is unknown or a required argument is missing
    """
    prompt = PROMPTS.get(name)
    if prompt is None:
        raise ValueError(f"Unknown prompt: {name}")

    arguments = arguments or {}
    missing = [arg.name for arg in prompt.arguments or [] if arg.required and not arguments.get(arg.name)]
    if missing:
        raise ValueError(f"Missing required arguments for prompt {name}: {', '.join(missing)}")

    return GetPromptResult(
        description=prompt.description,
        messages=[
            PromptMessage(role="user", content=TextContent(type="text", text=_render(name, arguments))),
        ]
    )
