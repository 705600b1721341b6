"""Tool schema definitions for the XML-style tool syntax the model writes.

Each parameter may carry ``"scan": "backward"`` when its value is raw file
content that can legitimately contain text resembling its own closing tag.
"""

TOOL_SCHEMAS = [
    {"type": "function", "function": {
        "name": "execute_command",
        "description": "Execute a CLI command on the user's system.",
        "parameters": {"type": "object", "properties": {
            "command": {"type": "string", "description": "Command line to run"},
            "requires_approval": {"type": "string", "description": "true/false, whether the command is impactful"},
        }, "required": ["command", "requires_approval"]},
    }},
    {"type": "function", "function": {
        "name": "read_file",
        "description": "Read the contents of a file.",
        "parameters": {"type": "object", "properties": {
            "path": {"type": "string", "description": "File path relative to the working directory"},
        }, "required": ["path"]},
    }},
    {"type": "function", "function": {
        "name": "write_to_file",
        "description": "Write full content to a file, creating it if needed.",
        "parameters": {"type": "object", "properties": {
            "path": {"type": "string", "description": "File path to write"},
            "content": {"type": "string", "description": "Complete file content", "scan": "backward"},
        }, "required": ["path", "content"]},
    }},
    {"type": "function", "function": {
        "name": "replace_in_file",
        "description": "Edit a file with SEARCH/REPLACE blocks.",
        "parameters": {"type": "object", "properties": {
            "path": {"type": "string", "description": "File path to edit"},
            "diff": {"type": "string", "description": "One or more SEARCH/REPLACE blocks"},
        }, "required": ["path", "diff"]},
    }},
    {"type": "function", "function": {
        "name": "search_files",
        "description": "Regex search across files in a directory.",
        "parameters": {"type": "object", "properties": {
            "path": {"type": "string", "description": "Directory to search"},
            "regex": {"type": "string", "description": "Regular expression"},
            "file_pattern": {"type": "string", "description": "Glob filter, e.g. '*.ts'"},
        }, "required": ["path", "regex"]},
    }},
    {"type": "function", "function": {
        "name": "list_files",
        "description": "List files and directories.",
        "parameters": {"type": "object", "properties": {
            "path": {"type": "string", "description": "Directory path"},
            "recursive": {"type": "string", "description": "true for recursive listing"},
        }, "required": ["path"]},
    }},
    {"type": "function", "function": {
        "name": "list_code_definition_names",
        "description": "List top-level source code definitions in a directory.",
        "parameters": {"type": "object", "properties": {
            "path": {"type": "string", "description": "Directory path"},
        }, "required": ["path"]},
    }},
    {"type": "function", "function": {
        "name": "browser_action",
        "description": "Drive a headless browser.",
        "parameters": {"type": "object", "properties": {
            "action": {"type": "string", "description": "launch, click, type, scroll_down, scroll_up or close"},
            "url": {"type": "string", "description": "URL for launch"},
            "coordinate": {"type": "string", "description": "x,y for click"},
            "text": {"type": "string", "description": "Text for type"},
        }, "required": ["action"]},
    }},
    {"type": "function", "function": {
        "name": "use_mcp_tool",
        "description": "Call a tool exposed by a connected MCP server.",
        "parameters": {"type": "object", "properties": {
            "server_name": {"type": "string", "description": "MCP server name"},
            "tool_name": {"type": "string", "description": "Tool to call"},
            "arguments": {"type": "string", "description": "JSON arguments"},
        }, "required": ["server_name", "tool_name"]},
    }},
    {"type": "function", "function": {
        "name": "access_mcp_resource",
        "description": "Read a resource exposed by a connected MCP server.",
        "parameters": {"type": "object", "properties": {
            "server_name": {"type": "string", "description": "MCP server name"},
            "uri": {"type": "string", "description": "Resource URI"},
        }, "required": ["server_name", "uri"]},
    }},
    {"type": "function", "function": {
        "name": "ask_followup_question",
        "description": "Ask the user a clarifying question.",
        "parameters": {"type": "object", "properties": {
            "question": {"type": "string", "description": "Question to ask"},
            "options": {"type": "string", "description": "JSON array of suggested answers"},
        }, "required": ["question"]},
    }},
    {"type": "function", "function": {
        "name": "plan_mode_respond",
        "description": "Respond to the user while planning.",
        "parameters": {"type": "object", "properties": {
            "response": {"type": "string", "description": "Response text"},
        }, "required": ["response"]},
    }},
    {"type": "function", "function": {
        "name": "new_task",
        "description": "Start a new task with preloaded context.",
        "parameters": {"type": "object", "properties": {
            "context": {"type": "string", "description": "Context to carry over"},
        }, "required": ["context"]},
    }},
    {"type": "function", "function": {
        "name": "attempt_completion",
        "description": "Present the result of the task.",
        "parameters": {"type": "object", "properties": {
            "result": {"type": "string", "description": "Final result"},
            "command": {"type": "string", "description": "Optional command demonstrating the result"},
        }, "required": ["result"]},
    }},
]

FILE_EDIT_TOOLS = {"write_to_file", "replace_in_file"}

