from action_tools.tools.action import ActionTool, InvocationContext, action
from action_tools.tools.base import JustInTimeToolingBase, ToolBase
from action_tools.tools.provider import ActionToolProvider

__all__ = [
    "ActionTool",
    "ActionToolProvider",
    "InvocationContext",
    "JustInTimeToolingBase",
    "ToolBase",
    "action",
]
