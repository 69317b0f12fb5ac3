from .registry import ToolDefinition, ToolRegistry
from .schema import generate_schema

__all__ = ["ToolDefinition", "ToolRegistry", "generate_schema"]
