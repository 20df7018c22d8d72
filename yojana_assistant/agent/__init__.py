"""
Agent Package
Contains the chat pipeline: prompt building, output coercion and orchestration
"""
from .coercion import coerce_model_output, strip_code_fences
from .prompt import BuiltPrompt, build_prompt
from .orchestrator import ChatAgent, ChatProcessingError

__all__ = [
    "coerce_model_output",
    "strip_code_fences",
    "BuiltPrompt",
    "build_prompt",
    "ChatAgent",
    "ChatProcessingError"
]
