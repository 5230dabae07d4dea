from .saved_prompt import SavedPrompt

__all__ = [
    "SavedPrompt",
]
