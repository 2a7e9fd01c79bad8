from .json_store import JsonTaskStore

__all__ = ["JsonTaskStore"]
