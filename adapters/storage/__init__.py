from .json_store import JsonFileHistoryStore

__all__ = ["JsonFileHistoryStore"]
