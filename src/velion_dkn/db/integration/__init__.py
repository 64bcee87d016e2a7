from .fastapi import EngineDep, attach_db, get_engine

__all__ = ["attach_db", "get_engine", "EngineDep"]
