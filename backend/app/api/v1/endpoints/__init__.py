# API endpoints
from . import auth, health, students, tasks

__all__ = ["auth", "health", "students", "tasks"]
