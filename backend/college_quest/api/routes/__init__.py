# API Routes Module
from college_quest.api.routes import (
    colleges,
    schools,
    favorites,
    folders,
    me,
    auth,
    admin,
)

__all__ = [
    "colleges",
    "schools",
    "favorites",
    "folders",
    "me",
    "auth",
    "admin",
]
