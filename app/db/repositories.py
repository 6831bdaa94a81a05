"""
app.db.repositories
~~~~~~~~~~~~~~~~~~~

所有集合仓库的聚合容器，在 lifespan 中创建一次并挂载到 ``app.state.repos``。
"""
from __future__ import annotations

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.db.api_repository import ApiRepository
from app.db.lesson_repository import HackathonRepository, LessonRepository
from app.db.message_repository import MessageRepository
from app.db.project_repository import ProjectRepository
from app.db.user_repository import UserRepository


class Repositories:
    """按集合划分的仓库集合，集合之间没有事务。

    Attributes:
        users: ``users`` 集合。
        messages: ``messages`` 集合。
        projects: ``projects`` 集合。
        apis: ``apis`` 集合。
        lessons: ``lessons`` 集合。
        hackathons: ``hackathons`` 集合。
    """

    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.users = UserRepository(db)
        self.messages = MessageRepository(db, self.users)
        self.projects = ProjectRepository(db, self.users)
        self.apis = ApiRepository(db)
        self.lessons = LessonRepository(db)
        self.hackathons = HackathonRepository(db)
