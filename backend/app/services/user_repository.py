"""
Persistence for principal documents.
"""
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from app.core.exceptions import DuplicateError
from app.models.user import USERS_COLLECTION, touch


class UserRepository:
    """Reads and writes the users collection"""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db[USERS_COLLECTION]

    async def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return await self.collection.find_one({"email": email.lower()})

    async def find_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            oid = ObjectId(user_id)
        except (InvalidId, TypeError):
            return None
        return await self.collection.find_one({"_id": oid})

    async def exists(self, email: str, username: str) -> bool:
        """Case-insensitive email or username clash"""
        existing = await self.collection.find_one(
            {"$or": [{"email": email.lower()}, {"username": username.lower()}]},
            projection={"_id": 1},
        )
        return existing is not None

    async def insert(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        try:
            await self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise DuplicateError("User")
        return doc

    async def update(self, user_id: ObjectId, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Apply changes, stamping updated_at, and return the new document"""
        return await self.collection.find_one_and_update(
            {"_id": user_id},
            {"$set": touch(changes)},
            return_document=ReturnDocument.AFTER,
        )
