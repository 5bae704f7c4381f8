"""MongoDB service for problems, users and interviews."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import PyMongoError

from app.models.auth_models import Identity, Role, UserResponse, UserSyncRequest
from app.models.interview_models import (
    InterviewCreate,
    InterviewProblemLink,
    InterviewResponse,
    InterviewStatus,
)
from app.models.problem_models import Difficulty, NewProblem, ProblemDetail
from app.services.store_interfaces import InterviewStore, ProblemStore, UserStore
from app.utils.config import Settings, get_settings
from app.utils.errors import DatabaseUnavailableError, NotFoundError

logger = logging.getLogger(__name__)

PROBLEMS_COLLECTION = "problems"
USERS_COLLECTION = "users"
INTERVIEWS_COLLECTION = "interviews"
INTERVIEW_PROBLEMS_COLLECTION = "interviewProblems"

NEWEST_FIRST = [("createdAt", DESCENDING), ("_id", DESCENDING)]


def to_object_id(value: str) -> Optional[ObjectId]:
    """Convert a string identifier to an ObjectId; malformed ids yield None."""
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def _with_string_id(doc: Dict[str, Any]) -> Dict[str, Any]:
    doc["id"] = str(doc.pop("_id"))
    return doc


class MongoDBService:
    """
    Owns the process-wide MongoDB client.

    The client is created once at application startup and closed at shutdown;
    the driver's connection pool handles reconnects, so the handle is never
    rebuilt mid-request.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.client: Optional[AsyncIOMotorClient] = None
        self.db: Optional[AsyncIOMotorDatabase] = None
        self._last_timestamp: Optional[datetime] = None

    async def connect(self) -> None:
        """Create the client and make sure the indexes exist."""
        if self.client is not None:
            return
        self.client = AsyncIOMotorClient(
            self.settings.mongodb_uri,
            tz_aware=True,
            serverSelectionTimeoutMS=self.settings.mongodb_timeout_ms,
        )
        self.db = self.client[self.settings.mongodb_db_name]
        try:
            await self.client.admin.command("ping")
            await self.ensure_indexes()
            logger.info("Successfully connected to MongoDB")
        except PyMongoError as e:
            # Keep the client: the pool reconnects once the server is reachable.
            logger.error("MongoDB is not reachable at startup: %s", e)

    async def ensure_indexes(self) -> None:
        """Create the indexes the queries rely on."""
        problems = self.collection(PROBLEMS_COLLECTION)
        await problems.create_index([("createdBy", ASCENDING), ("createdAt", DESCENDING)])
        await problems.create_index([("difficulty", ASCENDING), ("createdAt", DESCENDING)])
        await problems.create_index([("category", ASCENDING)])
        await problems.create_index([("createdAt", DESCENDING)])
        await self.collection(USERS_COLLECTION).create_index("subject", unique=True)
        interviews = self.collection(INTERVIEWS_COLLECTION)
        await interviews.create_index("candidateId")
        await interviews.create_index("streamCallId")
        links = self.collection(INTERVIEW_PROBLEMS_COLLECTION)
        await links.create_index([("interviewId", ASCENDING), ("order", ASCENDING)])
        await links.create_index("problemId")

    def disconnect(self) -> None:
        """Close the client."""
        if self.client is not None:
            self.client.close()
            logger.info("Disconnected from MongoDB")
        self.client = None
        self.db = None

    def collection(self, name: str) -> AsyncIOMotorCollection:
        """Return a collection handle, failing if the service is not connected."""
        if self.db is None:
            raise DatabaseUnavailableError("Database is not connected")
        return self.db[name]

    def next_timestamp(self) -> datetime:
        """
        Return the current UTC time at millisecond resolution, never earlier
        than the previous value handed out by this process.
        """
        now = datetime.now(timezone.utc)
        now = now.replace(microsecond=now.microsecond // 1000 * 1000)
        if self._last_timestamp is not None and now < self._last_timestamp:
            now = self._last_timestamp
        self._last_timestamp = now
        return now

    async def ping(self) -> bool:
        """Check if the database connection is healthy."""
        if self.client is None:
            return False
        try:
            await self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.error("Database health check failed: %s", e)
            return False


class MongoProblemStore(ProblemStore):
    """Problem persistence backed by the ``problems`` collection."""

    def __init__(self, service: MongoDBService):
        self.service = service

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self.service.collection(PROBLEMS_COLLECTION)

    async def insert(self, problem: NewProblem) -> ProblemDetail:
        doc: Dict[str, Any] = problem.model_dump(mode="json", exclude_none=True)
        doc["createdAt"] = self.service.next_timestamp()
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        record = ProblemDetail(**_with_string_id(doc))
        logger.info("Stored problem %s for %s", record.id, record.createdBy)
        return record

    async def get(self, problem_id: str) -> Optional[ProblemDetail]:
        object_id = to_object_id(problem_id)
        if object_id is None:
            return None
        doc = await self.collection.find_one({"_id": object_id})
        return ProblemDetail(**_with_string_id(doc)) if doc else None

    async def _find(self, query: Dict[str, Any]) -> List[ProblemDetail]:
        cursor = self.collection.find(query).sort(NEWEST_FIRST)
        return [ProblemDetail(**_with_string_id(doc)) async for doc in cursor]

    async def query_all(self) -> List[ProblemDetail]:
        return await self._find({})

    async def query_by_creator(self, subject: str) -> List[ProblemDetail]:
        return await self._find({"createdBy": subject})

    async def query_by_difficulty(self, difficulty: Difficulty) -> List[ProblemDetail]:
        return await self._find({"difficulty": Difficulty(difficulty).value})

    async def delete(self, problem_id: str) -> None:
        object_id = to_object_id(problem_id)
        result = None
        if object_id is not None:
            result = await self.collection.delete_one({"_id": object_id})
        if result is None or result.deleted_count == 0:
            raise NotFoundError(f"Problem with ID '{problem_id}' not found")
        logger.info("Deleted problem %s", problem_id)


class MongoUserStore(UserStore):
    """User role records backed by the ``users`` collection."""

    def __init__(self, service: MongoDBService):
        self.service = service

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self.service.collection(USERS_COLLECTION)

    async def get_by_subject(self, subject: str) -> Optional[UserResponse]:
        doc = await self.collection.find_one({"subject": subject})
        return UserResponse(**_with_string_id(doc)) if doc else None

    async def upsert(self, identity: Identity, profile: UserSyncRequest) -> UserResponse:
        profile_fields = profile.model_dump(exclude_none=True)
        doc = await self.collection.find_one_and_update(
            {"subject": identity.subject},
            {
                "$set": profile_fields,
                "$setOnInsert": {"role": (identity.role or Role.CANDIDATE).value},
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )
        return UserResponse(**_with_string_id(doc))

    async def update_role(self, subject: str, role: Role) -> UserResponse:
        doc = await self.collection.find_one_and_update(
            {"subject": subject},
            {"$set": {"role": Role(role).value}},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            raise NotFoundError("User not found")
        logger.info("Role of %s changed to %s", subject, Role(role).value)
        return UserResponse(**_with_string_id(doc))


class MongoInterviewStore(InterviewStore):
    """Interviews and their problem links."""

    def __init__(self, service: MongoDBService):
        self.service = service

    @property
    def interviews(self) -> AsyncIOMotorCollection:
        return self.service.collection(INTERVIEWS_COLLECTION)

    @property
    def links(self) -> AsyncIOMotorCollection:
        return self.service.collection(INTERVIEW_PROBLEMS_COLLECTION)

    async def create(self, interview: InterviewCreate) -> InterviewResponse:
        doc: Dict[str, Any] = interview.model_dump(exclude={"problemIds"}, exclude_none=True)
        doc["status"] = InterviewStatus(interview.status).value
        result = await self.interviews.insert_one(doc)
        interview_id = str(result.inserted_id)

        if interview.problemIds:
            try:
                await self.links.insert_many(
                    [
                        {
                            "interviewId": interview_id,
                            "problemId": problem_id,
                            "order": order,
                            "assignedAt": self.service.next_timestamp(),
                        }
                        for order, problem_id in enumerate(interview.problemIds)
                    ]
                )
            except PyMongoError:
                # An interview is never left behind without its problems.
                logger.error("Linking problems to interview %s failed, removing it", interview_id)
                await self.links.delete_many({"interviewId": interview_id})
                await self.interviews.delete_one({"_id": result.inserted_id})
                raise

        doc["_id"] = result.inserted_id
        return InterviewResponse(**_with_string_id(doc))

    async def get(self, interview_id: str) -> Optional[InterviewResponse]:
        object_id = to_object_id(interview_id)
        if object_id is None:
            return None
        doc = await self.interviews.find_one({"_id": object_id})
        return InterviewResponse(**_with_string_id(doc)) if doc else None

    async def query_all(self) -> List[InterviewResponse]:
        cursor = self.interviews.find({})
        return [InterviewResponse(**_with_string_id(doc)) async for doc in cursor]

    async def query_by_candidate(self, candidate_id: str) -> List[InterviewResponse]:
        cursor = self.interviews.find({"candidateId": candidate_id})
        return [InterviewResponse(**_with_string_id(doc)) async for doc in cursor]

    async def get_by_stream_call_id(self, stream_call_id: str) -> Optional[InterviewResponse]:
        doc = await self.interviews.find_one({"streamCallId": stream_call_id})
        return InterviewResponse(**_with_string_id(doc)) if doc else None

    async def update_status(
        self, interview_id: str, status: InterviewStatus
    ) -> InterviewResponse:
        status = InterviewStatus(status)
        update: Dict[str, Any] = {"status": status.value}
        if status == InterviewStatus.COMPLETED:
            update["endTime"] = self.service.next_timestamp()

        object_id = to_object_id(interview_id)
        doc = None
        if object_id is not None:
            doc = await self.interviews.find_one_and_update(
                {"_id": object_id},
                {"$set": update},
                return_document=ReturnDocument.AFTER,
            )
        if doc is None:
            raise NotFoundError(f"Interview with ID '{interview_id}' not found")
        return InterviewResponse(**_with_string_id(doc))

    async def get_problem_links(self, interview_id: str) -> List[InterviewProblemLink]:
        cursor = self.links.find({"interviewId": interview_id}).sort("order", ASCENDING)
        return [InterviewProblemLink(**doc) async for doc in cursor]


# Global instance (connected in the application lifespan)
mongodb_service = MongoDBService()
