from datetime import datetime
from typing import Any, Self
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pymongo.asynchronous.cursor import AsyncCursor

from medvault.utils import as_utc


class MongoModel(BaseModel):
    """Base for documents stored in MongoDB: UUID `_id` and UTC timestamps."""

    id: UUID = Field(alias="_id", serialization_alias="id", default_factory=uuid4)

    model_config = ConfigDict(
        populate_by_name=True,
        arbitrary_types_allowed=True,
        json_schema_serialization_defaults_required=True,
    )

    @field_validator("*", mode="after")
    @classmethod
    def _datetimes_as_utc(cls, value: Any) -> Any:
        # Expiry comparisons need aware datetimes, whatever the client's tz_aware setting
        if isinstance(value, datetime):
            return as_utc(value)
        return value

    def to_mongo(self) -> dict[str, Any]:
        """Convert the model to a dictionary for MongoDB storage with _id field."""
        data = self.model_dump()
        data["_id"] = data.pop("id")
        return data

    @classmethod
    async def list_cursor(cls, cursor: AsyncCursor[dict[str, Any]]) -> list[Self]:
        """Iterate over an AsyncCursor and return a list of model instances."""
        return [cls.model_validate(item) async for item in cursor]
