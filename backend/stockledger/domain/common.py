"""
Helpers shared by the domain models
"""
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Opaque record id"""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RequestModel(BaseModel):
    """
    Base for request bodies.

    Accepts both camelCase (what the mobile client sends) and snake_case.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
