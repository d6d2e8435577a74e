from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class MessageCreate(BaseModel):
    """Payload forwarded to ``POST /api/messages`` on the data service."""

    role: Literal["user", "assistant", "system"]
    content: str = Field(min_length=1)
    user_id: Optional[str] = None
    conversation_id: str = Field(min_length=1)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
