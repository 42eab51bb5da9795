from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class JoinEventRequest(BaseModel):
    """Body of ``POST /join-event/{eventId}``; presence is checked by the handler."""
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    userId: Optional[str] = Field(None, description="Identifier of the user joining the event.")
