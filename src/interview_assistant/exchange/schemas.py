"""
Pydantic schemas for the question exchange wire format.
"""

from pydantic import BaseModel, ConfigDict, Field


class ExchangeRequest(BaseModel):
    """Body of one ``POST /generateInterview`` call."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionId", description="Stable session identifier")
    user_response: str = Field(..., alias="userResponse", description="Transcript of the user's answer")


class ExchangeResponse(BaseModel):
    """Reply from the question service."""

    ok: bool = Field(..., strict=True, description="Whether the service produced a question")
    question: str | None = Field(default=None, description="Next interview question")

    @property
    def is_authoritative(self) -> bool:
        """Only ``ok`` plus a non-empty question counts as a usable reply."""
        return self.ok is True and bool(self.question)
