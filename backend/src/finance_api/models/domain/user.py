"""Current user domain model."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class CurrentUser(BaseModel):
    """Identity resolved by the authentication layer for the current request."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    phone: str | None = None
    email: str | None = None
