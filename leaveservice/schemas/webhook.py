from pydantic import BaseModel, ConfigDict
from typing import Optional, Union


class UserCreatedEvent(BaseModel):
    """user.created payload. Publishers differ in which field carries the id."""
    id: Optional[Union[str, int]] = None
    user_id: Optional[Union[str, int]] = None
    sub: Optional[str] = None

    model_config = ConfigDict(extra="allow")

    @property
    def resolved_user_id(self) -> Optional[str]:
        for value in (self.id, self.user_id, self.sub):
            if value not in (None, ""):
                return str(value)
        return None


class ProvisioningResponse(BaseModel):
    ok: bool = True
    user_id: str
    attempted: int
    created: int
