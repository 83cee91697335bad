from pydantic import BaseModel, ConfigDict


class UserSummary(BaseModel):
    """Participant display on session and request payloads"""
    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)
