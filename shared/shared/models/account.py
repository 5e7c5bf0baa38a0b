from pydantic import BaseModel, ConfigDict


class CurrentAccount(BaseModel):
    """Account context decoded from the session assertion."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    username: str
