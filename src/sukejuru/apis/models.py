from pydantic import BaseModel, Field


class User(BaseModel):
    """The user object associated with an API request."""

    id: str = Field(
        description="User unique ID (`user_id`) returned by the BaaS auth service."
    )
    access_token: str = Field(
        description="User's bearer access token value."
    )
    email: str | None = Field(
        default=None,
        description="User's email as known to the auth service."
    )


class OkResponse(BaseModel):
    ok: bool = True
