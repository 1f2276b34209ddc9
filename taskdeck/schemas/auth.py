from pydantic import BaseModel, EmailStr, Field

class RequestLinkIn(BaseModel):
    email: EmailStr
    # only stored when the account is new or has no name yet
    name: str | None = Field(default=None, max_length=100)

class RequestLinkOut(BaseModel):
    sent: bool = True
    token: str | None = None
    link: str | None = None

class RedeemIn(BaseModel):
    token: str

class AccessTokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
