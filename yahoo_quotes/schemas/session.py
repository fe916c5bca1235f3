from pydantic import BaseModel, ConfigDict


class SessionState(BaseModel):
    cookie: str | None = None
    crumb: str | None = None
    base_url: str = "https://query1.finance.yahoo.com"
    authenticated_at: float | None = None
    strategy: str | None = None


class SessionCredentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    cookie: str
    crumb: str
    base_url: str


class SessionStatus(BaseModel):
    authenticated: bool
    base_url: str
    authenticated_at: float | None = None
    strategy: str | None = None
