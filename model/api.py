# model/api.py
from typing import Literal
from pydantic import BaseModel


class MessageResponse(BaseModel):
    message: str


class StatusResponse(BaseModel):
    status: Literal["found", "not-found"]
    uploadedFiles: list[str]


class MeResponse(BaseModel):
    message: str
    email: str | None = None
    username: str


class BreakerSnapshot(BaseModel):
    name: str
    state: Literal["closed", "open", "half_open"]
    successes: int
    failures: int
    failureRate: float
    retryInMs: int | None = None


class HealthResponse(BaseModel):
    ok: bool
    breakers: list[BreakerSnapshot] = []
