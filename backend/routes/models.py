"""Pydantic request/response models for the JSON endpoints."""

from pydantic import BaseModel


class CounterResponse(BaseModel):
    value: int


class ErrorBody(BaseModel):
    error: str
