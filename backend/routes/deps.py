"""Request-scoped access to the objects create_app() puts on app.state."""

from fastapi import Request

from backend.llm import CompletionProxy
from endless_tale.counter import Counter
from endless_tale.service import AdventureService


def get_service(request: Request) -> AdventureService:
    return request.app.state.service


def get_counter(request: Request) -> Counter:
    return request.app.state.counter


def get_llm_proxy(request: Request) -> CompletionProxy:
    return request.app.state.llm_proxy
