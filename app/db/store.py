from fastapi import Request

from services.usage_tracker import KeyValueStore


def get_usage_store(request: Request) -> KeyValueStore:
    return request.app.state.usage_store
