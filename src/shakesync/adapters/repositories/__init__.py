from shakesync.adapters.repositories.state_repository import (
    InMemoryStateRepository,
    JsonFileStateRepository,
)

__all__ = ["InMemoryStateRepository", "JsonFileStateRepository"]
