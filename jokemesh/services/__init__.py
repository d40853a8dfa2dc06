"""Service layer: in-memory state, joke selection, proxying and notifications."""

__all__: list[str] = []
