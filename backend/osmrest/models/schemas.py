"""Pydantic models for the entities served by the API."""

from pydantic import BaseModel, ConfigDict


class Info(BaseModel):
    """Revision metadata of an entity. Every field may be missing on its own."""

    model_config = ConfigDict(frozen=True)

    version: int | None = None
    milli_timestamp: int | None = None
    changeset: int | None = None
    uid: int | None = None
    user: str | None = None
    visible: bool = True
    deleted: bool = False


class Node(BaseModel):
    """A point entity. ``info`` is ``None`` for nodes read from a dense block."""

    model_config = ConfigDict(frozen=True)

    id: int
    tags: dict[str, str]
    lat: float
    lon: float
    info: Info | None = None


class Way(BaseModel):
    """A linear or area entity; ``refs`` keeps the node order of the source."""

    model_config = ConfigDict(frozen=True)

    id: int
    tags: dict[str, str]
    info: Info | None = None
    refs: list[int]


class ErrorResponse(BaseModel):
    """Body of a failed request."""

    detail: str
