"""Response envelope shared by every endpoint."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, model_serializer

DataT = TypeVar("DataT")


class Envelope(BaseModel, Generic[DataT]):
    """``{"success": bool, "data"?: ..., "message"?: str}``

    ``data`` and ``message`` are left out of the payload when unset.
    """

    success: bool = True
    data: DataT | None = None
    message: str | None = None

    @model_serializer(mode="wrap")
    def drop_unset(self, handler: Any) -> dict[str, Any]:
        payload = handler(self)
        return {
            key: value
            for key, value in payload.items()
            if key == "success" or value is not None
        }
