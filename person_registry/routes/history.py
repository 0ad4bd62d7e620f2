"""Attribute history API routes."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..models.history import HistoryKind
from ..schemas.envelope import Envelope
from ..schemas.history import (
    AliasHistoryResponse,
    GuardianHistoryResponse,
    NameHistoryResponse,
    SexHistoryResponse,
)
from ..services.person import PersonMutationOrchestrator, get_orchestrator
from .person import PersonIdPath

router = APIRouter(tags=["history"])

# path, kind, response row schema
HISTORY_ROUTES: list[tuple[str, HistoryKind, type[BaseModel]]] = [
    ("/names", HistoryKind.NAME, NameHistoryResponse),
    ("/sex", HistoryKind.SEX, SexHistoryResponse),
    ("/aliases", HistoryKind.ALIAS, AliasHistoryResponse),
    ("/guardians", HistoryKind.GUARDIAN, GuardianHistoryResponse),
]


def _register(path: str, kind: HistoryKind, schema: type[BaseModel]) -> None:
    async def list_all(
        orchestrator: PersonMutationOrchestrator = Depends(get_orchestrator),
    ) -> Envelope:
        rows = [schema.model_validate(r) async for r in orchestrator.list_history(kind)]
        return Envelope(data=rows)

    async def list_for_person(
        person_id: PersonIdPath,
        orchestrator: PersonMutationOrchestrator = Depends(get_orchestrator),
    ) -> Envelope:
        records = await orchestrator.list_person_history(person_id, kind)
        return Envelope(data=[schema.model_validate(r) for r in records])

    router.add_api_route(
        path,
        list_all,
        methods=["GET"],
        response_model=Envelope[list[schema]],  # type: ignore[valid-type]
        name=f"list_{kind.value}_history",
        summary=f"List the full {kind.value} history",
    )
    router.add_api_route(
        f"{path}/{{person_id}}",
        list_for_person,
        methods=["GET"],
        response_model=Envelope[list[schema]],  # type: ignore[valid-type]
        name=f"list_person_{kind.value}_history",
        summary=f"List one person's {kind.value} history",
    )


for _path, _kind, _schema in HISTORY_ROUTES:
    _register(_path, _kind, _schema)
