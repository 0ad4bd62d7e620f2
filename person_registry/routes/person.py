"""Person API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from ..schemas.envelope import Envelope
from ..schemas.person import (
    MAX_PERSON_ID,
    PersonCreate,
    PersonCreated,
    PersonResponse,
    PersonUpdate,
)
from ..services.person import PersonMutationOrchestrator, get_orchestrator

router = APIRouter(prefix="/people", tags=["people"])

PersonIdPath = Annotated[int, Path(ge=1, le=MAX_PERSON_ID)]


@router.get(
    "",
    response_model=Envelope[list[PersonResponse]],
    summary="List all people ordered by id",
)
async def list_people(
    orchestrator: PersonMutationOrchestrator = Depends(get_orchestrator),
) -> Envelope[list[PersonResponse]]:
    people = await orchestrator.list_people()
    return Envelope(data=[PersonResponse.model_validate(p) for p in people])


@router.post(
    "",
    response_model=Envelope[PersonCreated],
    summary="Create a person with seeded history and parentage",
)
async def create_person(
    data: PersonCreate,
    orchestrator: PersonMutationOrchestrator = Depends(get_orchestrator),
) -> Envelope[PersonCreated]:
    person_id = await orchestrator.create(data.model_dump())
    return Envelope(data=PersonCreated(person_id=person_id))


@router.get(
    "/{person_id}",
    response_model=Envelope[PersonResponse],
    summary="Get one person",
)
async def get_person(
    person_id: PersonIdPath,
    orchestrator: PersonMutationOrchestrator = Depends(get_orchestrator),
) -> Envelope[PersonResponse]:
    person = await orchestrator.get_person(person_id)
    return Envelope(data=PersonResponse.model_validate(person))


@router.patch(
    "/{person_id}",
    response_model=Envelope[PersonResponse],
    summary="Partially update a person",
)
async def update_person(
    person_id: PersonIdPath,
    data: PersonUpdate,
    orchestrator: PersonMutationOrchestrator = Depends(get_orchestrator),
) -> Envelope[PersonResponse]:
    person = await orchestrator.update(person_id, data.to_patch())
    return Envelope(data=PersonResponse.model_validate(person))


@router.delete(
    "/{person_id}",
    response_model=Envelope[None],
    summary="Delete a person (history is retained)",
)
async def delete_person(
    person_id: PersonIdPath,
    orchestrator: PersonMutationOrchestrator = Depends(get_orchestrator),
) -> Envelope[None]:
    await orchestrator.delete(person_id)
    return Envelope()
