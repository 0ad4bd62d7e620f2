from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse

from .database import Database, get_database

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "Hello World"


@router.get("/healthz")
def healthz() -> dict[str, bool]:
    return {"ok": True}


@router.get("/readyz")
async def readyz(database: Database = Depends(get_database)) -> JSONResponse:
    ready = await database.ping()
    return JSONResponse({"ready": ready}, status_code=200 if ready else 503)
