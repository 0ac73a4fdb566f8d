import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from flashdeck.application.config import resolve_config
from flashdeck.application.factory import Services, build_services
from flashdeck.consts import VERSION
from flashdeck.domain.constants import SESSION_COOKIE_NAME
from flashdeck.domain.errors import FlashdeckError, StoreFailure, Unauthorized
from flashdeck.infrastructure.storage.records import card_to_record, collection_to_record

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("flashdeck.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"flashdeck server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("flashdeck server shutting down...")


app = FastAPI(
    title="flashdeck",
    description="Spaced-repetition flashcard server.",
    version=VERSION,
    lifespan=lifespan,
)

start_time = time.time()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@lru_cache(maxsize=1)
def get_services() -> Services:
    return build_services(resolve_config())


def require_auth(request: Request, services: Services = Depends(get_services)) -> None:
    authenticated = services.sessions.check_auth(
        request.cookies.get(SESSION_COOKIE_NAME),
        request.headers.get("authorization"),
        utcnow(),
    )
    if not authenticated:
        raise Unauthorized()


@app.exception_handler(FlashdeckError)
async def handle_flashdeck_error(request: Request, exc: FlashdeckError):
    if isinstance(exc, StoreFailure):
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.public_message})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


@app.post("/auth")
def login(req: LoginRequest, response: Response, services: Services = Depends(get_services)):
    if not services.sessions.validate_credentials(req.username, req.password):
        raise Unauthorized("Invalid credentials")

    token = services.sessions.create_session(req.username, utcnow())
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=services.sessions.max_age,
        httponly=True,
        samesite="lax",
        path="/",
    )
    logger.info(f"Session created for {req.username}")
    return {"success": True}


@app.delete("/auth")
def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
    return {"success": True}


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------


class CollectionRequest(BaseModel):
    name: str | None = None
    description: str | None = None


@app.get("/collections", dependencies=[Depends(require_auth)])
def list_collections(services: Services = Depends(get_services)):
    return [collection_to_record(c) for c in services.collections.list_collections()]


@app.post("/collections", status_code=201, dependencies=[Depends(require_auth)])
def create_collection(req: CollectionRequest, services: Services = Depends(get_services)):
    collection = services.collections.create_collection(
        req.name, utcnow(), description=req.description
    )
    return collection_to_record(collection)


@app.get("/collections/{collection_id}", dependencies=[Depends(require_auth)])
def get_collection(collection_id: str, services: Services = Depends(get_services)):
    return collection_to_record(services.collections.get_collection(collection_id))


@app.put("/collections/{collection_id}", dependencies=[Depends(require_auth)])
def update_collection(
    collection_id: str, req: CollectionRequest, services: Services = Depends(get_services)
):
    collection = services.collections.update_collection(
        collection_id, utcnow(), name=req.name, description=req.description
    )
    return collection_to_record(collection)


@app.delete("/collections/{collection_id}", dependencies=[Depends(require_auth)])
def delete_collection(collection_id: str, services: Services = Depends(get_services)):
    services.collections.delete_collection(collection_id)
    return {"success": True}


# ---------------------------------------------------------------------------
# Cards
# ---------------------------------------------------------------------------


class CardCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    front: str | None = None
    back: str | None = None
    collection_id: str | None = Field(default=None, alias="collectionId")
    collection: str | None = None  # collection name, alternative to collectionId
    note_id: str | None = Field(default=None, alias="noteId")


class CardUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    front: str | None = None
    back: str | None = None
    collection_id: str | None = Field(default=None, alias="collectionId")
    note_id: str | None = Field(default=None, alias="noteId")


@app.get("/cards", dependencies=[Depends(require_auth)])
def list_cards(
    collection_id: str | None = Query(default=None, alias="collectionId"),
    due: bool = False,
    new: bool = False,
    services: Services = Depends(get_services),
):
    cards = services.cards.list_cards(utcnow(), collection_id=collection_id, due=due, new=new)
    return [card_to_record(c) for c in cards]


@app.post("/cards", status_code=201, dependencies=[Depends(require_auth)])
def create_card(req: CardCreateRequest, services: Services = Depends(get_services)):
    card = services.cards.create_card(
        front=req.front,
        back=req.back,
        now=utcnow(),
        collection_id=req.collection_id,
        collection_name=req.collection,
        note_id=req.note_id,
    )
    return card_to_record(card)


@app.get("/cards/{card_id}", dependencies=[Depends(require_auth)])
def get_card(card_id: str, services: Services = Depends(get_services)):
    return card_to_record(services.cards.get_card(card_id))


@app.put("/cards/{card_id}", dependencies=[Depends(require_auth)])
def update_card(card_id: str, req: CardUpdateRequest, services: Services = Depends(get_services)):
    changes = req.model_dump(exclude_unset=True)
    return card_to_record(services.cards.update_card(card_id, changes, utcnow()))


@app.delete("/cards/{card_id}", dependencies=[Depends(require_auth)])
def delete_card(card_id: str, services: Services = Depends(get_services)):
    services.cards.delete_card(card_id)
    return {"success": True}


# ---------------------------------------------------------------------------
# Review
# ---------------------------------------------------------------------------


class ReviewRequest(BaseModel):
    # Validated by Rating.parse so bad values produce 400, not 422.
    rating: Any = None


@app.get("/cards/{card_id}/review", dependencies=[Depends(require_auth)])
def get_review_options(card_id: str, services: Services = Depends(get_services)):
    """Interval preview for each rating. Does not modify the card."""
    options = services.reviews.get_review_options(card_id, utcnow())
    return [{"rating": o.rating, "interval": o.interval} for o in options]


@app.post("/cards/{card_id}/review", dependencies=[Depends(require_auth)])
def submit_review(card_id: str, req: ReviewRequest, services: Services = Depends(get_services)):
    card = services.reviews.submit_review(card_id, req.rating, utcnow())
    return card_to_record(card)


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


@app.get("/stats", dependencies=[Depends(require_auth)])
def get_stats(services: Services = Depends(get_services)):
    snapshot = services.stats.snapshot(utcnow())
    return {
        "totalCollections": snapshot.total_collections,
        "totalCards": snapshot.total_cards,
        "dueCards": snapshot.due_cards,
        "newCards": snapshot.new_cards,
        "collections": [
            {
                "id": c.id,
                "name": c.name,
                "totalCards": c.total_cards,
                "dueCards": c.due_cards,
                "newCards": c.new_cards,
            }
            for c in snapshot.collections
        ],
    }
