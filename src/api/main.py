"""
FastAPI backend: REST API for profiles, details, connections and family trees.
Run with uvicorn: uvicorn api.main:app --reload
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from repo root (when run from repo root or from Docker)
for path in (
    Path(__file__).resolve().parent.parent.parent / ".env",
    Path.cwd() / ".env",
):
    if path.exists():
        load_dotenv(path)
        break

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse
from neo4j import AsyncGraphDatabase
from pydantic import BaseModel

from kinship.application import (
    DEFAULT_MAX_DEPTH,
    ConnectionCreated,
    ConnectionNotFound,
    DetailData,
    DetailNotFound,
    FamilyTreeBuilder,
    Invalid,
    ProfileData,
    ProfileNotFound,
    ProfileService,
    StoreError,
)
from kinship.domain import (
    ConnectionType,
    DetailCategory,
    FamilyTreeNode,
    Profile,
    ProfileDetail,
)
from kinship.infrastructure import (
    InMemoryProfileRepository,
    Neo4jProfileRepository,
    ensure_profile_constraint,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

STORE_MEMORY = "memory"
STORE_NEO4J = "neo4j"


def _env_int(name: str, default: int | None, minimum: int) -> int | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return default
    if value < minimum:
        logger.warning("Ignoring %s=%d: must be at least %d", name, value, minimum)
        return default
    return value


def _store_kind() -> str:
    return os.environ.get("KINSHIP_STORE", STORE_MEMORY).strip().lower() or STORE_MEMORY


def _get_driver():
    uri = os.environ.get("NEO4J_URI", "bolt://localhost:7687").strip()
    user = os.environ.get("NEO4J_USER", "neo4j").strip()
    password = os.environ.get("NEO4J_PASSWORD", "password").strip()
    return AsyncGraphDatabase.driver(uri, auth=(user, password))


def _build_service(repository) -> ProfileService:
    builder = FamilyTreeBuilder(
        repository,
        max_depth=_env_int("FAMILY_TREE_MAX_DEPTH", DEFAULT_MAX_DEPTH, 0),
        max_nodes=_env_int("FAMILY_TREE_MAX_NODES", None, 1),
        concurrency=_env_int("FAMILY_TREE_CONCURRENCY", 1, 1),
    )
    return ProfileService(repository, tree_builder=builder)


def get_service(request: Request) -> ProfileService:
    return request.app.state.service


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.driver = None
    kind = _store_kind()
    try:
        if kind == STORE_NEO4J:
            app.state.driver = _get_driver()
            await ensure_profile_constraint(app.state.driver)
            repository = Neo4jProfileRepository(app.state.driver)
        else:
            if kind != STORE_MEMORY:
                logger.warning("Unknown KINSHIP_STORE=%r, using in-memory store", kind)
            repository = InMemoryProfileRepository()
        app.state.service = _build_service(repository)
        logger.info("Kinship API started with %s store", kind)
        yield
    finally:
        if getattr(app.state, "driver", None) is not None:
            await app.state.driver.close()


app = FastAPI(title="Kinship API", lifespan=lifespan)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "Storage unavailable"})


# --- REST: health ---


@app.get("/health")
def health():
    return {"status": "ok"}


# --- REST: profiles ---


class CreateProfileBody(BaseModel):
    full_name: str
    preferred_name: str | None = None
    relationship: str | None = None
    photo_url: str | None = None
    phone_number: str | None = None
    include_in_family_tree: bool = True


class ProfileItem(BaseModel):
    profile_id: str
    full_name: str
    display_name: str
    relationship: str | None = None
    photo_url: str | None = None
    phone_number: str | None = None
    include_in_family_tree: bool = True
    created_at: str


def _profile_item(p: Profile) -> ProfileItem:
    return ProfileItem(
        profile_id=p.id,
        full_name=p.full_name,
        display_name=p.display_name,
        relationship=p.relationship,
        photo_url=p.photo_url,
        phone_number=p.phone_number,
        include_in_family_tree=p.include_in_family_tree,
        created_at=p.created_at.isoformat(),
    )


@app.post("/profiles")
async def create_profile(body: CreateProfileBody, request: Request):
    service = get_service(request)
    result = await service.add_profile(
        ProfileData(
            full_name=body.full_name,
            preferred_name=body.preferred_name,
            relationship=body.relationship,
            photo_url=body.photo_url,
            phone_number=body.phone_number,
            include_in_family_tree=body.include_in_family_tree,
        )
    )
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    return JSONResponse(
        content={"profile_id": result.profile_id, "name": result.name},
        status_code=201,
    )


@app.get("/profiles")
async def list_profiles(request: Request):
    profiles = await get_service(request).list_profiles()
    return [_profile_item(p) for p in profiles]


@app.get("/profiles/{profile_id}")
async def get_profile(profile_id: str, request: Request):
    profile = await get_service(request).get_profile(profile_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return _profile_item(profile)


@app.put("/profiles/{profile_id}")
async def update_profile(profile_id: str, body: CreateProfileBody, request: Request):
    result = await get_service(request).update_profile(
        profile_id,
        ProfileData(
            full_name=body.full_name,
            preferred_name=body.preferred_name,
            relationship=body.relationship,
            photo_url=body.photo_url,
            phone_number=body.phone_number,
            include_in_family_tree=body.include_in_family_tree,
        ),
    )
    if isinstance(result, ProfileNotFound):
        raise HTTPException(status_code=404, detail="Profile not found")
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    return {"profile_id": result.profile_id, "name": result.name}


@app.delete("/profiles/{profile_id}")
async def delete_profile(profile_id: str, request: Request):
    result = await get_service(request).delete_profile(profile_id)
    if isinstance(result, ProfileNotFound):
        raise HTTPException(status_code=404, detail="Profile not found")
    return Response(status_code=204)


# --- REST: profile details ---


class DetailBody(BaseModel):
    category: str = DetailCategory.NOTE.value
    label: str
    value: str = ""
    status: str | None = None
    occasion: str | None = None
    metadata: dict[str, str] = {}


class DetailItem(BaseModel):
    detail_id: str
    profile_id: str
    category: str
    category_display: str
    label: str
    value: str
    status: str | None = None
    occasion: str | None = None
    metadata: dict[str, str]
    created_at: str
    updated_at: str


def _detail_data(body: DetailBody) -> DetailData:
    return DetailData(
        category=body.category,
        label=body.label,
        value=body.value,
        status=body.status,
        occasion=body.occasion,
        metadata=body.metadata,
    )


def _detail_item(d: ProfileDetail) -> DetailItem:
    return DetailItem(
        detail_id=d.id,
        profile_id=d.profile_id,
        category=d.category.value,
        category_display=d.category.display_name,
        label=d.label,
        value=d.value,
        status=d.status,
        occasion=d.occasion,
        metadata=d.metadata,
        created_at=d.created_at.isoformat(),
        updated_at=d.updated_at.isoformat(),
    )


@app.post("/profiles/{profile_id}/details")
async def create_detail(profile_id: str, body: DetailBody, request: Request):
    result = await get_service(request).add_detail(profile_id, _detail_data(body))
    if isinstance(result, ProfileNotFound):
        raise HTTPException(status_code=404, detail="Profile not found")
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    return JSONResponse(
        content={"detail_id": result.detail_id, "profile_id": result.profile_id},
        status_code=201,
    )


@app.get("/profiles/{profile_id}/details")
async def list_details(
    profile_id: str, request: Request, category: str | None = None
):
    result = await get_service(request).details_of(profile_id, category)
    if isinstance(result, ProfileNotFound):
        raise HTTPException(status_code=404, detail="Profile not found")
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    return [_detail_item(d) for d in result]


@app.put("/details/{detail_id}")
async def update_detail(detail_id: str, body: DetailBody, request: Request):
    result = await get_service(request).update_detail(detail_id, _detail_data(body))
    if isinstance(result, DetailNotFound):
        raise HTTPException(status_code=404, detail="Detail not found")
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    return {"detail_id": result.detail_id}


@app.delete("/details/{detail_id}")
async def delete_detail(detail_id: str, request: Request):
    result = await get_service(request).delete_detail(detail_id)
    if isinstance(result, DetailNotFound):
        raise HTTPException(status_code=404, detail="Detail not found")
    return Response(status_code=204)


# --- REST: connections ---


class CreateConnectionBody(BaseModel):
    to_profile_id: str
    relationship_type: str = ConnectionType.OTHER.value
    bidirectional: bool = True


class ConnectionItem(BaseModel):
    connection_id: str
    relationship_type: str
    relationship: str
    category: str
    profile: ProfileItem


@app.post("/profiles/{profile_id}/connections")
async def create_connection(
    profile_id: str, body: CreateConnectionBody, request: Request
):
    result = await get_service(request).connect(
        profile_id,
        body.to_profile_id,
        ConnectionType.parse(body.relationship_type),
        bidirectional=body.bidirectional,
    )
    if isinstance(result, ProfileNotFound):
        raise HTTPException(status_code=404, detail="Profile not found")
    if isinstance(result, Invalid):
        raise HTTPException(status_code=400, detail=result.reason)
    if not isinstance(result, ConnectionCreated):
        raise HTTPException(status_code=400, detail="Failed to create connection")
    return JSONResponse(
        content={
            "connection_id": result.connection_id,
            "relationship_type": result.relationship_type.value,
            "inverse_id": result.inverse_id,
        },
        status_code=201,
    )


@app.get("/profiles/{profile_id}/connections")
async def list_connections(profile_id: str, request: Request):
    service = get_service(request)
    if await service.get_profile(profile_id) is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    connections = await service.connections_of(profile_id)
    return [
        ConnectionItem(
            connection_id=c.id,
            relationship_type=c.relationship_type.value,
            relationship=c.relationship_type.display_name,
            category=c.relationship_type.category.value,
            profile=_profile_item(c.connected_profile),
        )
        for c in connections
    ]


@app.delete("/connections/{connection_id}")
async def delete_connection(
    connection_id: str, request: Request, bidirectional: bool = True
):
    result = await get_service(request).disconnect(
        connection_id, bidirectional=bidirectional
    )
    if isinstance(result, ConnectionNotFound):
        raise HTTPException(status_code=404, detail="Connection not found")
    return Response(status_code=204)


# --- REST: family tree ---


def _tree_to_dict(node: FamilyTreeNode) -> dict:
    rel = node.relationship_to_parent
    return {
        "profile_id": node.id,
        "name": node.profile.display_name,
        "photo_url": node.profile.photo_url,
        "relationship": rel.value if rel is not None else None,
        "relationship_display": rel.display_name if rel is not None else None,
        "depth": node.depth,
        "children": [_tree_to_dict(child) for child in node.children],
    }


@app.get("/profiles/{profile_id}/family-tree")
async def family_tree(
    profile_id: str,
    request: Request,
    max_depth: int | None = Query(None, ge=0, le=10),
):
    result = await get_service(request).family_tree(profile_id, max_depth=max_depth)
    if isinstance(result, ProfileNotFound):
        raise HTTPException(status_code=404, detail="Profile not found")
    return _tree_to_dict(result)
