"""FastAPI application entrypoint and REST surface.

Public routes register and log users in; everything else requires an
``Authorization: Bearer <token>`` header and is scoped to the caller.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import auth, simulations
from .config import settings
from .credentials import serialize_user
from .db import get_session, init_db
from .errors import NotFound, ServiceError, ValidationFailed
from .identity import IdentityProvider, pick_identity_provider
from .models import User
from .schemas import (
    BulkDeleteRequest,
    LoginRequest,
    RegisterRequest,
    SimulationCreate,
    SimulationUpdate,
    VerifyTumRequest,
)
from .tokens import TokenService, token_service_from_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    init_db()
    logger.info("simhub api ready env=%s", settings.env)
    yield


app = FastAPI(title="Simulation Workspace API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

bearer_scheme = HTTPBearer(auto_error=False)


@app.exception_handler(ServiceError)
async def service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    body: dict[str, Any] = {"error": exc.message}
    if isinstance(exc, ValidationFailed) and exc.errors:
        body["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"error": "Invalid input", "errors": _field_errors(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Server error"})


def get_token_service() -> TokenService:
    return token_service_from_settings()


def get_identity_provider() -> Optional[IdentityProvider]:
    return pick_identity_provider()


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: Session = Depends(get_session),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    token = credentials.credentials if credentials else None
    return auth.current_user(session, tokens, token)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/api/auth/register", status_code=201)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
    tokens: TokenService = Depends(get_token_service),
):
    result = auth.register(
        session,
        tokens,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        password_confirmation=payload.password_confirmation,
        tum_id=payload.tum_id,
    )
    return {"message": "User registered successfully", **result}


@app.post("/api/auth/login")
def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
    tokens: TokenService = Depends(get_token_service),
):
    result = auth.login(session, tokens, email=payload.email, password=payload.password)
    return {"message": "Login successful", **result}


@app.post("/api/auth/logout")
def logout(user: User = Depends(get_current_user)):
    # Tokens are stateless; the client discards its copy.
    logger.info("logout user id=%s", user.id)
    return {"message": "Logout successful"}


@app.get("/api/auth/me")
def me(user: User = Depends(get_current_user)):
    return {"user": serialize_user(user)}


@app.post("/api/auth/verify-tum")
def verify_tum(
    payload: VerifyTumRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
    provider: Optional[IdentityProvider] = Depends(get_identity_provider),
):
    if provider is None:
        raise NotFound("TUM verification is not enabled")
    verified = auth.verify_external_identity(
        session,
        provider,
        user,
        tum_id=payload.tum_id,
        password=payload.password,
    )
    return {"message": "TUM verification successful", "user": verified}


@app.get("/api/simulations")
def list_simulations(
    page: Optional[str] = None,
    per_page: Optional[str] = None,
    sort_by: Optional[str] = None,
    order: Optional[str] = None,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return simulations.list_simulations(
        session,
        user.id,
        page=page,
        per_page=per_page,
        sort_by=sort_by,
        order=order,
    )


@app.post("/api/simulations", status_code=201)
def create_simulation(
    payload: SimulationCreate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    sim = simulations.create_simulation(
        session,
        user.id,
        configuration=payload.configuration,
        name=payload.name,
        description=payload.description,
        results=payload.results,
        notes=payload.notes,
    )
    return {"message": "Simulation saved successfully", "simulation": simulations.serialize_simulation(sim)}


@app.post("/api/simulations/bulk-delete")
def bulk_delete_simulations(
    payload: BulkDeleteRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    simulations.bulk_delete_simulations(session, user.id, payload.ids)
    return {"message": "Simulations deleted successfully"}


@app.get("/api/simulations/{simulation_id:int}")
def get_simulation(
    simulation_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    sim = simulations.get_simulation(session, user.id, simulation_id)
    return simulations.serialize_simulation(sim)


@app.put("/api/simulations/{simulation_id:int}")
def update_simulation(
    simulation_id: int,
    payload: SimulationUpdate,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    sim = simulations.update_simulation(
        session,
        user.id,
        simulation_id,
        payload.model_dump(exclude_unset=True),
    )
    return {"message": "Simulation updated successfully", "simulation": simulations.serialize_simulation(sim)}


@app.delete("/api/simulations/{simulation_id:int}")
def delete_simulation(
    simulation_id: int,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    simulations.delete_simulation(session, user.id, simulation_id)
    return {"message": "Simulation deleted successfully"}


def _field_errors(raw_errors: Any) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for item in raw_errors:
        loc = [str(part) for part in item.get("loc", ()) if part != "body"]
        field = ".".join(loc) or "body"
        errors.setdefault(field, []).append(str(item.get("msg", "Invalid value")))
    return errors
