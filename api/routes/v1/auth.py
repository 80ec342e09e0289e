"""
api/routes/v1/auth.py -- Authentication endpoints.

Routes (mounted without the /api/v1 prefix, under /auth):
  POST /auth/login     -- email + password; returns token pair + user
  POST /auth/register  -- create an account; returns token pair + user (201)
  POST /auth/refresh   -- exchange a refresh token for a new pair

Status mapping:
  login:    401 for bad credentials or an inactive account
  register: 400 when the email is taken
  refresh:  401 for an invalid refresh token or a vanished user
  Malformed bodies are 400 via the validation handler in api/main.py.

Security:
  [C1] Unknown email and wrong password share one error code
       ("bad_credentials") so responses do not reveal which emails exist.
  [M5] Cache-Control: no-store on every response that carries tokens.
"""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from api.models import AuthResponse, LoginRequest, RefreshRequest, RegisterRequest
from auth.models import AuthResult
from auth.service import AuthService
from core.errors import AccountInactive, EmailExists, InvalidCredentials, InvalidRefreshToken, UserNotFound

# Auth policy: every route here is public -- they are how callers obtain tokens.
router = APIRouter(prefix="/auth")


def _token_response(request: Request, result: AuthResult, status_code: int) -> JSONResponse:
    expires_in = int(request.app.state.tokens.access_ttl.total_seconds())
    resp = JSONResponse(
        status_code=status_code,
        content=AuthResponse.from_result(result, expires_in).model_dump(mode="json"),
    )
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.post("/login", response_model=AuthResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password.

    Inactive accounts get "account_inactive"; every other failure gets the
    same "bad_credentials" error.
    """
    auth_service: AuthService = request.app.state.auth_service
    try:
        result = auth_service.login(body.email, body.password)
    except (InvalidCredentials, AccountInactive) as exc:
        raise HTTPException(status_code=401, detail={"code": exc.code, "message": exc.message}) from exc
    return _token_response(request, result, 200)


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> JSONResponse:
    """Create an account with the requested role and log it in."""
    auth_service: AuthService = request.app.state.auth_service
    try:
        result = auth_service.register(body.email, body.password, body.role)
    except EmailExists as exc:
        raise HTTPException(status_code=400, detail={"code": exc.code, "message": exc.message}) from exc
    return _token_response(request, result, 201)


@router.post("/refresh", response_model=AuthResponse)
def refresh(request: Request, body: RefreshRequest) -> JSONResponse:
    """Rotate tokens. The new access token carries the user's current role."""
    auth_service: AuthService = request.app.state.auth_service
    try:
        result = auth_service.refresh(body.refresh_token)
    except (InvalidRefreshToken, UserNotFound) as exc:
        raise HTTPException(status_code=401, detail={"code": exc.code, "message": exc.message}) from exc
    return _token_response(request, result, 200)
