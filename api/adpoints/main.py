import logging
from fastapi import FastAPI, Depends, Header, Path, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from .config import Settings, load_settings
from .db import Database, get_db
from .errors import AppError, Forbidden
from .models import ROLE_ADMIN
from .schemas import Credentials, RegisterResponse, LoginResponse, MeResponse
from .schemas import AdIn, AdOut, CreatedResponse, ViewResponse
from .schemas import RedeemRequest, SuccessResponse, RedemptionOut
from .security import TokenService, TokenClaims, bearer_token
from .views import ViewLedger
from . import ads, redemptions, users

logger = logging.getLogger(__name__)

# largest value a SQLite INTEGER column can hold
MAX_ID = 2**63 - 1


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# --- Authorization ---

def current_user(request: Request, authorization: str | None = Header(default=None, alias="Authorization")) -> TokenClaims:
    tokens: TokenService = request.app.state.tokens
    return tokens.verify(bearer_token(authorization))


def require_admin(claims: TokenClaims = Depends(current_user)) -> TokenClaims:
    if claims.role != ROLE_ADMIN:
        raise Forbidden()
    return claims


# --- Error envelope ---

def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"error": "Invalid request"})

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(SQLAlchemyError)
    async def db_exc_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Storage error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


# --- Routes ---

def register_routes(app: FastAPI) -> None:
    @app.get("/health")
    def health():
        return {"ok": True}

    @app.post("/register", response_model=RegisterResponse)
    def register(body: Credentials, request: Request, db: Session = Depends(get_db)):
        rounds = request.app.state.settings.bcrypt_rounds
        return RegisterResponse(id=users.register(db, body.username, body.password, rounds=rounds))

    @app.post("/login", response_model=LoginResponse)
    def login(body: Credentials, request: Request, db: Session = Depends(get_db)):
        user = users.authenticate(db, body.username, body.password)
        token = request.app.state.tokens.issue(user)
        return LoginResponse(token=token, role=user.role)

    @app.get("/me", response_model=MeResponse)
    def me(claims: TokenClaims = Depends(current_user), db: Session = Depends(get_db)):
        return users.get_user(db, claims.id)

    @app.get("/ads", response_model=list[AdOut])
    def list_ads(_: TokenClaims = Depends(current_user), db: Session = Depends(get_db)):
        return ads.list_ads(db)

    @app.post("/ads/{ad_id}/view", response_model=ViewResponse)
    def view_ad(request: Request, ad_id: int = Path(..., ge=1, le=MAX_ID), claims: TokenClaims = Depends(current_user), db: Session = Depends(get_db)):
        ledger: ViewLedger = request.app.state.ledger
        reward = ledger.record_view(db, claims.id, ad_id)
        return ViewResponse(success=True, reward=reward)

    @app.post("/redeem", response_model=SuccessResponse)
    def redeem(body: RedeemRequest, claims: TokenClaims = Depends(current_user), db: Session = Depends(get_db)):
        redemptions.request_redemption(db, claims.id, body.reward)
        return SuccessResponse(success=True)

    # --- Admin ---

    @app.post("/admin/ads", response_model=CreatedResponse)
    def admin_create_ad(body: AdIn, _: TokenClaims = Depends(require_admin), db: Session = Depends(get_db)):
        ad_id = ads.create_ad(db, body.title, body.url, body.duration, body.reward_points)
        return CreatedResponse(id=ad_id)

    @app.get("/admin/redemptions", response_model=list[RedemptionOut])
    def admin_redemptions(_: TokenClaims = Depends(require_admin), db: Session = Depends(get_db)):
        return redemptions.list_redemptions(db)

    @app.post("/admin/redemptions/{redemption_id}/{action}", response_model=SuccessResponse)
    def admin_set_redemption(
        action: str,
        redemption_id: int = Path(..., ge=1, le=MAX_ID),
        _: TokenClaims = Depends(require_admin),
        db: Session = Depends(get_db),
    ):
        redemptions.set_status(db, redemption_id, action)
        return SuccessResponse(success=True)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    db = Database(settings.db_path)
    db.create_all()
    with db.session() as session:
        users.bootstrap_admin(session, settings.admin_username, settings.admin_password, settings.bcrypt_rounds)

    app = FastAPI(title="Adpoints API")
    app.state.settings = settings
    app.state.db = db
    app.state.tokens = TokenService(settings.jwt_secret, settings.token_hours)
    app.state.ledger = ViewLedger(settings.cooldown_ms)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)
    register_routes(app)
    return app


if __name__ == "__main__":
    import uvicorn
    settings = load_settings()
    uvicorn.run(
        "adpoints.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.port,
        reload=False,
    )
