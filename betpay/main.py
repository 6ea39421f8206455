from fastapi import FastAPI
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from betpay.api.routes import router
from betpay.api.admin_routes import router as admin_router
from betpay.api.schemas import ErrorResponse
from betpay.core.errors import (
    MissingDataError,
    RemoteTransactionError,
    StepTransitionError,
    ValidationError,
    WizardNotFound,
)
from betpay.observability.logging import log
from betpay.settings import settings
from betpay.utils.lock import LockNotAcquired

app = FastAPI(title="BetPay Transaction Wizard API")

origins = [x.strip() for x in settings.CORS_ORIGINS.split(",") if x.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router)
app.include_router(admin_router)


@app.get("/")
def root():
    return {
        "status": "ok",
        "message": "Transaction wizard API is running. Start with POST /wizard {kind}.",
    }


@app.get("/health")
def health():
    return {"status": "ok"}


def _error(status_code: int, error: str, message: str, field_errors=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, message=message, fieldErrors=field_errors or {}).model_dump(),
    )


# Step-local validation: shown inline next to the offending field.
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error(422, "validation_error", str(exc), exc.field_errors)


@app.exception_handler(WizardNotFound)
async def not_found_handler(request: Request, exc: WizardNotFound):
    return _error(404, "wizard_not_found", "Unknown or expired wizard session")


@app.exception_handler(StepTransitionError)
async def transition_error_handler(request: Request, exc: StepTransitionError):
    return _error(409, "invalid_transition", str(exc))


@app.exception_handler(MissingDataError)
async def missing_data_handler(request: Request, exc: MissingDataError):
    return _error(409, "missing_data", str(exc))


@app.exception_handler(LockNotAcquired)
async def busy_handler(request: Request, exc: LockNotAcquired):
    return _error(409, "wizard_busy", "Another operation is in progress for this wizard")


# Registry/settings fetch at wizard start; submission failures never get here.
@app.exception_handler(RemoteTransactionError)
async def remote_error_handler(request: Request, exc: RemoteTransactionError):
    return _error(502, "remote_error", str(exc))


@app.exception_handler(Exception)
async def universal_exception_handler(request: Request, exc: Exception):
    try:
        log(event="unhandled_exception", path=request.url.path, errorType=type(exc).__name__, error=str(exc)[:500])
    except Exception:
        pass
    return _error(500, "internal_error", "Une erreur est survenue")
