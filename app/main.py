from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from app.config import get_app_env, get_log_level
from app.db import ping_db
from app.errors import add_exception_handlers
from app.log import setup_logging
from app.routes import alerts as alert_routes
from app.routes import evacuation as evacuation_routes
from app.routes import sms as sms_routes

setup_logging(get_log_level(), get_app_env())

app = FastAPI(
    title="Emergency Alert SMS API",
    version="0.1.0",
    description="Alert and evacuation-center API with SMS notifications.",
)
add_exception_handlers(app)
app.include_router(sms_routes.router)
app.include_router(alert_routes.router)
app.include_router(evacuation_routes.router)


@app.get("/", response_class=JSONResponse)
def root() -> dict[str, str]:
    return {
        "message": "Emergency Alert SMS API is running.",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health", response_class=JSONResponse)
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/db/health", response_class=JSONResponse)
async def db_health() -> dict[str, str]:
    try:
        ok = await ping_db()
    except RuntimeError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=503, detail="Database not reachable.") from exc

    return {"status": "ok" if ok else "error"}
