import asyncio
import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

import config
import database
from errors import AuthenticationError, InvalidInputError, StoreError
from routes import routers

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("agrocatalog")


@asynccontextmanager
async def lifespan(app: FastAPI):
    database.connect()
    yield
    database.close()


app = FastAPI(title="Agro Catalog API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ------------------------- Middleware -------------------------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    try:
        response = await asyncio.wait_for(call_next(request), timeout=config.REQUEST_TIMEOUT)
    except asyncio.TimeoutError:
        logger.error("%s %s timed out after %ss", request.method, request.url.path, config.REQUEST_TIMEOUT)
        return JSONResponse(status_code=504, content={"detail": "Request timed out"})
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed_ms)
    return response

# ------------------------- Error handlers -------------------------

@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(AuthenticationError)
async def authentication_handler(request: Request, exc: AuthenticationError):
    return JSONResponse(status_code=401, content={"detail": str(exc)})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.exception_handler(RequestValidationError)
async def validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

# ------------------------- Routes -------------------------

for router in routers:
    app.include_router(router)


@app.get("/")
def read_root():
    return {"message": "Agro Catalog API running"}


@app.get("/test")
def test_database(db=Depends(database.get_db)):
    response = {"backend": "✅ Running", "database": "❌ Not Available"}
    try:
        db.list_collection_names()
        response["database"] = "✅ Connected"
    except PyMongoError as e:
        response["database"] = f"⚠️ {str(e)[:80]}"
    return response


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
