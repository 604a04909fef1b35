import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from travel_engine import __version__
from travel_engine.engine.errors import NotFound, InvalidArgument, InsufficientBalance
from travel_engine.api.pricing_api import router as pricing_router
from travel_engine.api.loyalty_api import router as loyalty_router
from travel_engine.api import state

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Travel Engine API",
    description="Dynamic pricing, price freezes and loyalty points for flights and hotels",
    version=__version__
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(pricing_router)
app.include_router(loyalty_router)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"error": str(exc)})


@app.exception_handler(InvalidArgument)
async def invalid_argument_handler(request: Request, exc: InvalidArgument):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(InsufficientBalance)
async def insufficient_balance_handler(request: Request, exc: InsufficientBalance):
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    if request.url.path == loyalty_router.prefix:
        message = "Invalid pointsToRedeem in request body"
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


@app.get("/")
async def root():
    return {"status": "online", "message": "Travel Engine API Active"}


@app.get("/system/status")
async def get_status():
    return {
        "engine_active": True,
        "flights": len(state.pricing_engine.list_points("flight")),
        "hotels": len(state.pricing_engine.list_points("hotel")),
        "bookings": len(state.loyalty_engine.ledger),
    }
