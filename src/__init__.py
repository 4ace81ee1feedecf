import logging
from fastapi import FastAPI, Request, status
from contextlib import asynccontextmanager
from starlette.exceptions import HTTPException as StarletteHTTPException
from src.config import Config
from src.db.main import init_db
from src.db.redis import redis_client, check_redis_connection

from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from src.auth.routes import authRouter
from src.customers.routes import customer_router
from src.sales.routes import sale_router
from src.expenses.routes import expense_router
from src.stats.routes import stats_router
from src.daily_summaries.routes import daily_summary_router
from src.utils.limiter import limiter


logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="[%(levelname)s] %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Server started")

    # 1. Create tables
    await init_db()

    # 2. Check Redis Connection
    await check_redis_connection()

    yield

    # 3. Clean up Redis connections on shutdown
    logger.info("Closing Redis connection")
    if redis_client:
        await redis_client.aclose()
    logger.info("Server closed")

app = FastAPI(
    title="Kavid Bookkeeping API",
    description="Sales, expenses, customers and daily financial summaries for small businesses",
    lifespan = lifespan
)

# Required for SlowAPI to function correctly on routes
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/")
def health_check():
    return{
        "status": "Success",
        "message": "Server Working"
    }

@app.exception_handler(StarletteHTTPException)
async def custom_http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": exc.detail,
            "data": None
        },
        headers=getattr(exc, "headers", None)
    )

def format_validation_errors(errors):
    formatted = []
    for err in errors:
        # Skip the first element if it's "body", "query", etc.
        loc = err["loc"]
        field = ".".join(str(l) for l in loc[1:]) if len(loc) > 1 else str(loc[0])
        formatted.append({
            "field": field,
            "message": err["msg"]
        })
    return formatted

@app.exception_handler(RequestValidationError)
async def custom_validation_exception_handler(request:Request, exc: RequestValidationError):
    errors = format_validation_errors(exc.errors())
    # The first failing field drives the top-level message
    first = errors[0] if errors else {"field": "body", "message": "Invalid request"}
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": f"{first['field']}: {first['message']}",
            "errors": errors,
            "data": None
        }
    )

@app.exception_handler(RateLimitExceeded)
async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={
            "success": False,
            "message": f"Rate limit exceeded: {exc.detail}",
            "data": None
        }
    )

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "message": "Internal server error",
            "data": None
        }
    )

# Register all routers
app.include_router(authRouter, prefix="/api/auth", tags=["Authentication"])
app.include_router(customer_router, prefix="/api/customers", tags=["Customers"])
app.include_router(sale_router, prefix="/api/sales", tags=["Sales"])
app.include_router(expense_router, prefix="/api/expenses", tags=["Expenses"])
app.include_router(stats_router, prefix="/api/stats", tags=["Stats"])
app.include_router(daily_summary_router, prefix="/api/daily-summaries", tags=["Daily Summaries"])
