from fastapi import FastAPI, Request
from dotenv import load_dotenv

load_dotenv()
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from database import Base, engine
from datetime import datetime
import os
import routers.customers as customers
import routers.lorry_receipts as lorry_receipts
import routers.invoices as invoices
import routers.truck_hiring_notes as truck_hiring_notes
import routers.payments as payments
import routers.ledgers as ledgers
from utils.exceptions import NotFoundError, ValidationError
import models  # noqa: F401  registers every table on Base.metadata
import logging
from fastapi.openapi.utils import get_openapi


LOG_DIR = os.getenv("LOG_DIR", "logs")
os.makedirs(LOG_DIR, exist_ok=True) # Create the log directory if it doesn't exist

# Create a unique log file name based on current date/time
current_time_str = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
LOG_FILE = os.path.join(LOG_DIR, f"app_{current_time_str}.log")

# Configure the root logger
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    filename=LOG_FILE, # Log to a file
    filemode='a' # Append to the file if it exists
)

# Also log to the console
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.INFO)
console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logging.getLogger().addHandler(console_handler) # Add to the root logger

logger = logging.getLogger(__name__)
logger.info("Application starting up...")
# --- End Logging Configuration ---


# Create database tables
Base.metadata.create_all(bind=engine)


app = FastAPI()


allowed_origins_str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:5173,http://127.0.0.1:5173"
)

# Split the string into a list, stripping any whitespace
allowed_origins = [origin.strip() for origin in allowed_origins_str.split(',')]

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def validation_failed(field_errors, form_errors=None) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "message": "Validation failed",
            "errors": {"formErrors": form_errors or [], "fieldErrors": field_errors},
        },
    )


@app.exception_handler(ValidationError)
async def domain_validation_error_handler(request: Request, exc: ValidationError):
    logger.warning(f"Validation failed on {request.method} {request.url.path}: {exc.message}")
    form_errors = [] if exc.field_errors else [exc.message]
    return validation_failed(exc.field_errors, form_errors)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    field_errors = {}
    form_errors = []
    for error in exc.errors():
        # loc looks like ("body", "amount") or ("query", "start_date"); cross-field errors stop at ("body",)
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        if loc:
            field_errors.setdefault(".".join(loc), []).append(error.get("msg"))
        else:
            form_errors.append(error.get("msg"))
    logger.warning(f"Request validation failed on {request.method} {request.url.path}: {field_errors or form_errors}")
    return validation_failed(field_errors, form_errors)


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    logger.warning(f"{exc.entity} {exc.entity_id} not found on {request.method} {request.url.path}")
    return JSONResponse(status_code=404, content={"detail": exc.message})


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="Freight Ledger API",
        version="1.0.0",
        description="API for lorry receipts, invoices, truck hiring notes, payments and ledgers",
        routes=app.routes,
    )
    openapi_schema["components"]["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
    }
    # Apply security globally to all endpoints
    openapi_schema["security"] = [{"BearerAuth": []}]
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi


app.include_router(customers.router)
app.include_router(lorry_receipts.router)
app.include_router(invoices.router)
app.include_router(truck_hiring_notes.router)
app.include_router(payments.router)
app.include_router(ledgers.router)

@app.get("/")
async def test_route():
    return {"message": "Welcome to the Freight Ledger API!"}
