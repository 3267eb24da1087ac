from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from usermgmt.core.config import settings
from usermgmt.core.database import engine, Base
from usermgmt.core.logging import configure_logging
from usermgmt.api.routes import users, verify

configure_logging()

# Create the users table if it doesn't exist
# In production, use migrations (Alembic) instead of create_all
Base.metadata.create_all(bind=engine)


app = FastAPI(
    title="User Management API",
    description="User CRUD with email verification and HTTP Basic authentication",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users.router)
app.include_router(verify.router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed or invalid bodies are client errors (400), not 422"""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


@app.get("/")
async def root():
    """Root endpoint - API information"""
    return {"message": "User Management API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """Health check endpoint - used by monitoring/deployment tools"""
    return {"status": "healthy"}
