# main.py

from datetime import datetime, timezone
from typing import List, Optional

import structlog
from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession
from contextlib import asynccontextmanager

from config import get_settings
from database import get_db, create_tables, dispose_engine
from errors import BlogError, StorageError
from logging_config import configure_logging
from service import PostService
from store import PostStore

logger = structlog.get_logger()

# --- Pydantic Models --- 

class PostOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    category: str
    author: str
    content: str
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(None, serialization_alias="updatedAt")

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite hands back naive datetimes; they were written as UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

class PostCreate(BaseModel):
    title: Optional[str] = None
    category: Optional[str] = None
    author: Optional[str] = None
    content: Optional[str] = None

class PostUpdate(PostCreate):
    pass

class CreatedResponse(BaseModel):
    message: str
    id: str

class MessageResponse(BaseModel):
    message: str

# --- Lifespan Management (for DB setup/teardown) --- 

@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(get_settings())
    logger.info("api_starting")
    await create_tables()
    yield
    logger.info("api_stopping")
    await dispose_engine() # Dispose of the engine connection pool

# --- FastAPI App --- 

app = FastAPI(lifespan=lifespan, title="Zenith CMS", version="1.0.0")

# --- Error Handling --- 

def error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    body = {"error": error}
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)

@app.exception_handler(BlogError)
async def blog_error_handler(request: Request, exc: BlogError):
    if isinstance(exc, StorageError):
        logger.error("storage_error", path=request.url.path, error=exc.message, details=exc.details)
    return error_response(exc.status_code, exc.message, exc.details)

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning("invalid_request_body", path=request.url.path)
    return error_response(400, "Invalid request body", str(exc.errors()))

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error("unhandled_error", path=request.url.path, error=repr(exc))
    return error_response(500, "Internal server error")

# --- Dependencies --- 

async def get_service(session: AsyncSession = Depends(get_db)) -> PostService:
    return PostService(PostStore(session))

# --- API Endpoints --- 

@app.get("/api/posts", response_model=List[PostOut])
async def list_posts(service: PostService = Depends(get_service)):
    """All posts, newest first."""
    return await service.list()

@app.get("/api/posts/{post_id}", response_model=PostOut)
async def read_post(post_id: str, service: PostService = Depends(get_service)):
    return await service.get_one(post_id)

@app.post("/api/posts", response_model=CreatedResponse, status_code=201)
async def create_post(payload: PostCreate, service: PostService = Depends(get_service)):
    post_id = await service.create(payload.model_dump())
    return CreatedResponse(message="Post created!", id=post_id)

@app.patch("/api/posts/{post_id}", response_model=MessageResponse)
async def update_post(post_id: str, payload: Optional[PostUpdate] = None, service: PostService = Depends(get_service)):
    """Partial update: only non-blank supplied fields change."""
    await service.update(post_id, (payload or PostUpdate()).model_dump())
    return MessageResponse(message="Post updated!")

@app.delete("/api/posts/{post_id}", response_model=MessageResponse)
async def delete_post(post_id: str, service: PostService = Depends(get_service)):
    await service.delete(post_id)
    return MessageResponse(message="Post deleted!")

# --- Root Endpoints --- 

@app.get("/")
async def root():
    return {"message": "Welcome to the Zenith CMS API. Go to /docs for documentation."}

@app.get("/health")
async def health():
    return {"status": "ok"}

# --- Run with Uvicorn (for local testing) --- 
# Use: uvicorn main:app --reload

if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("main:app", host=settings.api_host, port=settings.api_port)
