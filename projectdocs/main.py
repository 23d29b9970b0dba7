# projectdocs/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import attachments_router, documents_router, projects_router, users_router
from .database import init_db
from .utils.logging import api_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    api_logger.info("projectdocs started")
    yield


app = FastAPI(title="projectdocs", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify your actual frontend URL
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(projects_router)
app.include_router(users_router)
app.include_router(attachments_router)
app.include_router(documents_router)


@app.get("/")
async def root():
    return {"message": "projectdocs API is running"}
