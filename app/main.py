"""FastAPI application entrypoint."""

from dotenv import load_dotenv
from fastapi import FastAPI

from app.adapters.inbound.http.errors import register_error_handlers
from app.adapters.inbound.http.routes import router

# Load environment variables from .env file
load_dotenv()

app = FastAPI(
    title="Lead Timeline Engine",
    description="Step-based lead workflow engine using Clean Architecture",
    version="0.1.0",
)

register_error_handlers(app)
app.include_router(router)
