from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from hr_insights.api import analytics_routes, generate_routes
from hr_insights.database import init_db
from hr_insights.logging_config import configure_logging

@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    init_db()
    yield

app = FastAPI(title="HR Insights API", version="1.0.0", lifespan=lifespan)

origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(generate_routes.router)
app.include_router(analytics_routes.router)

@app.get("/")
def health_check():
    return {"status": "online", "message": "HR Insights is Running"}
