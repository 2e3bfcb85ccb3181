from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from qtrun.api.activities import router as activities_router
from qtrun.api.races import router as races_router
from qtrun.api.stats import router as stats_router
from qtrun.api.strava import router as strava_router
from qtrun.db import Base, engine
from qtrun.models.activity import Activity  # noqa: F401  (import ensures table is registered)
from qtrun.models.race import Race  # noqa: F401
from qtrun.core.config import settings
from qtrun.core.logger import setup_logger
import os


setup_logger(settings)

app = FastAPI(title="QT.run")

# Allow CORS for local frontend
origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create DB tables on startup
Base.metadata.create_all(bind=engine)

# Ensure uploads directory exists
os.makedirs(settings.uploads_dir, exist_ok=True)

app.include_router(activities_router)
app.include_router(stats_router)
app.include_router(races_router)
app.include_router(strava_router)


@app.get("/")
def root():
    return {"message": "QT.run backend is running"}
