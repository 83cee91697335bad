# app/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.database import Base, engine
from app.api import auth, availability, mentorship_request, notification, session

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(title="MentorLink API", debug=settings.DEBUG)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://0.0.0.0:8000",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
        "http://localhost:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routers
app.include_router(auth.router)                # /auth/*
app.include_router(mentorship_request.router)  # /mentorship-requests/*
app.include_router(availability.router)        # /availability/*
app.include_router(session.router)             # /sessions/*
app.include_router(notification.router)        # /notifications/*


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "message": "MentorLink API is running",
        "version": "1.0.0",
    }
