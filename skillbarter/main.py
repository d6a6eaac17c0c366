# skillbarter/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skillbarter.api import auth, matches, message, notification, review, skill, swap, swap_request, users
from skillbarter.config import settings
from skillbarter.database import Base, engine

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(title="SkillBarter API")

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routers
app.include_router(auth.router)           # /auth/*
app.include_router(users.router)          # /users/*
app.include_router(skill.router)          # /skills/*
app.include_router(matches.router)        # /matches/*
app.include_router(swap_request.router)   # /swap-requests/*
app.include_router(swap.router)           # /swaps/*
app.include_router(message.router)        # /swaps/{id}/messages, /conversations/
app.include_router(review.router)         # /reviews/*
app.include_router(notification.router)   # /notifications/*


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "message": "SkillBarter API is running",
        "version": "1.0.0",
    }
