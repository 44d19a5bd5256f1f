from fastapi import APIRouter
from leaveservice.routers import leave, policies

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(leave.router, tags=["Leave"])
api_router.include_router(policies.router, tags=["Leave Policies"])
