from fastapi import APIRouter
from hrdesk.routers import leave, payslip, users

# Centralized API router hub: main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(users.router, tags=["Users"])
api_router.include_router(leave.router, tags=["Leave"])
api_router.include_router(payslip.router, tags=["Payslips"])
