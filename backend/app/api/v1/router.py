"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import auth, swaps, reviews, transactions, admin

router = APIRouter()

# Include authentication endpoints
router.include_router(auth.router)

# Swap lifecycle and settlement
router.include_router(swaps.router)
router.include_router(reviews.router)

# Credit ledger
router.include_router(transactions.router)

# Include admin endpoints
router.include_router(admin.router)
