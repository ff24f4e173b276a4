"""Dependency injection and shared helpers for FastAPI endpoints"""

import uuid
from fastapi import HTTPException, Request
from splitledger.infrastructure.clients.notifier import SettlementNotifier


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_notifier() -> SettlementNotifier:
    """Provide settlement notification client instance"""
    return SettlementNotifier()


def parse_record_id(value: str, kind: str) -> uuid.UUID:
    """Parse a path id, 400 on malformed input"""
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {kind} ID format")
