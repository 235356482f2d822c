"""Shared FastAPI dependencies."""
from __future__ import annotations

from fastapi import Depends, Request

from src.services.network import NetworkService
from src.upstream.client import UpstreamClient


def get_upstream_client(request: Request) -> UpstreamClient:
    """The process-wide client created in the app lifespan."""
    return request.app.state.upstream_client


def get_network_service(client: UpstreamClient = Depends(get_upstream_client)) -> NetworkService:
    return NetworkService(client)
