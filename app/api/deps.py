"""
FastAPI dependencies: the lifecycle controller and collaborators live on app.state
(built once in create_app) and are handed to routes explicitly.
"""
from fastapi import Request

from app.artifacts.lifecycle import LifecycleController
from app.services.cleanup.service import CleanupService
from app.services.payments.base import PaymentGateway
from app.services.processing.base import DocumentProcessor


def get_controller(request: Request) -> LifecycleController:
    return request.app.state.controller


def get_processor(request: Request) -> DocumentProcessor:
    return request.app.state.processor


def get_gateway(request: Request) -> PaymentGateway:
    return request.app.state.gateway


def get_cleanup_service(request: Request) -> CleanupService:
    return CleanupService(request.app.state.controller)
