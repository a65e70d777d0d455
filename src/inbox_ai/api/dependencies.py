"""FastAPI dependencies resolving the services wired onto ``app.state``."""

from __future__ import annotations

from fastapi import Request

from inbox_ai.agent.actions import ActionExecutor
from inbox_ai.agent.assistant import ChatAssistant
from inbox_ai.config import Settings
from inbox_ai.google.oauth import GoogleOAuth
from inbox_ai.storage.base import Repository
from inbox_ai.sync import SyncService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_repository(request: Request) -> Repository:
    return request.app.state.repository


def get_oauth(request: Request) -> GoogleOAuth:
    return request.app.state.oauth


def get_sync_service(request: Request) -> SyncService:
    return request.app.state.sync


def get_executor(request: Request) -> ActionExecutor:
    return request.app.state.executor


def get_assistant(request: Request) -> ChatAssistant:
    return request.app.state.assistant
