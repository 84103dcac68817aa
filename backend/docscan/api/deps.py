# backend/docscan/api/deps.py
from fastapi import Request

from ..services.assembler import DocumentAssembler
from ..services.export import ExportRenderer


def get_assembler(request: Request) -> DocumentAssembler:
    return request.app.state.assembler


def get_renderer(request: Request) -> ExportRenderer:
    return request.app.state.renderer
