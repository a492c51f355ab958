"""
Exports API - CSV and PDF downloads of dashboard tables
"""

from fastapi import APIRouter
from fastapi.responses import Response
import logging

from app.models.requests import ExportRequest
from app.utils.exporters import export_filename, to_csv, to_pdf

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/csv")
async def export_csv(request: ExportRequest) -> Response:
    content = to_csv(request.columns, request.rows)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(request.title, "csv")}"'},
    )


@router.post("/pdf")
async def export_pdf(request: ExportRequest) -> Response:
    content = to_pdf(request.title, request.columns, request.rows)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(request.title, "pdf")}"'},
    )
