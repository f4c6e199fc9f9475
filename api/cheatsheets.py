"""Cheatsheet endpoints (English and Hindi)."""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Header, HTTPException, Query, UploadFile

from api.papers import pdf_attachment, read_pdf_upload
from lib.errors import http_error_for
from lib.generator import get_generator
from lib.latex_compiler import get_latex_compiler
from lib.latex_templates import wrap_cheatsheet, wrap_hindi_cheatsheet
from lib.logger import request_logger
from lib.mock_responses import get_mock_response
from lib.models import CheatsheetResponse, DownloadHindiPdfRequest, TokenUsage
from lib.prompt_templates import class_label, hindi_class_label, hindi_subject_label, subject_label
from lib.sanitize import Profile, sanitize_document
from lib.sanitize.response import extract_cheatsheet
from lib.simulator import simulate_delay, simulate_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["cheatsheets"])


async def _generate(
    endpoint: str,
    hindi: bool,
    file: Optional[UploadFile],
    subject: str,
    student_class: str,
    mode: str,
    delay: int,
    error: Optional[str],
    scenario: Optional[str],
) -> CheatsheetResponse:
    pdf = await read_pdf_upload(file, missing_detail="No PDF file uploaded")

    log_id = request_logger.log_request(f"/api/{endpoint}", mode, subject, len(pdf))
    try:
        if mode == "mock":
            await simulate_delay(delay)
            if error:
                simulate_error(error)
            if hindi:
                wrap = lambda content: wrap_hindi_cheatsheet(
                    content, hindi_subject_label(subject), hindi_class_label(student_class)
                )
            else:
                wrap = lambda content: wrap_cheatsheet(content, subject_label(subject), class_label(student_class))
            latex = extract_cheatsheet(get_mock_response(endpoint, scenario), wrap)
            usage = TokenUsage()
        elif hindi:
            latex, usage = await get_generator().generate_hindi_cheatsheet(pdf, subject, student_class)
        else:
            latex, usage = await get_generator().generate_cheatsheet(pdf, subject, student_class)

        request_logger.log_response(log_id, True, len(latex), usage.total_tokens)
        return CheatsheetResponse(latex=latex, token_usage=usage, mode=mode)

    except HTTPException as e:
        request_logger.log_response(log_id, False, error=str(e.detail))
        raise
    except Exception as e:
        logger.exception("Cheatsheet generation failed")
        request_logger.log_response(log_id, False, error=str(e))
        raise http_error_for(e)


@router.post("/cheatsheet", response_model=CheatsheetResponse)
async def cheatsheet(
    file: Optional[UploadFile] = File(None, description="Textbook PDF"),
    subject: str = Form("general"),
    student_class: str = Form("10", alias="studentClass"),
    mode: str = Query(default="prod", pattern="^(mock|prod)$"),
    delay: int = Query(default=0, ge=0, le=30000),
    error: Optional[str] = Query(default=None),
    x_mock_scenario: Optional[str] = Header(default=None),
):
    """Generate a chapter-wise revision cheatsheet from a textbook PDF."""
    return await _generate(
        "cheatsheet", False, file, subject, student_class, mode, delay, error, x_mock_scenario,
    )


@router.post("/hindi-cheatsheet", response_model=CheatsheetResponse)
async def hindi_cheatsheet(
    file: Optional[UploadFile] = File(None, description="Textbook PDF"),
    subject: str = Form("general"),
    student_class: str = Form("10", alias="studentClass"),
    mode: str = Query(default="prod", pattern="^(mock|prod)$"),
    delay: int = Query(default=0, ge=0, le=30000),
    error: Optional[str] = Query(default=None),
    x_mock_scenario: Optional[str] = Header(default=None),
):
    """Generate a Devanagari revision cheatsheet from a textbook PDF."""
    return await _generate(
        "hindi-cheatsheet", True, file, subject, student_class, mode, delay, error, x_mock_scenario,
    )


@router.post("/download-hindi-pdf")
async def download_hindi_pdf(body: DownloadHindiPdfRequest):
    """Repair a Hindi cheatsheet for LuaLaTeX and compile it to PDF."""
    if not body.latex.strip():
        raise HTTPException(status_code=400, detail="No LaTeX content provided")

    log_id = request_logger.log_request("/api/download-hindi-pdf", "prod", body.subject, len(body.latex))
    try:
        document = sanitize_document(
            body.latex,
            profile=Profile.HINDI,
            subject=body.subject,
            student_class=body.student_class,
        )
        result = await get_latex_compiler().compile_latex(document.latex, document.compilers)

        request_logger.log_response(log_id, True, len(result.pdf))
        return pdf_attachment(result.pdf, document.filename)

    except HTTPException as e:
        request_logger.log_response(log_id, False, error=str(e.detail))
        raise
    except Exception as e:
        logger.exception("Hindi PDF generation failed")
        request_logger.log_response(log_id, False, error=str(e))
        raise http_error_for(e)
