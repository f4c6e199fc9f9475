"""Question paper endpoints: generation, preview and downloads."""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, File, Form, Header, HTTPException, Query, UploadFile
from fastapi.responses import Response
from pydantic import ValidationError

from lib.errors import http_error_for
from lib.generator import get_generator
from lib.latex_compiler import get_latex_compiler
from lib.logger import request_logger
from lib.mock_responses import get_mock_response
from lib.models import (
    DownloadLatexRequest,
    DownloadPdfRequest,
    PaperOptions,
    PreviewRequest,
    PreviewResponse,
    QuestionCardModel,
    QuestionsByType,
    TokenStats,
    UploadResponse,
)
from lib.preview import parse_questions
from lib.sanitize import Profile, sanitize_document
from lib.sanitize.response import extract_question_paper
from lib.simulator import simulate_delay, simulate_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["papers"])


def max_upload_bytes() -> int:
    return int(os.getenv("MAX_UPLOAD_MB", "64")) * 1024 * 1024


async def read_pdf_upload(upload: Optional[UploadFile], missing_detail: str = "No file provided") -> bytes:
    """Read an uploaded PDF, enforcing presence and the size limit."""
    if upload is None:
        raise HTTPException(status_code=400, detail=missing_detail)
    data = await upload.read()
    limit = max_upload_bytes()
    if len(data) > limit:
        raise HTTPException(status_code=400, detail=f"File size exceeds the limit ({limit // (1024 * 1024)}MB per file)")
    return data


def _parse_json_field(name: str, raw: Optional[str]):
    """Decode an optional JSON form field; malformed values are logged and ignored."""
    if not raw:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Error parsing %s: %s", name, e)
        return None


def build_paper_options(
    subject: Optional[str],
    question_types: Optional[list[str]],
    difficulty: Optional[str],
    custom_instructions: Optional[str],
    questions_by_type: Optional[str],
    questions_by_marks: Optional[str],
) -> PaperOptions:
    options = PaperOptions()
    if subject:
        options.subject = subject
    if question_types:
        options.question_types = question_types
    if difficulty:
        options.difficulty = difficulty
    options.custom_instructions = custom_instructions or None

    by_type = _parse_json_field("questionsByType", questions_by_type)
    if isinstance(by_type, dict):
        try:
            options.questions_by_type = QuestionsByType.model_validate(by_type)
        except ValidationError as e:
            logger.warning("Ignoring invalid questionsByType: %s", e)

    by_marks = _parse_json_field("questionsByMarks", questions_by_marks)
    if isinstance(by_marks, dict):
        options.questions_by_marks = {
            str(marks): count for marks, count in by_marks.items() if isinstance(count, int)
        }
    return options


@router.post("/upload", response_model=UploadResponse)
async def upload(
    file: Optional[UploadFile] = File(None, description="Textbook PDF"),
    pattern_file: Optional[UploadFile] = File(None, alias="patternFile", description="Sample paper PDF"),
    subject: Optional[str] = Form(None),
    question_types: Optional[list[str]] = Form(None, alias="questionTypes"),
    difficulty: Optional[str] = Form(None),
    custom_instructions: Optional[str] = Form(None, alias="customInstructions"),
    questions_by_type: Optional[str] = Form(None, alias="questionsByType"),
    questions_by_marks: Optional[str] = Form(None, alias="questionsByMarks"),
    mode: str = Query(default="prod", pattern="^(mock|prod)$"),
    delay: int = Query(default=0, ge=0, le=30000),
    error: Optional[str] = Query(default=None),
    x_mock_scenario: Optional[str] = Header(default=None),
):
    """
    Generate a LaTeX question paper from a textbook PDF.

    With a patternFile, the paper replicates the sample paper's structure.

    Query Parameters:
    - mode: "mock" for canned output, "prod" for Gemini
    - delay / error: latency and error simulation (mock mode)
    """
    pdf = await read_pdf_upload(file)
    pattern_pdf = await read_pdf_upload(pattern_file) if pattern_file is not None else None
    options = build_paper_options(
        subject, question_types, difficulty, custom_instructions, questions_by_type, questions_by_marks,
    )

    log_id = request_logger.log_request("/api/upload", mode, options.subject, len(pdf))
    try:
        if mode == "mock":
            await simulate_delay(delay)
            if error:
                simulate_error(error)
            latex = extract_question_paper(get_mock_response("upload", x_mock_scenario))
            stats = TokenStats()
        else:
            latex, stats = await get_generator().generate_question_paper(pdf, options, pattern_pdf)

        request_logger.log_response(log_id, True, len(latex), stats.total.total_tokens)
        return UploadResponse(success=True, latex=latex, token_usage=stats, mode=mode)

    except HTTPException as e:
        request_logger.log_response(log_id, False, error=str(e.detail))
        raise
    except Exception as e:
        logger.exception("Question paper generation failed")
        request_logger.log_response(log_id, False, error=str(e))
        raise http_error_for(e)


def pdf_attachment(pdf: bytes, filename: str) -> Response:
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/download-pdf")
async def download_pdf(body: DownloadPdfRequest):
    """Sanitize a question paper and compile it to PDF."""
    if not body.latex.strip():
        raise HTTPException(status_code=400, detail="No LaTeX content provided")

    log_id = request_logger.log_request("/api/download-pdf", "prod", body.subject, len(body.latex))
    try:
        document = sanitize_document(
            body.latex,
            include_solutions=body.include_solutions,
            profile=Profile.PAPER,
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
        logger.exception("PDF generation failed")
        request_logger.log_response(log_id, False, error=str(e))
        raise http_error_for(e)


def latex_filename(now: Optional[datetime] = None) -> str:
    """math_questions_2024-05-01T10-20-30-123Z.tex"""
    now = now or datetime.now(timezone.utc)
    stamp = now.strftime("%Y-%m-%dT%H-%M-%S-") + f"{now.microsecond // 1000:03d}Z"
    return f"math_questions_{stamp}.tex"


@router.post("/download-latex")
async def download_latex(body: DownloadLatexRequest):
    """Return the LaTeX source as a .tex attachment, unmodified."""
    if not body.latex:
        raise HTTPException(status_code=400, detail="No LaTeX content provided")

    return Response(
        content=body.latex,
        media_type="application/x-latex",
        headers={"Content-Disposition": f'attachment; filename="{latex_filename()}"'},
    )


@router.post("/preview", response_model=PreviewResponse)
async def preview(body: PreviewRequest):
    """Split a question paper into question cards."""
    if not body.latex.strip():
        raise HTTPException(status_code=400, detail="No LaTeX content provided")

    cards = parse_questions(body.latex)
    return PreviewResponse(
        questions=[
            QuestionCardModel(number=c.number, question=c.question, solution=c.solution, marks=c.marks)
            for c in cards
        ],
        count=len(cards),
    )
