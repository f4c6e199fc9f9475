"""Unit tests for the remote LaTeX compiler (mocked HTTP transport)."""

import asyncio
import json
import os
import sys

import httpx
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from lib.errors import CompileError
from lib.latex_compiler import RemoteLaTeXCompiler

PDF_BYTES = b"%PDF-1.5 fake"
DOC = "\\documentclass{article}\\begin{document}x\\end{document}"


def _compile(handler, compilers):
    """Run compile_latex against a mock transport, recording request bodies."""
    seen = []

    def record(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return handler(request, seen[-1])

    async def run():
        compiler = RemoteLaTeXCompiler(url="http://latex.test/builds/sync", transport=httpx.MockTransport(record))
        try:
            return await compiler.compile_latex(DOC, compilers)
        finally:
            await compiler.close()

    return asyncio.run(run()), seen


def _pdf():
    return httpx.Response(200, content=PDF_BYTES, headers={"content-type": "application/pdf"})


class TestBuildRequest:

    def test_payload_shape(self):
        payload = RemoteLaTeXCompiler.build_request(DOC, "lualatex")
        assert payload == {"compiler": "lualatex", "resources": [{"main": True, "content": DOC}]}


class TestCompileLatex:

    def test_first_compiler_succeeds(self):
        result, seen = _compile(lambda request, body: _pdf(), ["pdflatex", "lualatex"])
        assert result.pdf == PDF_BYTES
        assert result.compiler == "pdflatex"
        assert result.attempts == 1
        assert [body["compiler"] for body in seen] == ["pdflatex"]

    def test_falls_back_on_error_status(self):
        def handler(request, body):
            if body["compiler"] == "pdflatex":
                return httpx.Response(400, text="! Undefined control sequence.")
            return _pdf()

        result, seen = _compile(handler, ["pdflatex", "lualatex"])
        assert result.compiler == "lualatex"
        assert result.attempts == 2
        assert len(seen) == 2

    def test_non_pdf_content_type_falls_back(self):
        def handler(request, body):
            if body["compiler"] == "pdflatex":
                return httpx.Response(200, json={"logs": "oops"})
            return _pdf()

        result, _ = _compile(handler, ["pdflatex", "xelatex"])
        assert result.compiler == "xelatex"

    def test_all_fail_reports_last_error(self):
        def handler(request, body):
            return httpx.Response(500, text=f"{body['compiler']} failed " + "x" * 500)

        with pytest.raises(CompileError) as exc_info:
            _compile(handler, ["pdflatex", "lualatex"])

        error = exc_info.value
        assert "failed with all compilers" in str(error)
        assert error.last_error.startswith("lualatex: 500 - lualatex failed")
        # status prefix plus the truncated body
        assert len(error.last_error) == len("lualatex: 500 - ") + 200

    def test_transport_error_falls_back(self):
        def handler(request, body):
            if body["compiler"] == "lualatex":
                raise httpx.ConnectError("connection refused")
            return _pdf()

        result, _ = _compile(handler, ["lualatex", "xelatex"])
        assert result.compiler == "xelatex"
