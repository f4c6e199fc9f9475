"""
LaTeX compilation service using a remote build server.

Posts the document to a LaTeX-on-HTTP endpoint and walks a list of
compilers until one returns a PDF.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import httpx

from lib.errors import CompileError

logger = logging.getLogger(__name__)

DEFAULT_COMPILE_URL = "https://latex.ytotech.com/builds/sync"

# Characters of the build server's error body kept in CompileError
ERROR_SNIPPET_CHARS = 200


@dataclass
class CompileResult:
    """A compiled PDF and the compiler that produced it."""
    pdf: bytes
    compiler: str
    attempts: int


class RemoteLaTeXCompiler:
    """Compiles LaTeX documents to PDF through a remote build service."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the compiler.

        Args:
            url: Build endpoint, defaults to LATEX_COMPILE_URL or the public ytotech server
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.url = url or os.getenv("LATEX_COMPILE_URL", DEFAULT_COMPILE_URL)
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @staticmethod
    def build_request(latex: str, compiler: str) -> dict:
        return {
            "compiler": compiler,
            "resources": [
                {"main": True, "content": latex},
            ],
        }

    async def compile_latex(self, latex: str, compilers: list[str]) -> CompileResult:
        """
        Compile a full LaTeX document to PDF.

        Args:
            latex: Complete LaTeX document (\\documentclass through \\end{document})
            compilers: Compiler names to try, in order

        Returns:
            CompileResult with the PDF bytes

        Raises:
            CompileError: If every compiler fails
        """
        last_error = ""
        for attempt, compiler in enumerate(compilers, start=1):
            logger.info("Compiling %d chars with %s (attempt %d/%d)", len(latex), compiler, attempt, len(compilers))
            try:
                response = await self._client.post(
                    self.url,
                    json=self.build_request(latex, compiler),
                    headers={"Content-Type": "application/json"},
                )
            except httpx.HTTPError as e:
                last_error = f"{compiler}: {type(e).__name__} - {str(e)[:ERROR_SNIPPET_CHARS]}"
                logger.warning("Compile request failed: %s", last_error)
                continue

            content_type = response.headers.get("content-type", "")
            if response.status_code == 200 and "application/pdf" in content_type:
                logger.info("Compiled with %s: %d bytes", compiler, len(response.content))
                return CompileResult(pdf=response.content, compiler=compiler, attempts=attempt)

            last_error = f"{compiler}: {response.status_code} - {response.text[:ERROR_SNIPPET_CHARS]}"
            logger.warning("Compiler rejected document: %s", last_error)

        raise CompileError(
            f"LaTeX compilation failed with all compilers. Last error: {last_error}",
            last_error=last_error,
        )

    async def close(self):
        """Close the HTTP client."""
        await self._client.aclose()


_compiler: Optional[RemoteLaTeXCompiler] = None


def get_latex_compiler() -> RemoteLaTeXCompiler:
    """Get or create the compiler singleton."""
    global _compiler
    if _compiler is None:
        _compiler = RemoteLaTeXCompiler()
    return _compiler
