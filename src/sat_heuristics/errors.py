# -*- coding: utf-8 -*-
"""
Formula errors
--------------
Raised while loading a CNF formula:

    MalformedInputError   descriptor or clause line cannot be parsed
    FormulaNotFoundError  input file missing or unreadable

Solvers never raise; every search ends with a SolveResult.
"""

from __future__ import annotations
from typing import Optional


class FormulaError(Exception):
    """Base class for formula loading errors."""


class MalformedInputError(FormulaError, ValueError):
    """Descriptor or clause line could not be parsed."""

    def __init__(self, message: str, token: Optional[str] = None, line_no: Optional[int] = None):
        self.token = token
        self.line_no = line_no
        if line_no is not None:
            message = f"line {line_no}: {message}"
        super().__init__(message)


class FormulaNotFoundError(FormulaError, FileNotFoundError):
    """Input file is missing or cannot be read."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        msg = f"cannot open CNF file {path!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
