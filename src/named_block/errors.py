"""Transformation errors. Every error carries the offending source position."""

from __future__ import annotations


class TransformError(Exception):
    """Base for errors raised while transforming a labeled block."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


# ============================================================
# USER ERRORS
# ============================================================


class ValidationError(TransformError):
    """The input is well-formed but uses early exit incorrectly."""


class UnresolvedLabel(ValidationError):
    """Labeled break/continue whose label matches no enclosing block or loop."""


class InvalidBareExit(ValidationError):
    """Unlabeled break/continue that the synthetic loop would intercept."""


class InvalidSelfContinue(ValidationError):
    """continue targeting a labeled block, which never iterates."""


class ClosureCapturedExit(ValidationError):
    """Labeled exit inside a closure reaching a block outside the closure."""


# ============================================================
# INTERNAL ERRORS
# ============================================================


class MalformedInput(TransformError):
    """Input the front-end should never produce (unmatched delimiter, bad invocation)."""
