#!/usr/bin/env python3
"""
Errors Module
Exception types raised while reconstructing a model or animation.

Every error aborts the current file. The orchestrator catches
ReconstructionError per file so one bad export never blocks a batch.
"""


class ReconstructionError(ValueError):
    """Base class for all reconstruction failures"""


class UnexpectedToken(ReconstructionError):
    """A token's name or kind did not match what the grammar expects

    Attributes:
        expected_names: Token names that were acceptable
        expected_kind: TokenKind that was acceptable
        token: The token actually found (None at end of stream)
    """

    def __init__(self, expected_names, expected_kind, token=None, detail=""):
        self.expected_names = tuple(expected_names)
        self.expected_kind = expected_kind
        self.token = token

        wanted = '/'.join(self.expected_names) or '<any>'
        kind = expected_kind.value if expected_kind is not None else 'any'
        if token is None:
            found = "end of stream"
        else:
            found = f"{token.name} ({token.kind.value})"
            if token.line is not None:
                found += f" at line {token.line}"
        if detail:
            found += f": {detail}"
        super().__init__(f"Expected {wanted} ({kind}), found {found}")


class StructuralMismatch(ReconstructionError):
    """A declared index does not match its position in the stream"""

    def __init__(self, record, declared, expected, detail=""):
        self.record = record
        self.declared = declared
        self.expected = expected
        message = f"{record} index {declared} does not match current index {expected}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class OutOfRange(ReconstructionError):
    """An index or weight falls outside its allowed range"""


class MissingDependency(ReconstructionError):
    """Animation reconstruction needs a skeleton that is not available"""
