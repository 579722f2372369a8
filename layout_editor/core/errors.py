class LayoutEditorError(Exception):
    """Base class for errors raised by the editor outside the fitting engine."""


class CodecError(LayoutEditorError):
    """The document codec could not parse or write a document."""


class ContentProposerError(LayoutEditorError):
    """The content proposer failed or returned an unusable response."""
