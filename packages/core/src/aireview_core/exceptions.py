"""Fatal errors raised by the review pipeline.

Anything that derives from AIReviewError aborts the run; the CLI turns it
into a non-zero exit. Soft failures (a file that cannot be loaded, a model
response that is not JSON) are returned as values instead and never show
up here.
"""


class AIReviewError(Exception):
    """Base class for every fatal pipeline error."""


class ConfigError(AIReviewError):
    """Instruction text or credentials could not be resolved."""


class GitError(AIReviewError):
    """A git command needed to compute the change set failed."""


class EventError(AIReviewError):
    """The GitHub event payload could not be read."""


class ProviderError(AIReviewError):
    """The chat-completion call failed or returned nothing usable."""


class PublishError(AIReviewError):
    """Posting the review back to GitHub failed."""
