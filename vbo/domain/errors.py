"""Error taxonomy for the optimization pipeline.

A missing root directory is not an error (discovery simply yields nothing).
Both per-file errors below are caught at the file-processing boundary by the
scheduler and never abort the batch.
"""


class OptimizerError(Exception):
    """Base class for pipeline errors."""


class TranscodeError(OptimizerError):
    """The external engine failed for one file; the original is untouched."""


class SwapError(OptimizerError):
    """Replacing the original with the transcoded output failed.

    With the legacy rewrite strategy the original may already be gone.
    """
