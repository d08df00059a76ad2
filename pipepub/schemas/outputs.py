"""
OutputDeclaration schema - one configured build output.

Output declarations come from configuration and are matched by position
against the output artifacts of the pipeline job.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class OutputDeclaration:
    """
    A sanitized output path/name from configuration.

    Attributes:
        output: Workspace-relative path of the file or directory to publish
    """
    output: str

    def __post_init__(self):
        if not self.output:
            raise ValueError("OutputDeclaration requires a non-empty output")

    def __str__(self) -> str:
        return self.output
