"""Commit model"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class CommitSummary:
    """A commit that arrived from a remote."""
    sha: str
    author_name: str
    author_email: str
    message: str
    timestamp: Optional[datetime] = None

    @property
    def description(self) -> str:
        """Author and first message line, e.g. 'Ada: Update notes'."""
        lines = self.message.strip().splitlines()
        summary = lines[0] if lines else ""
        return f"{self.author_name}: {summary}" if self.author_name else summary

    def __str__(self) -> str:
        return self.description
