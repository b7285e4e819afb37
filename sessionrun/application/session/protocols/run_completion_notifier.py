"""Protocol for collaborators notified when a run completes."""

from typing import Protocol

from sessionrun.domain.session.events import SessionRunCompleted


class RunCompletionNotifierProtocol(Protocol):
    """
    Downstream work triggered by a completed run (summaries, concept
    extraction). Called after the completion has been committed.
    """

    def notify(self, event: SessionRunCompleted) -> None:
        ...
