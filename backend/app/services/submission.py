"""
Estimate submission.

Creates one stored estimate per enabled trade, then emails the document.
Estimate creation failures propagate to the caller. An email failure after
the estimates exist is reported in the result and never rolls them back or
retries.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

from app.services.estimate_document import EstimateDocument, TradeSubmission

logger = logging.getLogger(__name__)


class EstimateStore(Protocol):
    """Persistence for submitted estimates."""

    def create_estimate(self, submission: TradeSubmission, document: EstimateDocument) -> str:
        """Store one trade estimate and return its id."""
        ...


class EstimateMailer(Protocol):
    """Delivery of the estimate document."""

    def send_estimate(self, recipient: str, document: EstimateDocument) -> None:
        ...


@dataclass
class SubmissionResult:
    """Outcome of a submit; email_sent=False with ids present is a partial success."""
    estimate_ids: List[str] = field(default_factory=list)
    email_sent: bool = False
    email_error: Optional[str] = None

    @property
    def partial(self) -> bool:
        return bool(self.estimate_ids) and self.email_error is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "estimate_ids": self.estimate_ids,
            "email_sent": self.email_sent,
            "email_error": self.email_error,
            "partial": self.partial,
        }


def submit_project(
    project,
    store: EstimateStore,
    mailer: Optional[EstimateMailer] = None,
    recipient: Optional[str] = None,
    project_name: str = "",
) -> SubmissionResult:
    """
    Persist and send a project estimate.

    Args:
        project: ProjectEstimate to submit
        store: Where trade estimates are created
        mailer: Optional mailer; skipped when None or no recipient
        recipient: Email address for the document
        project_name: Name printed on the document

    Returns:
        SubmissionResult with created ids and email status
    """
    document = project.build_document(project_name=project_name)
    result = SubmissionResult()

    for submission in project.build_submissions():
        estimate_id = store.create_estimate(submission, document)
        result.estimate_ids.append(estimate_id)
    logger.info(f"Created {len(result.estimate_ids)} trade estimates for '{project_name}'")

    if mailer is None or not recipient:
        return result

    try:
        mailer.send_estimate(recipient, document)
        result.email_sent = True
    except Exception as e:
        logger.warning(f"Estimate created but email to {recipient} failed: {e}")
        result.email_error = str(e)

    return result
