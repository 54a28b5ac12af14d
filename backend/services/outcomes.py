"""Result of a facade operation: a document to send or the failures that stopped it"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from services.validation.base import Failure, field_failures, rule_violations


class OutcomeStatus(str, Enum):
    OK = "ok"
    NO_CONTENT = "no_content"
    INVALID = "invalid"          # validation failure
    REJECTED = "rejected"        # business rule violation or bad query
    NOT_FOUND = "not_found"


HTTP_STATUS = {
    OutcomeStatus.OK: 200,
    OutcomeStatus.NO_CONTENT: 204,
    OutcomeStatus.INVALID: 422,
    OutcomeStatus.REJECTED: 400,
    OutcomeStatus.NOT_FOUND: 404,
}


@dataclass
class Outcome:
    status: OutcomeStatus
    document: Optional[Dict[str, Any]] = None
    failures: List[Failure] = field(default_factory=list)

    @property
    def http_status(self) -> int:
        return HTTP_STATUS[self.status]

    @property
    def succeeded(self) -> bool:
        return self.status in (OutcomeStatus.OK, OutcomeStatus.NO_CONTENT)

    @classmethod
    def ok(cls, document: Dict[str, Any]) -> "Outcome":
        return cls(OutcomeStatus.OK, document=document)

    @classmethod
    def no_content(cls) -> "Outcome":
        return cls(OutcomeStatus.NO_CONTENT)

    @classmethod
    def not_found(cls, title: str) -> "Outcome":
        return cls(OutcomeStatus.NOT_FOUND, failures=[Failure(title=title)])

    @classmethod
    def from_failures(cls, failures: List[Failure]) -> "Outcome":
        """Shape failures (422) win over business rule and query failures (400); all of a kind are kept."""
        invalid = field_failures(failures)
        if invalid:
            return cls(OutcomeStatus.INVALID, failures=invalid)
        return cls(OutcomeStatus.REJECTED, failures=rule_violations(failures))

    def errors(self) -> List[Dict[str, Any]]:
        return [failure.to_error() for failure in self.failures]
