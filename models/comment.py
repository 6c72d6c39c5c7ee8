import itertools
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from errors import BoardError
from services.datastore import Document

# Reserved prefix for ids synthesized on the client before the store answers
PROVISIONAL_PREFIX = "temp-"

_provisional_counter = itertools.count(1)


def new_provisional_id() -> str:
    """
    Create a client-side comment id, unique within this process

    The millisecond clock keeps ids readable, the counter keeps two submits in the
    same millisecond apart.
    """
    return f"{PROVISIONAL_PREFIX}{int(time.time() * 1000)}-{next(_provisional_counter)}"


def is_provisional(comment_id: str) -> bool:
    return comment_id.startswith(PROVISIONAL_PREFIX)


class Comment(BaseModel):
    id: str
    post_id: str
    author: str
    content: str
    created_at: datetime

    @property
    def provisional(self) -> bool:
        return is_provisional(self.id)

    @classmethod
    def from_document(cls, post_id: str, doc: Document) -> "Comment":
        fields = dict(doc.fields)
        fields.setdefault("post_id", post_id)
        return cls(id=doc.id, **fields)


@dataclass
class CommentThread:
    """Comment list and pending input owned by one Detail view"""
    post_id: str
    comments: List[Comment] = field(default_factory=list)
    draft: str = ""
    loading: bool = False
    closed: bool = False
    # sequence numbers of list fetches, used to drop out-of-order results
    fetches_issued: int = 0
    fetch_applied: int = 0

    def purge_provisional(self) -> int:
        """Drop every provisional entry, returns how many were removed"""
        kept = [c for c in self.comments if not c.provisional]
        removed = len(self.comments) - len(kept)
        self.comments = kept
        return removed

    def close(self):
        self.closed = True


class SubmitOutcome(Enum):
    """Enum for how an optimistic comment submission ended"""
    RECONCILED = "reconciled"
    ROLLED_BACK = "rolled_back"


@dataclass
class CommentSubmitResult:
    """Container for the end state of an optimistic comment submission"""
    outcome: SubmitOutcome
    comments: List[Comment]
    comment_id: Optional[str] = None
    error: Optional[BoardError] = None

    @property
    def success(self) -> bool:
        return self.outcome is SubmitOutcome.RECONCILED
