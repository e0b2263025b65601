"""Candidate retrieval from the repository collaborator."""

import logging
import re

from matchengine.core.repository import FreelancerRepository
from matchengine.core.schemas import FreelancerCandidate, UserInfo

logger = logging.getLogger(__name__)

_BIO_NAME_RE = re.compile(r"^([A-Za-z\s]+?)\s+is\s+an?\s+")


def resolve_display_name(candidate: FreelancerCandidate, user: UserInfo | None) -> str:
    """Display name, username, a name parsed from the bio, then ``Freelancer <id>``."""
    if user is not None:
        if user.display_name:
            return user.display_name
        if user.username:
            return user.username
    match = _BIO_NAME_RE.match(candidate.bio or "")
    if match:
        return match.group(1).strip()
    return f"Freelancer {candidate.id}"


class CandidateRetriever:
    """Reads every freelancer for ranking. A repository failure yields no candidates."""

    def __init__(self, repository: FreelancerRepository) -> None:
        self._repository = repository

    def fetch_all(self) -> list[FreelancerCandidate]:
        try:
            candidates = list(self._repository.get_all_freelancers() or [])
        except Exception:
            logger.warning("Failed to load freelancers - continuing without candidates", exc_info=True)
            return []
        logger.debug("Retrieved %d candidates", len(candidates))
        return candidates

    def display_names(self, candidates: list[FreelancerCandidate]) -> dict[int, str]:
        names: dict[int, str] = {}
        for c in candidates:
            user = None
            if c.user_id is not None:
                try:
                    user = self._repository.get_user(c.user_id)
                except Exception:
                    logger.debug("User lookup failed for freelancer %d", c.id, exc_info=True)
            names[c.id] = resolve_display_name(c, user)
        return names
