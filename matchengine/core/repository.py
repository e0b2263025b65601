"""Freelancer repository interface and an in-memory implementation.

The engine only reads through ``FreelancerRepository``; the relational store
behind it belongs to the host application.
"""

import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml

from matchengine.core.schemas import FreelancerCandidate, UserInfo

logger = logging.getLogger(__name__)


@runtime_checkable
class FreelancerRepository(Protocol):
    """Read-only view of freelancer and user records."""

    def get_all_freelancers(self) -> list[FreelancerCandidate]: ...
    def get_freelancer(self, freelancer_id: int) -> FreelancerCandidate | None: ...
    def get_user(self, user_id: int) -> UserInfo | None: ...


class InMemoryFreelancerRepository:
    """Repository backed by plain dicts, loadable from a YAML fixture file."""

    def __init__(
        self,
        freelancers: list[FreelancerCandidate] | None = None,
        users: list[UserInfo] | None = None,
    ) -> None:
        self._freelancers = {f.id: f for f in freelancers or []}
        self._users = {u.id: u for u in users or []}

    def get_all_freelancers(self) -> list[FreelancerCandidate]:
        return sorted(self._freelancers.values(), key=lambda f: f.id)

    def get_freelancer(self, freelancer_id: int) -> FreelancerCandidate | None:
        return self._freelancers.get(freelancer_id)

    def get_user(self, user_id: int) -> UserInfo | None:
        return self._users.get(user_id)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "InMemoryFreelancerRepository":
        """Load ``freelancers:`` and ``users:`` lists from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Freelancer data file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        freelancers = [FreelancerCandidate.model_validate(f) for f in raw.get("freelancers", [])]
        users = [UserInfo.model_validate(u) for u in raw.get("users", [])]
        logger.debug("Loaded %d freelancers and %d users from %s", len(freelancers), len(users), path)
        return cls(freelancers, users)
