"""Tests for the freelancer repository."""

from pathlib import Path
from textwrap import dedent

import pytest

from matchengine.core.repository import FreelancerRepository, InMemoryFreelancerRepository
from matchengine.core.schemas import FreelancerCandidate, UserInfo


class TestInMemoryFreelancerRepository:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(InMemoryFreelancerRepository(), FreelancerRepository)

    def test_all_freelancers_sorted_by_id(self) -> None:
        repo = InMemoryFreelancerRepository(
            [FreelancerCandidate(id=3), FreelancerCandidate(id=1), FreelancerCandidate(id=2)],
        )
        assert [f.id for f in repo.get_all_freelancers()] == [1, 2, 3]

    def test_lookups(self) -> None:
        repo = InMemoryFreelancerRepository(
            [FreelancerCandidate(id=1, profession="Designer")],
            [UserInfo(id=10, display_name="Grace")],
        )
        assert repo.get_freelancer(1).profession == "Designer"  # type: ignore[union-attr]
        assert repo.get_freelancer(2) is None
        assert repo.get_user(10).display_name == "Grace"  # type: ignore[union-attr]
        assert repo.get_user(11) is None

    def test_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "freelancers.yaml"
        path.write_text(dedent("""\
            freelancers:
              - id: 1
                profession: Frontend Developer
                skills: [React, TypeScript]
                job_performance: 95
                user_id: 10
            users:
              - id: 10
                username: ada
        """))
        repo = InMemoryFreelancerRepository.from_yaml(path)
        f = repo.get_freelancer(1)
        assert f is not None
        assert f.skills == frozenset({"React", "TypeScript"})
        assert repo.get_user(10).username == "ada"  # type: ignore[union-attr]

    def test_from_yaml_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            InMemoryFreelancerRepository.from_yaml(tmp_path / "missing.yaml")
