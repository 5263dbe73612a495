"""Shared fixtures for ciper tests."""

from __future__ import annotations

import typing as typ

import pytest

from ciper.github import RepositoryQualifier, WebhookReconciler
from ciper.jenkins import JobDefaults, JobReconciler
from ciper.sync import EventChannel, SyncOrchestrator
from tests.helpers.fakes import FakeGitHub, FakeJenkins

if typ.TYPE_CHECKING:
    from pathlib import Path

JENKINS_URL = "https://ci.example.test/"

JOB_TEMPLATE = """<project>
  <repo>{repo}</repo>
  <short>{short}</short>
  <node>{node}</node>
  <orgs>{orgs}</orgs>
  <permitAll>{permitAll}</permitAll>
  <script>echo ${sha1}</script>
</project>
"""


@pytest.fixture
def github() -> FakeGitHub:
    """Return an empty GitHub double."""
    return FakeGitHub()


@pytest.fixture
def jenkins() -> FakeJenkins:
    """Return an empty Jenkins double."""
    return FakeJenkins()


@pytest.fixture
def template_path(tmp_path: Path) -> Path:
    """Write a small job template and return its path."""
    path = tmp_path / "build.xml"
    path.write_text(JOB_TEMPLATE, encoding="utf-8")
    return path


@pytest.fixture
def job_defaults() -> JobDefaults:
    """Return template defaults whitelisting one organization."""
    return JobDefaults(admins=("alice",), organizations=("org1",))


@pytest.fixture
def make_orchestrator(
    github: FakeGitHub,
    jenkins: FakeJenkins,
    template_path: Path,
    job_defaults: JobDefaults,
) -> typ.Callable[..., SyncOrchestrator]:
    """Return a factory wiring an orchestrator to the doubles."""

    def _make(
        *,
        organizations: tuple[str, ...] = ("org1",),
        limit: int = 10,
        events: EventChannel | None = None,
    ) -> SyncOrchestrator:
        return SyncOrchestrator(
            github,
            qualifier=RepositoryQualifier(github),
            webhooks=WebhookReconciler(github, JENKINS_URL),
            jobs=JobReconciler(
                jenkins, defaults=job_defaults, template_path=template_path
            ),
            organizations=organizations,
            limit=limit,
            events=events,
        )

    return _make
