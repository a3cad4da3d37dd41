"""Shared fixtures for icanhazlb tests."""

from typing import Any, Dict, List

import pytest

from icanhazlb.document import render_manifest
from icanhazlb.errors import SubmissionFailed
from icanhazlb.models import ProvisioningDocument


class FakeResourceStore:
    """In-memory store with the API server's create-collision behavior."""

    def __init__(self):
        self.objects: Dict[str, Dict[str, Any]] = {}
        self.submitted: List[ProvisioningDocument] = []
        self.closed = False

    def submit(self, document: ProvisioningDocument) -> Dict[str, Any]:
        self.submitted.append(document)
        if document.name in self.objects:
            raise SubmissionFailed(
                f"failed to create {document.kind} {document.name}: 409 Conflict",
                document.name,
                status=409,
            )
        created = render_manifest(document)
        created["metadata"]["managedFields"] = [{"operation": "Update", "manager": "fake"}]
        self.objects[document.name] = created
        return created

    def close(self) -> None:
        self.closed = True


class UnreachableResourceStore:
    """Store whose API server cannot be reached."""

    def __init__(self):
        self.attempts = 0

    def submit(self, document: ProvisioningDocument) -> Dict[str, Any]:
        self.attempts += 1
        raise SubmissionFailed(
            f"failed to create {document.kind} {document.name}: connection refused",
            document.name,
        )


@pytest.fixture
def fake_store():
    return FakeResourceStore()


@pytest.fixture
def unreachable_store():
    return UnreachableResourceStore()
