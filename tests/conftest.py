"""Root test configuration."""

import base64
import hashlib
import logging
from typing import Any, ClassVar, Mapping

import pytest
import structlog

from octoform.core.errors import RemoteNotFound
from octoform.normalize.attributes import lowercase, strip_whitespace
from octoform.providers.identifiers import build_id, split_id
from octoform.schema import AttributeSpec, Mutability, ResourceSchema
from octoform.validation.validators import OneOf


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


WIDGET_SCHEMA = ResourceSchema(
    name="test_widget",
    description="Widget kept by an in-memory service",
    attributes={
        "group": AttributeSpec("Owning group", Mutability.REPLACE, required=True),
        "name": AttributeSpec(
            "Widget name", Mutability.REPLACE, required=True, normalizer=lowercase
        ),
        "size": AttributeSpec("Widget size", default=1, validators=(OneOf(1, 2, 3),)),
        "label": AttributeSpec("Free-form label", normalizer=strip_whitespace),
        "token": AttributeSpec(
            "Write-only token", Mutability.REPLACE, sensitive=True, readable=False
        ),
        "revision": AttributeSpec("Service revision", Mutability.COMPUTED),
    },
    import_id_parts=("group", "name"),
    write_only_guard=("revision",),
)


class FakeWidgetRemote:
    """In-memory remote service recording every call."""

    schema: ClassVar[ResourceSchema] = WIDGET_SCHEMA

    def __init__(self) -> None:
        self.entities: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str | None]] = []
        self.failures: dict[str, BaseException] = {}

    def _record(self, op: str, resource_id: str | None) -> None:
        self.calls.append((op, resource_id))
        failure = self.failures.pop(op, None)
        if failure is not None:
            raise failure

    def parse_id(self, identifier: str) -> tuple[str, ...]:
        return split_id(identifier, *self.schema.import_id_parts)

    async def get(self, resource_id: str) -> dict[str, Any]:
        self._record("get", resource_id)
        if resource_id not in self.entities:
            raise RemoteNotFound("HTTP 404: Not Found", status_code=404)
        return dict(self.entities[resource_id])

    async def create(self, fields: dict[str, Any]) -> str:
        self._record("create", None)
        resource_id = build_id(fields["group"], fields["name"])
        self.entities[resource_id] = {
            "group": fields["group"],
            "name": fields["name"],
            "size": fields.get("size"),
            "label": fields.get("label"),
            "revision": 1,
        }
        return resource_id

    async def update(self, resource_id: str, changed: dict[str, Any]) -> dict[str, Any]:
        self._record("update", resource_id)
        entity = self.entities[resource_id]
        entity.update(changed)
        entity["revision"] += 1
        return dict(entity)

    async def delete(self, resource_id: str, attributes: Mapping[str, Any] | None = None) -> None:
        self._record("delete", resource_id)
        if resource_id not in self.entities:
            raise RemoteNotFound("HTTP 404: Not Found", status_code=404)
        del self.entities[resource_id]


@pytest.fixture
def remote() -> FakeWidgetRemote:
    return FakeWidgetRemote()


def _ssh_field(data: bytes) -> bytes:
    return len(data).to_bytes(4, "big") + data


def _gpg_public_key_body() -> bytes:
    # v4, creation time, EdDSA, opaque key material
    return b"\x04" + (1700000000).to_bytes(4, "big") + b"\x16" + b"octoform-test-key" * 3


@pytest.fixture
def ssh_public_key() -> str:
    blob = _ssh_field(b"ssh-ed25519") + _ssh_field(bytes(range(32)))
    return "ssh-ed25519 " + base64.b64encode(blob).decode("ascii")


@pytest.fixture
def ssh_fingerprint(ssh_public_key) -> str:
    blob = base64.b64decode(ssh_public_key.split()[1])
    return "SHA256:" + base64.b64encode(hashlib.sha256(blob).digest()).decode("ascii").rstrip("=")


@pytest.fixture
def gpg_armored_key() -> str:
    body = _gpg_public_key_body()
    packet = bytes([0x98, len(body)]) + body
    encoded = base64.b64encode(packet).decode("ascii")
    lines = [encoded[i : i + 64] for i in range(0, len(encoded), 64)]
    return "\n".join(
        [
            "-----BEGIN PGP PUBLIC KEY BLOCK-----",
            "Comment: octoform test key",
            "",
            *lines,
            "=AbCd",
            "-----END PGP PUBLIC KEY BLOCK-----",
        ]
    )


@pytest.fixture
def gpg_key_id_hex() -> str:
    body = _gpg_public_key_body()
    digest = hashlib.sha1(b"\x99" + len(body).to_bytes(2, "big") + body).digest()
    return digest[-8:].hex().upper()
