from __future__ import annotations

from typing import Any, ClassVar, Mapping

import structlog

from octoform.clients.github import GitHubClient
from octoform.config.settings import Settings, get_settings
from octoform.core.errors import ConfigurationError, RemoteError, RemoteNotFound, RemoteRejected
from octoform.logging import configure_logging
from octoform.normalize.attributes import (
    chain,
    lowercase,
    normalize_timestamp,
    strip_whitespace,
    uppercase,
)
from octoform.normalize.keys import (
    derive_from,
    gpg_key_id,
    normalize_armored_key,
    normalize_ssh_public_key,
    ssh_key_fingerprint,
)
from octoform.providers.base import Provider, ProviderHealth
from octoform.providers.encryption import seal_secret
from octoform.providers.identifiers import build_id, require_numeric, split_id
from octoform.providers.importer import ImportResolver
from octoform.providers.reconciler import Reconciler
from octoform.providers.registry import create_resource, register_resource, resource_schemas
from octoform.schema import AttributeSpec, Mutability, ResourceSchema
from octoform.validation.validators import (
    ConflictsWith,
    GPGPublicKeyValidator,
    NameValidator,
    OneOf,
    SSHPublicKeyValidator,
)

logger = structlog.get_logger()

MEMBERSHIP = "github_membership"
USER_SSH_KEY = "github_user_ssh_key"
USER_GPG_KEY = "github_user_gpg_key"
ACTIONS_SECRET = "github_actions_secret"


class GitHubProvider(Provider):
    name = "github"

    def __init__(
        self,
        client: GitHubClient,
        owner: str | None,
        *,
        owner_is_organization: bool = True,
    ) -> None:
        self.client = client
        self.owner = owner
        self.owner_is_organization = owner_is_organization

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "GitHubProvider":
        settings = settings or get_settings()
        configure_logging(settings.log_level)
        if not settings.owner:
            raise ConfigurationError(
                "An owner is required to manage GitHub resources",
                {"setting": "OCTOFORM_OWNER"},
            )
        client = GitHubClient(
            settings.github_token,
            base_url=settings.github_base_url,
            timeout=settings.http_timeout,
            user_agent=settings.user_agent,
        )
        return cls(client, settings.owner, owner_is_organization=settings.owner_is_organization)

    async def health_check(self) -> ProviderHealth:
        try:
            await self.client.get("/user")
            return ProviderHealth(status="healthy")
        except RemoteError as exc:
            return ProviderHealth(status="unreachable", details=exc.message)

    async def resources(self) -> list[ResourceSchema]:
        return resource_schemas(provider=self.name)

    def organization(self) -> str:
        if not self.owner or not self.owner_is_organization:
            raise ConfigurationError(
                "This resource can only be used in the context of an organization",
                {"owner": self.owner},
            )
        return self.owner

    def repository_owner(self) -> str:
        if not self.owner:
            raise ConfigurationError("This resource requires an owner")
        return self.owner

    def reconciler(self, kind: str) -> Reconciler:
        return Reconciler(create_resource(kind, provider=self))

    def importer(self, kind: str) -> ImportResolver:
        return ImportResolver(create_resource(kind, provider=self))


class MembershipResource:
    """Organization membership of a user."""

    schema: ClassVar[ResourceSchema] = ResourceSchema(
        name=MEMBERSHIP,
        description="Provides a GitHub membership resource.",
        attributes={
            "username": AttributeSpec(
                "The user to add to the organization.",
                Mutability.REPLACE,
                required=True,
                normalizer=chain(strip_whitespace, lowercase),
            ),
            "role": AttributeSpec(
                "The role of the user within the organization. Must be one of 'member' or 'admin'.",
                default="member",
                validators=(OneOf("member", "admin"),),
            ),
            "downgrade_on_destroy": AttributeSpec(
                "Instead of removing the member from the org, downgrade them to 'member' on destroy.",
                default=False,
                readable=False,
            ),
            "etag": AttributeSpec("An etag representing the membership object.", Mutability.COMPUTED),
        },
        import_id_parts=("organization", "username"),
    )

    def __init__(self, provider: GitHubProvider) -> None:
        self._provider = provider

    def parse_id(self, identifier: str) -> tuple[str, ...]:
        return split_id(identifier, *self.schema.import_id_parts)

    def _path(self, org: str, username: str) -> str:
        return f"/orgs/{org}/memberships/{username}"

    async def get(self, resource_id: str) -> dict[str, Any]:
        org, username = self.parse_id(resource_id)
        data, etag = await self._provider.client.get_entity(self._path(org, username))
        return {
            "username": (data.get("user") or {}).get("login", username),
            "role": data.get("role"),
            "etag": etag,
        }

    async def create(self, fields: dict[str, Any]) -> str:
        org = self._provider.organization()
        username = fields["username"]
        await self._provider.client.put(
            self._path(org, username),
            json={"role": fields.get("role", "member")},
        )
        return build_id(org, username)

    async def update(self, resource_id: str, changed: dict[str, Any]) -> dict[str, Any]:
        if "role" not in changed:
            return {}
        org, username = self.parse_id(resource_id)
        return await self._provider.client.put(
            self._path(org, username),
            json={"role": changed["role"]},
        )

    async def delete(self, resource_id: str, attributes: Mapping[str, Any] | None = None) -> None:
        org, username = self.parse_id(resource_id)
        if attributes and attributes.get("downgrade_on_destroy"):
            await self._downgrade(org, username)
            return
        await self._provider.client.delete(self._path(org, username))

    async def _downgrade(self, org: str, username: str) -> None:
        log = logger.bind(organization=org, username=username)
        try:
            data = await self._provider.client.get(self._path(org, username))
        except RemoteNotFound:
            log.info("membership_downgrade_skipped", reason="not_a_member")
            return
        if data.get("role") == "member":
            log.info("membership_downgrade_skipped", reason="already_member")
            return
        await self._provider.client.put(self._path(org, username), json={"role": "member"})
        log.info("membership_downgraded")


class UserSSHKeyResource:
    """SSH key of the authenticated user."""

    schema: ClassVar[ResourceSchema] = ResourceSchema(
        name=USER_SSH_KEY,
        description="Provides a GitHub user's SSH key resource.",
        attributes={
            "title": AttributeSpec(
                "A descriptive name for the new key.",
                Mutability.REPLACE,
                required=True,
            ),
            "key": AttributeSpec(
                "The public SSH key to add to your GitHub account.",
                Mutability.REPLACE,
                required=True,
                validators=(SSHPublicKeyValidator(),),
                normalizer=normalize_ssh_public_key,
            ),
            "fingerprint": AttributeSpec(
                "The SHA256 fingerprint of the SSH key.",
                Mutability.COMPUTED,
                derive=derive_from("key", ssh_key_fingerprint),
            ),
            "url": AttributeSpec("The URL of the SSH key.", Mutability.COMPUTED),
            "etag": AttributeSpec("An etag representing the SSH key.", Mutability.COMPUTED),
        },
    )

    def __init__(self, provider: GitHubProvider) -> None:
        self._provider = provider

    def parse_id(self, identifier: str) -> tuple[str, ...]:
        return (str(require_numeric(identifier)),)

    async def get(self, resource_id: str) -> dict[str, Any]:
        data, etag = await self._provider.client.get_entity(f"/user/keys/{resource_id}")
        return {
            "title": data.get("title"),
            "key": data.get("key"),
            "url": data.get("url"),
            "etag": etag,
        }

    async def create(self, fields: dict[str, Any]) -> str:
        data = await self._provider.client.post(
            "/user/keys",
            json={"title": fields["title"], "key": fields["key"]},
        )
        return str(data["id"])

    async def update(self, resource_id: str, changed: dict[str, Any]) -> dict[str, Any]:
        raise RemoteRejected("SSH keys cannot be updated in place", {"attributes": sorted(changed)})

    async def delete(self, resource_id: str, attributes: Mapping[str, Any] | None = None) -> None:
        await self._provider.client.delete(f"/user/keys/{resource_id}")


class UserGPGKeyResource:
    """GPG key of the authenticated user."""

    schema: ClassVar[ResourceSchema] = ResourceSchema(
        name=USER_GPG_KEY,
        description="Provides a GitHub user's GPG key resource.",
        attributes={
            "armored_public_key": AttributeSpec(
                "Your public GPG key, generated in ASCII-armored format.",
                Mutability.REPLACE,
                required=True,
                readable=False,
                validators=(GPGPublicKeyValidator(),),
                normalizer=normalize_armored_key,
            ),
            "key_id": AttributeSpec(
                "The key ID of the GPG key, e.g. '3262EFF25BA0D270'.",
                Mutability.COMPUTED,
                derive=derive_from("armored_public_key", gpg_key_id),
            ),
            "etag": AttributeSpec("An etag representing the GPG key.", Mutability.COMPUTED),
        },
    )

    def __init__(self, provider: GitHubProvider) -> None:
        self._provider = provider

    def parse_id(self, identifier: str) -> tuple[str, ...]:
        return (str(require_numeric(identifier)),)

    async def get(self, resource_id: str) -> dict[str, Any]:
        data, etag = await self._provider.client.get_entity(f"/user/gpg_keys/{resource_id}")
        return {"key_id": data.get("key_id"), "etag": etag}

    async def create(self, fields: dict[str, Any]) -> str:
        data = await self._provider.client.post(
            "/user/gpg_keys",
            json={"armored_public_key": fields["armored_public_key"]},
        )
        return str(data["id"])

    async def update(self, resource_id: str, changed: dict[str, Any]) -> dict[str, Any]:
        raise RemoteRejected("GPG keys cannot be updated in place", {"attributes": sorted(changed)})

    async def delete(self, resource_id: str, attributes: Mapping[str, Any] | None = None) -> None:
        await self._provider.client.delete(f"/user/gpg_keys/{resource_id}")


class ActionsSecretResource:
    """
    GitHub Actions secret of a repository.

    Secret values are write-only: the service only reports timestamps, so an
    out-of-band change is detected through ``updated_at``.
    """

    schema: ClassVar[ResourceSchema] = ResourceSchema(
        name=ACTIONS_SECRET,
        description="Creates and manages secrets for a GitHub repository.",
        attributes={
            "repository": AttributeSpec(
                "Name of the repository.",
                Mutability.REPLACE,
                required=True,
            ),
            "secret_name": AttributeSpec(
                "Name of the secret.",
                Mutability.REPLACE,
                required=True,
                validators=(NameValidator(),),
                normalizer=uppercase,
            ),
            "encrypted_value": AttributeSpec(
                "Encrypted value of the secret using the GitHub public key in Base64 format.",
                Mutability.REPLACE,
                sensitive=True,
                readable=False,
                validators=(ConflictsWith("plaintext_value"),),
            ),
            "plaintext_value": AttributeSpec(
                "Plaintext value of the secret to be encrypted.",
                Mutability.REPLACE,
                sensitive=True,
                readable=False,
                validators=(ConflictsWith("encrypted_value"),),
            ),
            "created_at": AttributeSpec(
                "Date of actions_secret creation.",
                Mutability.COMPUTED,
                normalizer=normalize_timestamp,
            ),
            "updated_at": AttributeSpec(
                "Date of actions_secret update.",
                Mutability.COMPUTED,
                normalizer=normalize_timestamp,
            ),
        },
        required_one_of=(("encrypted_value", "plaintext_value"),),
        import_id_parts=("repository", "secret_name"),
        write_only_guard=("updated_at",),
    )

    def __init__(self, provider: GitHubProvider) -> None:
        self._provider = provider

    def parse_id(self, identifier: str) -> tuple[str, ...]:
        return split_id(identifier, *self.schema.import_id_parts)

    def _path(self, repository: str, suffix: str) -> str:
        owner = self._provider.repository_owner()
        return f"/repos/{owner}/{repository}/actions/secrets/{suffix}"

    async def get(self, resource_id: str) -> dict[str, Any]:
        repository, secret_name = self.parse_id(resource_id)
        data = await self._provider.client.get(self._path(repository, secret_name))
        return {
            "repository": repository,
            "secret_name": data.get("name", secret_name),
            "created_at": data.get("created_at"),
            "updated_at": data.get("updated_at"),
        }

    async def create(self, fields: dict[str, Any]) -> str:
        repository = fields["repository"]
        secret_name = fields["secret_name"]
        public_key = await self._provider.client.get(self._path(repository, "public-key"))

        encrypted = fields.get("encrypted_value")
        if encrypted is None:
            encrypted = seal_secret(fields.get("plaintext_value") or "", public_key["key"])

        await self._provider.client.put(
            self._path(repository, secret_name),
            json={"encrypted_value": encrypted, "key_id": public_key["key_id"]},
        )
        return build_id(repository, secret_name)

    async def update(self, resource_id: str, changed: dict[str, Any]) -> dict[str, Any]:
        raise RemoteRejected("Secrets are replaced rather than updated", {"attributes": sorted(changed)})

    async def delete(self, resource_id: str, attributes: Mapping[str, Any] | None = None) -> None:
        repository, secret_name = self.parse_id(resource_id)
        await self._provider.client.delete(self._path(repository, secret_name))


# Register resource kinds on import
register_resource(MembershipResource, provider=GitHubProvider.name)
register_resource(UserSSHKeyResource, provider=GitHubProvider.name)
register_resource(UserGPGKeyResource, provider=GitHubProvider.name)
register_resource(ActionsSecretResource, provider=GitHubProvider.name)
