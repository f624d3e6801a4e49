from datetime import datetime, timedelta, timezone

import pytest

from octoform.normalize.attributes import (
    chain,
    lowercase,
    normalize_attributes,
    normalize_line_endings,
    normalize_multiline,
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
from octoform.schema import AttributeSpec, Mutability, ResourceSchema


def test_text_normalizers_are_idempotent():
    for normalizer, raw in [
        (normalize_line_endings, "a\r\nb\rc"),
        (strip_whitespace, "  a  "),
        (normalize_multiline, "\n a  \r\n b \n\n"),
        (lowercase, "OctoCat"),
        (uppercase, "my_secret"),
    ]:
        once = normalizer(raw)
        assert normalizer(once) == once

    assert normalize_line_endings("a\r\nb\rc") == "a\nb\nc"
    assert normalize_multiline("\n a  \r\n b \n\n") == "a\n b"


@pytest.mark.parametrize(
    "raw",
    [
        "2024-01-02T03:04:05Z",
        "2024-01-02T05:04:05+02:00",
        "2024-01-02T03:04:05.999+00:00",
        datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        datetime(2024, 1, 2, 4, 4, 5, tzinfo=timezone(timedelta(hours=1))),
    ],
)
def test_timestamps_canonicalize_to_utc(raw):
    assert normalize_timestamp(raw) == "2024-01-02T03:04:05Z"
    assert normalize_timestamp(normalize_timestamp(raw)) == "2024-01-02T03:04:05Z"


def test_chain_applies_in_order():
    assert chain(strip_whitespace, lowercase)("  OctoCat ") == "octocat"


class TestSSHKeys:
    def test_comment_and_whitespace_are_dropped(self, ssh_public_key):
        key_type, blob = ssh_public_key.split()
        raw = f"  {key_type}   {blob}  user@host \n"

        assert normalize_ssh_public_key(raw) == ssh_public_key
        assert normalize_ssh_public_key(ssh_public_key) == ssh_public_key

    def test_fingerprint(self, ssh_public_key, ssh_fingerprint):
        assert ssh_key_fingerprint(ssh_public_key + " comment") == ssh_fingerprint
        assert "=" not in ssh_fingerprint

    @pytest.mark.parametrize(
        "raw",
        ["ssh-ed25519", "ssh-ed25519 not*base64", "ssh-rsa AAAAC3NzaC1lZDI1NTE5"],
    )
    def test_unparseable_keys(self, raw):
        with pytest.raises(ValueError):
            ssh_key_fingerprint(raw)

    def test_type_mismatch(self, ssh_public_key):
        blob = ssh_public_key.split()[1]

        with pytest.raises(ValueError, match="does not match"):
            ssh_key_fingerprint(f"ssh-rsa {blob}")


class TestGPGKeys:
    def test_armor_is_canonicalized(self, gpg_armored_key):
        messy = "\r\n".join(f"  {line}  " for line in gpg_armored_key.split("\n")) + "\r\n\r\n"

        assert normalize_armored_key(messy) == gpg_armored_key
        assert normalize_armored_key(gpg_armored_key) == gpg_armored_key

    def test_key_id(self, gpg_armored_key, gpg_key_id_hex):
        assert gpg_key_id(gpg_armored_key) == gpg_key_id_hex
        assert len(gpg_key_id_hex) == 16

    def test_missing_armor(self):
        with pytest.raises(ValueError, match="armor"):
            gpg_key_id("not a key")

    def test_derive_ignores_unparseable_source(self):
        derive = derive_from("armored_public_key", gpg_key_id)

        assert derive({"armored_public_key": "garbage"}) is None
        assert derive({}) is None


def test_normalize_attributes_drops_unknown_keys_and_derives():
    schema = ResourceSchema(
        name="t",
        description="",
        attributes={
            "name": AttributeSpec("", Mutability.REPLACE, normalizer=lowercase),
            "upper": AttributeSpec(
                "",
                Mutability.COMPUTED,
                derive=derive_from("name", str.upper),
            ),
        },
    )

    result = normalize_attributes(schema, {"name": "Alpha", "extra": 1})

    assert result == {"name": "alpha", "upper": "ALPHA"}
    assert normalize_attributes(schema, result) == result
