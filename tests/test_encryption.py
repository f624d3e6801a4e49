import base64

import pytest
from nacl.public import PrivateKey, SealedBox

from octoform.core.errors import EncryptionError
from octoform.providers.encryption import seal_secret


def test_seal_secret_round_trips_with_private_key():
    private_key = PrivateKey.generate()
    public_key = base64.b64encode(bytes(private_key.public_key)).decode("ascii")

    sealed = seal_secret("hunter2", public_key)

    assert SealedBox(private_key).decrypt(base64.b64decode(sealed)) == b"hunter2"


def test_seal_secret_rejects_bad_public_key():
    with pytest.raises(EncryptionError):
        seal_secret("hunter2", base64.b64encode(b"short").decode("ascii"))
