"""Shared pytest fixtures for filjwt tests."""

import pytest

from filjwt.wallet import decode_lotus_export, generate_private_key

from vectors import SAMPLE_SECP256K1_EXPORT


@pytest.fixture
def sample_key():
    """(address, private key) decoded from the sample export."""
    return decode_lotus_export(SAMPLE_SECP256K1_EXPORT)


@pytest.fixture
def sample_address(sample_key):
    return sample_key[0]


@pytest.fixture
def sample_private_key(sample_key):
    return sample_key[1]


@pytest.fixture
def other_private_key():
    """A fresh random key, unrelated to the sample export."""
    return generate_private_key()
