# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

import pytest
from cryptography.hazmat.primitives import serialization

from smartnote_server.auth import verify_password
from smartnote_server.scripts.create_admin import create_admin
from smartnote_server.scripts.generate_keys import generate_key_pair
from smartnote_server.stores import DuplicateRecordError


@pytest.mark.anyio
async def test_create_admin(reset_db):
    user = await create_admin("root@example.com", "Secret1")
    assert user.role == "admin"
    assert user.is_verified is True
    assert verify_password("Secret1", user.password_hash)
    with pytest.raises(DuplicateRecordError):
        await create_admin("root@example.com", "Other1")


def test_generated_keys_form_a_pair():
    private_pem, public_pem = generate_key_pair()
    private_key = serialization.load_pem_private_key(private_pem, password=None)
    public_key = serialization.load_pem_public_key(public_pem)
    assert private_key.public_key().public_numbers() == public_key.public_numbers()
    assert private_key.key_size == 2048
