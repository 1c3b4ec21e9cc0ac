#!/usr/bin/env python3
# Copyright (C) 2024 SmartNote Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Write an RSA-2048 key pair for JWT signing.

Run: python -m smartnote_server.scripts.generate_keys [output_dir]
"""

import sys
from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


def generate_key_pair(key_size: int = 2048) -> tuple[bytes, bytes]:
    """Return (private PEM, public PEM)."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem


def main():
    out = Path(sys.argv[1] if len(sys.argv) > 1 else "keys")
    out.mkdir(parents=True, exist_ok=True)
    private_path = out / "private.pem"
    if private_path.exists():
        print(f"{private_path} already exists; not overwriting")
        sys.exit(1)
    private_pem, public_pem = generate_key_pair()
    private_path.write_bytes(private_pem)
    private_path.chmod(0o600)
    (out / "public.pem").write_bytes(public_pem)
    print(f"Keys written to {out}/")


if __name__ == "__main__":
    main()
