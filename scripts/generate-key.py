#!/usr/bin/env python3
"""Generate a master API key for a Herald deployment."""

import secrets


def main() -> None:
    raw_key = f"hrd_{secrets.token_urlsafe(32)}"

    print()
    print(f"  Master API key: {raw_key}")
    print()
    print("  Set it in your environment:")
    print(f'    export HERALD_MASTER_API_KEY="{raw_key}"')
    print()
    print("  Or in herald.yaml:")
    print("    auth:")
    print(f'      master_api_key: "{raw_key}"')
    print()


if __name__ == "__main__":
    main()
