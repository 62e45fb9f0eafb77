import argparse
import sys

from poolladder.core.security import hash_password


def main():
    parser = argparse.ArgumentParser(description="Generate ADMIN_PASSWORD_HASH for the admin login")
    parser.add_argument("password", help="Admin password (at least 8 characters)")
    args = parser.parse_args()

    if len(args.password) < 8:
        print("error: password must be at least 8 characters long", file=sys.stderr)
        sys.exit(1)

    print(f"ADMIN_PASSWORD_HASH={hash_password(args.password)}")


if __name__ == "__main__":
    main()
