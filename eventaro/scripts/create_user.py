"""
Create a user, e.g. the first administrator (registration only creates USERs).
Run from project root:
  eventaro-create-user "FULL NAME" EMAIL PASSWORD [role]
Example:
  eventaro-create-user "Ada Admin" admin@example.com your-secure-password ADMIN
"""
import argparse
import asyncio
import sys

from pydantic import TypeAdapter, EmailStr, ValidationError
from sqlalchemy import select

from eventaro.core.security import hash_password_async
from eventaro.db.session import AsyncSessionLocal, engine
from eventaro.models.user import User, UserRole


async def create_user(full_name: str, email: str, password: str, role: str) -> User:
    async with AsyncSessionLocal() as db:
        existing = await db.execute(select(User).where(User.email == email))
        if existing.scalar_one_or_none():
            raise ValueError(f"User '{email}' already exists.")
        user = User(
            full_name=full_name,
            email=email,
            hashed_password=await hash_password_async(password),
            role=role,
        )
        db.add(user)
        await db.commit()
        return user


async def _run(args: argparse.Namespace) -> int:
    try:
        await create_user(args.full_name.strip(), args.email, args.password, args.role)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        await engine.dispose()
    print(f"Created user '{args.email}' with role '{args.role}'.")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Create an EvenTaro user.")
    parser.add_argument("full_name", help="Display name printed on tickets")
    parser.add_argument("email", help="Login email")
    parser.add_argument("password", help="Password (8-72 chars)")
    parser.add_argument(
        "role",
        nargs="?",
        default=UserRole.USER.value,
        choices=[r.value for r in UserRole],
    )
    args = parser.parse_args()

    if not args.full_name.strip():
        print("Full name must not be empty.", file=sys.stderr)
        return 1
    try:
        TypeAdapter(EmailStr).validate_python(args.email)
    except ValidationError:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not 8 <= len(args.password) <= 72:
        print("Password must be 8-72 characters.", file=sys.stderr)
        return 1

    return asyncio.run(_run(args))


if __name__ == "__main__":
    sys.exit(main())
