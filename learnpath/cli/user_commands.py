"""
Account CLI commands: create, set-role, list

`user create --role ADMIN` is how the first administrator is bootstrapped,
since public registration only creates students.
"""
import asyncio

from learnpath.errors import APIError


class UserCommand:
    """Account CLI command handler."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def execute(self, args) -> int:
        if args.user_action == "create":
            return self._run(self._create(args), f"create {args.role} account {args.email}")
        elif args.user_action == "set-role":
            return self._run(self._set_role(args), f"set role of {args.email} to {args.role}")
        elif args.user_action == "list":
            return self._run(self._list(), None)
        else:
            print("Error: Unknown user action (expected: create, set-role, list)")
            return 1

    def _run(self, coro, dry_run_message) -> int:
        if self.dry_run and dry_run_message:
            coro.close()
            print(f"[DRY RUN] Would {dry_run_message}")
            return 0
        try:
            asyncio.run(self._with_session(coro))
            return 0
        except APIError as e:
            print(f"Error: {e.message}")
            return 1

    @staticmethod
    async def _with_session(coro):
        from learnpath.database import close_db
        try:
            return await coro
        finally:
            await close_db()

    async def _create(self, args) -> None:
        from learnpath.database import AsyncSessionLocal, init_db
        from learnpath.orm.user import UserRole
        from learnpath.services import user_service

        await init_db()
        async with AsyncSessionLocal() as db:
            user = await user_service.create_user(
                db, args.email, args.password, args.name, UserRole(args.role)
            )
            print(f"✓ Created user {user.id}: {user.email} ({user.role.value})")

    async def _set_role(self, args) -> None:
        from learnpath.database import AsyncSessionLocal
        from learnpath.errors import NotFoundError, ErrorCode
        from learnpath.orm.user import UserRole
        from learnpath.services import user_service

        async with AsyncSessionLocal() as db:
            user = await user_service.get_user_by_email(db, args.email)
            if user is None:
                raise NotFoundError("User", args.email, code=ErrorCode.USER_NOT_FOUND)
            user = await user_service.set_role(db, user.id, UserRole(args.role))
            print(f"✓ {user.email} is now {user.role.value}")

    async def _list(self) -> None:
        from learnpath.database import AsyncSessionLocal
        from learnpath.services import user_service

        async with AsyncSessionLocal() as db:
            users = await user_service.list_users(db)
            for user in users:
                print(f"{user.id:>5}  {user.role.value:<8} {user.email}  ({user.name})")
            print(f"{len(users)} user(s)")
