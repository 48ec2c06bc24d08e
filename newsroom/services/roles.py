"""Staff role ladder helpers."""

from newsroom.models import StaffRole, User, UserType

# Lowest → highest. Index is the comparison key.
ROLE_LADDER: tuple[StaffRole, ...] = (
    StaffRole.intern,
    StaffRole.journalist,
    StaffRole.sub_editor,
    StaffRole.editor,
    StaffRole.admin,
    StaffRole.superadmin,
)

REVIEWER_TIER = StaffRole.journalist
APPROVER_TIER = StaffRole.sub_editor
OVERRIDE_TIER = StaffRole.editor


def parse_role(role: str | StaffRole | None) -> StaffRole | None:
    """Coerce a stored role value to the enum; unknown values become None."""
    if role is None:
        return None
    try:
        return StaffRole(role)
    except ValueError:
        return None


def role_rank(role: str | StaffRole | None) -> int:
    """Position on the ladder, -1 for no staff role."""
    parsed = parse_role(role)
    if parsed is None:
        return -1
    return ROLE_LADDER.index(parsed)


def role_at_least(role: str | StaffRole | None, minimum: StaffRole) -> bool:
    return role_rank(role) >= ROLE_LADDER.index(minimum)


def is_active_staff(user: User | None) -> bool:
    if user is None:
        return False
    return (
        user.user_type == UserType.staff
        and user.status == "active"
        and parse_role(user.staff_role) is not None
    )
