# inventory_api/constants/roles.py

from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


class Capability(str, Enum):
    READ = "read"
    WRITE = "write"
    MANAGE_USERS = "manage_users"


ROLE_CAPABILITIES: dict[Role, frozenset[Capability]] = {
    Role.ADMIN: frozenset(Capability),
    Role.USER: frozenset({Capability.READ}),
}
