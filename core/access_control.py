"""
Role-based access control for ledger components

Each component (user registry, order ledger) owns one RoleTable mapping
role -> set of accounts. Every role is administered by an admin role
(DEFAULT_ADMIN_ROLE unless changed); only holders of that admin role may
grant or revoke it. Denials raise AccessControlError with the canonical
``AccessControl: account <addr> is missing role <role>`` message.
"""

import logging
import re
import secrets
from copy import deepcopy
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field

from core.event_bus import Event, EventType, ServiceSource

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_ROLE = "0x" + "00" * 32
# keccak256("MANAGER")
MANAGER_ROLE = "0xaf290d8680820aad922855f39b306097b20e28774d6c1ad35a20325630c3a02c"

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_ROLE_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")


def normalize_address(address: str) -> str:
    """Validate a 20-byte hex account address and return it lowercased"""
    if not isinstance(address, str) or not _ADDRESS_RE.match(address):
        raise ValueError(f"Invalid account address: {address!r}")
    return address.lower()


def normalize_role(role: str) -> str:
    """Validate a 32-byte hex role identifier and return it lowercased"""
    if not isinstance(role, str) or not _ROLE_RE.match(role):
        raise ValueError(f"Invalid role identifier: {role!r}")
    return role.lower()


def make_contract_address() -> str:
    """Generate a fresh random component address"""
    return "0x" + secrets.token_hex(20)


class AccessControlError(Exception):
    """Raised when the caller lacks the role an operation requires"""

    error_code = "AccessControl"

    def __init__(self, message: str, account: Optional[str] = None, role: Optional[str] = None):
        super().__init__(message)
        self.account = account
        self.role = role

    @classmethod
    def missing_role(cls, account: str, role: str) -> "AccessControlError":
        return cls(
            f"AccessControl: account {account} is missing role {role}",
            account=account,
            role=role,
        )


class RoleTable:
    """Per-component authorization table (role -> accounts)"""

    def __init__(self, admin: str):
        self._members: Dict[str, Set[str]] = {}
        self._admins: Dict[str, str] = {}
        self._grant(DEFAULT_ADMIN_ROLE, normalize_address(admin))

    # ---- queries ----

    def has_role(self, role: str, account: str) -> bool:
        return normalize_address(account) in self._members.get(normalize_role(role), set())

    def get_role_admin(self, role: str) -> str:
        return self._admins.get(normalize_role(role), DEFAULT_ADMIN_ROLE)

    def members(self, role: str) -> List[str]:
        return sorted(self._members.get(normalize_role(role), set()))

    def check_role(self, role: str, account: str) -> None:
        """Raise AccessControlError unless account holds role"""
        if not self.has_role(role, account):
            raise AccessControlError.missing_role(normalize_address(account), normalize_role(role))

    # ---- mutations ----

    def grant_role(self, role: str, account: str, caller: str) -> bool:
        """Grant role to account; caller must hold the role's admin role"""
        self.check_role(self.get_role_admin(role), caller)
        return self._grant(normalize_role(role), normalize_address(account))

    def revoke_role(self, role: str, account: str, caller: str) -> bool:
        """Revoke role from account; caller must hold the role's admin role"""
        self.check_role(self.get_role_admin(role), caller)
        return self._revoke(normalize_role(role), normalize_address(account))

    def renounce_role(self, role: str, account: str, caller: str) -> bool:
        """Drop one of the caller's own roles"""
        if normalize_address(account) != normalize_address(caller):
            raise AccessControlError(
                "AccessControl: can only renounce roles for self",
                account=normalize_address(caller),
                role=normalize_role(role),
            )
        return self._revoke(normalize_role(role), normalize_address(account))

    def set_role_admin(self, role: str, admin_role: str) -> None:
        self._admins[normalize_role(role)] = normalize_role(admin_role)

    def setup_role(self, role: str, account: str) -> bool:
        """Grant without an admin check, for component construction only"""
        return self._grant(normalize_role(role), normalize_address(account))

    def _grant(self, role: str, account: str) -> bool:
        members = self._members.setdefault(role, set())
        if account in members:
            return False
        members.add(account)
        return True

    def _revoke(self, role: str, account: str) -> bool:
        members = self._members.get(role, set())
        if account not in members:
            return False
        members.discard(account)
        return True

    # ---- transaction support ----

    def snapshot(self):
        return deepcopy((self._members, self._admins))

    def restore(self, state) -> None:
        self._members, self._admins = state


# ============================================================================
# Role events
# ============================================================================


class RoleChangedEventData(BaseModel):
    """
    Event: access.role_granted / access.role_revoked
    Triggered when a role membership of a component changes
    """

    contract: str = Field(..., description="Address of the component owning the role table")
    role: str = Field(..., description="Role identifier")
    account: str = Field(..., description="Account whose membership changed")
    sender: str = Field(..., description="Account that performed the change")


async def publish_role_changed(
    event_bus,
    event_type: EventType,
    source: ServiceSource,
    contract: str,
    role: str,
    account: str,
    sender: str,
):
    """Publish access.role_granted / access.role_revoked"""
    try:
        event_data = RoleChangedEventData(
            contract=contract, role=role, account=account, sender=sender
        )
        event = Event(
            event_type=event_type,
            source=source,
            data=event_data.model_dump(mode="json"),
            subject=contract,
        )
        await event_bus.publish_event(event)
        logger.info(f"Published {event_type.value} for {account} on {contract}")
    except Exception as e:
        logger.error(f"Failed to publish {event_type.value}: {e}")


class AccessControlledMixin:
    """
    Role administration entry points shared by registry and ledger.

    Expects ``self.runtime`` (ContractRuntime), ``self.roles`` (RoleTable),
    ``self.address`` and ``self.event_source`` on the host class.
    """

    MANAGER = MANAGER_ROLE
    DEFAULT_ADMIN_ROLE = DEFAULT_ADMIN_ROLE

    async def has_role(self, role: str, account: str) -> bool:
        async with self.runtime.transaction():
            return self.roles.has_role(role, account)

    async def get_role_admin(self, role: str) -> str:
        async with self.runtime.transaction():
            return self.roles.get_role_admin(role)

    async def grant_role(self, caller: str, role: str, account: str) -> bool:
        """Grant role to account; returns False if it was already held"""
        async with self.runtime.transaction() as tx:
            tx.enlist(self.roles)
            changed = self.roles.grant_role(role, account, caller)
            if changed:
                await publish_role_changed(
                    tx, EventType.ROLE_GRANTED, self.event_source, self.address,
                    normalize_role(role), normalize_address(account), normalize_address(caller),
                )
                logger.info(f"Role {role} granted to {account} on {self.address}")
            return changed

    async def revoke_role(self, caller: str, role: str, account: str) -> bool:
        """Revoke role from account; returns False if it was not held"""
        async with self.runtime.transaction() as tx:
            tx.enlist(self.roles)
            changed = self.roles.revoke_role(role, account, caller)
            if changed:
                await publish_role_changed(
                    tx, EventType.ROLE_REVOKED, self.event_source, self.address,
                    normalize_role(role), normalize_address(account), normalize_address(caller),
                )
                logger.info(f"Role {role} revoked from {account} on {self.address}")
            return changed

    async def renounce_role(self, caller: str, role: str, account: str) -> bool:
        async with self.runtime.transaction() as tx:
            tx.enlist(self.roles)
            changed = self.roles.renounce_role(role, account, caller)
            if changed:
                await publish_role_changed(
                    tx, EventType.ROLE_REVOKED, self.event_source, self.address,
                    normalize_role(role), normalize_address(account), normalize_address(caller),
                )
            return changed

    def _require_manager(self, caller: str) -> None:
        try:
            self.roles.check_role(MANAGER_ROLE, caller)
        except AccessControlError as e:
            logger.warning(str(e))
            raise
