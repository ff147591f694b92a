"""Caller identity resolved from gateway headers, plus role gates."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException

ADMIN = "ADMIN"
DISPATCHER = "DISPATCHER"
TECHNICIAN = "TECHNICIAN"


@dataclass(frozen=True)
class Caller:
    username: str
    role: str
    technician_id: int | None = None


def get_caller(
    x_user: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
    x_technician_id: int | None = Header(default=None),
) -> Caller:
    if not x_user or not x_user_role:
        raise HTTPException(status_code=401, detail="Missing caller identity headers")
    return Caller(
        username=x_user.strip(),
        role=x_user_role.strip().upper(),
        technician_id=x_technician_id,
    )


def require_roles(*roles: str):
    """Dependency factory: reject callers whose role is not listed."""

    def _check(caller: Caller = Depends(get_caller)) -> Caller:
        if caller.role not in roles:
            raise HTTPException(
                status_code=403,
                detail=f"Role {caller.role} may not perform this operation",
            )
        return caller

    return _check


dispatcher_only = require_roles(ADMIN, DISPATCHER)


def technician_only(caller: Caller = Depends(require_roles(TECHNICIAN))) -> Caller:
    if caller.technician_id is None:
        raise HTTPException(status_code=401, detail="Missing X-Technician-Id header")
    return caller
