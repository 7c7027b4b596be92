"""
/policies — create, read, replace and delete enforcement policies.
"""

from __future__ import annotations

import json
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from pydantic import ValidationError

from ...policy.models import Policy

router = APIRouter(prefix="/policies", tags=["policies"])


def _get_store(request: Request):
    return request.app.state.store


def _dump(policy: Policy) -> Dict[str, Any]:
    return policy.model_dump(mode="json", by_alias=True)


@router.get("")
def list_policies(store=Depends(_get_store)):
    return {"policies": [_dump(p) for p in store.all()]}


@router.get("/{name}")
def get_policy(name: str, store=Depends(_get_store)):
    policy = store.get(name)
    if policy is None:
        raise HTTPException(status_code=404, detail=f"Policy not found: {name!r}")
    return _dump(policy)


@router.put("/{name}")
def put_policy(
    name: str,
    spec: Dict[str, Any],
    response: Response,
    store=Depends(_get_store),
):
    """Create or replace a policy from its spec; the path name wins over any name in the body."""
    try:
        policy = Policy.model_validate({**spec, "name": name})
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=json.loads(exc.json()))
    created = store.put(policy)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return _dump(policy)


@router.delete("/{name}")
def delete_policy(name: str, store=Depends(_get_store)):
    if not store.delete(name):
        raise HTTPException(status_code=404, detail=f"Policy not found: {name!r}")
    return {"status": "deleted"}
