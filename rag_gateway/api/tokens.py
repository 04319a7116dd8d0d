"""API token management routes.

Plaintext tokens appear only in the create response.
"""

from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from rag_gateway.api.deps import get_token_store
from rag_gateway.api.responses import success
from rag_gateway.exceptions import ErrorCode, NotFoundError, ValidationError
from rag_gateway.store.tokens import TokenStore

router = APIRouter(prefix="/api-tokens", tags=["API Tokens"])


class CreateTokenRequest(BaseModel):
    """Request body for token creation."""

    name: str = Field(description="Token label")


def _not_found(token_id: str) -> NotFoundError:
    return NotFoundError(
        "Token not found",
        code=ErrorCode.TOKEN_NOT_FOUND,
        details={"token_id": token_id},
    )


@router.get("")
def list_tokens(tokens: TokenStore = Depends(get_token_store)) -> dict[str, Any]:
    return success([t.model_dump(by_alias=True) for t in tokens.list()])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_token(
    body: CreateTokenRequest,
    tokens: TokenStore = Depends(get_token_store),
) -> dict[str, Any]:
    name = body.name.strip()
    if not name:
        raise ValidationError("name cannot be empty")

    plaintext, info = tokens.create(name)
    return success({**info.model_dump(by_alias=True), "token": plaintext})


@router.get("/{token_id}")
def get_token(token_id: str, tokens: TokenStore = Depends(get_token_store)) -> dict[str, Any]:
    info = tokens.get(token_id)
    if info is None:
        raise _not_found(token_id)
    return success(info.model_dump(by_alias=True))


@router.delete("/{token_id}")
def delete_token(token_id: str, tokens: TokenStore = Depends(get_token_store)) -> dict[str, Any]:
    if not tokens.delete(token_id):
        raise _not_found(token_id)
    return success()
