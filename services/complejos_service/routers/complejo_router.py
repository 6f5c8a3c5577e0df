# Router para los Complejos (perfiles de usuario)
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from jose.exceptions import JOSEError
from pydantic import ValidationError

from crud import ID_FIELD, CRUDComplejo
from database import DatabaseError, DocumentCollection, NotFoundError
from responses import APIError, read_json_object, success_response
from schemas import ComplejoCreate, Identity
from security import TokenService, get_token_service, require_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/complejo", tags=["complejo"])

require_admin = require_role("admin", "You do not have permission to update this Complejo.")
require_user = require_role("user", "You do not have permission to update this Complejo.")


def get_complejo_collection(request: Request) -> DocumentCollection:
    return request.app.state.complejo_collection


@router.post("", status_code=status.HTTP_201_CREATED)
def create_complejo(
    payload: ComplejoCreate,
    collection: DocumentCollection = Depends(get_complejo_collection),
    tokens: TokenService = Depends(get_token_service),
):
    """Crea un Complejo, calcula su IMC y devuelve un token para la nueva identidad."""
    try:
        complejo = CRUDComplejo.create(collection, payload)
    except DatabaseError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to create Complejo: {e}")

    try:
        token = tokens.issue(complejo.id, complejo.role, complejo.username)
    except JOSEError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to generate token: {e}")

    return success_response(
        status.HTTP_201_CREATED,
        "Complejo created successfully",
        data=complejo.model_dump(by_alias=True),
        token=token,
    )


@router.get("")
def get_complejos(collection: DocumentCollection = Depends(get_complejo_collection)):
    """Lista todos los Complejos. Una colección vacía se responde con 404."""
    try:
        complejos = CRUDComplejo.get_all(collection)
    except DatabaseError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to fetch Complejos from the database: {e}")
    except ValidationError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to parse Complejos data: {e}")

    if not complejos:
        raise APIError(status.HTTP_404_NOT_FOUND, "No Complejos found in the database")

    return success_response(
        status.HTTP_200_OK,
        "Complejos retrieved successfully",
        data=[complejo.model_dump(by_alias=True) for complejo in complejos],
    )


@router.put("/admin")
def update_complejo_for_admin(
    identity: Identity = Depends(require_admin),
    update_data: Dict[str, Any] = Depends(read_json_object),
    collection: DocumentCollection = Depends(get_complejo_collection),
):
    """Actualiza cualquier campo de un Complejo (solo admin). El _id nunca se sobrescribe."""
    target_id = update_data.get(ID_FIELD)
    if ID_FIELD in update_data and (not isinstance(target_id, str) or not target_id):
        raise APIError(status.HTTP_400_BAD_REQUEST, "Complejo _id must be a non-empty string")

    try:
        outcome = CRUDComplejo.update_for_admin(collection, identity, update_data)
    except DatabaseError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to update Complejo: {e}")

    if outcome is None:
        raise APIError(status.HTTP_400_BAD_REQUEST, "No valid fields to update")
    if outcome.matched_count == 0:
        raise APIError(status.HTTP_404_NOT_FOUND, "Complejo not found")

    return success_response(status.HTTP_200_OK, "Complejo updated successfully")


@router.put("/user")
def update_complejo_for_user(
    identity: Identity = Depends(require_user),
    update_data: Dict[str, Any] = Depends(read_json_object),
    collection: DocumentCollection = Depends(get_complejo_collection),
):
    """Actualiza los campos permitidos del propio Complejo (solo rol user)."""
    try:
        outcome = CRUDComplejo.update_for_user(collection, identity, update_data)
    except DatabaseError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to update Complejo: {e}")

    if outcome is None:
        raise APIError(status.HTTP_400_BAD_REQUEST, "No valid fields to update")
    if outcome.matched_count == 0:
        raise APIError(status.HTTP_404_NOT_FOUND, "Complejo not found or insufficient permissions")

    return success_response(status.HTTP_200_OK, "Complejo updated successfully")


@router.get("/{complejo_id}")
def get_complejo(complejo_id: str, collection: DocumentCollection = Depends(get_complejo_collection)):
    try:
        complejo = CRUDComplejo.get(collection, complejo_id)
    except NotFoundError:
        raise APIError(status.HTTP_404_NOT_FOUND, "Complejo not found")
    except DatabaseError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to retrieve Complejo: {e}")
    except ValidationError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to retrieve Complejo: {e}")

    return success_response(
        status.HTTP_200_OK,
        "Complejo retrieved successfully",
        data=complejo.model_dump(by_alias=True),
    )
