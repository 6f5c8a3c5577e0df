# Router para los eventos
import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from pydantic import ValidationError

from crud import ID_FIELD, CRUDEvent
from database import DatabaseError, DocumentCollection, NotFoundError
from responses import APIError, format_errors, invalid_payload, read_json_object, success_response
from schemas import Event, EventCreate, Identity
from security import get_current_identity, require_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/event", tags=["event"])

require_admin_to_create = require_role("admin", "You do not have permission to create events.")
require_admin_to_update = require_role("admin", "You do not have permission to update this Event.")


def get_event_collection(request: Request) -> DocumentCollection:
    return request.app.state.event_collection


def _event_data(event: Event) -> Dict[str, Any]:
    # image se omite cuando no existe
    return event.model_dump(by_alias=True, exclude_none=True)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_event(
    identity: Identity = Depends(require_admin_to_create),
    data: Dict[str, Any] = Depends(read_json_object),
    collection: DocumentCollection = Depends(get_event_collection),
):
    """Crea un evento nuevo (solo admin)."""
    try:
        payload = EventCreate.model_validate(data)
    except ValidationError as e:
        raise invalid_payload(format_errors(e.errors()))

    try:
        event = CRUDEvent.create(collection, payload)
    except DatabaseError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to create event: {e}")

    logger.info(f"Evento {event.id} creado por {identity.username}")
    return success_response(status.HTTP_201_CREATED, "Event created successfully", data=_event_data(event))


@router.get("")
def get_events(collection: DocumentCollection = Depends(get_event_collection)):
    """Lista todos los eventos. Sin eventos se responde con 404."""
    try:
        events = CRUDEvent.get_all(collection)
    except DatabaseError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to fetch Event from the database: {e}")
    except ValidationError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to parse Events data: {e}")

    if not events:
        raise APIError(status.HTTP_404_NOT_FOUND, "No Event found in the database")

    return success_response(
        status.HTTP_200_OK,
        "Event retrieved successfully",
        data=[_event_data(event) for event in events],
    )


@router.put("/admin")
def update_event_for_admin(
    identity: Identity = Depends(require_admin_to_update),
    update_data: Dict[str, Any] = Depends(read_json_object),
    collection: DocumentCollection = Depends(get_event_collection),
):
    """Actualiza cualquier campo del evento indicado por el _id del payload (solo admin)."""
    event_id = update_data.get(ID_FIELD)
    if not isinstance(event_id, str) or not event_id:
        raise APIError(status.HTTP_400_BAD_REQUEST, "Event _id is required")

    try:
        outcome = CRUDEvent.update_for_admin(collection, event_id, update_data)
    except DatabaseError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to update Event: {e}")

    if outcome is None:
        raise APIError(status.HTTP_400_BAD_REQUEST, "No valid fields to update")
    if outcome.matched_count == 0:
        raise APIError(status.HTTP_404_NOT_FOUND, "Event not found")

    return success_response(status.HTTP_200_OK, "Event updated successfully")


@router.get("/{event_id}")
def get_event(event_id: str, collection: DocumentCollection = Depends(get_event_collection)):
    try:
        event = CRUDEvent.get(collection, event_id)
    except NotFoundError:
        raise APIError(status.HTTP_404_NOT_FOUND, "Event not found")
    except (DatabaseError, ValidationError) as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to retrieve Event: {e}")

    return success_response(status.HTTP_200_OK, "Event retrieved successfully", data=_event_data(event))


@router.put("/{event_id}/subscribe")
def subscribe_event(
    event_id: str,
    identity: Identity = Depends(get_current_identity),
    collection: DocumentCollection = Depends(get_event_collection),
):
    """Añade el username del llamante a los participantes."""
    try:
        outcome = CRUDEvent.subscribe(collection, event_id, identity.username)
    except DatabaseError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to subscribe to the event: {e}")

    if outcome.matched_count == 0:
        raise APIError(status.HTTP_404_NOT_FOUND, "Event not found")
    if outcome.modified_count == 0:
        raise APIError(status.HTTP_409_CONFLICT, "Complejo is already subscribed to the event.")

    return success_response(status.HTTP_200_OK, "Successfully subscribed to the event")


@router.put("/{event_id}/unsubscribe")
def unsubscribe_event(
    event_id: str,
    identity: Identity = Depends(get_current_identity),
    collection: DocumentCollection = Depends(get_event_collection),
):
    """Quita el username del llamante de los participantes."""
    try:
        outcome = CRUDEvent.unsubscribe(collection, event_id, identity.username)
    except DatabaseError as e:
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, f"Failed to unsubscribe from event: {e}")

    if outcome.matched_count == 0:
        raise APIError(status.HTTP_404_NOT_FOUND, "Event not found or user not subscribed")
    if outcome.modified_count == 0:
        raise APIError(status.HTTP_409_CONFLICT, "Complejo is not already subscribed to the event.")

    return success_response(status.HTTP_200_OK, "Successfully unsubscribed from event")
