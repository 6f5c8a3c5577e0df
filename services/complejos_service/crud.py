import logging
import uuid
from typing import Any, Dict, List, Optional

from database import DocumentCollection, UpdateOutcome
from imc import calc_imc
from schemas import Complejo, ComplejoCreate, Event, EventCreate, Identity

# Configuración de logging
logger = logging.getLogger(__name__)

# Campos que un usuario puede modificar de su propio Complejo.
# "deadlift" se mantiene aunque el campo guardado sea "dl".
USER_UPDATABLE_FIELDS = ("username", "weight", "height", "bench", "squad", "deadlift", "photo")

ID_FIELD = "_id"


def new_id() -> str:
    return str(uuid.uuid4())


def strip_identifier(update_data: Dict[str, Any]) -> Dict[str, Any]:
    """Copia del patch sin el campo _id, para no sobrescribir la clave primaria."""
    return {key: value for key, value in update_data.items() if key != ID_FIELD}


def filter_allowed_fields(update_data: Dict[str, Any], allowed=USER_UPDATABLE_FIELDS) -> Dict[str, Any]:
    """Conserva solo los campos permitidos; el resto se descarta sin error."""
    return {field: update_data[field] for field in allowed if field in update_data}


class CRUDComplejo:
    """Operaciones sobre la colección de Complejos. Cada método hace una única operación."""

    @staticmethod
    def create(collection: DocumentCollection, payload: ComplejoCreate) -> Complejo:
        """Crea un Complejo con id nuevo y el IMC calculado.

        No se comprueba que el username sea único.

        Raises:
            DatabaseError: Si falla la inserción
        """
        complejo = Complejo(
            _id=new_id(),
            imc=calc_imc(payload.weight, payload.height),
            **payload.model_dump(),
        )
        collection.insert(complejo.model_dump(by_alias=True))
        logger.info(f"Complejo {complejo.id} creado")
        return complejo

    @staticmethod
    def get_all(collection: DocumentCollection) -> List[Complejo]:
        return [Complejo.model_validate(document) for document in collection.find_all()]

    @staticmethod
    def get(collection: DocumentCollection, complejo_id: str) -> Complejo:
        return Complejo.model_validate(collection.find_one(complejo_id))

    @staticmethod
    def update_for_user(
        collection: DocumentCollection, identity: Identity, update_data: Dict[str, Any]
    ) -> Optional[UpdateOutcome]:
        """Actualiza los campos permitidos del Complejo del propio usuario.

        Returns:
            UpdateOutcome, o None si no quedó ningún campo válido que actualizar
        """
        filtered = filter_allowed_fields(update_data)
        if not filtered:
            return None
        return collection.update_one(
            {ID_FIELD: identity.id, "role": "user"},
            {"$set": filtered},
        )

    @staticmethod
    def update_for_admin(
        collection: DocumentCollection, identity: Identity, update_data: Dict[str, Any]
    ) -> Optional[UpdateOutcome]:
        """Actualiza cualquier campo de un Complejo.

        El destino es el _id del payload o, si no viene, el del propio admin.
        El IMC no se recalcula.

        Raises:
            ValueError: Si el _id del payload no es una cadena (p. ej. un operador de consulta)
        """
        target_id = update_data.get(ID_FIELD, identity.id)
        if not isinstance(target_id, str) or not target_id:
            raise ValueError(f"invalid {ID_FIELD}: {target_id!r}")
        patch = strip_identifier(update_data)
        if not patch:
            return None
        return collection.update_one({ID_FIELD: target_id}, {"$set": patch})


class CRUDEvent:
    """Operaciones sobre la colección de eventos."""

    @staticmethod
    def create(collection: DocumentCollection, payload: EventCreate) -> Event:
        event = Event(_id=new_id(), **payload.model_dump())
        collection.insert(event.model_dump(by_alias=True))
        logger.info(f"Evento {event.id} creado")
        return event

    @staticmethod
    def get_all(collection: DocumentCollection) -> List[Event]:
        return [Event.model_validate(document) for document in collection.find_all()]

    @staticmethod
    def get(collection: DocumentCollection, event_id: str) -> Event:
        return Event.model_validate(collection.find_one(event_id))

    @staticmethod
    def update_for_admin(
        collection: DocumentCollection, event_id: str, update_data: Dict[str, Any]
    ) -> Optional[UpdateOutcome]:
        patch = strip_identifier(update_data)
        if not patch:
            return None
        return collection.update_one({ID_FIELD: event_id}, {"$set": patch})

    @staticmethod
    def subscribe(collection: DocumentCollection, event_id: str, username: str) -> UpdateOutcome:
        # $addToSet no duplica: si ya estaba, modified_count es 0
        return collection.update_one({ID_FIELD: event_id}, {"$addToSet": {"participants": username}})

    @staticmethod
    def unsubscribe(collection: DocumentCollection, event_id: str, username: str) -> UpdateOutcome:
        return collection.update_one({ID_FIELD: event_id}, {"$pull": {"participants": username}})
