import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

# Configuración de logging
logger = logging.getLogger(__name__)


class DatabaseError(Exception):
    """Error de transporte o de consulta contra MongoDB."""


class NotFoundError(Exception):
    """El documento buscado no existe en la colección."""


@dataclass(frozen=True)
class UpdateOutcome:
    matched_count: int
    modified_count: int


class DocumentCollection:
    """Pasarela sobre una colección de MongoDB.

    Expone únicamente las operaciones que usan los manejadores y traduce
    los errores del driver a DatabaseError / NotFoundError.
    """

    def __init__(self, collection: Collection):
        self._collection = collection

    @property
    def name(self) -> str:
        return self._collection.name

    def insert(self, document: Dict[str, Any]) -> str:
        """Inserta un documento y devuelve su _id."""
        try:
            result = self._collection.insert_one(document)
        except PyMongoError as e:
            logger.error(f"Error insertando en {self.name}: {e}")
            raise DatabaseError(str(e)) from e
        return result.inserted_id

    def find_one(self, document_id: str) -> Dict[str, Any]:
        """Obtiene un documento por su _id.

        Raises:
            NotFoundError: Si no existe ningún documento con ese _id
            DatabaseError: Si falla la consulta
        """
        try:
            document = self._collection.find_one({"_id": document_id})
        except PyMongoError as e:
            logger.error(f"Error buscando {document_id} en {self.name}: {e}")
            raise DatabaseError(str(e)) from e
        if document is None:
            raise NotFoundError(document_id)
        return document

    def find_all(self) -> List[Dict[str, Any]]:
        try:
            return list(self._collection.find({}))
        except PyMongoError as e:
            logger.error(f"Error listando {self.name}: {e}")
            raise DatabaseError(str(e)) from e

    def update_one(self, filter: Dict[str, Any], update: Dict[str, Any]) -> UpdateOutcome:
        """Aplica un operador de actualización ($set, $addToSet, $pull) a un documento.

        Returns:
            UpdateOutcome: Documentos encontrados y modificados por separado
        """
        try:
            result = self._collection.update_one(filter, update)
        except PyMongoError as e:
            logger.error(f"Error actualizando {self.name}: {e}")
            raise DatabaseError(str(e)) from e
        return UpdateOutcome(result.matched_count, result.modified_count)


class Database:
    """Conexión compartida a MongoDB.

    Se construye una sola vez al arrancar y se inyecta en la aplicación;
    el cliente de pymongo mantiene su propio pool y es seguro entre hilos.

    Uso:
        database = Database.connect("mongodb://localhost:27017", timeout_seconds=10)
        complejos = database.collection("COMPLEJOS", "complejo")
        ...
        database.close()
    """

    def __init__(self, client: MongoClient):
        self.client: Optional[MongoClient] = client

    @classmethod
    def connect(cls, uri: str, timeout_seconds: float = 10.0) -> "Database":
        """Crea el cliente y verifica la conexión con un ping.

        Raises:
            DatabaseError: Si el servidor no responde dentro del timeout
        """
        timeout_ms = int(timeout_seconds * 1000)
        client = None
        try:
            client = MongoClient(
                uri,
                serverSelectionTimeoutMS=timeout_ms,
                connectTimeoutMS=timeout_ms,
            )
            client.admin.command("ping")
        except PyMongoError as e:
            logger.critical(f"❌ Error conectando a MongoDB: {e}")
            if client is not None:
                client.close()
            raise DatabaseError(str(e)) from e

        logger.info("✅ Conexión con MongoDB establecida correctamente")
        return cls(client)

    def collection(self, database_name: str, collection_name: str) -> DocumentCollection:
        if self.client is None:
            raise DatabaseError("MongoDB client is not initialized")
        return DocumentCollection(self.client[database_name][collection_name])

    def ping(self) -> bool:
        if self.client is None:
            return False
        try:
            self.client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"Ping a MongoDB fallido: {e}")
            return False

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
            self.client = None
            logger.info("Conexión con MongoDB cerrada")
