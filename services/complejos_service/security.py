import logging
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Header, Request, status
from jose import jwt
from jose.exceptions import JOSEError

from responses import APIError
from schemas import Identity

# Configuración de logging
logger = logging.getLogger(__name__)

# Solo esquemas simétricos: el secreto firma y verifica
HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")

# Orden en que se comprueban los claims y mensaje si faltan
REQUIRED_CLAIMS = (
    ("role", "Role is missing or invalid in the token"),
    ("username", "Username is missing or invalid in the token"),
    ("_id", "User ID is missing or invalid in the token"),
)

__all__ = [
    'TokenService',
    'InvalidTokenError',
    'MissingClaimError',
    'get_token_service',
    'get_current_identity',
    'require_role',
]


class InvalidTokenError(Exception):
    """Firma, algoritmo o estructura del token inválidos."""


class MissingClaimError(Exception):
    """El token es válido pero le falta un claim obligatorio."""

    def __init__(self, claim: str, message: str):
        super().__init__(message)
        self.claim = claim
        self.message = message


class TokenService:
    """Emite y valida los JWT de identidad (_id, username, role).

    Los tokens no llevan "exp": son válidos hasta que se rote el secreto.
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        if algorithm not in HMAC_ALGORITHMS:
            raise ValueError(f"Unsupported JWT algorithm {algorithm!r}, expected one of {HMAC_ALGORITHMS}")
        self._secret = secret
        self.algorithm = algorithm

    def issue(self, id: str, role: str, username: str) -> str:
        """Crea un token firmado con los tres claims de identidad.

        Args:
            id: Identificador del Complejo
            role: Rol del usuario ("user" o "admin")
            username: Nombre de usuario

        Returns:
            str: Token JWT codificado
        """
        claims = {"_id": id, "username": username, "role": role}
        try:
            return jwt.encode(claims, self._secret, algorithm=self.algorithm)
        except JOSEError as e:
            logger.error(f"Error generando token JWT: {e}")
            raise

    def decode(self, token: str) -> Dict[str, Any]:
        """Verifica firma y algoritmo y devuelve el payload.

        Raises:
            InvalidTokenError: Si el token es inválido o usa otro algoritmo
        """
        try:
            return jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except JOSEError as e:
            logger.warning(f"Token rechazado: {e}")
            raise InvalidTokenError(str(e)) from e

    def validate(self, token: str) -> Identity:
        """Valida el token y extrae la identidad.

        Los claims solo se inspeccionan cuando la firma ya es válida.

        Raises:
            InvalidTokenError: Si el token no supera la verificación criptográfica
            MissingClaimError: Si falta algún claim o está vacío
        """
        payload = self.decode(token)
        for claim, message in REQUIRED_CLAIMS:
            value = payload.get(claim)
            if not isinstance(value, str) or not value:
                raise MissingClaimError(claim, message)
        return Identity(id=payload["_id"], username=payload["username"], role=payload["role"])


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def _extract_token(authorization: str) -> str:
    scheme, _, credentials = authorization.partition(" ")
    if credentials and scheme.lower() == "bearer":
        return credentials.strip()
    return authorization.strip()


def get_current_identity(
    authorization: Optional[str] = Header(default=None),
    tokens: TokenService = Depends(get_token_service),
) -> Identity:
    """Dependencia de autenticación: cabecera Authorization -> Identity."""
    if not authorization:
        raise APIError(status.HTTP_401_UNAUTHORIZED, "Authorization token is required")

    try:
        return tokens.validate(_extract_token(authorization))
    except InvalidTokenError:
        raise APIError(status.HTTP_401_UNAUTHORIZED, "Invalid or expired token")
    except MissingClaimError as e:
        logger.warning(f"Token sin claim '{e.claim}'")
        raise APIError(status.HTTP_403_FORBIDDEN, e.message)


def require_role(role: str, message: str) -> Callable[..., Identity]:
    """Crea una dependencia que solo deja pasar a identidades con el rol indicado."""

    def dependency(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role != role:
            logger.warning(f"Acceso denegado a {identity.id}: rol '{identity.role}', se requiere '{role}'")
            raise APIError(status.HTTP_403_FORBIDDEN, message)
        return identity

    return dependency
