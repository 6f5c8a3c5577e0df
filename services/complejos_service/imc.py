import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"
INVALID_INPUT = "Invalid input"

# (límite superior exclusivo, etiqueta); la última banda no tiene límite
IMC_BANDS = (
    (18.5, "Soldado del Burgo De Los No Muertos"),
    (25.0, "NPC"),
    (30.0, "Susi Slayer"),
)
TOP_LABEL = "Burger King Slayer"

# Decimal estricto: sin espacios, sin "_" y sin otros formatos que acepta float()
DECIMAL_PATTERN = re.compile(
    r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?(?:inf|infinity|nan)",
    re.IGNORECASE | re.ASCII,
)


class IMCStatus(str, Enum):
    OK = "ok"
    NOT_COMPUTABLE = "not_computable"
    INVALID_INPUT = "invalid_input"


@dataclass(frozen=True)
class IMCResult:
    """Resultado del cálculo del IMC.

    Atributos:
        status: Distingue un cálculo correcto de los casos sin datos o con datos inválidos
        value: Valor numérico del IMC (solo cuando status es OK)
        category: Etiqueta de la banda correspondiente (solo cuando status es OK)
    """
    status: IMCStatus
    value: Optional[float] = None
    category: Optional[str] = None

    @property
    def label(self) -> str:
        """Representación en texto que se guarda en el documento."""
        if self.status is IMCStatus.NOT_COMPUTABLE:
            return NOT_AVAILABLE
        if self.status is IMCStatus.INVALID_INPUT:
            return INVALID_INPUT
        return self.category


def _divide(weight: float, height_squared: float) -> float:
    # División IEEE: x/0 da ±inf y 0/0 da NaN
    try:
        return weight / height_squared
    except ZeroDivisionError:
        if weight == 0 or math.isnan(weight):
            return math.nan
        return math.copysign(math.inf, weight)


def parse_decimal(text: str) -> float:
    if not DECIMAL_PATTERN.fullmatch(text):
        raise ValueError(f"could not convert string to float: {text!r}")
    return float(text)


def categorize(value: float) -> str:
    """Devuelve la etiqueta de la banda de IMC. NaN cae en la última banda."""
    for upper, label in IMC_BANDS:
        if value < upper:
            return label
    return TOP_LABEL


def classify_imc(weight: str, height: str) -> IMCResult:
    """Calcula el IMC a partir de peso (kg) y altura (m) en texto.

    Args:
        weight: Peso en kilogramos como cadena decimal
        height: Altura en metros como cadena decimal

    Returns:
        IMCResult: NOT_COMPUTABLE si falta algún dato, INVALID_INPUT si alguno
        no es un número, OK con la categoría en otro caso
    """
    if not weight or not height:
        return IMCResult(IMCStatus.NOT_COMPUTABLE)

    try:
        weight_f = parse_decimal(weight)
        height_f = parse_decimal(height)
    except ValueError as e:
        logger.warning(f"Valores no numéricos para el IMC: {e}")
        return IMCResult(IMCStatus.INVALID_INPUT)

    value = _divide(weight_f, height_f * height_f)
    return IMCResult(IMCStatus.OK, value=value, category=categorize(value))


def calc_imc(weight: str, height: str) -> str:
    """Atajo que devuelve directamente la etiqueta a guardar en el campo imc."""
    return classify_imc(weight, height).label
