"""Modelos del dominio RSEF (Pydantic v2).

Por qué Pydantic en el dominio:
- Modelos inmutables (`frozen`) con documentación autocontenida (Field).
- Un discriminador `kind` convierte Version/Summary/Record en una unión
  etiquetada serializable sin clase base compartida.

Nota:
- Estos modelos describen *qué* contiene un listado, no *cómo* se obtiene.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter
from pydantic.config import ConfigDict


U32_MAX = 2**32 - 1


class ResourceType(str, Enum):
    """Tipos de recurso de Internet que aparecen en un listado."""

    ASN = "asn"
    IPV4 = "ipv4"
    IPV6 = "ipv6"
    UNKNOWN = "unknown"

    @classmethod
    def from_token(cls, token: str) -> "ResourceType":
        """Convierte el token del listado sin distinguir mayúsculas.

        Cualquier token no reconocido es `UNKNOWN`, nunca un error: así un
        tipo nuevo o propio de un registro no aborta el listado completo.
        """

        value = token.lower()
        for member in (cls.ASN, cls.IPV4, cls.IPV6):
            if member.value == value:
                return member
        return cls.UNKNOWN


class _Entry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Version(_Entry):
    """Línea de versión: describe el listado en sí."""

    kind: Literal["version"] = "version"
    version: float = Field(
        ...,
        ge=0,
        description="Versión del formato RSEF (p.ej. 2.3).",
    )
    registry: str = Field(
        ...,
        description="Registro que publica el listado.",
    )
    serial: str = Field(
        ...,
        description="Número de serie del fichero dentro de la serie del RIR.",
    )
    records: int = Field(
        ...,
        ge=0,
        le=U32_MAX,
        description="Registros declarados (sin versión, resúmenes ni comentarios).",
    )
    start_date: str = Field(
        ...,
        description="Inicio del periodo, YYYYMMDD (opaco).",
    )
    end_date: str = Field(
        ...,
        description="Fin del periodo, YYYYMMDD (opaco).",
    )
    utc_offset: str = Field(
        ...,
        description="Desfase respecto a UTC del RIR que produce el fichero.",
    )


class Summary(_Entry):
    """Línea de resumen: total de registros de un tipo de recurso."""

    kind: Literal["summary"] = "summary"
    registry: str = Field(..., description="Registro al que pertenece el resumen.")
    res_type: ResourceType = Field(..., description="Tipo de recurso resumido.")
    count: int = Field(
        ...,
        ge=0,
        le=U32_MAX,
        description="Número de líneas de registro de este tipo en el fichero.",
    )


class Record(_Entry):
    """Una asignación concreta de ASN, prefijo IPv4 o prefijo IPv6."""

    kind: Literal["record"] = "record"
    registry: str = Field(..., description="Registro al que pertenece la asignación.")
    organization: str = Field(
        ...,
        description="Código ISO 3166 de 2 letras de la organización (sin validar).",
    )
    res_type: ResourceType = Field(..., description="Tipo de recurso asignado.")
    start: str = Field(
        ...,
        description="Base del prefijo IP o primer ASN (texto opaco).",
    )
    value: int = Field(
        ...,
        ge=0,
        le=U32_MAX,
        description="Hosts (IPv4), longitud CIDR (IPv6) o cantidad de ASNs.",
    )
    date: str = Field(..., description="Fecha de asignación, YYYYMMDD (opaca).")
    status: str = Field(..., description="Estado de la asignación, literal.")
    id: str = Field(
        default="",
        description="Handle opaco de la organización; vacío si no viene.",
    )


Entry = Annotated[Union[Version, Summary, Record], Field(discriminator="kind")]

ENTRIES_ADAPTER: TypeAdapter[list[Entry]] = TypeAdapter(list[Entry])
