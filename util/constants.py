from typing import Final, Tuple


class InternalURIs:
    API = "/api"
    V1 = API + "/v1"
    UPLOAD = V1 + "/upload"
    STATUS = V1 + "/status"
    ME = V1 + "/me"
    HEALTH = "/healthz"


class ExternalURIs:
    KEYCLOAK_USERINFO = "/realms/{realm}/protocol/openid-connect/userinfo"


# Multipart field names accepted by the upload endpoint, one file each.
DOCUMENT_FIELDS: Final[Tuple[str, ...]] = (
    "documentoIdentidad",
    "formatoMaterias",
    "seguro",
    "cartaAceptacion",
    "cartaRecomendacion",
)

DRIVE_FOLDER_MIME: Final[str] = "application/vnd.google-apps.folder"
