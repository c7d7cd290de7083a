"""Domain-Fehler der Produktionsfila.

Services werfen diese Exceptions, die Routen übersetzen sie in HTTP-Statuscodes.
"""


class QueueError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(QueueError):
    """Ungültige Eingabe, vor jedem Schreibzugriff abgelehnt."""

    status_code = 400


class NotFoundError(QueueError):
    """Referenziertes Produkt, Filament oder Auftrag existiert nicht."""

    status_code = 404


class ConflictError(QueueError):
    """Eindeutigkeitsverletzung, z.B. doppelter Identifikator."""

    status_code = 409
