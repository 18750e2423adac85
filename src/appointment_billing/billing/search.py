"""Free-text search over the flattened fields of a billing record."""

from ..schemas.records import JoinedRecord

WILDCARD = "*"


def searchable_content(record: JoinedRecord) -> str:
    """Lower-cased, space-joined text of every present searchable field."""
    appointment = record.appointment
    patient = record.patient
    fields = [
        patient.numero_patient,
        patient.nom,
        patient.prenom,
        appointment.amount,
        appointment.status,
        appointment.payment_method,
        appointment.mutuelle.nom if appointment.mutuelle else None,
    ]
    return " ".join(f for f in fields if f).lower()


def token_matches(token: str, content: str) -> bool:
    if token.startswith(WILDCARD) and token.endswith(WILDCARD):
        pattern = token[1:-1]
        return not pattern or pattern in content
    return token in content


def matches_query(record: JoinedRecord, query: str | None) -> bool:
    """True when every whitespace-separated token of the query is found.

    Tokens wrapped in ``*`` are substring patterns. Plain tokens are matched
    as substrings too, so the markers only document intent.
    """
    tokens = (query or "").lower().split()
    if not tokens:
        return True
    content = searchable_content(record)
    return all(token_matches(token, content) for token in tokens)
